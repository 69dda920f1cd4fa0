"""Core logic of the email-domain role mapper.

Independent of HTTP frameworks; the Flask API and the CLI are thin wrappers.

Module Structure:
    - match_mode.py : MatchMode enum and parse_mode()
    - classifier.py : matches_domain() for EXACT / WILDCARD / REGEX patterns
    - resolver.py   : resolve_role() / find_role() for "role" and "clientId.role" names
    - policy.py     : assign_role() orchestration and config normalization
    - mapper.py     : DomainRoleMapper descriptor and config property metadata
    - keycloak/     : Keycloak Admin API adapters (realm, user, roles)

Import explicitly when needed:
    from domain_role.core.policy import assign_role
    from domain_role.core.classifier import matches_domain
"""
