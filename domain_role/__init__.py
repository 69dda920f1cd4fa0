"""Email-domain role mapper for Keycloak brokered users.

To use the mapper logic:
    from domain_role.core.mapper import DomainRoleMapper

To use the admin API:
    from domain_role.flask_app import create_app
"""
# flask_app is not imported here so the CLI and core work without Flask loaded
