"""Role assignment policy for brokered users based on their email domain.

The host (Keycloak or a test double) supplies three duck-typed collaborators:

    realm:  get_role(name) -> role | None
            get_client_by_client_id(client_id) -> client | None  (client.get_role(name))
    user:   email, username, has_role(role) -> bool, grant_role(role)

Configuration is the mapper's key/value mapping (see ``CFG_*`` keys).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, FrozenSet, Mapping, Optional

from .classifier import matches_domain
from .match_mode import MatchMode, parse_mode
from .resolver import find_role

logger = logging.getLogger(__name__)

CFG_DOMAINS = "allowedDomains"
CFG_DOMAIN_MATCH_MODE = "domainMatchMode"
CFG_MATCHED_ROLE = "matchedRole"
CFG_FALLBACK_ROLE = "fallbackRole"


@dataclass(frozen=True)
class MapperConfig:
    """Normalized mapper configuration, rebuilt on every evaluation."""
    allowed_domains: FrozenSet[str]
    match_mode: MatchMode
    matched_role: Optional[Any] = None
    fallback_role: Optional[Any] = None


@dataclass(frozen=True)
class AssignmentResult:
    """Outcome of one policy evaluation."""
    domain: str
    matched: bool
    role: Optional[Any]
    granted: bool


def is_valid_email(email: Optional[str]) -> bool:
    """Check that an email has exactly one '@' with non-empty parts on both sides."""
    if not isinstance(email, str) or email.count("@") != 1:
        return False
    local, domain = email.split("@")
    return bool(local.strip()) and bool(domain.strip())


def extract_domain(email: str) -> str:
    """Return the lower-cased domain part of a (valid) email address."""
    return email.rsplit("@", 1)[1].strip().lower()


def parse_allowed_domains(raw: Optional[str]) -> FrozenSet[str]:
    """Split the ``allowedDomains`` setting into a normalized pattern set."""
    if not raw:
        return frozenset()
    return frozenset(part.strip().lower() for part in raw.split() if part.strip())


def load_config(realm, mapper_config: Mapping[str, str]) -> MapperConfig:
    """Load and normalize configuration values, resolving both configured roles."""
    logger.debug(
        "Loaded mapper config for realm=%s: allowedDomains='%s', domainMatchMode='%s', "
        "matchedRole='%s', fallbackRole='%s'",
        getattr(realm, "name", "?"),
        mapper_config.get(CFG_DOMAINS),
        mapper_config.get(CFG_DOMAIN_MATCH_MODE),
        mapper_config.get(CFG_MATCHED_ROLE),
        mapper_config.get(CFG_FALLBACK_ROLE),
    )
    return MapperConfig(
        allowed_domains=parse_allowed_domains(mapper_config.get(CFG_DOMAINS)),
        match_mode=parse_mode(mapper_config.get(CFG_DOMAIN_MATCH_MODE)),
        matched_role=find_role(realm, mapper_config.get(CFG_MATCHED_ROLE)),
        fallback_role=find_role(realm, mapper_config.get(CFG_FALLBACK_ROLE)),
    )


@dataclass(frozen=True)
class Evaluation:
    """Dry-run verdict for an email: which configured role name would apply."""
    email_valid: bool
    domain: Optional[str]
    match_mode: MatchMode
    matched: bool
    role_name: Optional[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "email_valid": self.email_valid,
            "domain": self.domain,
            "match_mode": self.match_mode.name,
            "matched": self.matched,
            "role_name": self.role_name,
        }


def evaluate_email(email: Optional[str], mapper_config: Mapping[str, str]) -> Evaluation:
    """Classify an email without resolving or granting any role."""
    mode = parse_mode(mapper_config.get(CFG_DOMAIN_MATCH_MODE))
    if not is_valid_email(email):
        return Evaluation(False, None, mode, False, None)
    domain = extract_domain(email)
    matched = matches_domain(domain, parse_allowed_domains(mapper_config.get(CFG_DOMAINS)), mode)
    role_name = mapper_config.get(CFG_MATCHED_ROLE if matched else CFG_FALLBACK_ROLE)
    return Evaluation(True, domain, mode, matched, role_name)


def grant_role(user, role) -> bool:
    """Grant ``role`` to ``user`` unless it is missing or already held.

    Returns:
        True if a grant was requested from the host
    """
    if role is None:
        logger.debug("No role configured; no role changes for user %s", user.username)
        return False
    if user.has_role(role):
        logger.debug("User %s already has role %s; no action taken", user.username, _role_name(role))
        return False
    logger.info("Granting role %s to user %s", _role_name(role), user.username)
    user.grant_role(role)
    return True


def assign_role(realm, user, mapper_config: Mapping[str, str]) -> Optional[AssignmentResult]:
    """Assign the matched or fallback role to a user based on their email domain.

    Args:
        realm: Realm adapter used to resolve configured role names
        user: User adapter receiving the grant
        mapper_config: Raw mapper configuration

    Returns:
        AssignmentResult, or None when the user has no usable email
    """
    email = user.email
    if not is_valid_email(email):
        logger.debug("Skipping role assignment for user=%s due to missing/invalid email: %s", user.username, email)
        return None

    domain = extract_domain(email)
    cfg = load_config(realm, mapper_config)

    logger.debug(
        "User %s has email domain '%s'. Allowed domains configured: %s; matchedRole=%s; fallbackRole=%s",
        user.username,
        domain,
        sorted(cfg.allowed_domains),
        _role_name(cfg.matched_role),
        _role_name(cfg.fallback_role),
    )

    if not cfg.allowed_domains:
        logger.warning("No allowed domains configured in realm '%s'", getattr(realm, "name", "?"))

    matched = matches_domain(domain, cfg.allowed_domains, cfg.match_mode)
    role = cfg.matched_role if matched else cfg.fallback_role
    granted = grant_role(user, role)
    return AssignmentResult(domain=domain, matched=matched, role=role, granted=granted)


def _role_name(role) -> Optional[str]:
    if role is None:
        return None
    return getattr(role, "name", str(role))
