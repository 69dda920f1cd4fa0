"""Identity provider mapper descriptor for the email-domain role mapper.

Assigns a role if the brokered user's email domain matches one of the configured
allowed domains; otherwise an optional fallback role is granted.

Configuration properties:
    allowedDomains:  space separated list of domains (e.g. "example.com example.org")
    domainMatchMode: Exact, Wildcard or Regex
    matchedRole:     role granted when the domain matches
    fallbackRole:    optional role granted when the domain does not match
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .policy import (
    CFG_DOMAINS,
    CFG_DOMAIN_MATCH_MODE,
    CFG_FALLBACK_ROLE,
    CFG_MATCHED_ROLE,
    AssignmentResult,
    assign_role,
)

logger = logging.getLogger(__name__)

STRING_TYPE = "String"
LIST_TYPE = "List"
ROLE_TYPE = "Role"

ANY_PROVIDER = "*"


@dataclass(frozen=True)
class ConfigProperty:
    """Declarative description of one mapper setting (admin console metadata)."""
    name: str
    label: str
    type: str
    help_text: Optional[str] = None
    options: tuple[str, ...] = ()
    default_value: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "label": self.label, "type": self.type}
        if self.help_text:
            payload["helpText"] = self.help_text
        if self.options:
            payload["options"] = list(self.options)
        if self.default_value is not None:
            payload["defaultValue"] = self.default_value
        return payload


# Multi-valued string properties are not supported for IdP mappers, hence the
# space separated domain list.
CONFIG_PROPERTIES: tuple[ConfigProperty, ...] = (
    ConfigProperty(
        name=CFG_DOMAINS,
        label="Allowed E-Mail Domain(s)",
        type=STRING_TYPE,
        help_text="Multiple domains can be separated by space",
    ),
    ConfigProperty(
        name=CFG_DOMAIN_MATCH_MODE,
        label="Domain Match Mode",
        type=LIST_TYPE,
        help_text=(
            "Defines how email domains are matched against the configured domain list. Possible "
            "values are 'exact' for exact domain matches (e.g. example.org), 'wildcard' supports * as a "
            "placeholder (e.g. *.example.org) and 'regex' allows full regular expressions but "
            "also carries the highest risk of misconfiguration."
        ),
        options=("Exact", "Wildcard", "Regex"),
        default_value="Exact",
    ),
    ConfigProperty(name=CFG_MATCHED_ROLE, label="Role for Matching Domains", type=ROLE_TYPE),
    ConfigProperty(name=CFG_FALLBACK_ROLE, label="Fallback Role", type=ROLE_TYPE),
)


class DomainRoleMapper:
    """Email Domain → Role mapper for brokered users."""

    PROVIDER_ID = "domain-role-idp-mapper"

    def get_id(self) -> str:
        return self.PROVIDER_ID

    def get_display_type(self) -> str:
        return "Email Domain → Role Mapper"

    def get_display_category(self) -> str:
        return "Role Importer"

    def get_help_text(self) -> str:
        return (
            "Assigns a role if the user's email domain matches a configured list, "
            "otherwise assigns an optional fallback role."
        )

    def get_config_properties(self) -> tuple[ConfigProperty, ...]:
        return CONFIG_PROPERTIES

    def get_compatible_providers(self) -> list[str]:
        return [ANY_PROVIDER]

    def describe(self) -> dict[str, Any]:
        """Return the descriptor as a JSON-serializable dict."""
        return {
            "id": self.get_id(),
            "displayType": self.get_display_type(),
            "displayCategory": self.get_display_category(),
            "helpText": self.get_help_text(),
            "compatibleProviders": self.get_compatible_providers(),
            "properties": [prop.to_dict() for prop in self.get_config_properties()],
        }

    def update_brokered_user(
        self,
        realm,
        user,
        mapper_config: Mapping[str, str],
        broker_user_id: Optional[str] = None,
    ) -> Optional[AssignmentResult]:
        """Apply the mapper to a brokered user on (re-)login."""
        logger.debug(
            "update_brokered_user invoked for user=%s, realm=%s, brokeredId=%s",
            user.username,
            getattr(realm, "name", "?"),
            broker_user_id,
        )
        return assign_role(realm, user, mapper_config)
