"""Keycloak role lookup and role-mapping operations."""
from __future__ import annotations
import sys
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from .client import KeycloakClient
from .exceptions import KeycloakAPIError


def _segment(value: str) -> str:
    """URL-encode a single path segment (role names may contain '/', spaces, ...)."""
    return quote(value, safe="")


@dataclass(frozen=True)
class RoleRef:
    """Handle to a realm role (client_id is None) or a client role."""
    id: str
    name: str
    client_id: Optional[str] = None
    container_id: Optional[str] = None

    @property
    def is_client_role(self) -> bool:
        return self.client_id is not None

    @property
    def qualified_name(self) -> str:
        return f"{self.client_id}.{self.name}" if self.client_id else self.name

    def representation(self) -> dict:
        """Minimal role representation accepted by role-mapping endpoints."""
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_representation(cls, rep: dict, client_id: Optional[str] = None) -> "RoleRef":
        return cls(
            id=rep["id"],
            name=rep["name"],
            client_id=client_id,
            container_id=rep.get("containerId"),
        )


class RoleService:
    """Service for looking up roles and granting them to users."""

    def __init__(self, client: KeycloakClient):
        """Initialize role service.

        Args:
            client: Authenticated Keycloak client
        """
        self.client = client

    def _get_optional(self, path: str) -> Optional[dict]:
        try:
            resp = self.client.get(path)
        except KeycloakAPIError as exc:
            if exc.status_code == 404:
                return None
            raise
        payload = resp.json()
        return payload if isinstance(payload, dict) else None

    def get_realm_role(self, realm: str, role_name: str) -> Optional[RoleRef]:
        """Return the realm role with the given name, or None if it does not exist."""
        rep = self._get_optional(f"/admin/realms/{_segment(realm)}/roles/{_segment(role_name)}")
        return RoleRef.from_representation(rep) if rep else None

    def get_client_role(self, realm: str, client_uuid: str, client_id: str, role_name: str) -> Optional[RoleRef]:
        """Return a role defined on a client, or None if the client lacks it.

        Args:
            realm: Realm name
            client_uuid: Internal client id (UUID)
            client_id: Public client id (e.g. "realm-management")
            role_name: Role name on that client
        """
        rep = self._get_optional(
            f"/admin/realms/{_segment(realm)}/clients/{_segment(client_uuid)}/roles/{_segment(role_name)}"
        )
        if not rep:
            return None
        role = RoleRef.from_representation(rep, client_id=client_id)
        if role.container_id is None:
            role = RoleRef(id=role.id, name=role.name, client_id=client_id, container_id=client_uuid)
        return role

    def _mapping_path(self, realm: str, user_id: str, role: RoleRef) -> str:
        base = f"/admin/realms/{_segment(realm)}/users/{_segment(user_id)}/role-mappings"
        if role.is_client_role:
            return f"{base}/clients/{_segment(role.container_id or '')}"
        return f"{base}/realm"

    def effective_role_ids(self, realm: str, user_id: str, role: RoleRef) -> set[str]:
        """Return ids of the user's effective roles in the role's container.

        Composite expansion is included, so a role held through a composite or
        a group counts as held.
        """
        resp = self.client.get(f"{self._mapping_path(realm, user_id, role)}/composite")
        return {rep["id"] for rep in resp.json() if isinstance(rep, dict) and "id" in rep}

    def grant(self, realm: str, user_id: str, role: RoleRef, username: str = "") -> None:
        """Add a role mapping for the user. Keycloak ignores already-present mappings."""
        self.client.post(self._mapping_path(realm, user_id, role), json=[role.representation()])
        print(f"[role-grant] Granted role '{role.qualified_name}' to '{username or user_id}'", file=sys.stderr)
