"""Realm and client adapters exposing Keycloak to the role assignment policy."""
from __future__ import annotations
from typing import Optional

from .client import KeycloakClient
from .exceptions import KeycloakAPIError, RealmNotFoundError
from .roles import RoleRef, RoleService, _segment


class KeycloakClientApp:
    """A Keycloak client (application) that can own client roles."""

    def __init__(self, roles: RoleService, realm: str, representation: dict):
        self._roles = roles
        self.realm = realm
        self.id = representation["id"]
        self.client_id = representation["clientId"]

    def get_role(self, role_name: str) -> Optional[RoleRef]:
        return self._roles.get_client_role(self.realm, self.id, self.client_id, role_name)


class KeycloakRealm:
    """Realm adapter backed by the Keycloak Admin API."""

    def __init__(self, client: KeycloakClient, name: str):
        """Initialize realm adapter.

        Args:
            client: Authenticated Keycloak client
            name: Realm name
        """
        self.client = client
        self.name = name
        self.roles = RoleService(client)

    def exists(self) -> bool:
        try:
            self.client.get(f"/admin/realms/{_segment(self.name)}")
            return True
        except KeycloakAPIError as exc:
            if exc.status_code == 404:
                return False
            raise

    def ensure_exists(self) -> None:
        """Raise RealmNotFoundError unless the realm exists."""
        if not self.exists():
            raise RealmNotFoundError(f"Realm '{self.name}' not found")

    def get_role(self, role_name: str) -> Optional[RoleRef]:
        return self.roles.get_realm_role(self.name, role_name)

    def get_client_by_client_id(self, client_id: str) -> Optional[KeycloakClientApp]:
        """Return the client whose clientId equals ``client_id`` exactly, if any."""
        resp = self.client.get(f"/admin/realms/{_segment(self.name)}/clients", params={"clientId": client_id})
        for rep in resp.json():
            if rep.get("clientId") == client_id:
                return KeycloakClientApp(self.roles, self.name, rep)
        return None
