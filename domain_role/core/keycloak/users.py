"""Keycloak user lookups and the user adapter used by the assignment policy."""
from __future__ import annotations
from typing import Optional

from .client import KeycloakClient
from .exceptions import UserNotFoundError
from .roles import RoleRef, RoleService, _segment


class KeycloakUser:
    """User adapter: exposes email/username and role membership for one user."""

    def __init__(self, roles: RoleService, realm: str, representation: dict):
        self._roles = roles
        self.realm = realm
        self.id = representation["id"]
        self.username = representation.get("username", "")
        self.email = representation.get("email")

    def has_role(self, role: RoleRef) -> bool:
        return role.id in self._roles.effective_role_ids(self.realm, self.id, role)

    def grant_role(self, role: RoleRef) -> None:
        self._roles.grant(self.realm, self.id, role, username=self.username)


class UserService:
    """Service for looking up Keycloak users."""

    def __init__(self, client: KeycloakClient):
        """Initialize user service.

        Args:
            client: Authenticated Keycloak client
        """
        self.client = client

    def get_user_by_username(self, realm: str, username: str) -> Optional[dict]:
        """Return the user representation that exactly matches the username.

        Args:
            realm: Realm name
            username: Username to search for

        Returns:
            User representation or None if not found
        """
        resp = self.client.get(
            f"/admin/realms/{_segment(realm)}/users",
            params={"username": username, "exact": "true"},
        )
        for user in resp.json():
            if user.get("username") == username:
                return user
        return None

    def load_user(self, realm: str, username: str) -> KeycloakUser:
        """Return a KeycloakUser adapter for ``username``.

        Raises:
            UserNotFoundError: If no user has that exact username
        """
        rep = self.get_user_by_username(realm, username)
        if not rep:
            raise UserNotFoundError(f"User '{username}' not found in realm '{realm}'")
        return KeycloakUser(RoleService(self.client), realm, rep)
