"""Keycloak Admin API adapters for the email-domain role mapper.

Architecture:
- client.py: HTTP client with service account authentication and auto-refresh
- realm.py: Realm and client adapters (role lookup by name / clientId)
- users.py: User lookup and the user adapter (role membership, grants)
- roles.py: RoleRef handle and role-mapping operations
- exceptions.py: Typed exceptions for error handling

Usage:
    from domain_role.core.keycloak import KeycloakClient, KeycloakRealm, UserService

    client = KeycloakClient("http://keycloak:8080")
    client.authenticate_service_account("master", "automation-cli", "secret")

    realm = KeycloakRealm(client, "demo")
    user = UserService(client).load_user("demo", "alice")
"""
from .client import (
    KeycloakClient,
    get_service_account_token,
    create_client_with_token,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    UserNotFoundError,
    RealmNotFoundError,
)
from .realm import KeycloakRealm, KeycloakClientApp
from .roles import RoleRef, RoleService
from .users import KeycloakUser, UserService

__all__ = [
    # Client
    "KeycloakClient",
    "get_service_account_token",
    "create_client_with_token",
    "REQUEST_TIMEOUT",

    # Exceptions
    "KeycloakError",
    "KeycloakAPIError",
    "UserNotFoundError",
    "RealmNotFoundError",

    # Adapters and services
    "KeycloakRealm",
    "KeycloakClientApp",
    "KeycloakUser",
    "RoleRef",
    "RoleService",
    "UserService",
]
