"""Resolution of configured role names to realm or client roles.

Role settings are stored as namespaced strings: either ``roleName`` for a realm
role or ``clientId.roleName`` for a client role. Client ids and role names may
both contain dots, so a name like ``a.b.c`` is ambiguous and every split point
is tried from left to right.
"""
from __future__ import annotations
import logging
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


def iter_client_role_splits(name: str):
    """Yield ``(client_id, role_name)`` candidates for a dotted name, leftmost dot first."""
    index = name.find(".", 1)
    while 0 < index < len(name) - 1:
        client_id = name[:index]
        role_name = name[index + 1:]
        if not client_id.endswith(".") and not role_name.startswith("."):
            yield client_id, role_name
        index = name.find(".", index + 1)


def resolve_role(
    lookup_realm_role: Callable[[str], Optional[R]],
    lookup_client_role: Callable[[str, str], Optional[R]],
    client_exists: Callable[[str], bool],
    name: Optional[str],
) -> Optional[R]:
    """Resolve a qualified role name to a role handle.

    A realm role with the full name always wins. Otherwise each
    ``clientId.roleName`` split is tried in order and the first client that
    exists and owns the role is used.

    Args:
        lookup_realm_role: Returns the realm role with the given name, or None
        lookup_client_role: Returns the role of (client_id, role_name), or None
        client_exists: Whether a client with the given client id exists
        name: Configured role name

    Returns:
        Role handle or None if the name cannot be resolved
    """
    if not isinstance(name, str) or not name:
        return None

    role = lookup_realm_role(name)
    if role is not None:
        return role

    for client_id, role_name in iter_client_role_splits(name):
        if not client_exists(client_id):
            continue
        role = lookup_client_role(client_id, role_name)
        if role is not None:
            logger.debug("Resolved client role '%s' for client '%s'", role_name, client_id)
            return role

    return None


def find_role(realm, name: Optional[str]):
    """Resolve a role name against a realm adapter.

    The realm must provide ``get_role(name)`` and ``get_client_by_client_id(client_id)``;
    clients returned by the latter must provide ``get_role(name)``.
    """
    realm_name = getattr(realm, "name", "?")
    if name is None:
        logger.debug("No role configured while resolving role in realm '%s'", realm_name)
        return None

    clients: dict = {}

    def _client(client_id: str):
        if client_id not in clients:
            clients[client_id] = realm.get_client_by_client_id(client_id)
        return clients[client_id]

    def _client_role(client_id: str, role_name: str):
        client = _client(client_id)
        return client.get_role(role_name) if client is not None else None

    role = resolve_role(
        realm.get_role,
        _client_role,
        lambda client_id: _client(client_id) is not None,
        name,
    )
    if role is None:
        logger.warning(
            "Configured role '%s' not found in realm '%s' (as realm or client role)",
            name,
            realm_name,
        )
    return role
