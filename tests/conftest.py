"""Pytest shared fixtures: in-memory realm/user doubles and network guard rails."""
import os
import pathlib
import sys
from dataclasses import dataclass, field
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DEMO_MODE", "true")

import pytest
import requests


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """Fail loudly if a unit test reaches for a real Keycloak."""
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(*args, **kwargs):
        raise AssertionError(f"Unexpected network call in unit test: {args[:1]}")

    for verb in ("get", "post", "put", "delete"):
        monkeypatch.setattr(requests, verb, _refuse)
    monkeypatch.setattr(requests.Session, "request", _refuse)


# ─────────────────────────────────────────────────────────────────────────────
# In-memory host doubles
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class FakeRole:
    name: str
    client_id: Optional[str] = None


class FakeClient:
    def __init__(self, client_id: str, roles=()):
        self.client_id = client_id
        self.roles = {name: FakeRole(name, client_id) for name in roles}
        self.role_lookups: list[str] = []

    def get_role(self, name):
        self.role_lookups.append(name)
        return self.roles.get(name)


class FakeRealm:
    """Realm double supporting realm roles and client roles."""

    def __init__(self, name: str = "demo", roles=(), clients=None):
        self.name = name
        self.roles = {role: FakeRole(role) for role in roles}
        self.clients = {
            client_id: FakeClient(client_id, client_roles)
            for client_id, client_roles in (clients or {}).items()
        }
        self.client_lookups: list[str] = []

    def get_role(self, name):
        return self.roles.get(name)

    def get_client_by_client_id(self, client_id):
        self.client_lookups.append(client_id)
        return self.clients.get(client_id)


@dataclass
class FakeUser:
    email: Optional[str]
    username: str = "alice"
    held: set = field(default_factory=set)
    grants: list = field(default_factory=list)

    def has_role(self, role):
        return role in self.held

    def grant_role(self, role):
        self.grants.append(role)
        self.held.add(role)


@pytest.fixture
def make_realm():
    return FakeRealm


@pytest.fixture
def make_user():
    return FakeUser
