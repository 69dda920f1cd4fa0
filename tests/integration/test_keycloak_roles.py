"""
Integration tests against a running Keycloak.

Prerequisites:
    - Keycloak available at $KEYCLOAK_URL
    - Service account credentials configured (KEYCLOAK_SERVICE_CLIENT_SECRET)
    - A realm $KEYCLOAK_REALM containing user $DOMAIN_ROLE_TEST_USER

Usage:
    pytest tests/integration -v

    # Skip integration tests during CI
    pytest -m "not integration" tests/
"""
import os

import pytest

from domain_role.core.keycloak import (
    KeycloakClient,
    KeycloakRealm,
    RealmNotFoundError,
    UserService,
)
from domain_role.core.resolver import find_role

KEYCLOAK_URL = os.getenv("KEYCLOAK_URL", "http://localhost:8080")
SERVICE_REALM = os.getenv("KEYCLOAK_SERVICE_REALM", "master")
SERVICE_CLIENT_ID = os.getenv("KEYCLOAK_SERVICE_CLIENT_ID", "automation-cli")
SERVICE_CLIENT_SECRET = os.getenv("KEYCLOAK_SERVICE_CLIENT_SECRET", "")
TARGET_REALM = os.getenv("KEYCLOAK_REALM", "demo")
TEST_USER = os.getenv("DOMAIN_ROLE_TEST_USER", "")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not SERVICE_CLIENT_SECRET, reason="KEYCLOAK_SERVICE_CLIENT_SECRET not configured"),
]


@pytest.fixture(scope="module")
def kc_client():
    client = KeycloakClient(KEYCLOAK_URL)
    client.authenticate_service_account(SERVICE_REALM, SERVICE_CLIENT_ID, SERVICE_CLIENT_SECRET)
    return client


@pytest.fixture(scope="module")
def realm(kc_client):
    realm = KeycloakRealm(kc_client, TARGET_REALM)
    realm.ensure_exists()
    return realm


def test_unknown_realm_reported(kc_client):
    with pytest.raises(RealmNotFoundError):
        KeycloakRealm(kc_client, "no-such-realm-for-domain-role").ensure_exists()


def test_default_realm_role_resolves(realm):
    role = find_role(realm, "offline_access")
    assert role is not None
    assert not role.is_client_role


def test_builtin_client_role_resolves_via_dotted_name(realm):
    role = find_role(realm, "account.view-profile")
    assert role is not None
    assert role.client_id == "account"
    assert role.name == "view-profile"


def test_missing_role_returns_none(realm):
    assert find_role(realm, "account.no-such-role") is None


@pytest.mark.skipif(not TEST_USER, reason="DOMAIN_ROLE_TEST_USER not configured")
def test_grant_is_idempotent(kc_client, realm):
    user = UserService(kc_client).load_user(TARGET_REALM, TEST_USER)
    role = find_role(realm, "offline_access")

    if not user.has_role(role):
        user.grant_role(role)

    assert user.has_role(role)
