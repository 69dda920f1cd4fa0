"""Unit tests for the Keycloak Admin API HTTP client."""
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from domain_role.core.keycloak import KeycloakAPIError, KeycloakClient, create_client_with_token


def _response(status=200, payload=None, url="http://kc/x"):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload if payload is not None else {}
    resp.text = "error body"
    resp.url = url
    return resp


@pytest.fixture
def session():
    session = MagicMock()
    session.post.return_value = _response(payload={"access_token": "tok-1", "expires_in": 300})
    session.request.return_value = _response(payload=[])
    return session


def test_service_account_token_is_sent_as_bearer(session):
    client = KeycloakClient("http://kc/", session=session)
    assert client.authenticate_service_account("master", "automation-cli", "secret") == "tok-1"

    client.get("/admin/realms/demo/users", params={"username": "alice"})

    token_call = session.post.call_args
    assert token_call.args[0] == "http://kc/realms/master/protocol/openid-connect/token"
    assert token_call.kwargs["data"]["grant_type"] == "client_credentials"

    method, url = session.request.call_args.args
    assert (method, url) == ("GET", "http://kc/admin/realms/demo/users")
    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer tok-1"
    assert session.request.call_args.kwargs["params"] == {"username": "alice"}


def test_token_refreshed_before_expiry(session):
    client = KeycloakClient("http://kc", session=session)
    client.authenticate_service_account("master", "automation-cli", "secret")
    client._token_expires_at = datetime.now() + timedelta(seconds=5)
    session.post.return_value = _response(payload={"access_token": "tok-2", "expires_in": 300})

    client.post("/admin/realms/demo/users/1/role-mappings/realm", json=[{"id": "r"}])

    assert session.post.call_count == 2
    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer tok-2"


def test_http_error_raises_keycloak_api_error(session):
    session.request.return_value = _response(status=403, url="http://kc/admin/realms/demo")
    client = create_client_with_token("http://kc", "preset")
    client.session = session

    with pytest.raises(KeycloakAPIError) as exc:
        client.get("/admin/realms/demo")

    assert exc.value.status_code == 403
    assert exc.value.endpoint == "http://kc/admin/realms/demo"


def test_failed_token_request_raises(session):
    session.post.return_value = _response(status=401)
    client = KeycloakClient("http://kc", session=session)

    with pytest.raises(KeycloakAPIError) as exc:
        client.authenticate_service_account("master", "automation-cli", "wrong")

    assert exc.value.status_code == 401


def test_requests_without_authentication_fail(session):
    client = KeycloakClient("http://kc", session=session)
    with pytest.raises(KeycloakAPIError):
        client.get("/admin/realms/demo")
    session.request.assert_not_called()
