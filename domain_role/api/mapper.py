"""Admin API for the email-domain role mapper.

Endpoints:
    GET  /api/mapper           Mapper descriptor and config property metadata
    POST /api/mapper/evaluate  Dry run: which role would this email receive?
    POST /api/mapper/apply     Apply the mapper to an existing Keycloak user
"""
from __future__ import annotations
import logging

from flask import Blueprint, abort, current_app, jsonify, request

from domain_role import audit
from domain_role.api.decorators import require_api_token
from domain_role.core.keycloak import (
    KeycloakClient,
    KeycloakRealm,
    RealmNotFoundError,
    UserNotFoundError,
    UserService,
)
from domain_role.core.mapper import CONFIG_PROPERTIES, DomainRoleMapper
from domain_role.core.policy import evaluate_email

logger = logging.getLogger(__name__)

bp = Blueprint("mapper", __name__)

_CONFIG_KEYS = {prop.name for prop in CONFIG_PROPERTIES}


def _effective_mapper_config(payload: dict) -> dict[str, str]:
    """Settings defaults overridden by any mapper keys present in the request body."""
    mapper_config = dict(current_app.config["APP_CONFIG"].mapper_config())
    for key in _CONFIG_KEYS:
        value = payload.get(key)
        if isinstance(value, str):
            mapper_config[key] = value
    return mapper_config


def _json_object() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        abort(400, description="JSON object body required")
    return payload


def _keycloak_client() -> KeycloakClient:
    cfg = current_app.config["APP_CONFIG"]
    client = KeycloakClient(cfg.keycloak_url)
    client.authenticate_service_account(
        cfg.keycloak_service_realm,
        cfg.keycloak_service_client_id,
        cfg.keycloak_service_client_secret,
    )
    return client


@bp.route("/mapper", methods=["GET"])
def describe_mapper():
    return jsonify(DomainRoleMapper().describe())


@bp.route("/mapper/evaluate", methods=["POST"])
def evaluate():
    """Classify an email against the mapper configuration without touching Keycloak."""
    payload = _json_object()
    email = payload.get("email")
    if not isinstance(email, str):
        abort(400, description="Field 'email' is required")

    return jsonify(evaluate_email(email, _effective_mapper_config(payload)).to_dict())


@bp.route("/mapper/apply", methods=["POST"])
@require_api_token
def apply():
    """Run the mapper for an existing user, granting the resulting role in Keycloak."""
    cfg = current_app.config["APP_CONFIG"]
    payload = _json_object()
    username = payload.get("username")
    if not isinstance(username, str) or not username.strip():
        abort(400, description="Field 'username' is required")
    realm_name = payload.get("realm") or cfg.keycloak_realm

    client = _keycloak_client()
    realm = KeycloakRealm(client, realm_name)
    try:
        realm.ensure_exists()
        user = UserService(client).load_user(realm_name, username)
    except (RealmNotFoundError, UserNotFoundError) as exc:
        abort(404, description=str(exc))

    result = DomainRoleMapper().update_brokered_user(realm, user, _effective_mapper_config(payload))

    body = {
        "username": username,
        "realm": realm_name,
        "email_valid": result is not None,
        "domain": result.domain if result else None,
        "matched": result.matched if result else False,
        "role": result.role.qualified_name if result and result.role else None,
        "granted": result.granted if result else False,
    }
    logger.info("Mapper applied to user=%s realm=%s granted=%s", username, realm_name, body["granted"])
    audit.safe_log_event(
        "role_grant" if body["granted"] else "role_grant_skipped",
        username,
        operator="admin-api",
        realm=realm_name,
        details={key: body[key] for key in ("domain", "matched", "role")},
    )
    return jsonify(body)
