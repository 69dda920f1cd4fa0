"""Flask decorators for admin API authorization.

State-changing endpoints require ``Authorization: Bearer <token>`` matching the
configured DOMAIN_ROLE_API_TOKEN. Without a configured token those endpoints
are disabled.
"""
import hmac
import logging
from functools import wraps

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)


def require_api_token(fn):
    """Reject the request unless it carries the configured bearer token."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        expected = current_app.config["APP_CONFIG"].api_token
        if not expected:
            logger.warning("Admin API call to %s rejected: no API token configured", request.path)
            return jsonify({"error": "Forbidden", "message": "Admin API token not configured"}), 403

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            logger.warning("Admin API request missing Bearer token")
            return jsonify({
                "error": "Unauthorized",
                "message": "Authorization header required. Use 'Authorization: Bearer <token>'",
            }), 401

        token = auth_header[7:]
        if not token or not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
            logger.warning("Admin API request with invalid token")
            return jsonify({"error": "Unauthorized", "message": "Invalid API token"}), 401

        return fn(*args, **kwargs)

    return wrapper
