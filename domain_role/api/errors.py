"""JSON error handlers for the admin API."""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from domain_role.core.keycloak.exceptions import KeycloakAPIError


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return jsonify({"error": "Bad Request", "message": _description(error)}), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify({"error": "Not Found", "message": _description(error, "Resource not found")}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method Not Allowed", "message": "Method not allowed for this endpoint"}), 405

    @app.errorhandler(KeycloakAPIError)
    def keycloak_error(error):
        """Keycloak failures surface as 502 Bad Gateway."""
        app.logger.error("Keycloak API error: %s", error)
        return jsonify({
            "error": "Bad Gateway",
            "message": f"Keycloak request failed with status {error.status_code}",
        }), 502

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error."""
        app.logger.error("Internal error: %s", error, exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        app.logger.error("Unhandled exception: %s", error, exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500


def _description(error, default: str = "") -> str:
    description = getattr(error, "description", None)
    if description and not str(description).startswith("The browser (or proxy) sent a request"):
        return str(description)
    return default or str(error)
