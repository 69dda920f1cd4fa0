"""Flask application factory for the domain role mapper admin API."""
from __future__ import annotations
import logging
import os
from typing import Optional

from flask import Flask

from domain_role.config import AppConfig, load_settings


def create_app(cfg: Optional[AppConfig] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Preloaded settings (defaults to load_settings())
    """
    cfg = cfg or load_settings()

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["DEMO_MODE"] = cfg.demo_mode

    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

    from domain_role.api import health, errors, mapper

    app.register_blueprint(health.bp)
    app.register_blueprint(mapper.bp, url_prefix="/api")

    errors.register_error_handlers(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    print(f"[flask_app] Mode={mode_label}; realm={cfg.keycloak_realm}")
    if not cfg.api_token:
        print("[flask_app] WARNING: DOMAIN_ROLE_API_TOKEN not set - /api/mapper/apply is disabled")

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
