"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from domain_role.core.policy import (
    CFG_DOMAINS,
    CFG_DOMAIN_MATCH_MODE,
    CFG_FALLBACK_ROLE,
    CFG_MATCHED_ROLE,
)

SECRETS_DIR = Path("/run/secrets")


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = SECRETS_DIR / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from {SECRETS_DIR}")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read {SECRETS_DIR}/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    demo_mode: bool

    # Keycloak
    keycloak_url: str = ""
    keycloak_realm: str = "demo"
    keycloak_service_realm: str = "demo"
    keycloak_service_client_id: str = "automation-cli"
    keycloak_service_client_secret: str = ""

    # Mapper defaults
    allowed_domains: str = ""
    domain_match_mode: str = "Exact"
    matched_role: Optional[str] = None
    fallback_role: Optional[str] = None

    # Admin API bearer token (empty disables state-changing endpoints)
    api_token: str = ""

    def mapper_config(self) -> dict[str, str]:
        """Mapper settings keyed like the mapper's config properties (unset keys omitted)."""
        values = {
            CFG_DOMAINS: self.allowed_domains,
            CFG_DOMAIN_MATCH_MODE: self.domain_match_mode,
            CFG_MATCHED_ROLE: self.matched_role,
            CFG_FALLBACK_ROLE: self.fallback_role,
        }
        return {key: value for key, value in values.items() if value}


def _get_or_default(var_name: str, demo_default: Optional[str] = None, demo_mode: bool = False) -> str:
    """Get environment variable or use demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        print(f"[demo-mode] Using default for {var_name}")
        return demo_default

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    keycloak_url = _get_or_default("KEYCLOAK_URL", demo_default="http://127.0.0.1:8080", demo_mode=demo_mode)
    keycloak_realm = os.environ.get("KEYCLOAK_REALM", "demo")
    keycloak_service_realm = os.environ.get("KEYCLOAK_SERVICE_REALM", keycloak_realm)
    keycloak_service_client_id = _get_or_default(
        "KEYCLOAK_SERVICE_CLIENT_ID",
        demo_default="automation-cli",
        demo_mode=demo_mode,
    )

    keycloak_service_client_secret = _load_secret_from_file(
        "keycloak_service_client_secret",
        "KEYCLOAK_SERVICE_CLIENT_SECRET",
    )
    if not keycloak_service_client_secret:
        if demo_mode:
            keycloak_service_client_secret = os.environ.get(
                "KEYCLOAK_SERVICE_CLIENT_SECRET_DEMO", "demo-service-secret"
            )
            print("[demo-mode] Using demo KEYCLOAK_SERVICE_CLIENT_SECRET")
        else:
            raise RuntimeError("KEYCLOAK_SERVICE_CLIENT_SECRET not found in /run/secrets or environment")

    api_token = _load_secret_from_file("domain_role_api_token", "DOMAIN_ROLE_API_TOKEN") or ""

    allowed_domains = os.environ.get("DOMAIN_ROLE_ALLOWED_DOMAINS", "")
    domain_match_mode = os.environ.get("DOMAIN_ROLE_MATCH_MODE", "Exact").strip() or "Exact"
    matched_role = os.environ.get("DOMAIN_ROLE_MATCHED_ROLE") or None
    fallback_role = os.environ.get("DOMAIN_ROLE_FALLBACK_ROLE") or None

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(f"[settings] Mode={mode_label}; realm={keycloak_realm}; match_mode={domain_match_mode}")

    return AppConfig(
        demo_mode=demo_mode,
        keycloak_url=keycloak_url.rstrip("/"),
        keycloak_realm=keycloak_realm,
        keycloak_service_realm=keycloak_service_realm,
        keycloak_service_client_id=keycloak_service_client_id,
        keycloak_service_client_secret=keycloak_service_client_secret,
        allowed_domains=allowed_domains,
        domain_match_mode=domain_match_mode,
        matched_role=matched_role,
        fallback_role=fallback_role,
        api_token=api_token,
    )
