import pytest

from domain_role.config import settings
from domain_role.config.settings import AppConfig, _get_or_default, load_settings

ENV_VARS = [
    "DEMO_MODE",
    "KEYCLOAK_URL",
    "KEYCLOAK_REALM",
    "KEYCLOAK_SERVICE_REALM",
    "KEYCLOAK_SERVICE_CLIENT_ID",
    "KEYCLOAK_SERVICE_CLIENT_SECRET",
    "DOMAIN_ROLE_API_TOKEN",
    "DOMAIN_ROLE_ALLOWED_DOMAINS",
    "DOMAIN_ROLE_MATCH_MODE",
    "DOMAIN_ROLE_MATCHED_ROLE",
    "DOMAIN_ROLE_FALLBACK_ROLE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(settings, "SECRETS_DIR", tmp_path)
    yield


def test_demo_mode_uses_local_defaults(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    cfg = load_settings()
    assert cfg.demo_mode is True
    assert cfg.keycloak_url == "http://127.0.0.1:8080"
    assert cfg.keycloak_service_client_id == "automation-cli"
    assert cfg.keycloak_service_client_secret == "demo-service-secret"
    assert cfg.domain_match_mode == "Exact"


def test_production_requires_keycloak_url():
    with pytest.raises(RuntimeError, match="KEYCLOAK_URL"):
        load_settings()


def test_production_requires_service_secret(monkeypatch):
    monkeypatch.setenv("KEYCLOAK_URL", "https://kc.example.org")
    monkeypatch.setenv("KEYCLOAK_SERVICE_CLIENT_ID", "automation-cli")
    with pytest.raises(RuntimeError, match="KEYCLOAK_SERVICE_CLIENT_SECRET"):
        load_settings()


def test_service_secret_read_from_run_secrets(monkeypatch, tmp_path):
    (tmp_path / "keycloak_service_client_secret").write_text("file-secret\n")
    monkeypatch.setenv("KEYCLOAK_URL", "https://kc.example.org/")
    monkeypatch.setenv("KEYCLOAK_SERVICE_CLIENT_ID", "automation-cli")
    cfg = load_settings()
    assert cfg.keycloak_service_client_secret == "file-secret"
    assert cfg.keycloak_url == "https://kc.example.org"


def test_mapper_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("KEYCLOAK_REALM", "corp")
    monkeypatch.setenv("DOMAIN_ROLE_ALLOWED_DOMAINS", "example.com *.example.org")
    monkeypatch.setenv("DOMAIN_ROLE_MATCH_MODE", "Wildcard")
    monkeypatch.setenv("DOMAIN_ROLE_MATCHED_ROLE", "portal.staff")
    cfg = load_settings()
    assert cfg.keycloak_service_realm == "corp"
    assert cfg.mapper_config() == {
        "allowedDomains": "example.com *.example.org",
        "domainMatchMode": "Wildcard",
        "matchedRole": "portal.staff",
    }


def test_mapper_config_omits_unset_keys():
    cfg = AppConfig(demo_mode=True, domain_match_mode="")
    assert cfg.mapper_config() == {}


def test_get_or_default_prefers_environment(monkeypatch):
    monkeypatch.setenv("SOME_VAR", "set")
    assert _get_or_default("SOME_VAR", demo_default="fallback", demo_mode=True) == "set"
    monkeypatch.delenv("SOME_VAR")
    assert _get_or_default("SOME_VAR", demo_default="fallback", demo_mode=True) == "fallback"
    with pytest.raises(RuntimeError):
        _get_or_default("SOME_VAR", demo_default="fallback", demo_mode=False)
