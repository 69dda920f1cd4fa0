"""Command-line helper for the email-domain role mapper.

This module serves as a CLI wrapper around domain_role.core.
"""
from __future__ import annotations
import argparse
import json
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from domain_role import audit
from domain_role.core.keycloak import (
    KeycloakRealm,
    UserService,
    create_client_with_token,
    get_service_account_token,
)
from domain_role.core.keycloak.exceptions import KeycloakAPIError, RealmNotFoundError, UserNotFoundError
from domain_role.core.mapper import DomainRoleMapper
from domain_role.core.policy import (
    CFG_DOMAINS,
    CFG_DOMAIN_MATCH_MODE,
    CFG_FALLBACK_ROLE,
    CFG_MATCHED_ROLE,
    evaluate_email,
)


def _mapper_config(args: argparse.Namespace) -> dict[str, str]:
    values = {
        CFG_DOMAINS: args.domains,
        CFG_DOMAIN_MATCH_MODE: args.mode,
        CFG_MATCHED_ROLE: args.matched_role,
        CFG_FALLBACK_ROLE: args.fallback_role,
    }
    return {key: value for key, value in values.items() if value}


def _add_mapper_options(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("--domains", default=os.environ.get("DOMAIN_ROLE_ALLOWED_DOMAINS", ""),
                    help="Space separated domain patterns")
    sp.add_argument("--mode", default=os.environ.get("DOMAIN_ROLE_MATCH_MODE", "Exact"),
                    help="Exact, Wildcard or Regex")
    sp.add_argument("--matched-role", default=os.environ.get("DOMAIN_ROLE_MATCHED_ROLE"))
    sp.add_argument("--fallback-role", default=os.environ.get("DOMAIN_ROLE_FALLBACK_ROLE"))


def evaluate(args: argparse.Namespace) -> dict:
    """Offline dry run for a single email address."""
    return {"email": args.email, **evaluate_email(args.email, _mapper_config(args)).to_dict()}


def main() -> None:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Email domain → role mapper helper")
    parser.add_argument("--kc-url", default=os.environ.get("KEYCLOAK_URL", "http://localhost:8080"))
    parser.add_argument("--auth-realm", default=os.environ.get("KEYCLOAK_SERVICE_REALM", "master"))
    parser.add_argument("--svc-client-id", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_ID", "automation-cli"))
    parser.add_argument("--svc-client-secret", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_SECRET"))
    parser.add_argument("--operator", default="cli",
                        help="Operator identifier for audit logs (default: cli)")

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("describe")

    se = sub.add_parser("evaluate")
    se.add_argument("--email", required=True)
    _add_mapper_options(se)

    sa = sub.add_parser("apply")
    sa.add_argument("--realm", default=os.environ.get("KEYCLOAK_REALM", "demo"))
    sa.add_argument("--username", required=True)
    _add_mapper_options(sa)

    args = parser.parse_args()

    if not args.cmd:
        parser.print_help()
        return

    if args.cmd == "describe":
        print(json.dumps(DomainRoleMapper().describe(), indent=2, ensure_ascii=False))
        return

    if args.cmd == "evaluate":
        print(json.dumps(evaluate(args), indent=2))
        return

    if not args.svc_client_secret:
        parser.error("Missing service account secret")

    token = get_service_account_token(args.kc_url, args.auth_realm, args.svc_client_id, args.svc_client_secret)
    client = create_client_with_token(args.kc_url, token)

    try:
        realm = KeycloakRealm(client, args.realm)
        realm.ensure_exists()
        user = UserService(client).load_user(args.realm, args.username)
        result = DomainRoleMapper().update_brokered_user(realm, user, _mapper_config(args))
    except (RealmNotFoundError, UserNotFoundError, KeycloakAPIError) as e:
        print(f"[apply] Error: {e}", file=sys.stderr)
        audit.safe_log_event(
            "role_grant",
            args.username,
            operator=args.operator,
            realm=args.realm,
            details={"error": str(e)},
            success=False,
        )
        sys.exit(1)

    if result is None:
        print(f"[apply] User '{args.username}' has no usable email; nothing to do", file=sys.stderr)
        return

    role_name = result.role.qualified_name if result.role else None
    audit.safe_log_event(
        "role_grant" if result.granted else "role_grant_skipped",
        args.username,
        operator=args.operator,
        realm=args.realm,
        details={"domain": result.domain, "matched": result.matched, "role": role_name},
    )
    outcome = "granted" if result.granted else "unchanged"
    print(f"[apply] domain={result.domain} matched={result.matched} role={role_name} ({outcome})", file=sys.stderr)


if __name__ == "__main__":
    main()
