"""Signed audit trail of role grants made by the domain role mapper.

Each evaluation that reaches Keycloak appends one JSON line to
``$AUDIT_LOG_DIR/role-grants.jsonl``. Lines carry an HMAC-SHA256 signature over
their canonical JSON form when a signing key is configured
(AUDIT_LOG_SIGNING_KEY_FILE or AUDIT_LOG_SIGNING_KEY).

Verify the trail with:
    python -m domain_role.audit
"""
from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import os
import sys
from pathlib import Path
from typing import Any, Literal, Optional

EventType = Literal["role_grant", "role_grant_skipped"]

AUDIT_FILE_NAME = "role-grants.jsonl"


def audit_log_path() -> Path:
    return Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit")) / AUDIT_FILE_NAME


def _signing_key() -> bytes:
    key_file = os.environ.get("AUDIT_LOG_SIGNING_KEY_FILE")
    if key_file:
        try:
            return Path(key_file).read_text(encoding="utf-8").strip().encode("utf-8")
        except OSError as e:
            print(f"[audit] Warning: cannot read signing key file {key_file}: {e}", file=sys.stderr)
    return os.environ.get("AUDIT_LOG_SIGNING_KEY", "").strip().encode("utf-8")


def _signature(event: dict[str, Any], key: bytes) -> str:
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hmac.new(key, canonical, hashlib.sha256).hexdigest()


def log_event(
    event_type: EventType,
    username: str,
    *,
    operator: str = "system",
    realm: str = "demo",
    details: Optional[dict[str, Any]] = None,
    success: bool = True,
) -> dict[str, Any]:
    """Append a role-grant event to the audit trail.

    Args:
        event_type: "role_grant" when a role was granted, "role_grant_skipped" otherwise
        username: User the mapper ran for
        operator: Who triggered the run (e.g. "cli", "admin-api")
        realm: Keycloak realm
        details: Domain, match verdict and role involved
        success: Whether the run completed

    Returns:
        The event as written
    """
    event: dict[str, Any] = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "realm": realm,
        "username": username,
        "operator": operator,
        "success": success,
        "details": dict(details or {}),
    }
    key = _signing_key()
    if key:
        event["signature"] = _signature(event, key)

    path = audit_log_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.parent.chmod(0o700)
    with path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(event, ensure_ascii=False) + "\n")
    path.chmod(0o600)
    return event


def safe_log_event(event_type: EventType, username: str, **kwargs) -> bool:
    """Like log_event, but I/O failures are reported on stderr instead of raised.

    Returns:
        True if the event was written
    """
    try:
        log_event(event_type, username, **kwargs)
    except OSError as e:
        print(f"[audit] Warning: Failed to log {event_type} event for {username}: {e}", file=sys.stderr)
        return False
    return True


def verify_audit_log() -> tuple[int, int]:
    """Check every signature in the audit trail.

    Returns:
        (total_events, valid_signatures); unsigned or unparsable lines count as invalid
    """
    path = audit_log_path()
    if not path.exists():
        return 0, 0

    key = _signing_key()
    total = valid = 0
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        total += 1
        try:
            event = json.loads(line)
        except json.JSONDecodeError:
            continue
        stored = event.pop("signature", None) if isinstance(event, dict) else None
        if key and stored and hmac.compare_digest(stored, _signature(event, key)):
            valid += 1
    return total, valid


if __name__ == "__main__":
    total, valid = verify_audit_log()
    print(f"Audit log {audit_log_path()}: {valid}/{total} events with valid signatures")
    sys.exit(0 if total == valid else 1)
