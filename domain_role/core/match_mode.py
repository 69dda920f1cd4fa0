"""Domain match modes for the email-domain role mapper."""
from __future__ import annotations
from enum import Enum
from typing import Optional


class MatchMode(Enum):
    """How configured domain patterns are compared against an email domain."""

    EXACT = "exact"
    WILDCARD = "wildcard"
    REGEX = "regex"


def parse_mode(raw: Optional[str]) -> MatchMode:
    """Parse a configured match mode, falling back to EXACT.

    Args:
        raw: Value of the ``domainMatchMode`` setting (e.g. "Wildcard")

    Returns:
        Matching MatchMode, or MatchMode.EXACT for missing/unknown values
    """
    if not isinstance(raw, str):
        return MatchMode.EXACT
    try:
        return MatchMode[raw.strip().upper()]
    except KeyError:
        return MatchMode.EXACT
