"""Email domain classification against configured domain patterns."""
from __future__ import annotations
import logging
import re
from typing import AbstractSet, Callable, Optional

from .match_mode import MatchMode

logger = logging.getLogger(__name__)


def wildcard_to_regex(pattern: str) -> str:
    """Translate a wildcard domain pattern into an equivalent regex.

    ``*`` matches any run of characters; everything else (dots included) is literal.
    """
    return re.escape(pattern).replace(r"\*", ".*")


def _match_exact(domain: str, patterns: AbstractSet[str]) -> bool:
    return domain in patterns


def _match_wildcard(domain: str, patterns: AbstractSet[str]) -> bool:
    return any(re.fullmatch(wildcard_to_regex(pattern), domain) for pattern in patterns)


def _match_regex(domain: str, patterns: AbstractSet[str]) -> bool:
    for pattern in patterns:
        try:
            if re.fullmatch(pattern, domain):
                return True
        except Exception as exc:
            logger.warning("Failed to match domain pattern '%s': %s", pattern, exc)
    return False


_MATCHERS: dict[MatchMode, Callable[[str, AbstractSet[str]], bool]] = {
    MatchMode.EXACT: _match_exact,
    MatchMode.WILDCARD: _match_wildcard,
    MatchMode.REGEX: _match_regex,
}


def matches_domain(
    domain: Optional[str],
    patterns: Optional[AbstractSet[str]],
    mode: MatchMode,
) -> bool:
    """Check whether a domain matches any configured pattern.

    Both ``domain`` and ``patterns`` are expected to be lower-cased already.

    Args:
        domain: Email domain (e.g. "dev.example.org")
        patterns: Normalized domain patterns
        mode: How patterns are interpreted

    Returns:
        True if any pattern matches the whole domain, False otherwise
    """
    if domain is None or not patterns:
        return False
    matcher = _MATCHERS.get(mode, _match_exact)
    return matcher(domain, patterns)
