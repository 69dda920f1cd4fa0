import pytest

from domain_role.core.match_mode import MatchMode, parse_mode


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("exact", MatchMode.EXACT),
        ("Exact", MatchMode.EXACT),
        ("WILDCARD", MatchMode.WILDCARD),
        ("Wildcard", MatchMode.WILDCARD),
        ("regex", MatchMode.REGEX),
        ("ReGeX", MatchMode.REGEX),
        ("  Regex ", MatchMode.REGEX),
    ],
)
def test_parse_mode_is_case_insensitive(raw, expected):
    assert parse_mode(raw) is expected


@pytest.mark.parametrize("raw", [None, "", "   ", "glob", "exactly", "EXACT_MATCH", 42])
def test_parse_mode_defaults_to_exact(raw):
    assert parse_mode(raw) is MatchMode.EXACT
