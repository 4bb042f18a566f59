"""
Path matching tests.
"""

import pytest

from yamlcrypt.errors import UsageError
from yamlcrypt.rules import PathRule, matches, parse_path


def test_parse_path():
    assert parse_path(None) == ()
    assert parse_path("") == ()
    assert parse_path("a.b.c") == ("a", "b", "c")


@pytest.mark.parametrize("expression", ["a..b", ".a", "a."])
def test_parse_path_rejects_empty_components(expression):
    with pytest.raises(UsageError):
        parse_path(expression)


def test_empty_target_matches_everything():
    assert matches((), ())
    assert matches(("x", "y"), ())


def test_prefix_matching():
    target = ("a", "b")
    assert matches(("a", "b"), target)
    assert matches(("a", "b", "c"), target)
    assert not matches(("a",), target)
    assert not matches(("a", "c"), target)
    assert not matches(("a", "bc"), target)


def test_path_rule():
    rule = PathRule.parse("data")
    assert rule.matches(("data", "password"))
    assert not rule.matches(("metadata", "name"))
    assert str(rule) == "data"
    assert str(PathRule()) == "<document>"
