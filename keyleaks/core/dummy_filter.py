"""Placeholder value filtering.

Reporting every ``YOUR_API_KEY_HERE`` or ``changeme`` trains people to
ignore the scanner, so obvious placeholders are dropped before a match is
ever reported. The chain leans toward suppression: a real secret that
happens to look like a placeholder will be missed.
"""

import re
from typing import Callable, List, Optional, Tuple

DummyRule = Tuple[str, Callable[[str], bool]]


def _regex_rule(*patterns: str, flags: int = re.IGNORECASE) -> Callable[[str], bool]:
    compiled = [re.compile(p, flags) for p in patterns]
    return lambda value: any(p.search(value) for p in compiled)


def _is_repeated_character(value: str) -> bool:
    return len(value) > 3 and value == value[0] * len(value)


DEFAULT_RULES: List[DummyRule] = [
    (
        "placeholder",
        _regex_rule(
            r"^(?:YOUR[_-]?|EXAMPLE[_-]?|PLACEHOLDER[_-]?|CHANGE[_-]?ME|TODO|FIXME|XXX|TEMP|DUMMY)[\w-]*$",
            r"^(?:your|example|placeholder|changeme|test|demo|sample|fake|mock)[\w-]*$",
        ),
    ),
    (
        "test_value",
        _regex_rule(
            r"^(?:test|testing|test123|test_key|test_token|test_secret)$",
            r"^test[\w-]*$",
        ),
    ),
    (
        "example_domain",
        _regex_rule(
            r"^(?:example|sample|test)\.(?:com|org|net|io)$",
            r"^(?:example|sample|test|demo)@[\w.-]+$",
        ),
    ),
    (
        "filler_literal",
        _regex_rule(
            r"^12345(?:67890)?$",
            r"^(?:abcdef|123456|qwerty|password)$",
            r"^[\w-]*_here$",
        ),
    ),
    (
        "degenerate",
        _regex_rule(
            r"""^(?:null|undefined|none|empty|''|""|\[|\])$""",
            r"^.{0,3}$",
        ),
    ),
    (
        "local_dev",
        _regex_rule(
            r"^(?:dev|development|local|localhost|127\.0\.0\.1)[\w-]*$",
            r"^localhost",
        ),
    ),
    (
        "ignore_file",
        _regex_rule(r"^\.env\.example$", r"^\.env\.sample$"),
    ),
    ("repeated_character", _is_repeated_character),
]


class DummyFilter:
    """Ordered chain of placeholder predicates; the first hit wins."""

    def __init__(self, rules: Optional[List[DummyRule]] = None):
        self.rules: List[DummyRule] = list(rules) if rules is not None else list(DEFAULT_RULES)

    def matched_rule(self, value: str) -> Optional[str]:
        """Name of the first rule that flags ``value``, or None."""
        trimmed = value.strip()
        for name, predicate in self.rules:
            if predicate(trimmed):
                return name
        return None

    def is_dummy(self, value: str) -> bool:
        return self.matched_rule(value) is not None


_default_filter = DummyFilter()


def is_dummy(value: str) -> bool:
    """Check ``value`` against the default placeholder chain."""
    return _default_filter.is_dummy(value)
