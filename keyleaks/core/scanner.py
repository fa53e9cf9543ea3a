"""Secret scanner engine for detecting exposed secrets in text."""

import logging
from typing import Iterable, List, Optional

from keyleaks.core.dummy_filter import DummyFilter
from keyleaks.core.models import SecretMatch, SecretPattern
from keyleaks.core.patterns import default_patterns, load_patterns

logger = logging.getLogger(__name__)

CONTEXT_BEFORE = 30
CONTEXT_AFTER = 50


class SecretScanner:
    """
    Scans raw text for exposed secrets, line by line.

    The scanner is stateless between calls: it owns its pattern catalog and
    placeholder filter, and every ``scan`` call returns fresh matches.
    Size limits are the caller's concern.
    """

    def __init__(
        self,
        patterns: Optional[Iterable[SecretPattern]] = None,
        patterns_file: Optional[str] = None,
        dummy_filter: Optional[DummyFilter] = None,
    ):
        """
        Initialize the secret scanner.

        Args:
            patterns: Explicit detectors to use
            patterns_file: Path to a YAML catalog, used when ``patterns`` is None
            dummy_filter: Placeholder filter (defaults to the standard chain)

        Raises:
            PatternError: If the catalog cannot be loaded
        """
        if patterns is not None:
            self.patterns = tuple(patterns)
        elif patterns_file:
            self.patterns = load_patterns(patterns_file)
        else:
            self.patterns = default_patterns()
        self.dummy_filter = dummy_filter or DummyFilter()

    def scan(self, text: str) -> List[SecretMatch]:
        """
        Scan text for secrets.

        Args:
            text: Raw text content

        Returns:
            Matches ordered by line, then by pattern order, then by position
        """
        matches: List[SecretMatch] = []

        for line_index, line in enumerate(text.split("\n")):
            for pattern in self.patterns:
                for occurrence in pattern.matcher.finditer(line):
                    value = self._extract_value(occurrence)

                    rule = self.dummy_filter.matched_rule(value)
                    if rule:
                        logger.debug(
                            "Suppressed %s candidate on line %d (rule: %s)",
                            pattern.name,
                            line_index + 1,
                            rule,
                        )
                        continue

                    start = occurrence.start()
                    matches.append(
                        SecretMatch(
                            type=pattern.name,
                            value=value,
                            line=line_index + 1,
                            column=start + 1,
                            context=self._extract_context(line, start),
                            severity=pattern.severity,
                        )
                    )

        return matches

    @staticmethod
    def _extract_value(occurrence) -> str:
        """Capture group 1 when the pattern has one and it matched, else the whole match."""
        if occurrence.re.groups and occurrence.group(1):
            return occurrence.group(1)
        return occurrence.group(0)

    @staticmethod
    def _extract_context(line: str, start: int) -> str:
        """Text around the occurrence, clipped to the line and trimmed."""
        begin = max(0, start - CONTEXT_BEFORE)
        end = min(len(line), start + CONTEXT_AFTER)
        return line[begin:end].strip()


def scan_for_secrets(text: str) -> List[SecretMatch]:
    """Scan ``text`` with the default catalog and placeholder filter."""
    return SecretScanner().scan(text)
