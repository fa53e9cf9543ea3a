"""Conversion of matches into editor-style diagnostics."""

from dataclasses import dataclass
from enum import Enum
from typing import List

from keyleaks.core.models import SecretMatch, Severity
from keyleaks.core.redactor import redact

DIAGNOSTIC_SOURCE = "keyleaks"


class DiagnosticLevel(str, Enum):
    """Visual class of a diagnostic marker."""

    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"


SEVERITY_LEVELS = {
    Severity.HIGH: DiagnosticLevel.ERROR,
    Severity.MEDIUM: DiagnosticLevel.WARNING,
    Severity.LOW: DiagnosticLevel.INFORMATION,
}


@dataclass(frozen=True)
class Diagnostic:
    """A 1-based line/column marker for one match."""

    line: int
    column: int
    level: DiagnosticLevel
    message: str
    code: str
    source: str = DIAGNOSTIC_SOURCE

    def format(self, resource_id: str) -> str:
        """Compiler-style ``resource:line:col: level: message``."""
        return f"{resource_id}:{self.line}:{self.column}: {self.level.value}: {self.message}"


def diagnostic_message(match: SecretMatch) -> str:
    return f"Secret detected: {match.type} - {redact(match.value)}"


def to_diagnostic(match: SecretMatch) -> Diagnostic:
    return Diagnostic(
        line=match.line,
        column=match.column,
        level=SEVERITY_LEVELS[match.severity],
        message=diagnostic_message(match),
        code=match.type,
    )


def to_diagnostics(matches: List[SecretMatch]) -> List[Diagnostic]:
    """Diagnostics for ``matches``, in the same order."""
    return [to_diagnostic(m) for m in matches]
