"""Core domain models for KeyLeaks."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Pattern


class Severity(str, Enum):
    """Detector severity levels."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Urgency(str, Enum):
    """Urgency levels for security advice."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AdviceSource(str, Enum):
    """Which path produced a piece of advice."""

    REMOTE = "remote"
    UNSTRUCTURED = "unstructured"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class SecretPattern:
    """A named detector: a compiled regex plus a severity tag."""

    name: str
    severity: Severity
    matcher: Pattern[str]

    @classmethod
    def compile(cls, name: str, pattern: str, severity: str) -> "SecretPattern":
        """Build a pattern from its raw definition (case-insensitive)."""
        return cls(
            name=name,
            severity=Severity(severity),
            matcher=re.compile(pattern, re.IGNORECASE),
        )


@dataclass(frozen=True)
class SecretMatch:
    """A single detected secret. The value is stored raw, never redacted."""

    type: str
    value: str
    line: int
    column: int
    context: str
    severity: Severity

    def __post_init__(self) -> None:
        if self.line < 1 or self.column < 1:
            raise ValueError(
                f"line and column are 1-based (got line={self.line}, column={self.column})"
            )


@dataclass
class ScanResult:
    """Latest scan of one resource."""

    resource_id: str
    matches: List[SecretMatch] = field(default_factory=list)
    scanned_at: datetime = field(default_factory=datetime.now)

    @property
    def total_matches(self) -> int:
        return len(self.matches)

    @property
    def high_severity_matches(self) -> List[SecretMatch]:
        """Matches worth an immediate alert."""
        return [m for m in self.matches if m.severity == Severity.HIGH]


@dataclass
class SecurityAdvice:
    """Remediation guidance for one detected secret."""

    title: str
    description: str
    recommendations: List[str]
    urgency: Urgency
    revocation_steps: Optional[List[str]] = None

    def __post_init__(self) -> None:
        if not self.recommendations:
            raise ValueError("SecurityAdvice requires at least one recommendation")

    def to_dict(self) -> dict:
        data = {
            "title": self.title,
            "description": self.description,
            "recommendations": list(self.recommendations),
            "urgency": self.urgency.value,
        }
        if self.revocation_steps:
            data["revocationSteps"] = list(self.revocation_steps)
        return data


@dataclass
class AdviceOutcome:
    """
    Result of an advisory request.

    ``advice`` is always populated. ``warning`` carries the reason when the
    remote call failed and the deterministic fallback was used instead.
    """

    advice: SecurityAdvice
    source: AdviceSource
    warning: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.warning is not None


@dataclass
class AdvicePanelData:
    """Payload handed to whatever renders advice for a human."""

    advice: SecurityAdvice
    match: SecretMatch
    resource_id: str


@dataclass
class BatchSummary:
    """Aggregate of a workspace batch scan."""

    scanned: int = 0
    skipped: int = 0
    total_matches: int = 0
    results_with_matches: List[ScanResult] = field(default_factory=list)
