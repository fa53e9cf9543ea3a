"""KeyLeaks - secret leak detection with remediation advice."""

__version__ = "0.1.0"
__author__ = "KeyLeaks Team"

from keyleaks.core.models import (
    AdviceSource,
    ScanResult,
    SecretMatch,
    SecurityAdvice,
    Severity,
    Urgency,
)

__all__ = [
    "AdviceSource",
    "ScanResult",
    "SecretMatch",
    "SecurityAdvice",
    "Severity",
    "Urgency",
    "__version__",
]
