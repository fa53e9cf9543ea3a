"""Core package for KeyLeaks."""

from keyleaks.core.advisor import SecurityAdvisor, fallback_advice, get_security_advice
from keyleaks.core.dummy_filter import DummyFilter, is_dummy
from keyleaks.core.exceptions import KeyLeaksError, PatternError
from keyleaks.core.models import SecretMatch, SecretPattern, SecurityAdvice, Severity
from keyleaks.core.patterns import default_patterns, load_patterns
from keyleaks.core.redactor import redact
from keyleaks.core.scanner import SecretScanner, scan_for_secrets
from keyleaks.core.scheduler import ScanScheduler

__all__ = [
    "SecurityAdvisor",
    "fallback_advice",
    "get_security_advice",
    "DummyFilter",
    "is_dummy",
    "KeyLeaksError",
    "PatternError",
    "SecretMatch",
    "SecretPattern",
    "SecurityAdvice",
    "Severity",
    "default_patterns",
    "load_patterns",
    "redact",
    "SecretScanner",
    "scan_for_secrets",
    "ScanScheduler",
]
