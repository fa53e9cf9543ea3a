"""Secret pattern registry.

The registry is a flat, ordered catalog of detectors loaded from YAML. The
scanner treats every entry the same way, so adding a detector is a data
change only.
"""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

import yaml

from keyleaks.core.exceptions import PatternError
from keyleaks.core.models import SecretPattern, Severity

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS_FILE = Path(__file__).parent.parent / "config" / "secret_patterns.yaml"


def _build_pattern(index: int, pattern_def: dict) -> SecretPattern:
    """Validate and compile a single catalog entry."""
    if not isinstance(pattern_def, dict):
        raise PatternError(f"Pattern #{index} is not a mapping", details={"index": index})

    name = pattern_def.get("name")
    raw = pattern_def.get("pattern")
    severity = pattern_def.get("severity", Severity.MEDIUM.value)

    if not name or not raw:
        raise PatternError(
            f"Pattern #{index} must define 'name' and 'pattern'",
            details={"index": index},
        )

    try:
        compiled = SecretPattern.compile(name=name, pattern=raw, severity=severity)
    except re.error as e:
        raise PatternError(
            f"Pattern '{name}' failed to compile: {e}",
            details={"name": name, "pattern": raw},
        )
    except ValueError:
        raise PatternError(
            f"Pattern '{name}' has unknown severity '{severity}'",
            details={"name": name, "severity": severity},
        )

    if compiled.matcher.groups > 1:
        raise PatternError(
            f"Pattern '{name}' declares {compiled.matcher.groups} capture groups (max 1)",
            details={"name": name, "groups": compiled.matcher.groups},
        )

    return compiled


def load_patterns(patterns_file: Optional[str] = None) -> Tuple[SecretPattern, ...]:
    """
    Load the secret pattern catalog.

    Args:
        patterns_file: Path to a YAML catalog (defaults to the bundled one)

    Returns:
        Ordered, immutable tuple of compiled patterns

    Raises:
        PatternError: If the file is missing, unreadable or holds a bad entry.
            This is a start-up failure, not something to recover from per scan.
    """
    path = Path(patterns_file) if patterns_file else DEFAULT_PATTERNS_FILE

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise PatternError(f"Failed to load patterns file: {e}", details={"path": str(path)})

    pattern_defs = config.get("patterns") if isinstance(config, dict) else None
    if not pattern_defs:
        raise PatternError(f"No patterns defined in {path}", details={"path": str(path)})

    patterns = tuple(_build_pattern(i, d) for i, d in enumerate(pattern_defs))
    logger.debug("Loaded %d secret patterns from %s", len(patterns), path)
    return patterns


@lru_cache(maxsize=1)
def default_patterns() -> Tuple[SecretPattern, ...]:
    """The bundled catalog, loaded once per process."""
    return load_patterns()
