"""Secret redaction for safe display and logging."""

VISIBLE_CHARS = 4
MAX_MASK_LENGTH = 20


def redact(value: str) -> str:
    """
    Mask a secret, keeping only the first and last four characters.

    Values of eight characters or fewer are fully masked. The masked middle
    is capped at twenty asterisks however long the value is.
    """
    if len(value) <= VISIBLE_CHARS * 2:
        return "*" * len(value)
    mask = "*" * min(len(value) - VISIBLE_CHARS * 2, MAX_MASK_LENGTH)
    return f"{value[:VISIBLE_CHARS]}{mask}{value[-VISIBLE_CHARS:]}"
