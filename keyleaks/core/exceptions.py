"""Core exceptions for KeyLeaks."""

from typing import Optional


class KeyLeaksError(Exception):
    """Base exception for all KeyLeaks errors."""

    def __init__(self, message: str, details: dict = None):
        """Initialize the exception."""
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class PatternError(KeyLeaksError):
    """Raised when the secret pattern catalog is malformed."""

    pass


class ConfigurationError(KeyLeaksError):
    """Raised when configuration is invalid."""

    pass


class ResourceSizeExceeded(KeyLeaksError):
    """Raised when a resource is too large to scan."""

    def __init__(self, resource_id: str, size: int, limit: int):
        """Initialize with the offending resource and the ceiling it exceeded."""
        super().__init__(
            f"Resource {resource_id} exceeds scan size limit ({size} > {limit})",
            details={"resource_id": resource_id, "size": size, "limit": limit},
        )
        self.resource_id = resource_id
        self.size = size
        self.limit = limit


class RemoteAdvisoryError(KeyLeaksError):
    """Raised when the remote advisory call does not produce usable text."""

    pass


class TransportError(RemoteAdvisoryError):
    """Raised on connection failure or timeout."""

    pass


class RemoteStatusError(RemoteAdvisoryError):
    """Raised when the advisory service answers with a non-200 status."""

    def __init__(self, status: int, body: str = ""):
        """Initialize with the HTTP status and response body."""
        super().__init__(
            f"API error: {status} - {body}",
            details={"status": status, "body": body},
        )
        self.status = status
        self.body = body


class InvalidResponseError(RemoteAdvisoryError):
    """Raised when a successful response lacks the expected text field."""

    pass


class ResponseParseError(KeyLeaksError):
    """Raised when response text holds no well-formed advice object."""

    def __init__(self, message: str, text: Optional[str] = None):
        """Initialize with the text that failed to parse."""
        super().__init__(message, details={"length": len(text) if text else 0})
        self.text = text
