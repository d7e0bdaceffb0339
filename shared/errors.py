"""
Shared error types for the platform plugin client.

Transport failures (``httpx.HTTPStatusError``, ``httpx.TransportError``) are
never wrapped by these types; they reach the caller unchanged.
"""

from typing import Dict, Any, Optional


class PlatformClientError(Exception):
    """Base exception for the platform plugin client."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for structured logs."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


class ValidationError(PlatformClientError):
    """Malformed input handed to the client."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ExternalServiceError(PlatformClientError):
    """The platform answered with something the client cannot use."""

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class StorageProtocolError(ExternalServiceError):
    """Storage service returned a result list that does not line up with the commands sent."""

    def __init__(self, message: str = "Malformed storage response", details: Optional[Dict[str, Any]] = None):
        super().__init__("plugin_storage", message, details)
