"""
Error taxonomy for the webhook core.

Validation and not-found errors are raised before or instead of any
external side effect; store-unavailable errors wrap failures of the
external subscription store or the delivery log's persistence sink.
"""

from typing import Any, Dict, Optional


class WebhookError(Exception):
    """Base exception for webhook management errors."""

    def __init__(
        self, message: str, code: str = "webhook_error", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        error_dict: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            error_dict["details"] = self.details
        return error_dict


class ValidationError(WebhookError):
    """Malformed input, detected before any external call."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", details=details)


class NotFoundError(WebhookError):
    """Referenced subscription or log entry does not exist."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="not_found", details=details)


class StoreUnavailableError(WebhookError):
    """External store or persistence sink could not be reached."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code="store_unavailable", details=details)
        self.original_error = original_error


class TransportError(WebhookError):
    """A delivery attempt failed below the HTTP layer (timeout, refused, TLS)."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message, code="transport_error")
        self.original_error = original_error
