"""
Error Taxonomy

Exceptions raised by the alert pipeline. None of them is fatal to the process:
validation errors become 4xx responses, everything else is logged where it is
caught.
"""

from typing import Any, Dict, Optional


class AlertServiceError(Exception):
    """Base class for all alert pipeline errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(AlertServiceError):
    """Subscribe input is malformed. User-correctable, surfaced as a 400."""


class UpstreamRegistrationError(AlertServiceError):
    """Stream creation or address registration with the provider failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class DeliveryError(AlertServiceError):
    """A single notification send failed."""

    def __init__(
        self,
        message: str,
        recipient: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.recipient = recipient
        self.status_code = status_code


class MalformedEventError(AlertServiceError):
    """A substantive webhook payload is missing a field we need to read."""
