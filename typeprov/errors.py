"""
Exceptions raised while handling lifecycle notifications.
"""

from datetime import datetime
from typing import Any, Dict, Optional


class ProviderError(Exception):
    """Base exception for all provider handler errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/output."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class DecodeError(ProviderError):
    """Notification payload is not a well-formed notification."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Unable to decode notification: {reason}",
            error_code="DECODE_ERROR",
            details={"reason": reason}
        )


class MissingConfiguration(ProviderError):
    """A required configuration value is not set."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(
            message=f"Missing configuration environment entry: {key}",
            error_code="MISSING_CONFIGURATION",
            details={"key": key}
        )


class RegistrationError(ProviderError):
    """Registering a resource type failed."""

    def __init__(self, type_name: str, reason: str):
        self.type_name = type_name
        super().__init__(
            message=f"Failed to register type {type_name}: {reason}",
            error_code="REGISTRATION_FAILED",
            details={"type_name": type_name, "reason": reason}
        )


class DeregistrationError(ProviderError):
    """Describing or deregistering a resource type failed."""

    def __init__(self, type_name: str, reason: str):
        self.type_name = type_name
        super().__init__(
            message=f"Failed to deregister type {type_name}: {reason}",
            error_code="DEREGISTRATION_FAILED",
            details={"type_name": type_name, "reason": reason}
        )


class ConfirmationError(ProviderError):
    """The release confirmation callback did not succeed."""

    def __init__(
        self,
        reason: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        deadline: Optional[datetime] = None
    ):
        self.status_code = status_code
        self.body = body
        self.deadline = deadline
        super().__init__(
            message=f"Release confirmation failed: {reason}",
            error_code="CONFIRMATION_FAILED",
            details={
                "status_code": status_code,
                "body": body,
                "deadline": deadline.isoformat() if deadline else None
            }
        )
