"""Booking pipeline error taxonomy."""

from typing import Optional


class BookingError(Exception):
    """Base class for booking pipeline errors."""


class ConfigurationError(BookingError):
    """Deployment is missing a value the selected mode needs."""


class DecodeError(BookingError):
    """Envelope is malformed or could not be decrypted."""


class ValidationError(BookingError):
    """One or more fields failed presence or format rules."""

    def __init__(self, field_errors: dict[str, str], message: str = "Missing or invalid fields."):
        super().__init__(message)
        self.field_errors = field_errors


class ConflictError(BookingError):
    """A booking already exists for this email and date."""


class StoreError(BookingError):
    """The record store could not complete the operation."""


class NotifyError(BookingError):
    """Mail transport failure; advisory only."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
