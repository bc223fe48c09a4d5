"""Booking client — the website form's submit flow, usable from Python.

Runs the same pre-check as the browser (sanitize, validate with the shared
rule table), wraps the payload with the configured codec and posts it to
``/api/book-consultation``. Messages returned are safe to show to a visitor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

import httpx
import structlog

from src.booking.codec import PayloadCodec
from src.booking.rules import sanitize_input
from src.booking.validator import validate

logger = structlog.get_logger()

BOOKING_PATH = "/api/book-consultation"

SUCCESS_MESSAGE = (
    "Thank you! Your appointment request has been submitted successfully. "
    "We will contact you within 24 hours."
)
FIX_FIELDS_MESSAGE = "Please correct the highlighted fields."
ALREADY_BOOKED_MESSAGE = "You have already booked a consultation for this date with this email."
GENERIC_ERROR_MESSAGE = (
    "Sorry, there was an error submitting your request. "
    "Please try again or contact us directly."
)


@dataclass
class SubmitResult:
    """What the form shows after a submit attempt."""

    ok: bool
    message: str
    field_errors: dict[str, str] = field(default_factory=dict)
    status_code: Optional[int] = None
    warning: Optional[str] = None


class BookingClient:
    """Submits consultation bookings the way the website form does."""

    def __init__(
        self,
        base_url: str,
        codec: PayloadCodec,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        self.codec = codec
        self.http = http or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "BookingClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    def prepare(form: dict[str, Any]) -> dict[str, Any]:
        """Sanitize text inputs as the form does on every keystroke."""
        return {
            key: sanitize_input(value) if isinstance(value, str) else value
            for key, value in form.items()
        }

    async def submit(self, form: dict[str, Any], today: Optional[date] = None) -> SubmitResult:
        """Pre-check, encode and send a booking form.

        Args:
            form: Form values keyed by wire name (camelCase)
            today: Reference date for the date rule (defaults to today)

        Returns:
            SubmitResult with a visitor-facing message
        """
        payload = self.prepare(form)

        errors = validate(payload, today=today)
        if errors:
            return SubmitResult(ok=False, message=FIX_FIELDS_MESSAGE, field_errors=errors)

        envelope = self.codec.encode(payload)

        try:
            response = await self.http.post(BOOKING_PATH, json=envelope)
        except httpx.HTTPError as e:
            logger.warning("booking_request_failed", error=str(e))
            return SubmitResult(ok=False, message=GENERIC_ERROR_MESSAGE)

        return self._result(response)

    def _result(self, response: httpx.Response) -> SubmitResult:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        status = response.status_code
        if status == 200 and body.get("success"):
            return SubmitResult(
                ok=True,
                message=SUCCESS_MESSAGE,
                status_code=status,
                warning=body.get("warning"),
            )
        if status == 409:
            return SubmitResult(ok=False, message=ALREADY_BOOKED_MESSAGE, status_code=status)
        if status == 400 and body.get("fieldErrors"):
            return SubmitResult(
                ok=False,
                message=FIX_FIELDS_MESSAGE,
                field_errors=dict(body["fieldErrors"]),
                status_code=status,
            )

        logger.warning("booking_rejected_by_server", status=status)
        return SubmitResult(ok=False, message=GENERIC_ERROR_MESSAGE, status_code=status)
