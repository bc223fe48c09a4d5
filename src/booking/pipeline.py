"""Booking submission pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Optional, Protocol

import structlog
from pydantic import ValidationError as PydanticValidationError

from src.booking.codec import PayloadCodec
from src.booking.errors import ConflictError, DecodeError, StoreError, ValidationError
from src.booking.rules import DATE_INVALID_MESSAGE, DATE_PAST_MESSAGE, REQUIRED_FIELDS
from src.booking.validator import ensure_valid, parse_preferred_date
from src.schemas.booking import BookingRequest, NotifyResult, StoredBooking

logger = structlog.get_logger()

INVALID_FORMAT = "Invalid data format."
MISSING_FIELDS = "Missing required fields."
INVALID_FIELDS = "Missing or invalid fields."
INVALID_DATE = "Invalid date format."
PAST_DATE = "Cannot book a consultation in the past."
ALREADY_BOOKED = "You have already booked a consultation for this date with this email."
SERVER_ERROR = "We could not save your booking right now. Please try again later or contact us directly."


class BookingStore(Protocol):
    async def find_one(self, email: str, preferred_date: str) -> Optional[StoredBooking]: ...

    async def insert(self, request: BookingRequest) -> StoredBooking: ...


class Notifier(Protocol):
    async def notify(self, booking: StoredBooking) -> NotifyResult: ...


class OutcomeStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"


@dataclass
class Outcome:
    """Result of one submission."""

    status: OutcomeStatus
    reason: Optional[str] = None
    field_errors: dict[str, str] = field(default_factory=dict)
    booking: Optional[StoredBooking] = None
    notification: Optional[NotifyResult] = None

    @property
    def accepted(self) -> bool:
        return self.status is OutcomeStatus.ACCEPTED

    @property
    def warning(self) -> bool:
        """Accepted, but the emails did not go out."""
        return self.notification is not None and not self.notification.ok

    @classmethod
    def rejected(cls, reason: str, field_errors: Optional[dict[str, str]] = None) -> "Outcome":
        return cls(OutcomeStatus.REJECTED, reason=reason, field_errors=field_errors or {})


class BookingPipeline:
    """Runs a submitted envelope through every booking step in order.

    Rejections and conflicts are decided before anything is written. Once the
    insert commits the outcome is Accepted; notification problems only set
    the warning.
    """

    def __init__(
        self,
        store: BookingStore,
        codec: PayloadCodec,
        notifier: Notifier,
        clock: Callable[[], date] = date.today,
    ):
        self.store = store
        self.codec = codec
        self.notifier = notifier
        self.clock = clock

    async def submit(self, envelope: Any) -> Outcome:
        # 1. Decode
        try:
            payload = self.codec.decode(envelope)
        except DecodeError as e:
            logger.warning("booking_decode_failed", error=str(e))
            return Outcome.rejected(INVALID_FORMAT)

        # 2. Structure
        missing = [name for name in REQUIRED_FIELDS if name not in payload]
        if missing:
            logger.info("booking_missing_fields", fields=missing)
            return Outcome.rejected(
                MISSING_FIELDS, {name: "This field is required" for name in missing}
            )

        # 3. Field rules (authoritative; never trust the browser pre-check)
        today = self.clock()
        try:
            ensure_valid(payload, today=today)
        except ValidationError as e:
            logger.info("booking_invalid_fields", fields=sorted(e.field_errors))
            return Outcome.rejected(_rejection_reason(e.field_errors), e.field_errors)

        # 4. Date policy
        preferred = parse_preferred_date(payload["preferredDate"])
        if preferred is None:
            return Outcome.rejected(INVALID_DATE, {"preferredDate": DATE_INVALID_MESSAGE})
        if preferred < today:
            return Outcome.rejected(PAST_DATE, {"preferredDate": DATE_PAST_MESSAGE})

        try:
            request = BookingRequest.model_validate(
                {**payload, "preferredDate": preferred.isoformat()}
            ).normalized()
        except PydanticValidationError as e:
            logger.warning("booking_payload_unparseable", error=str(e))
            return Outcome.rejected(INVALID_FORMAT)

        # 5. Conflict check
        try:
            existing = await self.store.find_one(request.email, request.preferred_date)
        except StoreError:
            return Outcome(OutcomeStatus.SERVER_ERROR, reason=SERVER_ERROR)
        if existing is not None:
            logger.info(
                "booking_conflict",
                email=request.email,
                preferred_date=request.preferred_date,
            )
            return Outcome(OutcomeStatus.CONFLICT, reason=ALREADY_BOOKED)

        # 6. Persist; the unique (email, preferred_date) constraint turns a
        # concurrent duplicate that slipped past step 5 into ConflictError.
        try:
            booking = await self.store.insert(request)
        except ConflictError:
            return Outcome(OutcomeStatus.CONFLICT, reason=ALREADY_BOOKED)
        except StoreError:
            return Outcome(OutcomeStatus.SERVER_ERROR, reason=SERVER_ERROR)

        # 7. Notify (best effort)
        notification = await self._notify(booking)

        return Outcome(OutcomeStatus.ACCEPTED, booking=booking, notification=notification)

    async def _notify(self, booking: StoredBooking) -> NotifyResult:
        try:
            result = await self.notifier.notify(booking)
        except Exception as e:
            logger.error("booking_notify_crashed", booking_id=booking.id, error=str(e))
            return NotifyResult(ok=False, error=str(e))

        if not result.ok:
            logger.warning("booking_notify_failed", booking_id=booking.id, error=result.error)
        return result


def _rejection_reason(errors: dict[str, str]) -> str:
    if set(errors) == {"preferredDate"}:
        if errors["preferredDate"] == DATE_PAST_MESSAGE:
            return PAST_DATE
        if errors["preferredDate"] == DATE_INVALID_MESSAGE:
            return INVALID_DATE
    return INVALID_FIELDS
