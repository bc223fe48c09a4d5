"""Bookings API endpoints."""

from __future__ import annotations

import json
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.booking.codec import Mode, PayloadCodec, get_codec
from src.booking.pipeline import INVALID_FORMAT, BookingPipeline, Outcome, OutcomeStatus
from src.booking.rules import rules_table
from src.config import settings
from src.database import get_db
from src.notifications.email import EmailNotifier
from src.repositories.booking import BookingRepository

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["bookings"])

STATUS_CODES = {
    OutcomeStatus.ACCEPTED: 200,
    OutcomeStatus.REJECTED: 400,
    OutcomeStatus.CONFLICT: 409,
    OutcomeStatus.SERVER_ERROR: 500,
}

_codec: Optional[PayloadCodec] = None


def get_payload_codec() -> PayloadCodec:
    """Get or create the payload codec for the configured environment (lazy init)."""
    global _codec
    if _codec is None:
        _codec = get_codec(
            Mode.from_environment(settings.environment),
            settings.booking_secret_key,
        )
    return _codec


def get_notifier() -> EmailNotifier:
    return EmailNotifier.from_settings(settings)


async def get_pipeline(
    db: AsyncSession = Depends(get_db),
    codec: PayloadCodec = Depends(get_payload_codec),
    notifier: EmailNotifier = Depends(get_notifier),
) -> BookingPipeline:
    return BookingPipeline(BookingRepository(db), codec, notifier)


def outcome_response(outcome: Outcome) -> JSONResponse:
    """Map a pipeline outcome to the JSON body the website expects."""
    if outcome.accepted:
        body = {
            "success": True,
            "id": outcome.booking.id if outcome.booking else None,
            "notification": outcome.notification.status if outcome.notification else None,
        }
        if outcome.warning:
            body["warning"] = "Your booking is saved, but we could not send the confirmation email."
    else:
        body = {"error": outcome.reason}
        if outcome.field_errors:
            body["fieldErrors"] = outcome.field_errors

    return JSONResponse(status_code=STATUS_CODES[outcome.status], content=body)


@router.post("/book-consultation")
async def book_consultation(
    request: Request,
    pipeline: BookingPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Accept a consultation booking (plain JSON or ``{"encrypted": ...}``)."""
    try:
        envelope = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        logger.warning("booking_body_not_json")
        return JSONResponse(status_code=400, content={"error": INVALID_FORMAT})

    outcome = await pipeline.submit(envelope)

    logger.info(
        "booking_submission_handled",
        status=outcome.status.value,
        notification=outcome.notification.status if outcome.notification else None,
    )
    return outcome_response(outcome)


@router.get("/booking-options")
async def booking_options() -> dict:
    """Field rules and option lists for the form's pre-check."""
    return rules_table()
