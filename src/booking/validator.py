"""Booking form validator shared by the API and the client mirror."""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Optional

from src.booking.errors import ValidationError
from src.booking.rules import (
    DATE_INVALID_MESSAGE,
    DATE_PAST_MESSAGE,
    DATE_REQUIRED_MESSAGE,
    FIELD_RULES,
    MESSAGE_MAX_LENGTH,
    MESSAGE_TOO_LONG,
)

_ISO_DATE_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}")


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def parse_preferred_date(value: Any) -> Optional[date]:
    """Parse an ISO date (or datetime) string, dropping any time of day.

    Only the extended ``YYYY-MM-DD`` form is accepted; compact (``20261019``)
    and week (``2026-W43-1``) dates return None, as do invalid calendar dates.
    """
    text = as_text(value).strip()
    if not _ISO_DATE_PREFIX.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def validate(payload: Mapping[str, Any], today: Optional[date] = None) -> dict[str, str]:
    """Check a booking payload (wire field names) against the form rules.

    Args:
        payload: Submitted form data, camelCase keys
        today: Reference date for the "not in the past" rule (defaults to today)

    Returns:
        Mapping of field name to error message; empty when the payload is valid
    """
    today = today or date.today()
    errors: dict[str, str] = {}

    for rule in FIELD_RULES:
        error = rule.check(as_text(payload.get(rule.field)))
        if error:
            errors[rule.field] = error

    raw_date = as_text(payload.get("preferredDate")).strip()
    if not raw_date:
        errors["preferredDate"] = DATE_REQUIRED_MESSAGE
    else:
        preferred = parse_preferred_date(raw_date)
        if preferred is None:
            errors["preferredDate"] = DATE_INVALID_MESSAGE
        elif preferred < today:
            errors["preferredDate"] = DATE_PAST_MESSAGE

    message = as_text(payload.get("message"))
    if message and len(message) > MESSAGE_MAX_LENGTH:
        errors["message"] = MESSAGE_TOO_LONG

    return errors


def ensure_valid(payload: Mapping[str, Any], today: Optional[date] = None) -> None:
    """Raise ValidationError carrying the field errors when ``payload`` fails."""
    errors = validate(payload, today=today)
    if errors:
        raise ValidationError(errors)
