"""Test fixtures and configuration."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.booking.codec import AESCodec, PlainCodec
from src.booking.pipeline import BookingPipeline
from src.schemas.booking import NotifyResult
from tests.helpers import SECRET, TODAY, InMemoryBookingStore


@pytest.fixture
def valid_form():
    """Scenario A form, booked for today."""
    return {
        "name": "Jane Doe",
        "email": "JANE@x.com",
        "phone": "1234567890",
        "state": "Gujarat",
        "service": "visa-processing",
        "preferredDate": TODAY.isoformat(),
        "message": "",
        "englishLevel": "Good (7 Band)",
        "age": "18-35 years",
        "education": "Graduation",
        "experience": "1 year",
        "visaType": "Work Permit",
    }


@pytest.fixture
def store():
    """In-memory record store."""
    return InMemoryBookingStore()


@pytest.fixture
def plain_codec():
    return PlainCodec(SECRET)


@pytest.fixture
def aes_codec():
    return AESCodec(SECRET)


@pytest.fixture
def notifier():
    """Notifier mock that reports success."""
    mock = MagicMock()
    mock.notify = AsyncMock(return_value=NotifyResult(ok=True))
    return mock


@pytest.fixture
def pipeline(store, plain_codec, notifier):
    """Pipeline over the in-memory store with a fixed clock."""
    return BookingPipeline(store, plain_codec, notifier, clock=lambda: TODAY)
