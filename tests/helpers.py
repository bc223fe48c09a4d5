"""Shared test constants and doubles."""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from src.booking.errors import ConflictError, StoreError
from src.schemas.booking import BookingRequest, StoredBooking

TODAY = date(2026, 10, 19)
SECRET = "EasyGoAdvisor@1974"


class InMemoryBookingStore:
    """Record store double with the same unique (email, date) rule as the table."""

    def __init__(self):
        self.records: list[StoredBooking] = []
        self.fail_on: Optional[str] = None  # "find" | "insert"
        self.skip_lookup = False  # simulate a concurrent insert racing the lookup

    async def find_one(self, email: str, preferred_date: str) -> Optional[StoredBooking]:
        if self.fail_on == "find":
            raise StoreError("lookup failed")
        if self.skip_lookup:
            return None
        for record in self.records:
            if record.email == email.lower() and record.preferred_date == preferred_date:
                return record
        return None

    async def insert(self, request: BookingRequest) -> StoredBooking:
        if self.fail_on == "insert":
            raise StoreError("insert failed")
        for record in self.records:
            if record.email == request.email.lower() and record.preferred_date == request.preferred_date:
                raise ConflictError("duplicate")
        now = datetime.now(timezone.utc)
        stored = StoredBooking(
            **request.model_dump(),
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
        )
        self.records.append(stored)
        return stored
