"""Booking repository — lookup, insert and delete of consultation bookings."""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.booking.errors import ConflictError, StoreError
from src.models.booking import Booking
from src.schemas.booking import BookingRequest, StoredBooking

logger = structlog.get_logger()

# Filter keys accepted by delete_one
_FILTER_COLUMNS = {
    "id": Booking.id,
    "email": Booking.email,
    "preferred_date": Booking.preferred_date,
}


def _filter_value(key: str, value: str):
    if key == "id":
        return uuid.UUID(value)
    if key == "email":
        return value.lower()
    return value


class BookingRepository:
    """Record store for bookings backed by the async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_one(self, email: str, preferred_date: str) -> Optional[StoredBooking]:
        """Find the booking for this email on this date, if any.

        Raises:
            StoreError: the query failed
        """
        stmt = (
            select(Booking)
            .where(Booking.email == email.lower(), Booking.preferred_date == preferred_date)
            .limit(1)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("booking_lookup_failed", error=str(e))
            raise StoreError("Booking lookup failed") from e

        booking = result.scalar_one_or_none()
        return StoredBooking.from_model(booking) if booking else None

    async def insert(self, request: BookingRequest) -> StoredBooking:
        """Persist and commit a new booking.

        Raises:
            ConflictError: the (email, preferred_date) pair already exists
            StoreError: the insert or commit failed for any other reason
        """
        booking = Booking(
            id=uuid.uuid4(),
            name=request.name,
            email=request.email.lower(),
            phone=request.phone,
            state=request.state,
            service=request.service,
            preferred_date=request.preferred_date,
            message=request.message,
            english_level=request.english_level,
            age=request.age,
            education=request.education,
            experience=request.experience,
            visa_type=request.visa_type,
        )

        self.db.add(booking)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info(
                "booking_conflict_on_insert",
                email=booking.email,
                preferred_date=booking.preferred_date,
            )
            raise ConflictError("Booking already exists for this email and date") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("booking_insert_failed", error=str(e))
            raise StoreError("Booking insert failed") from e

        logger.info(
            "booking_created",
            booking_id=str(booking.id),
            service=booking.service,
            preferred_date=booking.preferred_date,
        )
        return StoredBooking.from_model(booking)

    async def delete_one(self, **filters: str) -> int:
        """Delete the booking matching all filters; returns rows deleted.

        Filters: id, email, preferred_date. Used by admin tooling only.
        """
        unknown = set(filters) - set(_FILTER_COLUMNS)
        if unknown or not filters:
            raise ValueError(f"Unsupported delete filter: {sorted(unknown) or 'empty'}")

        conditions = [
            _FILTER_COLUMNS[key] == _filter_value(key, value)
            for key, value in filters.items()
        ]
        target = select(Booking.id).where(*conditions).limit(1).scalar_subquery()
        try:
            result = await self.db.execute(delete(Booking).where(Booking.id == target))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("booking_delete_failed", error=str(e))
            raise StoreError("Booking delete failed") from e

        logger.info("booking_deleted", filters=filters, count=result.rowcount)
        return result.rowcount
