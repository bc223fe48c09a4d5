"""Booking schemas for the consultation form and API responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BookingRequest(BaseModel):
    """Consultation request as submitted by the website form.

    Wire field names are camelCase (``preferredDate``, ``englishLevel``, ...);
    attribute names are snake_case.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str
    email: str
    phone: str
    state: str
    service: str
    preferred_date: str = Field(alias="preferredDate")
    message: Optional[str] = None

    # Eligibility
    english_level: str = Field(alias="englishLevel")
    age: str
    education: str
    experience: str
    visa_type: str = Field(alias="visaType")

    def normalized(self) -> "BookingRequest":
        """Copy with lowercased email and empty message dropped."""
        return self.model_copy(
            update={
                "email": self.email.lower(),
                "message": self.message or None,
            }
        )


class StoredBooking(BookingRequest):
    """A persisted booking with storage identity and timestamps."""

    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, booking) -> "StoredBooking":
        return cls(
            id=str(booking.id),
            name=booking.name,
            email=booking.email,
            phone=booking.phone,
            state=booking.state,
            service=booking.service,
            preferred_date=booking.preferred_date,
            message=booking.message,
            english_level=booking.english_level,
            age=booking.age,
            education=booking.education,
            experience=booking.experience,
            visa_type=booking.visa_type,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class NotifyResult(BaseModel):
    """Outcome of sending the confirmation / admin alert pair."""

    ok: bool = True
    disabled: bool = False  # transport not configured, nothing sent
    error: Optional[str] = None

    @property
    def status(self) -> str:
        if not self.ok:
            return "failed"
        return "disabled" if self.disabled else "sent"
