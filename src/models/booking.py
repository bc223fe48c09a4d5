"""Booking model — consultation requests from the website form."""

from typing import Optional

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin, UUIDMixin


class Booking(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "tblinquiry"
    __table_args__ = (
        # One consultation per email per day; also closes the race between
        # the conflict lookup and the insert.
        UniqueConstraint("email", "preferred_date", name="uq_tblinquiry_email_date"),
    )

    # Contact
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(15), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)

    # Request
    service: Mapped[str] = mapped_column(String(50), nullable=False)
    preferred_date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Eligibility
    english_level: Mapped[str] = mapped_column(String(50), nullable=False)
    age: Mapped[str] = mapped_column(String(50), nullable=False)
    education: Mapped[str] = mapped_column(String(50), nullable=False)
    experience: Mapped[str] = mapped_column(String(50), nullable=False)
    visa_type: Mapped[str] = mapped_column(String(50), nullable=False)
