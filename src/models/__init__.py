"""SQLAlchemy ORM models."""

from src.models.base import Base
from src.models.booking import Booking

__all__ = [
    "Base",
    "Booking",
]
