"""Field rules and option sets for the consultation form.

The same table drives the server-side validator, the Python client mirror and
the ``/api/booking-options`` endpoint the website reads its pre-check from.
"""

import re
from dataclasses import dataclass
from typing import Optional

INDIAN_STATES = [
    "Andhra Pradesh", "Arunachal Pradesh", "Assam", "Bihar", "Chhattisgarh",
    "Goa", "Gujarat", "Haryana", "Himachal Pradesh", "Jharkhand",
    "Karnataka", "Kerala", "Madhya Pradesh", "Maharashtra", "Manipur",
    "Meghalaya", "Mizoram", "Nagaland", "Odisha", "Punjab",
    "Rajasthan", "Sikkim", "Tamil Nadu", "Telangana", "Tripura",
    "Uttar Pradesh", "Uttarakhand", "West Bengal",
    "Andaman and Nicobar Islands", "Chandigarh",
    "Dadra and Nagar Haveli and Daman and Diu",
    "Delhi", "Jammu and Kashmir", "Ladakh", "Lakshadweep", "Puducherry",
]

SERVICES = {
    "visa-processing": "Visa Processing",
    "immigration": "Immigration Services",
    "career-counseling": "Career Counseling",
}

ENGLISH_LEVELS = [
    "Excellent (8+ Band)", "Good (7 Band)", "Average (6 Band)",
    "Poor (5 Band)", "Very Poor (4 Band)",
]
AGE_GROUPS = ["Under 18 years", "18-35 years", "36-40 years", "40 years+"]
EDUCATION_LEVELS = [
    "PHD", "Masters", "Post Graduation", "Two or more Certificates",
    "Graduation", "Diploma 3 years",
]
EXPERIENCE_RANGES = ["1 year", "2-3 years", "4-5 years", "6 or more years"]
VISA_TYPES = [
    "Express Entry", "PNP", "Business Investor Program", "Work Permit",
    "Visitor Visa", "Tourist", "Others",
]

MESSAGE_MAX_LENGTH = 500

_UNSAFE_CHARS = re.compile(r"[<>\"']")


@dataclass(frozen=True)
class FieldRule:
    """Presence and format rule for one form field (keyed by wire name)."""

    field: str
    required_message: Optional[str] = None  # None = optional
    pattern: Optional[str] = None
    pattern_message: Optional[str] = None
    options: Optional[list[str]] = None
    max_length: Optional[int] = None  # matches the column size

    @property
    def required(self) -> bool:
        return self.required_message is not None

    def check(self, value: str) -> Optional[str]:
        """Return an error message for ``value`` or None when it passes.

        Dates and the message length are handled by the validator itself.
        """
        value = value.strip()
        if not value:
            return self.required_message
        if self.max_length is not None and len(value) > self.max_length:
            return f"Must be at most {self.max_length} characters"
        if self.pattern and not re.fullmatch(self.pattern, value):
            return self.pattern_message
        return None

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "required": self.required,
            "requiredMessage": self.required_message,
            "pattern": self.pattern,
            "patternMessage": self.pattern_message,
            "options": self.options,
            "maxLength": self.max_length,
        }


FIELD_RULES: list[FieldRule] = [
    FieldRule(
        "name",
        "Name is required",
        r"[A-Za-z ]{2,50}",
        "Name must contain only letters and spaces (2-50 characters)",
        max_length=50,
    ),
    FieldRule(
        "email",
        "Email is required",
        r"[^\s@]+@[^\s@]+\.[^\s@]+",
        "Please enter a valid email address",
        max_length=254,
    ),
    FieldRule(
        "phone",
        "Phone number is required",
        r"[0-9 ()+\-]{10,15}",
        "Please enter a valid phone number (10-15 digits)",
        max_length=15,
    ),
    FieldRule("state", "Please select your state", options=INDIAN_STATES, max_length=100),
    FieldRule("service", "Please select a service", options=list(SERVICES), max_length=50),
    FieldRule("englishLevel", "English level is required", options=ENGLISH_LEVELS, max_length=50),
    FieldRule("age", "Age is required", options=AGE_GROUPS, max_length=50),
    FieldRule("education", "Education is required", options=EDUCATION_LEVELS, max_length=50),
    FieldRule("experience", "Experience is required", options=EXPERIENCE_RANGES, max_length=50),
    FieldRule("visaType", "Visa type is required", options=VISA_TYPES, max_length=50),
]

REQUIRED_FIELDS: list[str] = [rule.field for rule in FIELD_RULES if rule.required] + [
    "preferredDate",
]

DATE_REQUIRED_MESSAGE = "Please select a preferred date"
DATE_INVALID_MESSAGE = "Please select a valid date"
DATE_PAST_MESSAGE = "Please select future date"
MESSAGE_TOO_LONG = f"Message must be less than {MESSAGE_MAX_LENGTH} characters"


def sanitize_input(value: str) -> str:
    """Strip characters the website form never accepts (``< > " '``)."""
    return _UNSAFE_CHARS.sub("", value)


def rules_table() -> dict:
    """Serializable rule table for the browser pre-check."""
    return {
        "fields": [rule.to_dict() for rule in FIELD_RULES],
        "preferredDate": {
            "required": True,
            "requiredMessage": DATE_REQUIRED_MESSAGE,
            "invalidMessage": DATE_INVALID_MESSAGE,
            "pastMessage": DATE_PAST_MESSAGE,
            "format": "YYYY-MM-DD",
        },
        "message": {
            "required": False,
            "maxLength": MESSAGE_MAX_LENGTH,
            "maxLengthMessage": MESSAGE_TOO_LONG,
        },
        "services": SERVICES,
    }
