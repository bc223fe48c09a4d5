"""Email notification service — booking confirmation and admin alert."""

from __future__ import annotations

import asyncio
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

import structlog

from src.booking.errors import NotifyError
from src.booking.rules import SERVICES
from src.config import Settings
from src.schemas.booking import NotifyResult, StoredBooking

logger = structlog.get_logger()

USER_SUBJECT = "Your Consultation Booking - {company}"
ADMIN_SUBJECT = "New Consultation Booking"

USER_TEMPLATE = """Dear {name},

Thank you for booking a consultation with {company}.

Details:
Service: {service}
Date: {preferred_date}
State: {state}

Your eligibility answers:
English level: {english_level}
Age: {age}
Education: {education}
Experience: {experience}
Visa type: {visa_type}

We will contact you soon!

Best regards,
{company} Team"""

ADMIN_TEMPLATE = """A new consultation has been booked:

Name: {name}
Email: {email}
Phone: {phone}
State: {state}
Service: {service}
Date: {preferred_date}
English level: {english_level}
Age: {age}
Education: {education}
Experience: {experience}
Visa type: {visa_type}
Message: {message}

Booking #{booking_id}"""


class EmailNotifier:
    """Sends booking emails through an SMTP account (Gmail by default)."""

    def __init__(
        self,
        user: str,
        password: str,
        host: str = "smtp.gmail.com",
        port: int = 587,
        admin_email: Optional[str] = None,
        from_name: str = "Easy Go Overseas",
        timeout: float = 15,
    ):
        self.user = user
        self.password = password
        self.host = host
        self.port = port
        self.admin_email = admin_email or user
        self.from_name = from_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailNotifier":
        return cls(
            user=settings.email_user,
            password=settings.email_pass,
            host=settings.smtp_host,
            port=settings.smtp_port,
            admin_email=settings.admin_email,
            from_name=settings.mail_from_name,
        )

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    def _fields(self, booking: StoredBooking) -> dict:
        return {
            "company": self.from_name,
            "booking_id": booking.id[:8],
            "name": booking.name,
            "email": booking.email,
            "phone": booking.phone,
            "state": booking.state,
            "service": SERVICES.get(booking.service, booking.service),
            "preferred_date": booking.preferred_date,
            "message": booking.message or "N/A",
            "english_level": booking.english_level,
            "age": booking.age,
            "education": booking.education,
            "experience": booking.experience,
            "visa_type": booking.visa_type,
        }

    def build_user_confirmation(self, booking: StoredBooking) -> EmailMessage:
        fields = self._fields(booking)
        return self._message(
            to=booking.email,
            subject=USER_SUBJECT.format(**fields),
            body=USER_TEMPLATE.format(**fields),
        )

    def build_admin_alert(self, booking: StoredBooking) -> EmailMessage:
        fields = self._fields(booking)
        return self._message(
            to=self.admin_email,
            subject=ADMIN_SUBJECT,
            body=ADMIN_TEMPLATE.format(**fields),
        )

    def _message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = formataddr((self.from_name, self.user))
        msg["To"] = to
        msg.set_content(body)
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls()
            server.login(self.user, self.password)
            server.send_message(msg)

    async def _send(self, msg: EmailMessage, kind: str, booking_id: str) -> None:
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("booking_email_failed", kind=kind, booking_id=booking_id, error=str(e))
            raise NotifyError(f"{kind} email failed", cause=e) from e
        logger.info("booking_email_sent", kind=kind, booking_id=booking_id)

    async def send_user_confirmation(self, booking: StoredBooking) -> None:
        await self._send(self.build_user_confirmation(booking), "user_confirmation", booking.id)

    async def send_admin_alert(self, booking: StoredBooking) -> None:
        await self._send(self.build_admin_alert(booking), "admin_alert", booking.id)

    async def notify(self, booking: StoredBooking) -> NotifyResult:
        """Send the confirmation and the admin alert.

        Both sends are attempted even if the first fails. Never raises.

        Returns:
            NotifyResult; ``disabled`` when SMTP credentials are not set
        """
        if not self.configured:
            logger.info("booking_email_disabled", booking_id=booking.id)
            return NotifyResult(ok=True, disabled=True)

        failures = []
        for send in (self.send_user_confirmation, self.send_admin_alert):
            try:
                await send(booking)
            except NotifyError as e:
                failures.append(str(e))

        if failures:
            return NotifyResult(ok=False, error="; ".join(failures))
        return NotifyResult(ok=True)
