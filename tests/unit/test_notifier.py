"""Tests for the email notifier."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from src.booking.errors import NotifyError
from src.notifications.email import EmailNotifier
from src.schemas.booking import StoredBooking


@pytest.fixture
def booking():
    return StoredBooking(
        id="0b7c2a1e-4a3f-4f64-9a3c-2f1de0c5a111",
        name="Jane Doe",
        email="jane@x.com",
        phone="1234567890",
        state="Gujarat",
        service="visa-processing",
        preferred_date="2026-10-19",
        message=None,
        english_level="Good (7 Band)",
        age="18-35 years",
        education="Graduation",
        experience="1 year",
        visa_type="Work Permit",
    )


@pytest.fixture
def email_notifier():
    return EmailNotifier(
        user="bookings@easygo.example",
        password="app-password",
        admin_email="admin@easygo.example",
    )


class TestMessages:
    def test_user_confirmation(self, email_notifier, booking):
        msg = email_notifier.build_user_confirmation(booking)
        body = msg.get_content()

        assert msg["To"] == "jane@x.com"
        assert msg["Subject"] == "Your Consultation Booking - Easy Go Overseas"
        assert "Dear Jane Doe" in body
        assert "Service: Visa Processing" in body
        assert "Date: 2026-10-19" in body
        assert "State: Gujarat" in body
        assert "Visa type: Work Permit" in body

    def test_admin_alert(self, email_notifier, booking):
        msg = email_notifier.build_admin_alert(booking)
        body = msg.get_content()

        assert msg["To"] == "admin@easygo.example"
        assert msg["Subject"] == "New Consultation Booking"
        assert "Email: jane@x.com" in body
        assert "Phone: 1234567890" in body
        assert "Message: N/A" in body
        assert "Booking #0b7c2a1e" in body

    def test_admin_falls_back_to_sender(self, booking):
        notifier = EmailNotifier(user="bookings@easygo.example", password="pw")
        assert notifier.build_admin_alert(booking)["To"] == "bookings@easygo.example"


class TestNotify:
    @pytest.mark.asyncio
    async def test_disabled_without_credentials(self, booking):
        notifier = EmailNotifier(user="", password="")
        with patch.object(notifier, "_deliver") as deliver:
            result = await notifier.notify(booking)

        assert result.ok
        assert result.disabled
        assert result.status == "disabled"
        deliver.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_both(self, email_notifier, booking):
        with patch.object(email_notifier, "_deliver") as deliver:
            result = await email_notifier.notify(booking)

        assert result.status == "sent"
        recipients = [call.args[0]["To"] for call in deliver.call_args_list]
        assert recipients == ["jane@x.com", "admin@easygo.example"]

    @pytest.mark.asyncio
    async def test_transport_failure_reported_not_raised(self, email_notifier, booking):
        deliver = MagicMock(side_effect=smtplib.SMTPAuthenticationError(535, b"bad credentials"))
        with patch.object(email_notifier, "_deliver", deliver):
            result = await email_notifier.notify(booking)

        assert not result.ok
        assert result.status == "failed"
        assert "user_confirmation" in result.error
        assert "admin_alert" in result.error
        assert deliver.call_count == 2

    @pytest.mark.asyncio
    async def test_single_send_raises_notify_error(self, email_notifier, booking):
        with patch.object(email_notifier, "_deliver", side_effect=ConnectionRefusedError()):
            with pytest.raises(NotifyError) as exc_info:
                await email_notifier.send_admin_alert(booking)

        assert isinstance(exc_info.value.cause, ConnectionRefusedError)

    def test_smtp_session(self, email_notifier, booking):
        with patch("src.notifications.email.smtplib.SMTP") as smtp_cls:
            email_notifier._deliver(email_notifier.build_user_confirmation(booking))

        server = smtp_cls.return_value.__enter__.return_value
        smtp_cls.assert_called_once_with("smtp.gmail.com", 587, timeout=15)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("bookings@easygo.example", "app-password")
        server.send_message.assert_called_once()
