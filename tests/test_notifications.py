import smtplib
from unittest.mock import patch

import pytest

from pathlab.core.config import settings
from pathlab.infrastructure.notifications import (
    OtpNotifier, render_otp_email, send_notification, send_otp_email
)
from pathlab.tasks.email_tasks import send_otp_email_task


@pytest.fixture
def smtp_credentials(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_USER", "lab@example.com")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "app-password")


def test_send_notification_logged_without_smtp(monkeypatch):
    """Without SMTP credentials the message is logged, not sent"""
    monkeypatch.setattr(settings, "SMTP_USER", None)

    with patch("pathlab.infrastructure.notifications._send_smtp") as mock_send:
        result = send_notification("test@example.com", "Test Subject", "Test body content")

    mock_send.assert_not_called()
    assert result["status"] == "logged"
    assert result["recipient"] == "test@example.com"
    assert result["channel"] == "email"


def test_send_notification_success(smtp_credentials):
    with patch("pathlab.infrastructure.notifications._send_smtp") as mock_send:
        result = send_notification("test@example.com", "Subject", "Body", html="<p>Body</p>")

    mock_send.assert_called_once_with("test@example.com", "Subject", "Body", "<p>Body</p>")
    assert result["status"] == "sent"


def test_send_notification_smtp_failure_falls_back_to_log(smtp_credentials):
    """SMTP errors never propagate to the caller"""
    with patch("pathlab.infrastructure.notifications._send_smtp") as mock_send:
        mock_send.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
        result = send_notification("test@example.com", "Subject", "Body")

    assert result["status"] == "logged"
    assert "error" in result


def test_send_notification_sms():
    result = send_notification(
        recipient="+919876500001",
        subject="",
        body="Your OTP is 123456",
        channel="sms"
    )
    assert result["status"] == "logged"
    assert result["channel"] == "sms"


def test_render_otp_email_by_purpose():
    reset = render_otp_email("482913", "password_reset")
    verification = render_otp_email("482913", "email_verification")

    assert reset["subject"].startswith("Password Reset OTP")
    assert "10 minutes" in reset["body"]
    assert verification["subject"].startswith("Verify Your Email")
    assert "5 minutes" in verification["body"]
    assert "482913" in verification["html"]


def test_send_otp_email_reports_delivery(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_USER", None)

    assert send_otp_email("test@example.com", "482913", "email_verification") is True


class TestOtpNotifier:

    def test_phone_contact_goes_to_sms(self):
        with patch("pathlab.infrastructure.notifications.send_notification") as mock_send:
            OtpNotifier().deliver("9876500001", "482913", "register")

        mock_send.assert_called_once_with("9876500001", "", "Your OTP is 482913", channel="sms")

    def test_email_sent_inline(self, monkeypatch):
        monkeypatch.setattr(settings, "EMAIL_DELIVERY", "inline")

        with patch("pathlab.infrastructure.notifications.send_otp_email") as mock_send:
            OtpNotifier().deliver("asha@example.com", "482913", "email_verification")

        mock_send.assert_called_once_with("asha@example.com", "482913", "email_verification")

    def test_email_enqueued_with_celery(self, monkeypatch):
        monkeypatch.setattr(settings, "EMAIL_DELIVERY", "celery")

        with patch.object(send_otp_email_task, "delay") as mock_delay, \
                patch("pathlab.infrastructure.notifications.send_otp_email") as mock_send:
            OtpNotifier().deliver("asha@example.com", "482913", "password_reset")

        mock_delay.assert_called_once_with("asha@example.com", "482913", "password_reset")
        mock_send.assert_not_called()

    def test_broker_outage_sends_inline(self, monkeypatch):
        monkeypatch.setattr(settings, "EMAIL_DELIVERY", "celery")

        with patch.object(send_otp_email_task, "delay", side_effect=ConnectionError("broker down")), \
                patch("pathlab.infrastructure.notifications.send_otp_email") as mock_send:
            OtpNotifier().deliver("asha@example.com", "482913", "password_reset")

        mock_send.assert_called_once_with("asha@example.com", "482913", "password_reset")


def test_email_task_sends_otp():
    with patch("pathlab.tasks.email_tasks.send_otp_email", return_value=True) as mock_send:
        assert send_otp_email_task.run("asha@example.com", "482913", "email_verification") is True

    mock_send.assert_called_once_with("asha@example.com", "482913", "email_verification")
