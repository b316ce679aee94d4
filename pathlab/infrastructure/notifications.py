import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Dict, Any, Optional

from loguru import logger

from pathlab.core.config import settings

EMAIL_CHANNEL = "email"
SMS_CHANNEL = "sms"


def smtp_configured() -> bool:
    return bool(settings.SMTP_USER and settings.SMTP_PASSWORD)


def _send_smtp(recipient: str, subject: str, body: str, html: Optional[str] = None) -> None:
    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = f"{settings.EMAIL_FROM_NAME} <{settings.SMTP_USER}>"
    message["To"] = recipient
    message.attach(MIMEText(body, "plain"))
    if html:
        message.attach(MIMEText(html, "html"))

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT_SECONDS) as server:
        server.starttls()
        server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.sendmail(settings.SMTP_USER, [recipient], message.as_string())


def send_notification(
    recipient: str,
    subject: str,
    body: str,
    channel: str = EMAIL_CHANNEL,
    html: Optional[str] = None,
) -> Dict[str, Any]:
    """Best-effort delivery. Never raises; undeliverable messages are logged instead."""
    if channel != EMAIL_CHANNEL:
        logger.info(f"[{channel.upper()}] {recipient}: {body}")
        return {"status": "logged", "recipient": recipient, "channel": channel}

    if not smtp_configured():
        logger.info(f"[DEV MODE] Email to {recipient}: {subject} / {body}")
        return {"status": "logged", "recipient": recipient, "channel": channel}

    try:
        _send_smtp(recipient, subject, body, html)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {recipient}: {e}")
        logger.info(f"[FALLBACK] Email to {recipient}: {body}")
        return {"status": "logged", "recipient": recipient, "channel": channel, "error": str(e)}

    logger.info(f"Email sent successfully to {recipient}")
    return {"status": "sent", "recipient": recipient, "channel": channel}


def render_otp_email(code: str, purpose: str) -> Dict[str, str]:
    if purpose == "password_reset":
        subject = f"Password Reset OTP - {settings.EMAIL_FROM_NAME}"
        purpose_text = "reset your password"
        minutes = settings.OTP_PASSWORD_RESET_EXPIRE_MINUTES
    else:
        subject = f"Verify Your Email - {settings.EMAIL_FROM_NAME}"
        purpose_text = "verify your email address"
        minutes = settings.OTP_VERIFICATION_EXPIRE_MINUTES

    body = (
        f"Use the following OTP to {purpose_text}: {code}\n"
        f"This OTP is valid for {minutes} minutes and can only be used once.\n"
        "If you did not request this OTP, please ignore this email."
    )
    html = (
        f"<h2>{escape(settings.EMAIL_FROM_NAME)}</h2>"
        f"<p>Use the following OTP to {purpose_text}:</p>"
        f"<p style=\"font-size:32px;font-weight:bold;letter-spacing:8px\">{escape(code)}</p>"
        f"<p>This OTP is valid for <strong>{minutes} minutes</strong> and can only be used once.</p>"
    )
    return {"subject": subject, "body": body, "html": html}


def send_otp_email(to: str, code: str, purpose: str) -> bool:
    rendered = render_otp_email(code, purpose)
    result = send_notification(to, rendered["subject"], rendered["body"], EMAIL_CHANNEL, rendered["html"])
    return result["status"] in ("sent", "logged")


class OtpNotifier:
    """Routes OTP codes to the contact's channel"""

    def deliver(self, contact: str, code: str, purpose: str) -> None:
        if "@" not in contact:
            send_notification(contact, "", f"Your OTP is {code}", channel=SMS_CHANNEL)
            return

        if settings.EMAIL_DELIVERY == "celery":
            from pathlab.tasks.email_tasks import send_otp_email_task
            try:
                send_otp_email_task.delay(contact, code, purpose)
                return
            except Exception as e:
                logger.warning(f"Could not enqueue OTP email for {contact}, sending inline: {e}")

        send_otp_email(contact, code, purpose)
