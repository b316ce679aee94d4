from loguru import logger

from pathlab.core.celery_app import celery_app
from pathlab.infrastructure.notifications import send_otp_email


@celery_app.task(name="pathlab.tasks.email_tasks.send_otp_email_task")
def send_otp_email_task(email: str, otp: str, purpose: str):
    """
    Celery task to send OTP email.
    """
    logger.info(f"Background task: Sending {purpose} OTP to {email}")
    return send_otp_email(email, otp, purpose)
