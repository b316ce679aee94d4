"""
One-time code issuance and verification.

At most one live code exists per (contact, purpose): issuing replaces the
previous one. A code is consumed on success, on expiry, and once the attempt
limit is reached.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional, Union

from loguru import logger
from sqlalchemy.orm import Session

from pathlab.core.config import settings
from pathlab.core.exceptions import (
    OtpNotFoundError, ExpiredError, InvalidCodeError, AttemptsExceededError, ValidationError
)
from pathlab.core.security import generate_otp_code, constant_time_equals
from pathlab.domain.auth.models import Otp, OtpPurpose
from pathlab.domain.auth.repository import OtpRepository


def normalize_contact(contact: str) -> str:
    contact = contact.strip()
    return contact.lower() if "@" in contact else contact


def otp_lifetime(purpose: OtpPurpose) -> timedelta:
    if purpose == OtpPurpose.PASSWORD_RESET:
        return timedelta(minutes=settings.OTP_PASSWORD_RESET_EXPIRE_MINUTES)
    return timedelta(minutes=settings.OTP_VERIFICATION_EXPIRE_MINUTES)


def parse_purpose(purpose: Union[str, OtpPurpose, None]) -> OtpPurpose:
    try:
        return OtpPurpose(purpose)
    except ValueError:
        raise ValidationError(f"Unknown OTP purpose: {purpose}")


class OtpVerifier:
    """Issues and checks one-time codes"""

    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.otp_repo = OtpRepository(db)
        self.clock = clock or datetime.utcnow

    @property
    def max_attempts(self) -> int:
        return settings.OTP_MAX_ATTEMPTS

    def issue(self, contact: str, purpose: Union[str, OtpPurpose]) -> Otp:
        purpose = parse_purpose(purpose)
        now = self.clock()
        otp = self.otp_repo.replace({
            "contact": normalize_contact(contact),
            "code": generate_otp_code(),
            "purpose": purpose.value,
            "attempts": 0,
            "created_at": now,
            "expires_at": now + otp_lifetime(purpose),
        })
        logger.debug(f"Issued {purpose.value} OTP for {otp.contact}")
        return otp

    def verify(self, contact: str, purpose: Union[str, OtpPurpose], code: str) -> None:
        """Consume the code or raise; attempts are counted before comparing"""
        purpose = parse_purpose(purpose)
        contact = normalize_contact(contact)

        otp = self.otp_repo.get_latest(contact, purpose.value)
        if not otp:
            raise OtpNotFoundError()

        if otp.is_expired(self.clock()):
            self.otp_repo.delete(otp)
            raise ExpiredError()

        if otp.attempts >= self.max_attempts:
            self.otp_repo.delete(otp)
            raise AttemptsExceededError()

        otp = self.otp_repo.increment_attempts(otp)

        if not constant_time_equals(otp.code, (code or "").strip()):
            remaining = self.max_attempts - otp.attempts
            if remaining <= 0:
                self.otp_repo.delete(otp)
                logger.warning(f"OTP attempts exhausted for {contact} ({purpose.value})")
                raise AttemptsExceededError()
            raise InvalidCodeError(remaining_attempts=remaining)

        self.otp_repo.delete(otp)
