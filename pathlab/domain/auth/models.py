from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.sql import func
from datetime import datetime
import enum
import uuid

from pathlab.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class AdminRole(str, enum.Enum):
    """Operator roles"""
    ADMIN = "admin"
    TECHNICIAN = "technician"


class OtpPurpose(str, enum.Enum):
    """What a one-time code proves"""
    REGISTER = "register"
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


class Admin(Base):
    """Operator account, created by seeding only"""
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(30), nullable=False, default=AdminRole.TECHNICIAN.value)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    def set_password(self, password: str):
        from pathlab.core.security import get_password_hash
        self.password_hash = get_password_hash(password)

    def verify_password(self, password: str) -> bool:
        from pathlab.core.security import verify_password
        return verify_password(password, self.password_hash)


class Otp(Base):
    """Short-lived one-time code tied to a contact and purpose"""
    __tablename__ = "otps"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    contact = Column(String(255), nullable=False, index=True)
    code = Column(String(6), nullable=False)
    purpose = Column(String(30), nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    def is_expired(self, now: datetime = None) -> bool:
        return (now or datetime.utcnow()) > self.expires_at
