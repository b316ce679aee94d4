"""
Patient Domain Models

Identity records for patients. A patient registers through email/password,
phone OTP or the external identity provider and is never deleted.
"""

from sqlalchemy import Column, String, Text, DateTime, Boolean
from sqlalchemy.sql import func
import uuid

from pathlab.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class Patient(Base):
    """Patient identity record"""
    __tablename__ = "patients"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    patient_id = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone = Column(String(20), nullable=False, unique=True, index=True)

    # Credentials
    password_hash = Column(String(255), nullable=True)
    firebase_uid = Column(String(128), nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)

    # Demographics
    dob = Column(DateTime, nullable=True)
    gender = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)

    def set_password(self, password: str):
        """Set password hash"""
        from pathlab.core.security import get_password_hash
        self.password_hash = get_password_hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify password"""
        from pathlab.core.security import verify_password
        return verify_password(password, self.password_hash)

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)
