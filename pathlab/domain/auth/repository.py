from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from pathlab.domain.auth.models import Admin, Otp


class AdminRepository:
    """Repository for admin accounts"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, admin_data: dict) -> Admin:
        password = admin_data.pop("password")
        admin = Admin(**admin_data)
        admin.set_password(password)
        self.db.add(admin)
        self.db.commit()
        self.db.refresh(admin)
        return admin

    def get_by_id(self, admin_id: str) -> Optional[Admin]:
        return self.db.query(Admin).filter(Admin.id == admin_id).first()

    def get_by_username(self, username: str) -> Optional[Admin]:
        return self.db.query(Admin).filter(Admin.username == username).first()

    def count(self) -> int:
        return self.db.query(func.count(Admin.id)).scalar() or 0


class OtpRepository:
    """Repository for one-time codes"""

    def __init__(self, db: Session):
        self.db = db

    def replace(self, otp_data: dict) -> Otp:
        """Store a code, dropping any earlier code for the same contact and purpose"""
        self.db.query(Otp).filter(
            Otp.contact == otp_data["contact"],
            Otp.purpose == otp_data["purpose"]
        ).delete(synchronize_session=False)
        otp = Otp(**otp_data)
        self.db.add(otp)
        self.db.commit()
        self.db.refresh(otp)
        return otp

    def get_latest(self, contact: str, purpose: str) -> Optional[Otp]:
        return self.db.query(Otp).filter(
            Otp.contact == contact,
            Otp.purpose == purpose
        ).order_by(Otp.created_at.desc()).first()

    def increment_attempts(self, otp: Otp) -> Otp:
        otp.attempts = (otp.attempts or 0) + 1
        self.db.commit()
        self.db.refresh(otp)
        return otp

    def delete(self, otp: Otp) -> None:
        self.db.delete(otp)
        self.db.commit()
