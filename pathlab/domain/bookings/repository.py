from datetime import datetime
from typing import Optional, List
from sqlalchemy import func
from sqlalchemy.orm import Session

from pathlab.domain.bookings.models import Booking, PaymentStatus


class BookingRepository:
    """Repository for booking data access operations"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        return booking

    def get_by_id(self, booking_id: str) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def get_by_patient(self, patient_id: str) -> List[Booking]:
        return self.db.query(Booking).filter(
            Booking.patient_id == patient_id
        ).order_by(Booking.created_at.desc(), Booking.id.desc()).all()

    def get_all(self, skip: int = 0, limit: int = 200) -> List[Booking]:
        return self.db.query(Booking).order_by(
            Booking.created_at.desc(), Booking.id.desc()
        ).offset(skip).limit(limit).all()

    def save(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        return booking

    def mark_payment_verified(self, booking_id: str, admin_id: str, verified_at: datetime) -> bool:
        """Flip paid_unverified to verified in one UPDATE; False when the row was not pending"""
        updated = self.db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.payment_status == PaymentStatus.PAID_UNVERIFIED.value,
        ).update(
            {
                Booking.payment_status: PaymentStatus.VERIFIED.value,
                Booking.payment_verified_at: verified_at,
                Booking.payment_verified_by: admin_id,
                Booking.updated_at: verified_at,
            },
            synchronize_session=False,
        )
        self.db.commit()
        return updated == 1

    def count(self) -> int:
        return self.db.query(func.count(Booking.id)).scalar() or 0

    def count_by_status(self, status: str) -> int:
        return self.db.query(func.count(Booking.id)).filter(
            Booking.status == status
        ).scalar() or 0

    def count_by_payment_status(self, payment_status: str) -> int:
        return self.db.query(func.count(Booking.id)).filter(
            Booking.payment_status == payment_status
        ).scalar() or 0
