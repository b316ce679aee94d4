from typing import Dict

from sqlalchemy.orm import Session

from pathlab.domain.bookings.models import BookingStatus, PaymentStatus
from pathlab.domain.bookings.repository import BookingRepository
from pathlab.domain.catalog.repository import LabTestRepository
from pathlab.domain.lab.repository import LabRepository
from pathlab.domain.patients.repository import PatientRepository


class DashboardService:
    """Headline counts for the admin dashboard"""

    def __init__(self, db: Session):
        self.db = db
        self.patient_repo = PatientRepository(db)
        self.booking_repo = BookingRepository(db)
        self.lab_repo = LabRepository(db)
        self.test_repo = LabTestRepository(db)

    def get_stats(self) -> Dict[str, int]:
        return {
            "total_patients": self.patient_repo.count(),
            "total_bookings": self.booking_repo.count(),
            "pending_bookings": self.booking_repo.count_by_status(BookingStatus.PENDING.value),
            "payments_awaiting_verification": self.booking_repo.count_by_payment_status(
                PaymentStatus.PAID_UNVERIFIED.value
            ),
            "total_reports": self.lab_repo.count_reports(),
            "total_tests": self.test_repo.count(),
        }
