"""
Report Access Gate

A report linked to a booking is released only once that booking's payment
status settles it. Reports without a link predate payment tracking and are
always released.

Patient listings also try to *derive* a booking for unlinked reports by
matching the result's test against the patient's bookings. That match is a
heuristic: with several bookings for the same test the newest one wins, which
may not be the booking the sample came from. The download endpoint never uses
it and checks the explicit link only.
"""

from dataclasses import dataclass
from typing import Optional, List, Sequence

from loguru import logger
from sqlalchemy.orm import Session

from pathlab.core.config import settings
from pathlab.core.exceptions import NotFoundError, PaymentRequiredError
from pathlab.domain.bookings.models import Booking, PaymentStatus
from pathlab.domain.bookings.repository import BookingRepository
from pathlab.domain.lab.models import Report
from pathlab.domain.lab.repository import LabRepository

RELEASING_PAYMENT_STATUSES = frozenset({
    PaymentStatus.VERIFIED.value,
    PaymentStatus.CASH_ON_DELIVERY.value,
    PaymentStatus.PAY_AT_LAB.value,
})


def payment_releases(payment_status: Optional[str]) -> bool:
    return payment_status in RELEASING_PAYMENT_STATUSES


class LinkedBookingMatch:
    """The booking the report was issued against"""
    name = "linked"

    def find(self, report: Report, bookings: Sequence[Booking]) -> Optional[Booking]:
        if not report.booking_id:
            return None
        return next((b for b in bookings if b.id == report.booking_id), None)


class SharedTestBookingMatch:
    """Newest booking of the patient that includes the report's test"""
    name = "test_id"

    def find(self, report: Report, bookings: Sequence[Booking]) -> Optional[Booking]:
        if report.booking_id or report.result is None:
            return None
        return next((b for b in bookings if b.contains_test(report.result.test_id)), None)


def default_strategies():
    strategies = [LinkedBookingMatch()]
    if settings.REPORT_BOOKING_FALLBACK_MATCH:
        strategies.append(SharedTestBookingMatch())
    return strategies


@dataclass
class ReportListing:
    report: Report
    booking: Optional[Booking]
    booking_match: Optional[str]
    released: bool

    @property
    def payment_status(self) -> str:
        return self.booking.payment_status if self.booking else PaymentStatus.PENDING.value

    @property
    def secure_download_token(self) -> Optional[str]:
        return self.report.secure_download_token if self.released else None

    @property
    def is_legacy(self) -> bool:
        return not self.report.booking_id and self.booking is None


class ReportAccessGate:
    def __init__(self, db: Session, strategies=None):
        self.db = db
        self.lab_repo = LabRepository(db)
        self.booking_repo = BookingRepository(db)
        self.strategies = strategies if strategies is not None else default_strategies()

    def match_booking(self, report: Report, bookings: Sequence[Booking]):
        for strategy in self.strategies:
            booking = strategy.find(report, bookings)
            if booking is not None:
                return booking, strategy.name
        return None, None

    def describe(self, report: Report, bookings: Sequence[Booking]) -> ReportListing:
        booking, match = self.match_booking(report, bookings)
        if booking is not None:
            released = payment_releases(booking.payment_status)
        else:
            # Linked to a booking we cannot see: withhold, as the download would
            released = not report.booking_id
        return ReportListing(report=report, booking=booking, booking_match=match, released=released)

    def list_patient_reports(self, patient_id: str) -> List[ReportListing]:
        reports = self.lab_repo.get_reports_by_patient(patient_id)
        bookings = self.booking_repo.get_by_patient(patient_id)
        return [self.describe(report, bookings) for report in reports]

    def authorize_download(self, token: str) -> Report:
        """Return the report behind ``token`` if its artifact may be served"""
        report = self.lab_repo.get_report_by_token(token)
        if not report:
            raise NotFoundError("Report not found or link expired")

        if report.booking_id:
            booking = self.booking_repo.get_by_id(report.booking_id)
            if not booking:
                logger.warning(f"Report {report.id} links to missing booking {report.booking_id}")
                raise PaymentRequiredError("Unable to verify payment status. Please contact support.")
            if not payment_releases(booking.payment_status):
                logger.info(
                    f"Refused download of report {report.id}: booking {booking.id} "
                    f"payment status is {booking.payment_status}"
                )
                raise PaymentRequiredError()

        return report
