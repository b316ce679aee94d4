"""
Booking Service Layer

Booking creation and the two state machines a booking carries:

* fulfilment status: pending -> collected -> processing -> report_ready -> delivered
* payment status: decided at creation, paid_unverified -> verified by an admin
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Union

from loguru import logger
from sqlalchemy.orm import Session

from pathlab.core.config import settings
from pathlab.core.exceptions import (
    ValidationError, NotFoundError, ForbiddenError, InvalidStateError, GatewayError
)
from pathlab.domain.bookings.identity import BookingIdentity, IdentifiedPatient, Guest
from pathlab.domain.bookings.models import (
    Booking, BookingStatus, PaymentStatus, PaymentMethod, CollectionType,
    DEFERRED_PAYMENT_METHODS
)
from pathlab.domain.bookings.repository import BookingRepository
from pathlab.domain.catalog.models import LabTest
from pathlab.domain.catalog.repository import LabTestRepository
from pathlab.domain.patients.repository import PatientRepository
from pathlab.infrastructure.payments import GatewayProof, RazorpayGateway

STATUS_ORDER = list(BookingStatus)


def parse_enum(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {label}: {value}. Expected one of: {allowed}")


def initial_payment_status(method: PaymentMethod, gateway_confirmed: bool) -> PaymentStatus:
    """Payment status a new booking starts in"""
    if method in DEFERRED_PAYMENT_METHODS:
        return PaymentStatus(method.value)
    if gateway_confirmed:
        return PaymentStatus.VERIFIED
    return PaymentStatus.PAID_UNVERIFIED


class BookingService:
    """Service layer for the booking and payment ledger"""

    def __init__(self, db: Session, gateway: Optional[RazorpayGateway] = None):
        self.db = db
        self.booking_repo = BookingRepository(db)
        self.test_repo = LabTestRepository(db)
        self.patient_repo = PatientRepository(db)
        self.gateway = gateway

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repo.get_by_id(booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def _confirm_gateway_proof(self, proof: Optional[GatewayProof]) -> bool:
        """True when the checkout proof is complete and, if required, correctly signed"""
        if not proof or not proof.order_id or not proof.payment_id:
            return False
        if not settings.REQUIRE_GATEWAY_SIGNATURE:
            return True

        if self.gateway is None or not self.gateway.configured:
            raise GatewayError()
        if not proof.signature or not self.gateway.verify_signature(
            proof.order_id, proof.payment_id, proof.signature
        ):
            logger.warning(f"Rejected booking with bad gateway signature for order {proof.order_id}")
            raise ValidationError("Invalid payment signature")
        return True

    # ==================== Creation ====================

    def create_booking(
        self,
        identity: BookingIdentity,
        phone: Optional[str],
        test_ids: Optional[List[str]],
        collection_type: Optional[str],
        slot: Optional[datetime],
        payment_method: Optional[str],
        email: Optional[str] = None,
        transaction_id: Optional[str] = None,
        amount_paid: Optional[Decimal] = None,
        gateway_proof: Optional[GatewayProof] = None,
    ) -> Booking:
        """Create a booking and decide its initial payment status"""
        phone = (phone or "").strip()
        if not phone or not test_ids or not collection_type or not slot:
            raise ValidationError("Missing required fields")
        if not payment_method:
            raise ValidationError("Payment method is required")

        collection_type = parse_enum(CollectionType, collection_type, "collection type")
        method = parse_enum(PaymentMethod, payment_method, "payment method")

        if isinstance(identity, Guest) and not identity.name:
            raise ValidationError("Guest name is required")
        if isinstance(identity, IdentifiedPatient) and not self.patient_repo.get_by_id(identity.patient_id):
            raise NotFoundError("Patient not found")

        unique_ids = list(dict.fromkeys(test_ids))
        tests = self.test_repo.get_many(unique_ids)
        if len(tests) != len(unique_ids):
            found = {test.id for test in tests}
            missing = [test_id for test_id in unique_ids if test_id not in found]
            raise ValidationError("Unknown test ids", details={"missing_test_ids": missing})

        gateway_confirmed = (
            method not in DEFERRED_PAYMENT_METHODS and self._confirm_gateway_proof(gateway_proof)
        )
        payment_status = initial_payment_status(method, gateway_confirmed)

        if amount_paid is None:
            amount_paid = sum((Decimal(test.price) for test in tests), Decimal("0"))

        now = datetime.utcnow()
        booking = Booking(
            phone=phone,
            email=email or None,
            test_ids=unique_ids,
            type=collection_type.value,
            slot=slot,
            status=BookingStatus.PENDING.value,
            payment_method=method.value,
            payment_status=payment_status.value,
            transaction_id=transaction_id or None,
            razorpay_order_id=gateway_proof.order_id if gateway_confirmed else None,
            razorpay_payment_id=gateway_proof.payment_id if gateway_confirmed else None,
            amount_paid=amount_paid,
            payment_date=now,
            payment_verified_at=now if gateway_confirmed else None,
        )
        booking.identity = identity
        booking = self.booking_repo.create(booking)

        logger.info(
            f"Created booking {booking.id} ({collection_type.value}, {len(unique_ids)} tests) "
            f"with payment status {booking.payment_status}"
        )
        return booking

    # ==================== Fulfilment status ====================

    def update_status(self, booking_id: str, new_status: Union[str, BookingStatus]) -> Booking:
        new_status = parse_enum(BookingStatus, new_status, "status")
        booking = self._get_booking(booking_id)

        if settings.ENFORCE_FORWARD_STATUS_TRANSITIONS:
            current = BookingStatus(booking.status)
            if STATUS_ORDER.index(new_status) < STATUS_ORDER.index(current):
                raise InvalidStateError(
                    f"Cannot move booking from {current.value} back to {new_status.value}"
                )

        previous = booking.status
        booking.status = new_status.value
        booking = self.booking_repo.save(booking)
        logger.info(f"Booking {booking.id} status {previous} -> {booking.status}")
        return booking

    # ==================== Payment ====================

    def record_patient_payment(
        self,
        booking_id: str,
        patient_id: str,
        payment_method: Optional[str],
        amount_paid: Optional[Decimal],
        transaction_id: Optional[str] = None,
        payment_screenshot: Optional[str] = None,
    ) -> Booking:
        """Payment details submitted by the owning patient after booking"""
        booking = self._get_booking(booking_id)
        if booking.patient_id != patient_id:
            logger.warning(f"Patient {patient_id} tried to update payment on booking {booking_id}")
            raise ForbiddenError()

        if not payment_method or amount_paid is None:
            raise ValidationError("Payment method and amount are required")
        if amount_paid <= 0:
            raise ValidationError("Amount must be greater than zero")
        method = parse_enum(PaymentMethod, payment_method, "payment method")

        if booking.payment_status == PaymentStatus.VERIFIED.value:
            raise InvalidStateError("Payment is already verified")

        booking.payment_method = method.value
        booking.payment_status = initial_payment_status(method, gateway_confirmed=False).value
        if transaction_id:
            booking.transaction_id = transaction_id
        if payment_screenshot:
            booking.payment_screenshot = payment_screenshot
        booking.amount_paid = amount_paid
        booking.payment_date = datetime.utcnow()

        booking = self.booking_repo.save(booking)
        logger.info(f"Recorded {method.value} payment for booking {booking.id}")
        return booking

    def verify_payment(self, booking_id: str, admin_id: str) -> Booking:
        booking = self._get_booking(booking_id)
        # Conditional write: only one of two concurrent verifications succeeds
        if not self.booking_repo.mark_payment_verified(booking_id, admin_id, datetime.utcnow()):
            raise InvalidStateError("Payment is not pending verification")
        self.db.refresh(booking)
        logger.info(f"Payment for booking {booking.id} verified by admin {admin_id}")
        return booking

    # ==================== Listings ====================

    def list_patient_bookings(self, patient_id: str) -> List[Booking]:
        return self.booking_repo.get_by_patient(patient_id)

    def list_all_bookings(self) -> List[Booking]:
        return self.booking_repo.get_all()

    def tests_by_id(self, bookings: List[Booking]) -> Dict[str, LabTest]:
        """Catalog rows for every test referenced by the given bookings"""
        ids = {test_id for booking in bookings for test_id in (booking.test_ids or [])}
        return {test.id: test for test in self.test_repo.get_many(ids)}
