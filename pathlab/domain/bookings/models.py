"""
Booking Domain Models

A booking carries two independent lifecycles: the fulfilment status driven by
lab staff, and the payment status set at creation and verified by an admin.
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, Numeric, JSON, ForeignKey, Text
from sqlalchemy.orm import relationship
import enum
import uuid

from pathlab.infrastructure.database import Base
from pathlab.domain.bookings.identity import BookingIdentity, IdentifiedPatient, Guest


def gen_uuid():
    return str(uuid.uuid4())


class BookingStatus(str, enum.Enum):
    """Fulfilment status, in pipeline order"""
    PENDING = "pending"
    COLLECTED = "collected"
    PROCESSING = "processing"
    REPORT_READY = "report_ready"
    DELIVERED = "delivered"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID_UNVERIFIED = "paid_unverified"
    VERIFIED = "verified"
    CASH_ON_DELIVERY = "cash_on_delivery"
    PAY_AT_LAB = "pay_at_lab"


class PaymentMethod(str, enum.Enum):
    UPI = "upi"
    DEBIT_CARD = "debit_card"
    CREDIT_CARD = "credit_card"
    NET_BANKING = "net_banking"
    WALLET = "wallet"
    BANK_TRANSFER = "bank_transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"
    PAY_AT_LAB = "pay_at_lab"


class CollectionType(str, enum.Enum):
    WALKIN = "walkin"
    PICKUP = "pickup"


# Methods settled outside the portal; they double as their own payment status
DEFERRED_PAYMENT_METHODS = (PaymentMethod.CASH_ON_DELIVERY, PaymentMethod.PAY_AT_LAB)


class Booking(Base):
    """Booking aggregate: owns fulfilment and payment state"""
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=gen_uuid)

    # Identity; written only through ``identity``
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=True, index=True)
    guest_name = Column(String(255), nullable=True)

    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True)
    test_ids = Column(JSON, nullable=False)
    type = Column(String(20), nullable=False)
    slot = Column(DateTime, nullable=False)
    status = Column(String(30), nullable=False, default=BookingStatus.PENDING.value)

    # Payment
    payment_method = Column(String(30), nullable=True)
    payment_status = Column(String(30), nullable=False, default=PaymentStatus.PENDING.value)
    transaction_id = Column(String(255), nullable=True)
    razorpay_order_id = Column(String(255), nullable=True)
    razorpay_payment_id = Column(String(255), nullable=True)
    payment_screenshot = Column(Text, nullable=True)
    amount_paid = Column(Numeric(10, 2), nullable=True)
    payment_date = Column(DateTime, nullable=True)
    payment_verified_at = Column(DateTime, nullable=True)
    payment_verified_by = Column(String(36), ForeignKey("admins.id"), nullable=True)

    # Set in Python for sub-second ordering; newest-first listings depend on it
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    patient = relationship("Patient", lazy="joined")

    @property
    def identity(self) -> BookingIdentity:
        if self.patient_id:
            return IdentifiedPatient(self.patient_id)
        return Guest(self.guest_name or "")

    @identity.setter
    def identity(self, value: BookingIdentity):
        if isinstance(value, IdentifiedPatient):
            self.patient_id = value.patient_id
            self.guest_name = None
        elif isinstance(value, Guest):
            self.patient_id = None
            self.guest_name = value.name
        else:
            raise TypeError(f"Unsupported booking identity: {value!r}")

    def contains_test(self, test_id: str) -> bool:
        return test_id in (self.test_ids or [])
