from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from pathlab.api.catalog.schemas import LabTestSummary


class BookingCreate(BaseModel):
    """Booking request from a guest or a logged-in patient"""
    patient_id: Optional[str] = None
    guest_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    test_ids: Optional[List[str]] = None
    type: Optional[str] = None
    slot: Optional[datetime] = None
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    amount_paid: Optional[Decimal] = None
    # Checkout proof from the payment gateway
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: Optional[str] = None


class BookingPaymentUpdate(BaseModel):
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    amount_paid: Optional[Decimal] = None
    payment_screenshot: Optional[str] = None


class BookingPatientSummary(BaseModel):
    id: str
    patient_id: str
    name: str
    phone: str
    email: Optional[str] = None

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: str
    patient_id: Optional[str] = None
    guest_name: Optional[str] = None
    phone: str
    email: Optional[str] = None
    test_ids: List[str]
    type: str
    slot: datetime
    status: str
    payment_method: Optional[str] = None
    payment_status: str
    transaction_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    amount_paid: Optional[Decimal] = None
    payment_date: Optional[datetime] = None
    payment_verified_at: Optional[datetime] = None
    payment_verified_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingDetailResponse(BookingResponse):
    tests: List[LabTestSummary] = []
    patient: Optional[BookingPatientSummary] = None
