"""
Booking API Routes

Booking creation for guests and patients, the patient's own bookings and
payment submission, and admin status / payment verification.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from pathlab.domain.bookings.identity import IdentifiedPatient, resolve_identity
from pathlab.domain.bookings.service import BookingService
from pathlab.infrastructure.payments import GatewayProof
from pathlab.api.deps import (
    Principal, get_db, get_optional_principal, get_payment_gateway, require_admin, require_patient
)
from pathlab.api.catalog.schemas import LabTestSummary
from pathlab.api.bookings.schemas import (
    BookingCreate, BookingStatusUpdate, BookingPaymentUpdate,
    BookingResponse, BookingDetailResponse
)

router = APIRouter(tags=["Bookings"])


def _with_details(service: BookingService, bookings) -> List[BookingDetailResponse]:
    tests = service.tests_by_id(bookings)
    detailed = []
    for booking in bookings:
        item = BookingDetailResponse.model_validate(booking)
        item.tests = [
            LabTestSummary.model_validate(tests[test_id])
            for test_id in booking.test_ids or [] if test_id in tests
        ]
        detailed.append(item)
    return detailed


@router.post("/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    body: BookingCreate,
    db=Depends(get_db),
    gateway=Depends(get_payment_gateway),
    principal: Optional[Principal] = Depends(get_optional_principal)
):
    """Create a booking; anonymous callers book as guests"""
    if principal is not None and principal.is_admin and body.patient_id:
        # Front-desk booking on behalf of a registered patient
        identity = IdentifiedPatient(body.patient_id)
    else:
        identity = resolve_identity(
            principal.id if principal is not None and principal.is_patient else None,
            requested_patient_id=body.patient_id,
            guest_name=body.guest_name,
        )

    proof = None
    if body.razorpay_order_id or body.razorpay_payment_id:
        proof = GatewayProof(
            order_id=body.razorpay_order_id,
            payment_id=body.razorpay_payment_id,
            signature=body.razorpay_signature,
        )

    service = BookingService(db, gateway=gateway)
    return service.create_booking(
        identity=identity,
        phone=body.phone,
        email=body.email,
        test_ids=body.test_ids,
        collection_type=body.type,
        slot=body.slot,
        payment_method=body.payment_method,
        transaction_id=body.transaction_id,
        amount_paid=body.amount_paid,
        gateway_proof=proof,
    )


# ==================== Patient Endpoints ====================

@router.get("/patient/bookings", response_model=List[BookingDetailResponse])
def list_my_bookings(
    db=Depends(get_db),
    principal: Principal = Depends(require_patient)
):
    service = BookingService(db)
    return _with_details(service, service.list_patient_bookings(principal.id))


@router.patch("/patient/bookings/{booking_id}/payment", response_model=BookingResponse)
def submit_payment(
    booking_id: str,
    body: BookingPaymentUpdate,
    db=Depends(get_db),
    principal: Principal = Depends(require_patient)
):
    """Record payment details for one of the caller's own bookings"""
    return BookingService(db).record_patient_payment(
        booking_id,
        principal.id,
        payment_method=body.payment_method,
        amount_paid=body.amount_paid,
        transaction_id=body.transaction_id,
        payment_screenshot=body.payment_screenshot,
    )


# ==================== Admin Endpoints ====================

@router.get("/admin/bookings", response_model=List[BookingDetailResponse])
def list_all_bookings(
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    service = BookingService(db)
    return _with_details(service, service.list_all_bookings())


@router.patch("/admin/bookings/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    return BookingService(db).update_status(booking_id, body.status)


@router.patch("/admin/bookings/{booking_id}/verify-payment", response_model=BookingResponse)
def verify_booking_payment(
    booking_id: str,
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    """Move a booking from paid_unverified to verified"""
    return BookingService(db).verify_payment(booking_id, admin.id)
