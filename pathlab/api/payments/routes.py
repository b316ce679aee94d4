from fastapi import APIRouter, Depends

from loguru import logger

from pathlab.core.exceptions import ValidationError
from pathlab.api.deps import get_payment_gateway
from pathlab.api.payments.schemas import (
    RazorpayKeyResponse, CreateOrderRequest, CreateOrderResponse,
    VerifyPaymentRequest, VerifyPaymentResponse
)

router = APIRouter(prefix="/payment", tags=["Payments"])


@router.get("/razorpay-key", response_model=RazorpayKeyResponse)
def razorpay_key(gateway=Depends(get_payment_gateway)):
    return RazorpayKeyResponse(key_id=gateway.require_key_id())


@router.post("/create-order", response_model=CreateOrderResponse)
def create_order(body: CreateOrderRequest, gateway=Depends(get_payment_gateway)):
    notes = {"test_ids": ",".join(body.test_ids)}
    for key in ("phone", "email", "name"):
        value = getattr(body, key)
        if value:
            notes[key] = value

    order = gateway.create_order(body.amount, notes)
    return CreateOrderResponse(
        order_id=order["id"],
        amount=order["amount"],
        currency=order.get("currency", "INR"),
        key_id=gateway.require_key_id(),
    )


@router.post("/verify", response_model=VerifyPaymentResponse)
def verify_payment(body: VerifyPaymentRequest, gateway=Depends(get_payment_gateway)):
    """Check the checkout signature returned to the browser"""
    if not body.razorpay_order_id or not body.razorpay_payment_id or not body.razorpay_signature:
        raise ValidationError("Missing payment verification details")

    if not gateway.verify_signature(body.razorpay_order_id, body.razorpay_payment_id, body.razorpay_signature):
        logger.warning(f"Payment signature mismatch for order {body.razorpay_order_id}")
        raise ValidationError("Invalid payment signature")

    return VerifyPaymentResponse(
        verified=True,
        order_id=body.razorpay_order_id,
        payment_id=body.razorpay_payment_id,
    )
