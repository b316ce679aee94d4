from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from decimal import Decimal


class RazorpayKeyResponse(BaseModel):
    key_id: str


class CreateOrderRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    test_ids: List[str] = Field(..., min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


class CreateOrderResponse(BaseModel):
    order_id: str
    amount: int
    currency: str
    key_id: str


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None


class VerifyPaymentResponse(BaseModel):
    verified: bool
    order_id: str
    payment_id: str
