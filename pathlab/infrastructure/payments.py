import hashlib
import hmac
import time
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from pathlab.core.config import settings
from pathlab.core.exceptions import GatewayError


@dataclass(frozen=True)
class GatewayProof:
    """Identifiers returned by the checkout, with the gateway's signature over them"""
    order_id: str
    payment_id: str
    signature: Optional[str] = None


class RazorpayGateway:
    """Razorpay orders API and checkout signature verification"""

    def __init__(
        self,
        key_id: Optional[str],
        key_secret: Optional[str],
        api_base: str = "https://api.razorpay.com/v1",
        http_client: Optional[httpx.Client] = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.api_base = api_base.rstrip("/")
        self.http_client = http_client

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def require_key_id(self) -> str:
        if not self.key_id:
            raise GatewayError()
        return self.key_id

    def create_order(self, amount: Decimal, notes: Dict[str, str]) -> Dict[str, Any]:
        if not self.configured:
            raise GatewayError()

        paise = int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        payload = {
            "amount": paise,
            "currency": "INR",
            "receipt": f"order_{int(time.time() * 1000)}",
            "notes": notes,
        }
        try:
            if self.http_client is not None:
                response = self.http_client.post(
                    f"{self.api_base}/orders", json=payload, auth=(self.key_id, self.key_secret)
                )
            else:
                response = httpx.post(
                    f"{self.api_base}/orders", json=payload, auth=(self.key_id, self.key_secret), timeout=10.0
                )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Razorpay order creation failed: {e}")
            raise GatewayError("Failed to create payment order")

        order = response.json()
        logger.info(f"Created Razorpay order {order.get('id')} for {paise} paise")
        return order

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        if not self.key_secret:
            raise GatewayError()
        body = f"{order_id}|{payment_id}".encode("utf-8")
        return hmac.new(self.key_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        expected = self.expected_signature(order_id, payment_id)
        return hmac.compare_digest(expected, signature or "")


def get_payment_gateway() -> RazorpayGateway:
    return RazorpayGateway(
        settings.RAZORPAY_KEY_ID,
        settings.RAZORPAY_KEY_SECRET,
        api_base=settings.RAZORPAY_API_BASE,
    )
