import base64
import hashlib
import hmac
import json

import pytest

from pathlab.api.deps import get_payment_gateway
from pathlab.infrastructure.payments import RazorpayGateway
from pathlab.main import app


@pytest.fixture
def unconfigured_gateway(client):
    app.dependency_overrides[get_payment_gateway] = lambda: RazorpayGateway(None, None)
    return client


@pytest.mark.payments
@pytest.mark.integration
class TestRazorpayKey:

    def test_returns_public_key(self, client) -> None:
        response = client.get("/api/payment/razorpay-key")

        assert response.status_code == 200
        assert response.json() == {"key_id": "rzp_test_key"}

    def test_unconfigured(self, unconfigured_gateway) -> None:
        response = unconfigured_gateway.get("/api/payment/razorpay-key")

        assert response.status_code == 503
        assert response.json()["error_code"] == "GATEWAY_ERROR"


@pytest.mark.payments
@pytest.mark.integration
class TestCreateOrder:

    def test_creates_order_in_paise(self, client, razorpay_stub) -> None:
        response = client.post("/api/payment/create-order", json={
            "amount": "499.50",
            "test_ids": ["t1", "t2"],
            "phone": "9000000001",
        })

        assert response.status_code == 200
        assert response.json() == {
            "order_id": "order_TEST123",
            "amount": 49950,
            "currency": "INR",
            "key_id": "rzp_test_key",
        }

        sent = razorpay_stub.requests[0]
        assert sent.url.path.endswith("/orders")
        body = json.loads(sent.content)
        assert body["receipt"].startswith("order_")
        assert body["notes"] == {"test_ids": "t1,t2", "phone": "9000000001"}
        expected_auth = base64.b64encode(b"rzp_test_key:rzp_test_secret").decode()
        assert sent.headers["authorization"] == f"Basic {expected_auth}"

    def test_upstream_failure(self, client, razorpay_stub) -> None:
        razorpay_stub.fail = True

        response = client.post("/api/payment/create-order", json={"amount": 100, "test_ids": ["t1"]})

        assert response.status_code == 503
        assert response.json()["message"] == "Failed to create payment order"

    @pytest.mark.parametrize("body", [
        {"amount": 0, "test_ids": ["t1"]},
        {"amount": 100, "test_ids": []},
        {"test_ids": ["t1"]},
    ])
    def test_rejects_invalid_request(self, client, razorpay_stub, body) -> None:
        response = client.post("/api/payment/create-order", json=body)

        assert response.status_code == 400
        assert razorpay_stub.requests == []

    def test_unconfigured(self, unconfigured_gateway) -> None:
        response = unconfigured_gateway.post("/api/payment/create-order", json={"amount": 100, "test_ids": ["t1"]})

        assert response.status_code == 503


@pytest.mark.payments
@pytest.mark.integration
class TestVerifySignature:

    def test_valid_signature(self, client, gateway) -> None:
        signature = gateway.expected_signature("order_TEST123", "pay_ABC")

        response = client.post("/api/payment/verify", json={
            "razorpay_order_id": "order_TEST123",
            "razorpay_payment_id": "pay_ABC",
            "razorpay_signature": signature,
        })

        assert response.status_code == 200
        assert response.json() == {"verified": True, "order_id": "order_TEST123", "payment_id": "pay_ABC"}

    def test_tampered_signature(self, client, gateway) -> None:
        signature = gateway.expected_signature("order_TEST123", "pay_ABC")

        response = client.post("/api/payment/verify", json={
            "razorpay_order_id": "order_TEST123",
            "razorpay_payment_id": "pay_OTHER",
            "razorpay_signature": signature,
        })

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid payment signature"

    def test_missing_fields(self, client) -> None:
        response = client.post("/api/payment/verify", json={"razorpay_order_id": "order_TEST123"})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing payment verification details"


@pytest.mark.payments
@pytest.mark.unit
class TestGatewaySignature:

    def test_signature_is_hmac_sha256_of_order_and_payment(self) -> None:

        gateway = RazorpayGateway("key", "secret")
        expected = hmac.new(b"secret", b"order_1|pay_1", hashlib.sha256).hexdigest()

        assert gateway.expected_signature("order_1", "pay_1") == expected
        assert gateway.verify_signature("order_1", "pay_1", expected)
        assert not gateway.verify_signature("order_1", "pay_1", None)
