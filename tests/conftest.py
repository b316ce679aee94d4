import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pathlab")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("DEBUG", "false")

import json
from datetime import datetime
from decimal import Decimal
from typing import Generator, List, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pathlab.main import app
from pathlab.api.deps import get_db, get_identity_verifier, get_otp_notifier, get_payment_gateway
from pathlab.core.exceptions import AuthenticationError
from pathlab.core.security import create_access_token, PRINCIPAL_ADMIN, PRINCIPAL_PATIENT
from pathlab.domain.auth.models import AdminRole
from pathlab.domain.auth.repository import AdminRepository
from pathlab.domain.bookings.models import Booking, BookingStatus, PaymentStatus, PaymentMethod
from pathlab.domain.catalog.repository import LabTestRepository
from pathlab.domain.patients.service import PatientService
from pathlab.infrastructure.database import Base
from pathlab.infrastructure.identity_provider import ExternalIdentity
from pathlab.infrastructure.notifications import OtpNotifier
from pathlab.infrastructure.payments import RazorpayGateway

RAZORPAY_KEY_ID = "rzp_test_key"
RAZORPAY_KEY_SECRET = "rzp_test_secret"

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = sessionmaker(
    bind=test_engine, autocommit=False, autoflush=False, expire_on_commit=False
)


class RecordingNotifier(OtpNotifier):
    """Captures delivered codes instead of sending them"""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []

    def deliver(self, contact: str, code: str, purpose: str) -> None:
        self.sent.append((contact, code, purpose))

    def last_code(self, contact: str) -> str:
        for sent_contact, code, _ in reversed(self.sent):
            if sent_contact == contact:
                return code
        raise AssertionError(f"No code delivered to {contact}")


class FakeIdentityVerifier:
    """Maps known ID tokens to identities"""

    def __init__(self):
        self.identities = {}

    def verify_external_token(self, token: str) -> ExternalIdentity:
        if token not in self.identities:
            raise AuthenticationError("Invalid or expired Firebase token")
        return self.identities[token]


class RazorpayStub:
    """Transport standing in for the Razorpay orders API"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.fail = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(500, json={"error": {"description": "server error"}})
        payload = json.loads(request.content)
        return httpx.Response(200, json={
            "id": "order_TEST123",
            "entity": "order",
            "amount": payload["amount"],
            "currency": payload["currency"],
            "receipt": payload["receipt"],
            "status": "created",
        })


@pytest.fixture(scope="function")
def db_session() -> Generator:
    """Fresh schema and session for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def razorpay_stub() -> RazorpayStub:
    return RazorpayStub()


@pytest.fixture(scope="function")
def gateway(razorpay_stub) -> RazorpayGateway:
    client = httpx.Client(transport=httpx.MockTransport(razorpay_stub))
    return RazorpayGateway(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET, http_client=client)


@pytest.fixture(scope="function")
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(scope="function")
def identity_verifier() -> FakeIdentityVerifier:
    return FakeIdentityVerifier()


@pytest.fixture(scope="function")
def client(db_session, gateway, notifier, identity_verifier) -> Generator[TestClient, None, None]:
    """Test client wired to the test session and fake external services."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_otp_notifier] = lambda: notifier
    app.dependency_overrides[get_identity_verifier] = lambda: identity_verifier

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def blood_sugar_test(db_session):
    return LabTestRepository(db_session).create({
        "code": "BSF",
        "name": "Blood Sugar Fasting",
        "category": "Diabetes",
        "price": Decimal("80"),
        "duration": "4 hours",
        "parameters": [
            {"name": "Fasting Blood Glucose", "unit": "mg/dL", "normal_range": "70-100", "code": "FBG"},
        ],
    })


@pytest.fixture(scope="function")
def lipid_test(db_session):
    return LabTestRepository(db_session).create({
        "code": "LIPID",
        "name": "Lipid Profile",
        "category": "Biochemistry",
        "price": Decimal("500"),
        "duration": "24 hours",
        "parameters": [
            {"name": "Total Cholesterol", "unit": "mg/dL", "normal_range": "<200", "code": "TC"},
            {"name": "HDL Cholesterol", "unit": "mg/dL", "normal_range": ">40", "code": "HDL"},
        ],
    })


@pytest.fixture(scope="function")
def test_patient(db_session):
    """A verified patient with an email password."""
    return PatientService(db_session).create_patient(
        name="Asha Rao",
        phone="9876500001",
        email="asha@example.com",
        password="secret123",
        email_verified=True,
    )


@pytest.fixture(scope="function")
def other_patient(db_session):
    return PatientService(db_session).create_patient(
        name="Vikram Shah",
        phone="9876500002",
        email="vikram@example.com",
        password="secret456",
        email_verified=True,
    )


@pytest.fixture(scope="function")
def admin_user(db_session):
    return AdminRepository(db_session).create({
        "username": "labadmin",
        "password": "adminpass",
        "name": "Lab Admin",
        "role": AdminRole.ADMIN.value,
    })


@pytest.fixture(scope="function")
def patient_headers(test_patient) -> dict:
    return {"Authorization": f"Bearer {create_access_token(test_patient.id, PRINCIPAL_PATIENT)}"}


@pytest.fixture(scope="function")
def other_patient_headers(other_patient) -> dict:
    return {"Authorization": f"Bearer {create_access_token(other_patient.id, PRINCIPAL_PATIENT)}"}


@pytest.fixture(scope="function")
def admin_headers(admin_user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(admin_user.id, PRINCIPAL_ADMIN)}"}


@pytest.fixture(scope="function")
def make_booking(db_session):
    """Insert a booking directly, bypassing creation rules (e.g. legacy 'pending' payments)."""

    def _make(patient, tests, payment_status=PaymentStatus.PENDING.value,
              payment_method=PaymentMethod.UPI.value):
        booking = Booking(
            patient_id=patient.id,
            phone=patient.phone,
            test_ids=[test.id for test in tests],
            type="walkin",
            slot=datetime(2026, 11, 2, 9, 30),
            status=BookingStatus.PENDING.value,
            payment_method=payment_method,
            payment_status=payment_status,
        )
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking

    return _make


@pytest.fixture(scope="function")
def booking_payload():
    """Builds a valid guest booking body; keyword overrides replace fields."""

    def _payload(test_ids, **overrides) -> dict:
        payload = {
            "guest_name": "Walk-in Guest",
            "phone": "9000000001",
            "email": "guest@example.com",
            "test_ids": list(test_ids),
            "type": "walkin",
            "slot": "2026-11-02T09:30:00",
            "payment_method": "upi",
            "transaction_id": "UPI-REF-1",
        }
        payload.update(overrides)
        return payload

    return _payload


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    for marker, description in (
        ("unit", "mark test as a unit test"),
        ("integration", "mark test as an integration test"),
        ("auth", "mark test as authentication related"),
        ("bookings", "mark test as booking and payment ledger related"),
        ("reports", "mark test as report issuance and access related"),
        ("payments", "mark test as payment gateway related"),
        ("content", "mark test as reviews and advertisements related"),
    ):
        config.addinivalue_line("markers", f"{marker}: {description}")
