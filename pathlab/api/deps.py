"""
Shared FastAPI dependencies.

External collaborators (payment gateway, identity provider, OTP notifier) are
resolved here so tests can swap them through ``app.dependency_overrides``.
"""

from pathlab.core.permissions import (  # noqa: F401
    Principal, get_current_principal, get_optional_principal, require_admin, require_patient
)
from pathlab.infrastructure.database import get_db  # noqa: F401
from pathlab.infrastructure.identity_provider import get_identity_verifier  # noqa: F401
from pathlab.infrastructure.notifications import OtpNotifier
from pathlab.infrastructure.payments import get_payment_gateway  # noqa: F401


def get_otp_notifier() -> OtpNotifier:
    return OtpNotifier()
