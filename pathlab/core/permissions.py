from dataclasses import dataclass
from typing import Optional
from fastapi import Request

from pathlab.core.security import verify_token, PRINCIPAL_ADMIN, PRINCIPAL_PATIENT
from pathlab.core.exceptions import AuthenticationError, AuthorizationError


@dataclass(frozen=True)
class Principal:
    """Authenticated caller decoded from the bearer token"""
    id: str
    type: str

    @property
    def is_admin(self) -> bool:
        return self.type == PRINCIPAL_ADMIN

    @property
    def is_patient(self) -> bool:
        return self.type == PRINCIPAL_PATIENT


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def get_current_principal(request: Request) -> Principal:
    """Extract and validate the caller from the Authorization header"""
    token = _bearer_token(request)
    if not token:
        raise AuthenticationError("Authentication required")

    payload = verify_token(token, "access")
    if not payload:
        raise AuthorizationError("Invalid or expired token", error_code="INVALID_TOKEN")

    principal = Principal(id=str(payload["id"]), type=payload["type"])
    request.state.principal = principal
    return principal


def get_optional_principal(request: Request) -> Optional[Principal]:
    """Like get_current_principal, but anonymous callers get None"""
    if not _bearer_token(request):
        return None
    return get_current_principal(request)


def require_admin(request: Request) -> Principal:
    principal = get_current_principal(request)
    if not principal.is_admin:
        raise AuthorizationError("Admin access required")
    return principal


def require_patient(request: Request) -> Principal:
    principal = get_current_principal(request)
    if not principal.is_patient:
        raise AuthorizationError("Patient access required")
    return principal
