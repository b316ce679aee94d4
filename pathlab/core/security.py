from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import hmac
import secrets
import jwt
from passlib.context import CryptContext
from pathlab.core.config import settings

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PRINCIPAL_PATIENT = "patient"
PRINCIPAL_ADMIN = "admin"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash"""
    return pwd_context.hash(password)


def create_access_token(principal_id: str, principal_type: str) -> str:
    """Create JWT access token carrying {id, type}"""
    if principal_type == PRINCIPAL_ADMIN:
        lifetime = timedelta(hours=settings.ADMIN_TOKEN_EXPIRE_HOURS)
    else:
        lifetime = timedelta(days=settings.PATIENT_TOKEN_EXPIRE_DAYS)
    now = datetime.utcnow()
    to_encode = {
        "id": principal_id,
        "type": principal_type,
        "sub": principal_id,
        "exp": now + lifetime,
        "iat": now,
        "token_type": "access"
    }
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and validate JWT token"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except jwt.PyJWTError:
        return None


def verify_token(token: str, token_type: str = "access") -> Optional[Dict[str, Any]]:
    """Verify token and check token type"""
    payload = decode_token(token)
    if not payload:
        return None

    if payload.get("token_type") != token_type:
        return None

    if payload.get("type") not in (PRINCIPAL_PATIENT, PRINCIPAL_ADMIN) or not payload.get("id"):
        return None

    return payload


def generate_otp_code(length: int = 6) -> str:
    """Uniformly random numeric one-time code"""
    return "".join([str(secrets.randbelow(10)) for _ in range(length)])


def generate_download_token() -> str:
    """256-bit capability token for report downloads"""
    return secrets.token_hex(32)


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
