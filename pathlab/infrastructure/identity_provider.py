"""
External identity provider capability.

The auth service only depends on ``verify_external_token(token)``; the
Firebase implementation below checks phone-auth ID tokens against Google's
published signing certificates.
"""

import time
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
import jwt
from cryptography.x509 import load_pem_x509_certificate

from pathlab.core.config import settings
from pathlab.core.exceptions import AuthenticationError, ExternalServiceError, handle_external_service_error

FIREBASE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)


@dataclass(frozen=True)
class ExternalIdentity:
    uid: str
    phone: Optional[str]
    email: Optional[str] = None


class FirebaseTokenVerifier:
    def __init__(self, project_id: Optional[str], http_client: Optional[httpx.Client] = None):
        self.project_id = project_id
        self.http_client = http_client
        self._certs: Dict[str, str] = {}
        self._certs_expire_at = 0.0

    def _fetch_certs(self) -> Dict[str, str]:
        if self._certs and time.time() < self._certs_expire_at:
            return self._certs
        try:
            if self.http_client is not None:
                response = self.http_client.get(FIREBASE_CERTS_URL)
            else:
                response = httpx.get(FIREBASE_CERTS_URL, timeout=10.0)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise handle_external_service_error(e, "firebase", "fetch_certs")

        max_age = 3600
        for directive in response.headers.get("cache-control", "").split(","):
            directive = directive.strip()
            if directive.startswith("max-age="):
                max_age = int(directive.split("=", 1)[1])
        self._certs = response.json()
        self._certs_expire_at = time.time() + max_age
        return self._certs

    def verify_external_token(self, token: str) -> ExternalIdentity:
        if not self.project_id:
            raise ExternalServiceError("Phone authentication is not configured")

        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError:
            raise AuthenticationError("Invalid or expired Firebase token")

        cert = self._fetch_certs().get(header.get("kid", ""))
        if not cert:
            raise AuthenticationError("Invalid or expired Firebase token")

        public_key = load_pem_x509_certificate(cert.encode("utf-8")).public_key()
        try:
            claims = jwt.decode(
                token,
                public_key,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=f"https://securetoken.google.com/{self.project_id}",
            )
        except jwt.PyJWTError:
            raise AuthenticationError("Invalid or expired Firebase token")

        uid = claims.get("sub")
        if not uid:
            raise AuthenticationError("Invalid or expired Firebase token")
        return ExternalIdentity(uid=uid, phone=claims.get("phone_number"), email=claims.get("email"))


_verifier: Optional[FirebaseTokenVerifier] = None


def get_identity_verifier() -> FirebaseTokenVerifier:
    global _verifier
    if _verifier is None:
        _verifier = FirebaseTokenVerifier(settings.FIREBASE_PROJECT_ID)
    return _verifier
