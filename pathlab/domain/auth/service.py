from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from pathlab.core.exceptions import (
    ValidationError, ConflictError, NotFoundError, ForbiddenError,
    InvalidCredentialsError, NoPasswordSetError, EmailNotVerifiedError
)
from pathlab.core.security import create_access_token, PRINCIPAL_ADMIN, PRINCIPAL_PATIENT
from pathlab.domain.auth.models import Admin, Otp, OtpPurpose
from pathlab.domain.auth.otp import OtpVerifier, normalize_contact
from pathlab.domain.auth.repository import AdminRepository
from pathlab.domain.patients.models import Patient
from pathlab.domain.patients.repository import PatientRepository
from pathlab.domain.patients.service import PatientService
from pathlab.infrastructure.notifications import OtpNotifier

MIN_PASSWORD_LENGTH = 6


@dataclass
class PatientSession:
    patient: Patient
    token: str


@dataclass
class AdminSession:
    admin: Admin
    token: str


def _require_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class AuthenticationService:
    """Service layer for patient credential lifecycle"""

    def __init__(self, db: Session, notifier: Optional[OtpNotifier] = None, otp_verifier: Optional[OtpVerifier] = None):
        self.db = db
        self.patient_repo = PatientRepository(db)
        self.patients = PatientService(db)
        self.otp = otp_verifier or OtpVerifier(db)
        self.notifier = notifier or OtpNotifier()

    def _session(self, patient: Patient) -> PatientSession:
        return PatientSession(patient=patient, token=create_access_token(patient.id, PRINCIPAL_PATIENT))

    def _send_otp(self, contact: str, purpose: OtpPurpose) -> Otp:
        otp = self.otp.issue(contact, purpose)
        self.notifier.deliver(otp.contact, otp.code, purpose.value)
        return otp

    # ==================== Email / password ====================

    def register_email(
        self,
        name: str,
        email: str,
        phone: str,
        password: str,
        gender: Optional[str] = None,
        dob: Optional[datetime] = None,
    ) -> tuple:
        """Create an unverified patient and send the verification code"""
        if not name or not email or not phone or not password:
            raise ValidationError("Name, email, phone, and password are required")
        _require_password_strength(password)

        if self.patient_repo.get_by_email(email):
            raise ConflictError("Email already registered")

        patient = self.patients.create_patient(
            name=name, phone=phone, email=email, password=password,
            gender=gender, dob=dob, email_verified=False,
        )
        otp = self._send_otp(patient.email, OtpPurpose.EMAIL_VERIFICATION)
        return patient, otp

    def resend_verification(self, email: str) -> Otp:
        patient = self.patient_repo.get_by_email(email)
        if not patient:
            raise NotFoundError("Email not found")
        if patient.email_verified:
            raise ValidationError("Email already verified")
        return self._send_otp(patient.email, OtpPurpose.EMAIL_VERIFICATION)

    def verify_email(self, email: str, code: str) -> PatientSession:
        self.otp.verify(email, OtpPurpose.EMAIL_VERIFICATION, code)

        patient = self.patient_repo.get_by_email(email)
        if not patient:
            raise NotFoundError("Patient not found")
        patient.email_verified = True
        patient = self.patient_repo.save(patient)
        logger.info(f"Email verified for patient {patient.patient_id}")
        return self._session(patient)

    def login_email(self, email: str, password: str) -> PatientSession:
        patient = self.patient_repo.get_by_email(email)
        if not patient:
            raise InvalidCredentialsError()
        if not patient.has_password:
            raise NoPasswordSetError()
        if not patient.verify_password(password):
            raise InvalidCredentialsError()
        if not patient.email_verified:
            raise EmailNotVerifiedError(patient.email)
        return self._session(patient)

    def forgot_password(self, email: str) -> None:
        """Sends a reset code when the email is registered; silent otherwise"""
        patient = self.patient_repo.get_by_email(email)
        if not patient:
            logger.info(f"Password reset requested for unknown email {normalize_contact(email)}")
            return
        self._send_otp(patient.email, OtpPurpose.PASSWORD_RESET)

    def reset_password(self, email: str, code: str, new_password: str) -> None:
        _require_password_strength(new_password)
        self.otp.verify(email, OtpPurpose.PASSWORD_RESET, code)

        patient = self.patient_repo.get_by_email(email)
        if not patient:
            raise NotFoundError("Patient not found")
        patient.set_password(new_password)
        self.patient_repo.save(patient)
        logger.info(f"Password reset for patient {patient.patient_id}")

    # ==================== Phone OTP ====================

    def register_phone(
        self,
        name: str,
        phone: str,
        email: Optional[str] = None,
        gender: Optional[str] = None,
        dob: Optional[datetime] = None,
    ) -> tuple:
        patient = self.patients.create_patient(name=name, phone=phone, email=email, gender=gender, dob=dob)
        otp = self._send_otp(patient.phone, OtpPurpose.REGISTER)
        return patient, otp

    def request_otp(self, contact: str, purpose: str) -> Otp:
        if not contact or not purpose:
            raise ValidationError("Contact and purpose are required")
        otp = self.otp.issue(contact, purpose)
        self.notifier.deliver(otp.contact, otp.code, otp.purpose)
        return otp

    def verify_otp(self, contact: str, purpose: str, code: str) -> PatientSession:
        if not contact or not purpose or not code:
            raise ValidationError("Contact, OTP, and purpose are required")
        self.otp.verify(contact, purpose, code)

        patient = self.patient_repo.get_by_phone(contact) or self.patient_repo.get_by_email(contact)
        if not patient:
            raise ValidationError("Patient not found. Please register first.")
        return self._session(patient)

    # ==================== External identity provider ====================

    def external_login(self, verifier, id_token: str) -> PatientSession:
        if not id_token:
            raise ValidationError("Firebase ID token is required")
        identity = verifier.verify_external_token(id_token)
        if not identity.phone:
            raise ValidationError("Phone number not found in Firebase account")

        patient = self.patient_repo.get_by_phone(identity.phone)
        if not patient:
            raise NotFoundError("Patient not found. Please register first.")
        if patient.firebase_uid and patient.firebase_uid != identity.uid:
            raise ForbiddenError("Phone number linked to another account")
        if not patient.firebase_uid:
            patient.firebase_uid = identity.uid
            patient = self.patient_repo.save(patient)
        return self._session(patient)

    def external_register(
        self,
        verifier,
        id_token: str,
        name: str,
        email: Optional[str] = None,
        gender: Optional[str] = None,
        dob: Optional[datetime] = None,
    ) -> PatientSession:
        if not name or not id_token:
            raise ValidationError("Name and Firebase ID token are required")
        identity = verifier.verify_external_token(id_token)
        if not identity.phone:
            raise ValidationError("Phone number not found in Firebase account")

        existing = self.patient_repo.get_by_phone(identity.phone)
        if existing:
            if existing.firebase_uid == identity.uid:
                return self._session(existing)
            raise ConflictError("Phone number already registered")

        patient = self.patients.create_patient(
            name=name,
            phone=identity.phone,
            email=email or identity.email,
            gender=gender,
            dob=dob,
            firebase_uid=identity.uid,
        )
        return self._session(patient)


class AdminAuthService:
    """Service layer for operator login"""

    def __init__(self, db: Session):
        self.db = db
        self.admin_repo = AdminRepository(db)

    def login(self, username: str, password: str) -> AdminSession:
        admin = self.admin_repo.get_by_username(username)
        if not admin or not admin.verify_password(password):
            raise InvalidCredentialsError("Invalid credentials")
        return AdminSession(admin=admin, token=create_access_token(admin.id, PRINCIPAL_ADMIN))
