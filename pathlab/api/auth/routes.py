from fastapi import APIRouter, Depends, status

from pathlab.core.config import settings
from pathlab.domain.auth.service import AuthenticationService, AdminAuthService
from pathlab.api.deps import get_db, get_identity_verifier, get_otp_notifier
from pathlab.api.auth.schemas import (
    PatientResponse, AdminResponse, PatientTokenResponse, AdminTokenResponse,
    MessageResponse, RegistrationResponse,
    RequestOtpRequest, VerifyOtpRequest, RegisterRequest,
    FirebaseLoginRequest, FirebaseRegisterRequest,
    RegisterEmailRequest, LoginEmailRequest, VerifyEmailRequest,
    EmailRequest, ResetPasswordRequest, AdminLoginRequest
)

router = APIRouter(tags=["Authentication"])


def _debug_code(otp):
    return otp.code if settings.DEBUG else None


def _patient_token(session) -> PatientTokenResponse:
    return PatientTokenResponse(token=session.token, patient=PatientResponse.model_validate(session.patient))


# ==================== Phone OTP ====================

@router.post("/auth/request-otp", response_model=MessageResponse)
def request_otp(
    body: RequestOtpRequest,
    db=Depends(get_db),
    notifier=Depends(get_otp_notifier)
):
    """Send a one-time code to a phone number or email address"""
    otp = AuthenticationService(db, notifier=notifier).request_otp(body.contact, body.purpose)
    return MessageResponse(message="OTP sent successfully", debug_otp=_debug_code(otp))


@router.post("/auth/verify-otp", response_model=PatientTokenResponse)
def verify_otp(body: VerifyOtpRequest, db=Depends(get_db)):
    session = AuthenticationService(db).verify_otp(body.contact, body.purpose, body.otp)
    return _patient_token(session)


@router.post("/auth/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db=Depends(get_db),
    notifier=Depends(get_otp_notifier)
):
    """Register with a phone number; the OTP sent to it logs the patient in"""
    patient, otp = AuthenticationService(db, notifier=notifier).register_phone(
        name=body.name,
        phone=body.phone,
        email=body.email,
        gender=body.gender,
        dob=body.dob,
    )
    return RegistrationResponse(
        message="Registration successful. Please verify OTP.",
        patient=PatientResponse.model_validate(patient),
        debug_otp=_debug_code(otp),
    )


# ==================== External identity provider ====================

@router.post("/auth/firebase-login", response_model=PatientTokenResponse)
def firebase_login(
    body: FirebaseLoginRequest,
    db=Depends(get_db),
    verifier=Depends(get_identity_verifier)
):
    session = AuthenticationService(db).external_login(verifier, body.id_token)
    return _patient_token(session)


@router.post("/auth/firebase-register", response_model=PatientTokenResponse, status_code=status.HTTP_201_CREATED)
def firebase_register(
    body: FirebaseRegisterRequest,
    db=Depends(get_db),
    verifier=Depends(get_identity_verifier)
):
    session = AuthenticationService(db).external_register(
        verifier,
        id_token=body.id_token,
        name=body.name,
        email=body.email,
        gender=body.gender,
        dob=body.dob,
    )
    return _patient_token(session)


# ==================== Email / password ====================

@router.post("/auth/register-email", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
def register_email(
    body: RegisterEmailRequest,
    db=Depends(get_db),
    notifier=Depends(get_otp_notifier)
):
    """Register with email and password; the account stays unverified until the emailed code is confirmed"""
    patient, otp = AuthenticationService(db, notifier=notifier).register_email(
        name=body.name,
        email=body.email,
        phone=body.phone,
        password=body.password,
        gender=body.gender,
        dob=body.dob,
    )
    return RegistrationResponse(
        message="Registration successful. Please check your email for the verification code.",
        patient=PatientResponse.model_validate(patient),
        debug_otp=_debug_code(otp),
    )


@router.post("/auth/verify-email", response_model=PatientTokenResponse)
def verify_email(body: VerifyEmailRequest, db=Depends(get_db)):
    session = AuthenticationService(db).verify_email(body.email, body.otp)
    return _patient_token(session)


@router.post("/auth/resend-verification", response_model=MessageResponse)
def resend_verification(
    body: EmailRequest,
    db=Depends(get_db),
    notifier=Depends(get_otp_notifier)
):
    otp = AuthenticationService(db, notifier=notifier).resend_verification(body.email)
    return MessageResponse(message="Verification code sent", debug_otp=_debug_code(otp))


@router.post("/auth/login-email", response_model=PatientTokenResponse)
def login_email(body: LoginEmailRequest, db=Depends(get_db)):
    session = AuthenticationService(db).login_email(body.email, body.password)
    return _patient_token(session)


@router.post("/auth/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: EmailRequest,
    db=Depends(get_db),
    notifier=Depends(get_otp_notifier)
):
    """Same response whether or not the email is registered"""
    AuthenticationService(db, notifier=notifier).forgot_password(body.email)
    return MessageResponse(message="If this email is registered, a password reset code has been sent.")


@router.post("/auth/reset-password", response_model=MessageResponse)
def reset_password(body: ResetPasswordRequest, db=Depends(get_db)):
    AuthenticationService(db).reset_password(body.email, body.otp, body.new_password)
    return MessageResponse(message="Password reset successful. You can now log in.")


# ==================== Admin ====================

@router.post("/admin/login", response_model=AdminTokenResponse)
def admin_login(body: AdminLoginRequest, db=Depends(get_db)):
    session = AdminAuthService(db).login(body.username, body.password)
    return AdminTokenResponse(token=session.token, admin=AdminResponse.model_validate(session.admin))
