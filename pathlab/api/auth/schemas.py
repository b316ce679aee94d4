from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class PatientResponse(BaseModel):
    """Patient data returned to clients; never includes credentials"""
    id: str
    patient_id: str
    name: str
    email: Optional[str] = None
    phone: str
    email_verified: bool
    gender: Optional[str] = None
    dob: Optional[datetime] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminResponse(BaseModel):
    id: str
    username: str
    name: str
    role: str

    class Config:
        from_attributes = True


class PatientTokenResponse(BaseModel):
    token: str
    patient: PatientResponse


class AdminTokenResponse(BaseModel):
    token: str
    admin: AdminResponse


class MessageResponse(BaseModel):
    message: str
    # Only populated when DEBUG is on
    debug_otp: Optional[str] = None


class RegistrationResponse(MessageResponse):
    patient: PatientResponse


# ==================== Phone OTP ====================

class RequestOtpRequest(BaseModel):
    contact: Optional[str] = None
    purpose: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    contact: Optional[str] = None
    otp: Optional[str] = None
    purpose: Optional[str] = None


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    gender: Optional[str] = None
    dob: Optional[datetime] = None


# ==================== External identity provider ====================

class FirebaseLoginRequest(BaseModel):
    id_token: Optional[str] = None


class FirebaseRegisterRequest(BaseModel):
    id_token: Optional[str] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    gender: Optional[str] = None
    dob: Optional[datetime] = None


# ==================== Email / password ====================

class RegisterEmailRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[datetime] = None


class LoginEmailRequest(BaseModel):
    email: str
    password: str


class VerifyEmailRequest(BaseModel):
    email: str
    otp: str = Field(..., min_length=1)


class EmailRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    email: str
    otp: str
    new_password: str


class AdminLoginRequest(BaseModel):
    username: str
    password: str
