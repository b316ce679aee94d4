from pydantic import BaseModel, EmailStr
from typing import Optional


class PatientCreate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    gender: Optional[str] = None
    address: Optional[str] = None


class DashboardStats(BaseModel):
    total_patients: int
    total_bookings: int
    pending_bookings: int
    payments_awaiting_verification: int
    total_reports: int
    total_tests: int
