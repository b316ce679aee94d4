from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Union
from datetime import datetime

from pathlab.api.auth.schemas import PatientResponse
from pathlab.api.catalog.schemas import LabTestSummary


class ParameterResult(BaseModel):
    parameter_name: str
    value: str
    unit: str = ""
    normal_range: str = ""
    # Computed from the normal range when omitted
    is_abnormal: Optional[bool] = None

    @field_validator("value", mode="before")
    @classmethod
    def stringify_numeric_value(cls, v: Union[str, int, float]) -> str:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class ReportGenerateRequest(BaseModel):
    patient_id: Optional[str] = None
    test_id: Optional[str] = None
    technician: Optional[str] = None
    referred_by: Optional[str] = None
    collected_at: Optional[datetime] = None
    booking_id: Optional[str] = None
    parameter_results: Optional[List[ParameterResult]] = None


class ResultResponse(BaseModel):
    id: str
    patient_id: str
    test_id: str
    parameter_results: List[ParameterResult]
    technician: str
    referred_by: Optional[str] = None
    collected_at: datetime

    class Config:
        from_attributes = True


class ReportResponse(BaseModel):
    id: str
    patient_id: str
    result_id: str
    booking_id: Optional[str] = None
    pdf_path: Optional[str] = None
    secure_download_token: str
    generated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReportGenerateResponse(BaseModel):
    report: ReportResponse
    result: ResultResponse
    download_url: str


class PatientReportResponse(BaseModel):
    """Listing entry; the token is withheld until the booking's payment settles"""
    id: str
    result_id: str
    booking_id: Optional[str] = None
    generated_at: Optional[datetime] = None
    test: Optional[LabTestSummary] = None
    secure_download_token: Optional[str] = None
    payment_verified: bool
    payment_status: str
    booking_match: Optional[str] = Field(None, description="linked, test_id or null")
    matched_booking_id: Optional[str] = None


class AdminReportResponse(ReportResponse):
    patient: Optional[PatientResponse] = None
    test: Optional[LabTestSummary] = None
