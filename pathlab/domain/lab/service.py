from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Dict, Any

from loguru import logger
from sqlalchemy.orm import Session

from pathlab.core.config import settings
from pathlab.core.exceptions import ValidationError, NotFoundError
from pathlab.core.security import generate_download_token
from pathlab.domain.bookings.repository import BookingRepository
from pathlab.domain.catalog.repository import LabTestRepository
from pathlab.domain.lab.models import Result, Report
from pathlab.domain.lab.ranges import is_value_abnormal
from pathlab.domain.lab.repository import LabRepository
from pathlab.domain.patients.repository import PatientRepository


def download_url(token: str) -> str:
    return f"{settings.API_PREFIX}/reports/download/{token}"


@dataclass
class IssuedReport:
    result: Result
    report: Report
    download_url: str


class ReportService:
    """Records lab results and issues their reports"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = LabRepository(db)
        self.patient_repo = PatientRepository(db)
        self.test_repo = LabTestRepository(db)
        self.booking_repo = BookingRepository(db)

    def _normalize_parameters(self, parameter_results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        normalized = []
        for item in parameter_results:
            entry = {
                "parameter_name": item.get("parameter_name"),
                "value": "" if item.get("value") is None else str(item.get("value")),
                "unit": item.get("unit") or "",
                "normal_range": item.get("normal_range") or "",
                "is_abnormal": item.get("is_abnormal"),
            }
            if not entry["parameter_name"]:
                raise ValidationError("Each parameter result needs a parameter name")
            # Flags entered at the bench are kept; only missing ones are computed
            if entry["is_abnormal"] is None:
                entry["is_abnormal"] = is_value_abnormal(entry["value"], entry["normal_range"])
            normalized.append(entry)
        return normalized

    def _unused_token(self) -> str:
        token = generate_download_token()
        while self.repo.get_report_by_token(token):
            token = generate_download_token()
        return token

    def generate_report(
        self,
        patient_id: Optional[str],
        test_id: Optional[str],
        technician: Optional[str],
        parameter_results: Optional[List[Dict[str, Any]]],
        collected_at: Optional[datetime] = None,
        referred_by: Optional[str] = None,
        booking_id: Optional[str] = None,
    ) -> IssuedReport:
        """Persist one result and mint exactly one report for it"""
        if not patient_id or not test_id or not technician or not parameter_results:
            raise ValidationError("Missing required fields")

        if not self.patient_repo.get_by_id(patient_id):
            raise NotFoundError("Patient not found")
        if not self.test_repo.get_by_id(test_id):
            raise NotFoundError("Test not found")

        if booking_id:
            booking = self.booking_repo.get_by_id(booking_id)
            if not booking or booking.patient_id != patient_id:
                raise ValidationError("Booking does not belong to this patient")

        parameters = self._normalize_parameters(parameter_results)

        try:
            result = self.repo.add_result({
                "patient_id": patient_id,
                "test_id": test_id,
                "technician": technician,
                "referred_by": referred_by or None,
                "collected_at": collected_at or datetime.utcnow(),
                "parameter_results": parameters,
            })
            report = self.repo.add_report({
                "patient_id": patient_id,
                "result_id": result.id,
                "booking_id": booking_id or None,
                "pdf_path": None,
                "secure_download_token": self._unused_token(),
            })
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.db.refresh(result)
        self.db.refresh(report)
        logger.info(
            f"Issued report {report.id} for patient {patient_id}"
            + (f" linked to booking {booking_id}" if booking_id else " without booking link")
        )
        return IssuedReport(result=result, report=report, download_url=download_url(report.secure_download_token))

    def list_all_reports(self) -> List[Report]:
        return self.repo.get_all_reports()
