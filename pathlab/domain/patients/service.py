from typing import Optional, List
from datetime import datetime

from loguru import logger
from sqlalchemy.orm import Session

from pathlab.core.config import settings
from pathlab.core.exceptions import ConflictError, ValidationError
from pathlab.domain.patients.models import Patient
from pathlab.domain.patients.repository import PatientRepository


class PatientService:
    """Service layer for the patient registry"""

    def __init__(self, db: Session):
        self.db = db
        self.patient_repo = PatientRepository(db)

    def generate_patient_id(self) -> str:
        """Human-readable id: prefix, two-digit year, six-digit sequence"""
        prefix = f"{settings.PATIENT_ID_PREFIX}{datetime.utcnow():%y}"
        sequence = self.patient_repo.count_with_patient_id_prefix(prefix) + 1
        candidate = f"{prefix}{sequence:06d}"
        while self.patient_repo.get_by_patient_id(candidate):
            sequence += 1
            candidate = f"{prefix}{sequence:06d}"
        return candidate

    def create_patient(
        self,
        name: Optional[str],
        phone: Optional[str],
        email: Optional[str] = None,
        password: Optional[str] = None,
        gender: Optional[str] = None,
        dob: Optional[datetime] = None,
        address: Optional[str] = None,
        firebase_uid: Optional[str] = None,
        email_verified: bool = False,
    ) -> Patient:
        if not name or not phone:
            raise ValidationError("Name and phone are required")

        if self.patient_repo.get_by_phone(phone):
            raise ConflictError("Phone number already registered")
        if email and self.patient_repo.get_by_email(email):
            raise ConflictError("Email already registered")

        patient = self.patient_repo.create({
            "patient_id": self.generate_patient_id(),
            "name": name.strip(),
            "phone": phone.strip(),
            "email": email.strip().lower() if email else None,
            "password": password,
            "gender": gender,
            "dob": dob,
            "address": address,
            "firebase_uid": firebase_uid,
            "email_verified": email_verified,
        })
        logger.info(f"Registered patient {patient.patient_id}")
        return patient

    def get_patient(self, patient_id: str) -> Optional[Patient]:
        return self.patient_repo.get_by_id(patient_id)

    def list_patients(self, query: Optional[str] = None) -> List[Patient]:
        if query:
            return self.patient_repo.search(query)
        return self.patient_repo.get_all()
