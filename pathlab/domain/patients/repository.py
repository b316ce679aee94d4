from typing import Optional, List
from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from pathlab.domain.patients.models import Patient


class PatientRepository:
    """Repository for patient data access operations"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, patient_data: dict) -> Patient:
        """Create a new patient"""
        password = patient_data.pop("password", None)
        patient = Patient(**patient_data)
        if password:
            patient.set_password(password)
        self.db.add(patient)
        self.db.commit()
        self.db.refresh(patient)
        return patient

    def get_by_id(self, patient_id: str) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.id == patient_id).first()

    def get_by_email(self, email: str) -> Optional[Patient]:
        return self.db.query(Patient).filter(
            func.lower(Patient.email) == email.strip().lower()
        ).first()

    def get_by_phone(self, phone: str) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.phone == phone.strip()).first()

    def get_by_patient_id(self, patient_id: str) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.patient_id == patient_id).first()

    def get_all(self, skip: int = 0, limit: int = 100) -> List[Patient]:
        return self.db.query(Patient).order_by(
            Patient.created_at.desc()
        ).offset(skip).limit(limit).all()

    def search(self, query: str, limit: int = 50) -> List[Patient]:
        """Search by name, phone, email, or patient id"""
        pattern = f"%{query.strip()}%"
        return self.db.query(Patient).filter(
            or_(
                Patient.name.ilike(pattern),
                Patient.phone.ilike(pattern),
                Patient.email.ilike(pattern),
                Patient.patient_id.ilike(pattern),
            )
        ).order_by(Patient.created_at.desc()).limit(limit).all()

    def count(self) -> int:
        return self.db.query(func.count(Patient.id)).scalar() or 0

    def count_with_patient_id_prefix(self, prefix: str) -> int:
        return self.db.query(func.count(Patient.id)).filter(
            Patient.patient_id.like(f"{prefix}%")
        ).scalar() or 0

    def save(self, patient: Patient) -> Patient:
        self.db.add(patient)
        self.db.commit()
        self.db.refresh(patient)
        return patient
