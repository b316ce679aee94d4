from typing import Optional, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from pathlab.domain.lab.models import Result, Report


class LabRepository:
    def __init__(self, db: Session):
        self.db = db

    def add_result(self, result_data: dict) -> Result:
        result = Result(**result_data)
        self.db.add(result)
        self.db.flush()
        return result

    def add_report(self, report_data: dict) -> Report:
        report = Report(**report_data)
        self.db.add(report)
        self.db.flush()
        return report

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def get_report(self, report_id: str) -> Optional[Report]:
        return self.db.query(Report).filter(Report.id == report_id).first()

    def get_report_by_token(self, token: str) -> Optional[Report]:
        return self.db.query(Report).filter(Report.secure_download_token == token).first()

    def get_reports_by_patient(self, patient_id: str) -> List[Report]:
        return self.db.query(Report).filter(
            Report.patient_id == patient_id
        ).order_by(Report.generated_at.desc()).all()

    def get_all_reports(self, skip: int = 0, limit: int = 200) -> List[Report]:
        return self.db.query(Report).order_by(
            Report.generated_at.desc()
        ).offset(skip).limit(limit).all()

    def count_reports(self) -> int:
        return self.db.query(func.count(Report.id)).scalar() or 0
