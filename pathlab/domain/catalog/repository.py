from typing import Optional, List, Iterable
from sqlalchemy import func
from sqlalchemy.orm import Session

from pathlab.domain.catalog.models import LabTest


class LabTestRepository:
    """Repository for catalog tests"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, test_data: dict) -> LabTest:
        test = LabTest(**test_data)
        self.db.add(test)
        self.db.commit()
        self.db.refresh(test)
        return test

    def get_by_id(self, test_id: str) -> Optional[LabTest]:
        return self.db.query(LabTest).filter(LabTest.id == test_id).first()

    def get_by_code(self, code: str) -> Optional[LabTest]:
        return self.db.query(LabTest).filter(LabTest.code == code).first()

    def get_many(self, test_ids: Iterable[str]) -> List[LabTest]:
        test_ids = list(test_ids)
        if not test_ids:
            return []
        return self.db.query(LabTest).filter(LabTest.id.in_(test_ids)).all()

    def get_all(self) -> List[LabTest]:
        return self.db.query(LabTest).order_by(LabTest.name).all()

    def count(self) -> int:
        return self.db.query(func.count(LabTest.id)).scalar() or 0
