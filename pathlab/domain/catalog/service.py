from decimal import Decimal
from typing import Optional, List, Dict, Any

from loguru import logger
from sqlalchemy.orm import Session

from pathlab.core.exceptions import ConflictError, ValidationError, NotFoundError
from pathlab.domain.catalog.models import LabTest
from pathlab.domain.catalog.repository import LabTestRepository


class CatalogService:
    """Service layer for the test catalog"""

    def __init__(self, db: Session):
        self.db = db
        self.test_repo = LabTestRepository(db)

    def list_tests(self) -> List[LabTest]:
        return self.test_repo.get_all()

    def get_test(self, test_id: str) -> LabTest:
        test = self.test_repo.get_by_id(test_id)
        if not test:
            raise NotFoundError("Test not found")
        return test

    def create_test(
        self,
        code: str,
        name: str,
        category: str,
        price: Decimal,
        duration: str,
        parameters: Optional[List[Dict[str, Any]]] = None,
        description: Optional[str] = None,
    ) -> LabTest:
        if not code or not name:
            raise ValidationError("Code and name are required")
        if price is None or Decimal(price) < 0:
            raise ValidationError("Price must be zero or more")

        code = code.strip().upper()
        if self.test_repo.get_by_code(code):
            raise ConflictError(f"Test code {code} already exists")

        test = self.test_repo.create({
            "code": code,
            "name": name.strip(),
            "category": category,
            "price": Decimal(price),
            "duration": duration,
            "description": description,
            "parameters": parameters or [],
        })
        logger.info(f"Added catalog test {test.code}")
        return test
