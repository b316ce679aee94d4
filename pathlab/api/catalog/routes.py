from typing import List

from fastapi import APIRouter, Depends, status

from pathlab.domain.catalog.service import CatalogService
from pathlab.api.deps import get_db, require_admin
from pathlab.api.catalog.schemas import LabTestCreate, LabTestResponse

router = APIRouter(tags=["Catalog"])


@router.get("/tests", response_model=List[LabTestResponse])
def list_tests(db=Depends(get_db)):
    """Public test catalog"""
    return CatalogService(db).list_tests()


@router.post("/admin/tests", response_model=LabTestResponse, status_code=status.HTTP_201_CREATED)
def create_test(
    test_in: LabTestCreate,
    db=Depends(get_db),
    admin=Depends(require_admin)
):
    return CatalogService(db).create_test(
        code=test_in.code,
        name=test_in.name,
        category=test_in.category,
        price=test_in.price,
        duration=test_in.duration,
        description=test_in.description,
        parameters=[p.model_dump() for p in test_in.parameters],
    )
