from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from pathlab.domain.dashboard.service import DashboardService
from pathlab.domain.patients.service import PatientService
from pathlab.api.deps import Principal, get_db, require_admin
from pathlab.api.auth.schemas import PatientResponse
from pathlab.api.admin.schemas import PatientCreate, DashboardStats

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    return DashboardService(db).get_stats()


@router.get("/patients", response_model=List[PatientResponse])
def list_patients(
    q: Optional[str] = Query(None, description="Search name, phone, email or patient id"),
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    return PatientService(db).list_patients(q)


@router.post("/patients", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(
    body: PatientCreate,
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    """Register a walk-in patient without credentials"""
    return PatientService(db).create_patient(
        name=body.name,
        phone=body.phone,
        email=body.email,
        gender=body.gender,
        address=body.address,
    )
