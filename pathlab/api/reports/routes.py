from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse, HTMLResponse

from pathlab.domain.lab.access import ReportAccessGate
from pathlab.domain.lab.rendering import render_report_html, stored_artifact
from pathlab.domain.lab.service import ReportService
from pathlab.api.deps import Principal, get_db, require_admin, require_patient
from pathlab.api.catalog.schemas import LabTestSummary
from pathlab.api.reports.schemas import (
    ReportGenerateRequest, ReportGenerateResponse, ReportResponse, ResultResponse,
    PatientReportResponse, AdminReportResponse
)

router = APIRouter(tags=["Reports"])


def _test_of(report):
    if report.result is None or report.result.test is None:
        return None
    return LabTestSummary.model_validate(report.result.test)


@router.get("/reports/download/{token}")
def download_report(token: str, db=Depends(get_db)):
    """The token is the only credential; payment is re-checked on every download"""
    report = ReportAccessGate(db).authorize_download(token)
    artifact = stored_artifact(report)
    if artifact is not None:
        return FileResponse(artifact, filename=artifact.name)
    return HTMLResponse(render_report_html(report))


@router.get("/patient/reports", response_model=List[PatientReportResponse])
def list_my_reports(
    db=Depends(get_db),
    principal: Principal = Depends(require_patient)
):
    listings = ReportAccessGate(db).list_patient_reports(principal.id)
    return [
        PatientReportResponse(
            id=entry.report.id,
            result_id=entry.report.result_id,
            booking_id=entry.report.booking_id,
            generated_at=entry.report.generated_at,
            test=_test_of(entry.report),
            secure_download_token=entry.secure_download_token,
            payment_verified=entry.released,
            payment_status=entry.payment_status,
            booking_match=entry.booking_match,
            matched_booking_id=entry.booking.id if entry.booking else None,
        )
        for entry in listings
    ]


# ==================== Admin Endpoints ====================

@router.get("/admin/reports", response_model=List[AdminReportResponse])
def list_all_reports(
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    reports = ReportService(db).list_all_reports()
    items = []
    for report in reports:
        item = AdminReportResponse.model_validate(report)
        item.test = _test_of(report)
        items.append(item)
    return items


@router.post("/admin/reports/generate", response_model=ReportGenerateResponse, status_code=status.HTTP_201_CREATED)
def generate_report(
    body: ReportGenerateRequest,
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    """Record a result and issue its report"""
    issued = ReportService(db).generate_report(
        patient_id=body.patient_id,
        test_id=body.test_id,
        technician=body.technician,
        parameter_results=[p.model_dump() for p in body.parameter_results or []],
        collected_at=body.collected_at,
        referred_by=body.referred_by,
        booking_id=body.booking_id,
    )
    return ReportGenerateResponse(
        report=ReportResponse.model_validate(issued.report),
        result=ResultResponse.model_validate(issued.result),
        download_url=issued.download_url,
    )
