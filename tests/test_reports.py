import pytest

from pathlab.core.config import settings
from pathlab.domain.lab.service import ReportService


@pytest.fixture
def issue_report(db_session, test_patient, blood_sugar_test):
    """Issue a fasting glucose report, optionally linked to a booking."""

    def _issue(booking=None, value="101", patient=None, test=None):
        return ReportService(db_session).generate_report(
            patient_id=(patient or test_patient).id,
            test_id=(test or blood_sugar_test).id,
            technician="R. Iyer",
            parameter_results=[{
                "parameter_name": "Fasting Blood Glucose",
                "value": value,
                "unit": "mg/dL",
                "normal_range": "70-100",
            }],
            booking_id=booking.id if booking else None,
        )

    return _issue


def set_payment_status(db_session, booking, payment_status):
    booking.payment_status = payment_status
    db_session.commit()


@pytest.mark.reports
@pytest.mark.integration
class TestReportGeneration:
    """POST /api/admin/reports/generate"""

    def test_generates_result_and_report(self, client, admin_headers, test_patient, blood_sugar_test) -> None:
        response = client.post("/api/admin/reports/generate", headers=admin_headers, json={
            "patient_id": test_patient.id,
            "test_id": blood_sugar_test.id,
            "technician": "R. Iyer",
            "referred_by": "Dr. Mehta",
            "collected_at": "2026-11-02T08:00:00",
            "parameter_results": [
                {"parameter_name": "Fasting Blood Glucose", "value": "101", "unit": "mg/dL", "normal_range": "70-100"},
            ],
        })

        assert response.status_code == 201
        data = response.json()
        token = data["report"]["secure_download_token"]
        assert len(token) == 64
        int(token, 16)
        assert data["download_url"] == f"/api/reports/download/{token}"
        assert data["report"]["booking_id"] is None
        assert data["result"]["referred_by"] == "Dr. Mehta"
        assert data["result"]["parameter_results"][0]["is_abnormal"] is True

    def test_supplied_abnormal_flag_is_kept(self, client, admin_headers, test_patient, blood_sugar_test) -> None:
        response = client.post("/api/admin/reports/generate", headers=admin_headers, json={
            "patient_id": test_patient.id,
            "test_id": blood_sugar_test.id,
            "technician": "R. Iyer",
            "parameter_results": [
                {"parameter_name": "Fasting Blood Glucose", "value": "85", "normal_range": "70-100", "is_abnormal": True},
            ],
        })

        assert response.status_code == 201
        result = response.json()["result"]
        assert result["parameter_results"][0]["is_abnormal"] is True
        assert result["collected_at"] is not None

    def test_numeric_values_are_accepted(self, client, admin_headers, test_patient, blood_sugar_test) -> None:
        response = client.post("/api/admin/reports/generate", headers=admin_headers, json={
            "patient_id": test_patient.id,
            "test_id": blood_sugar_test.id,
            "technician": "R. Iyer",
            "parameter_results": [
                {"parameter_name": "Fasting Blood Glucose", "value": 101, "unit": "mg/dL", "normal_range": "70-100"},
                {"parameter_name": "Post-prandial Glucose", "value": 92.5, "normal_range": "70-140"},
            ],
        })

        assert response.status_code == 201
        fasting, post_prandial = response.json()["result"]["parameter_results"]
        assert fasting["value"] == "101"
        assert fasting["is_abnormal"] is True
        assert post_prandial["value"] == "92.5"
        assert post_prandial["is_abnormal"] is False

    def test_tokens_are_unique(self, issue_report) -> None:
        tokens = {issue_report().report.secure_download_token for _ in range(5)}
        assert len(tokens) == 5

    @pytest.mark.parametrize("missing", ["patient_id", "test_id", "technician", "parameter_results"])
    def test_missing_required_field(
        self, client, admin_headers, test_patient, blood_sugar_test, missing
    ) -> None:
        body = {
            "patient_id": test_patient.id,
            "test_id": blood_sugar_test.id,
            "technician": "R. Iyer",
            "parameter_results": [{"parameter_name": "Fasting Blood Glucose", "value": "90"}],
        }
        body.pop(missing)

        response = client.post("/api/admin/reports/generate", headers=admin_headers, json=body)

        assert response.status_code == 400

    def test_unknown_patient(self, client, admin_headers, blood_sugar_test) -> None:
        response = client.post("/api/admin/reports/generate", headers=admin_headers, json={
            "patient_id": "nobody",
            "test_id": blood_sugar_test.id,
            "technician": "R. Iyer",
            "parameter_results": [{"parameter_name": "Fasting Blood Glucose", "value": "90"}],
        })

        assert response.status_code == 404

    def test_booking_must_belong_to_patient(
        self, client, admin_headers, make_booking, test_patient, other_patient, blood_sugar_test
    ) -> None:
        foreign_booking = make_booking(other_patient, [blood_sugar_test])

        response = client.post("/api/admin/reports/generate", headers=admin_headers, json={
            "patient_id": test_patient.id,
            "test_id": blood_sugar_test.id,
            "booking_id": foreign_booking.id,
            "technician": "R. Iyer",
            "parameter_results": [{"parameter_name": "Fasting Blood Glucose", "value": "90"}],
        })

        assert response.status_code == 400

    def test_requires_admin(self, client, patient_headers, test_patient, blood_sugar_test) -> None:
        response = client.post("/api/admin/reports/generate", headers=patient_headers, json={
            "patient_id": test_patient.id,
            "test_id": blood_sugar_test.id,
            "technician": "R. Iyer",
            "parameter_results": [{"parameter_name": "Fasting Blood Glucose", "value": "90"}],
        })

        assert response.status_code == 403


@pytest.mark.reports
@pytest.mark.integration
class TestReportDownloadGate:
    """GET /api/reports/download/{token} and GET /api/patient/reports"""

    def test_unpaid_linked_report_is_withheld_until_verified(
        self, client, db_session, make_booking, test_patient, blood_sugar_test, issue_report, patient_headers
    ) -> None:
        booking = make_booking(test_patient, [blood_sugar_test], payment_status="pending")
        token = issue_report(booking=booking).report.secure_download_token

        refused = client.get(f"/api/reports/download/{token}")
        assert refused.status_code == 403
        assert refused.json()["error_code"] == "PAYMENT_REQUIRED"

        listing = client.get("/api/patient/reports", headers=patient_headers).json()
        assert listing[0]["secure_download_token"] is None
        assert listing[0]["payment_verified"] is False
        assert listing[0]["payment_status"] == "pending"
        assert listing[0]["booking_match"] == "linked"

        set_payment_status(db_session, booking, "verified")

        allowed = client.get(f"/api/reports/download/{token}")
        assert allowed.status_code == 200
        assert allowed.headers["content-type"].startswith("text/html")

        listing = client.get("/api/patient/reports", headers=patient_headers).json()
        assert listing[0]["secure_download_token"] == token
        assert listing[0]["payment_verified"] is True

    def test_admin_verification_releases_report(
        self, client, make_booking, test_patient, blood_sugar_test, issue_report, admin_headers
    ) -> None:
        booking = make_booking(test_patient, [blood_sugar_test], payment_status="paid_unverified")
        token = issue_report(booking=booking).report.secure_download_token

        assert client.get(f"/api/reports/download/{token}").status_code == 403
        assert client.patch(f"/api/admin/bookings/{booking.id}/verify-payment", headers=admin_headers).status_code == 200
        assert client.get(f"/api/reports/download/{token}").status_code == 200

    @pytest.mark.parametrize("payment_status", ["cash_on_delivery", "pay_at_lab"])
    def test_deferred_payment_releases_report(
        self, client, make_booking, test_patient, blood_sugar_test, issue_report, payment_status
    ) -> None:
        booking = make_booking(test_patient, [blood_sugar_test], payment_status=payment_status)
        token = issue_report(booking=booking).report.secure_download_token

        assert client.get(f"/api/reports/download/{token}").status_code == 200

    def test_legacy_report_downloads_regardless_of_bookings(
        self, client, make_booking, test_patient, blood_sugar_test, lipid_test, issue_report, patient_headers
    ) -> None:
        make_booking(test_patient, [lipid_test], payment_status="pending")
        token = issue_report().report.secure_download_token

        assert client.get(f"/api/reports/download/{token}").status_code == 200

        entry = client.get("/api/patient/reports", headers=patient_headers).json()[0]
        assert entry["secure_download_token"] == token
        assert entry["booking_match"] is None
        assert entry["matched_booking_id"] is None

    def test_test_id_fallback_is_a_heuristic(
        self, client, make_booking, test_patient, blood_sugar_test, issue_report, patient_headers
    ) -> None:
        # Unlinked report matched to an unpaid booking for the same test: the listing
        # hides the token, but the download only honours an explicit link.
        booking = make_booking(test_patient, [blood_sugar_test], payment_status="pending")
        token = issue_report().report.secure_download_token

        entry = client.get("/api/patient/reports", headers=patient_headers).json()[0]
        assert entry["booking_match"] == "test_id"
        assert entry["matched_booking_id"] == booking.id
        assert entry["secure_download_token"] is None

        assert client.get(f"/api/reports/download/{token}").status_code == 200

    def test_fallback_prefers_newest_booking_for_the_test(
        self, client, make_booking, test_patient, blood_sugar_test, issue_report, patient_headers
    ) -> None:
        make_booking(test_patient, [blood_sugar_test], payment_status="pending")
        newer = make_booking(test_patient, [blood_sugar_test], payment_status="verified")
        token = issue_report().report.secure_download_token

        entry = client.get("/api/patient/reports", headers=patient_headers).json()[0]
        assert entry["booking_match"] == "test_id"
        assert entry["matched_booking_id"] == newer.id
        assert entry["secure_download_token"] == token

    def test_fallback_can_be_disabled(
        self, client, make_booking, test_patient, blood_sugar_test, issue_report, patient_headers, monkeypatch
    ) -> None:
        monkeypatch.setattr(settings, "REPORT_BOOKING_FALLBACK_MATCH", False)
        make_booking(test_patient, [blood_sugar_test], payment_status="pending")
        token = issue_report().report.secure_download_token

        entry = client.get("/api/patient/reports", headers=patient_headers).json()[0]
        assert entry["booking_match"] is None
        assert entry["secure_download_token"] == token

    def test_missing_linked_booking_refuses_download(
        self, client, db_session, make_booking, test_patient, blood_sugar_test, issue_report, patient_headers
    ) -> None:
        booking = make_booking(test_patient, [blood_sugar_test], payment_status="verified")
        token = issue_report(booking=booking).report.secure_download_token
        db_session.delete(booking)
        db_session.commit()

        response = client.get(f"/api/reports/download/{token}")
        assert response.status_code == 403
        assert response.json()["message"] == "Unable to verify payment status. Please contact support."

        entry = client.get("/api/patient/reports", headers=patient_headers).json()[0]
        assert entry["secure_download_token"] is None

    def test_unknown_token(self, client) -> None:
        assert client.get("/api/reports/download/deadbeef").status_code == 404

    def test_other_patients_reports_not_listed(
        self, client, issue_report, other_patient, other_patient_headers
    ) -> None:
        issue_report()

        assert client.get("/api/patient/reports", headers=other_patient_headers).json() == []

    def test_rendered_report_content(self, client, test_patient, issue_report) -> None:
        token = issue_report(value="101").report.secure_download_token

        body = client.get(f"/api/reports/download/{token}").text

        assert test_patient.patient_id in body
        assert "Asha Rao" in body
        assert "Blood Sugar Fasting" in body
        assert "Fasting Blood Glucose" in body
        assert "Abnormal" in body

    def test_stored_artifact_is_served(self, client, db_session, issue_report, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr(settings, "REPORTS_DIR", str(tmp_path))
        (tmp_path / "report-1.pdf").write_bytes(b"%PDF-1.4 test")
        report = issue_report().report
        report.pdf_path = "report-1.pdf"
        db_session.commit()

        response = client.get(f"/api/reports/download/{report.secure_download_token}")

        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 test"

    def test_artifact_outside_reports_dir_is_ignored(
        self, client, db_session, issue_report, tmp_path, monkeypatch
    ) -> None:
        reports_dir = tmp_path / "reports"
        reports_dir.mkdir()
        (tmp_path / "secret.txt").write_text("do not serve")
        monkeypatch.setattr(settings, "REPORTS_DIR", str(reports_dir))
        report = issue_report().report
        report.pdf_path = "../secret.txt"
        db_session.commit()

        response = client.get(f"/api/reports/download/{report.secure_download_token}")

        assert response.status_code == 200
        assert "do not serve" not in response.text
        assert response.headers["content-type"].startswith("text/html")


@pytest.mark.reports
@pytest.mark.integration
class TestAdminReportListing:

    def test_lists_reports_with_patient_and_test(self, client, admin_headers, issue_report, test_patient) -> None:
        issued = issue_report()

        response = client.get("/api/admin/reports", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data[0]["id"] == issued.report.id
        assert data[0]["patient"]["patient_id"] == test_patient.patient_id
        assert data[0]["test"]["code"] == "BSF"
