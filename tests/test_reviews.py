import pytest

from pathlab.domain.reviews.models import Review
from pathlab.domain.reviews.repository import ReviewRepository


@pytest.fixture
def make_review(db_session):
    def _make(is_approved=False, name="Meera", rating=5):
        return ReviewRepository(db_session).create({
            "name": name,
            "location": "Pune",
            "rating": rating,
            "review": "Quick home collection and clear report.",
            "is_approved": is_approved,
        })

    return _make


def review_body(**overrides) -> dict:
    body = {"name": "Meera", "location": "Pune", "rating": 4, "review": "Friendly phlebotomist."}
    body.update(overrides)
    return body


@pytest.mark.content
@pytest.mark.integration
class TestReviewSubmission:
    """POST /api/reviews"""

    def test_submitted_review_awaits_approval(self, client, db_session) -> None:
        response = client.post("/api/reviews", json=review_body())

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Review submitted successfully. It will appear after approval."
        assert data["review"]["is_approved"] is False
        assert data["review"]["rating"] == 4
        assert client.get("/api/reviews").json() == []

    @pytest.mark.parametrize("missing", ["name", "location", "rating", "review"])
    def test_all_fields_required(self, client, db_session, missing) -> None:
        body = review_body()
        body.pop(missing)

        response = client.post("/api/reviews", json=body)

        assert response.status_code == 400
        assert response.json()["message"] == "All fields are required"
        assert db_session.query(Review).count() == 0

    def test_blank_name_counts_as_missing(self, client) -> None:
        response = client.post("/api/reviews", json=review_body(name="   "))

        assert response.status_code == 400
        assert response.json()["message"] == "All fields are required"

    @pytest.mark.parametrize("rating", [6, -1])
    def test_rating_out_of_range(self, client, rating) -> None:
        response = client.post("/api/reviews", json=review_body(rating=rating))

        assert response.status_code == 400
        assert response.json()["message"] == "Rating must be between 1 and 5"

    def test_client_cannot_self_approve(self, client) -> None:
        response = client.post("/api/reviews", json=review_body(is_approved=True))

        assert response.status_code == 201
        assert response.json()["review"]["is_approved"] is False


@pytest.mark.content
@pytest.mark.integration
class TestReviewModeration:
    """/api/admin/reviews"""

    def test_public_list_shows_only_approved(self, client, make_review) -> None:
        approved = make_review(is_approved=True)
        make_review(is_approved=False, name="Ravi")

        reviews = client.get("/api/reviews").json()

        assert [r["id"] for r in reviews] == [approved.id]

    def test_admin_sees_every_review(self, client, admin_headers, make_review) -> None:
        make_review(is_approved=True)
        make_review(is_approved=False, name="Ravi")

        response = client.get("/api/admin/reviews", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_approve_then_hide(self, client, admin_headers, make_review) -> None:
        review = make_review()
        url = f"/api/admin/reviews/{review.id}/approve"

        approved = client.patch(url, json={"is_approved": True}, headers=admin_headers)
        assert approved.status_code == 200
        assert approved.json()["is_approved"] is True
        assert [r["id"] for r in client.get("/api/reviews").json()] == [review.id]

        hidden = client.patch(url, json={"is_approved": False}, headers=admin_headers)
        assert hidden.json()["is_approved"] is False
        assert client.get("/api/reviews").json() == []

    def test_approval_flag_required(self, client, admin_headers, make_review) -> None:
        review = make_review()

        response = client.patch(f"/api/admin/reviews/{review.id}/approve", json={}, headers=admin_headers)

        assert response.status_code == 400

    def test_approve_unknown_review(self, client, admin_headers) -> None:
        response = client.patch("/api/admin/reviews/missing/approve", json={"is_approved": True}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Review not found"

    def test_delete_review(self, client, db_session, admin_headers, make_review) -> None:
        review = make_review(is_approved=True)

        response = client.delete(f"/api/admin/reviews/{review.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Review deleted successfully"}
        assert db_session.query(Review).count() == 0

    def test_delete_unknown_review(self, client, admin_headers) -> None:
        assert client.delete("/api/admin/reviews/missing", headers=admin_headers).status_code == 404

    def test_requires_admin(self, client, patient_headers, make_review) -> None:
        review = make_review()
        url = f"/api/admin/reviews/{review.id}/approve"

        assert client.get("/api/admin/reviews").status_code == 401
        assert client.patch(url, json={"is_approved": True}, headers=patient_headers).status_code == 403
        assert client.delete(f"/api/admin/reviews/{review.id}", headers=patient_headers).status_code == 403
