from typing import List

from fastapi import APIRouter, Depends, status

from pathlab.domain.reviews.service import ReviewService
from pathlab.api.deps import Principal, get_db, require_admin
from pathlab.api.reviews.schemas import (
    ReviewCreate, ReviewApproval, ReviewResponse, ReviewSubmitted, DeletedResponse,
)

router = APIRouter(tags=["Reviews"])


@router.get("/reviews", response_model=List[ReviewResponse])
def list_approved_reviews(db=Depends(get_db)):
    """Approved reviews for the public site"""
    return ReviewService(db).list_approved()


@router.post("/reviews", response_model=ReviewSubmitted, status_code=status.HTTP_201_CREATED)
def submit_review(body: ReviewCreate, db=Depends(get_db)):
    review = ReviewService(db).submit_review(
        name=body.name,
        location=body.location,
        rating=body.rating,
        review=body.review,
    )
    return ReviewSubmitted(
        message="Review submitted successfully. It will appear after approval.",
        review=ReviewResponse.model_validate(review),
    )


# ==================== Moderation ====================

@router.get("/admin/reviews", response_model=List[ReviewResponse])
def list_all_reviews(
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    return ReviewService(db).list_all()


@router.patch("/admin/reviews/{review_id}/approve", response_model=ReviewResponse)
def set_review_approval(
    review_id: str,
    body: ReviewApproval,
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    return ReviewService(db).set_approval(review_id, body.is_approved)


@router.delete("/admin/reviews/{review_id}", response_model=DeletedResponse)
def delete_review(
    review_id: str,
    db=Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    ReviewService(db).delete_review(review_id)
    return DeletedResponse(message="Review deleted successfully")
