from typing import Optional, List

from loguru import logger
from sqlalchemy.orm import Session

from pathlab.core.exceptions import ValidationError, NotFoundError
from pathlab.domain.reviews.models import Review
from pathlab.domain.reviews.repository import ReviewRepository

MIN_RATING = 1
MAX_RATING = 5


class ReviewService:
    """Public review submission and admin moderation"""

    def __init__(self, db: Session):
        self.db = db
        self.review_repo = ReviewRepository(db)

    def list_approved(self) -> List[Review]:
        return self.review_repo.get_approved()

    def list_all(self) -> List[Review]:
        return self.review_repo.get_all()

    def submit_review(
        self,
        name: Optional[str],
        location: Optional[str],
        rating: Optional[int],
        review: Optional[str],
    ) -> Review:
        """Store a review; it stays unapproved until an admin approves it"""
        name = (name or "").strip()
        location = (location or "").strip()
        review = (review or "").strip()
        if not name or not location or not rating or not review:
            raise ValidationError("All fields are required")
        if rating < MIN_RATING or rating > MAX_RATING:
            raise ValidationError("Rating must be between 1 and 5")

        created = self.review_repo.create({
            "name": name,
            "location": location,
            "rating": rating,
            "review": review,
            "is_approved": False,
        })
        logger.info(f"Review {created.id} submitted, awaiting approval")
        return created

    def set_approval(self, review_id: str, is_approved: Optional[bool]) -> Review:
        if is_approved is None:
            raise ValidationError("Approval flag is required")
        review = self._get_review(review_id)
        review.is_approved = is_approved
        review = self.review_repo.save(review)
        logger.info(f"Review {review.id} {'approved' if is_approved else 'hidden'}")
        return review

    def delete_review(self, review_id: str) -> None:
        review = self._get_review(review_id)
        self.review_repo.delete(review)
        logger.info(f"Review {review_id} deleted")

    def _get_review(self, review_id: str) -> Review:
        review = self.review_repo.get_by_id(review_id)
        if not review:
            raise NotFoundError("Review not found")
        return review
