from typing import Optional, List
from sqlalchemy.orm import Session

from pathlab.domain.reviews.models import Review


class ReviewRepository:
    """Repository for review data access operations"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, review_data: dict) -> Review:
        review = Review(**review_data)
        self.db.add(review)
        self.db.commit()
        self.db.refresh(review)
        return review

    def get_by_id(self, review_id: str) -> Optional[Review]:
        return self.db.query(Review).filter(Review.id == review_id).first()

    def get_approved(self) -> List[Review]:
        return self.db.query(Review).filter(
            Review.is_approved.is_(True)
        ).order_by(Review.created_at.desc()).all()

    def get_all(self) -> List[Review]:
        return self.db.query(Review).order_by(Review.created_at.desc()).all()

    def save(self, review: Review) -> Review:
        self.db.add(review)
        self.db.commit()
        self.db.refresh(review)
        return review

    def delete(self, review: Review) -> None:
        self.db.delete(review)
        self.db.commit()
