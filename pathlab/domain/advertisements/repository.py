from typing import Optional, List
from sqlalchemy.orm import Session

from pathlab.domain.advertisements.models import Advertisement


class AdvertisementRepository:
    """Repository for advertisement data access operations"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, ad_data: dict) -> Advertisement:
        ad = Advertisement(**ad_data)
        self.db.add(ad)
        self.db.commit()
        self.db.refresh(ad)
        return ad

    def get_by_id(self, ad_id: str) -> Optional[Advertisement]:
        return self.db.query(Advertisement).filter(Advertisement.id == ad_id).first()

    def get_active(self) -> List[Advertisement]:
        return self.db.query(Advertisement).filter(
            Advertisement.is_active.is_(True)
        ).order_by(Advertisement.sort_order, Advertisement.created_at).all()

    def get_all(self) -> List[Advertisement]:
        return self.db.query(Advertisement).order_by(
            Advertisement.sort_order, Advertisement.created_at
        ).all()

    def save(self, ad: Advertisement) -> Advertisement:
        self.db.add(ad)
        self.db.commit()
        self.db.refresh(ad)
        return ad

    def delete(self, ad: Advertisement) -> None:
        self.db.delete(ad)
        self.db.commit()
