from typing import Optional, List, Dict, Any

from loguru import logger
from sqlalchemy.orm import Session

from pathlab.core.exceptions import ValidationError, NotFoundError
from pathlab.domain.advertisements.models import Advertisement
from pathlab.domain.advertisements.repository import AdvertisementRepository

REQUIRED_FIELDS = ("title", "subtitle", "description", "gradient", "icon", "cta_text", "cta_link")
UPDATABLE_FIELDS = REQUIRED_FIELDS + ("image_url", "is_active", "sort_order")


class AdvertisementService:
    """Service layer for home page advertisements"""

    def __init__(self, db: Session):
        self.db = db
        self.ad_repo = AdvertisementRepository(db)

    def list_active(self) -> List[Advertisement]:
        return self.ad_repo.get_active()

    def list_all(self) -> List[Advertisement]:
        return self.ad_repo.get_all()

    def create_advertisement(self, data: Dict[str, Any]) -> Advertisement:
        if any(not data.get(field) for field in REQUIRED_FIELDS):
            raise ValidationError("All fields are required")

        ad = self.ad_repo.create({
            **{field: data[field] for field in REQUIRED_FIELDS},
            "image_url": data.get("image_url") or None,
            "is_active": True if data.get("is_active") is None else data["is_active"],
            "sort_order": data.get("sort_order") or 0,
        })
        logger.info(f"Advertisement {ad.id} created")
        return ad

    def update_advertisement(self, ad_id: str, updates: Dict[str, Any]) -> Advertisement:
        """Apply only the fields that were sent"""
        ad = self._get_advertisement(ad_id)
        for field, value in updates.items():
            if field not in UPDATABLE_FIELDS:
                continue
            # Required columns cannot be cleared
            if field in REQUIRED_FIELDS and not value:
                raise ValidationError(f"{field} cannot be empty")
            if field in ("is_active", "sort_order") and value is None:
                raise ValidationError(f"{field} cannot be empty")
            setattr(ad, field, value)

        ad = self.ad_repo.save(ad)
        logger.info(f"Advertisement {ad.id} updated")
        return ad

    def delete_advertisement(self, ad_id: str) -> None:
        ad = self._get_advertisement(ad_id)
        self.ad_repo.delete(ad)
        logger.info(f"Advertisement {ad_id} deleted")

    def _get_advertisement(self, ad_id: str) -> Advertisement:
        ad = self.ad_repo.get_by_id(ad_id)
        if not ad:
            raise NotFoundError("Advertisement not found")
        return ad
