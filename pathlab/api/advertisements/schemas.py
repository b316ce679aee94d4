from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class AdvertisementCreate(BaseModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    gradient: Optional[str] = Field(None, max_length=100)
    icon: Optional[str] = Field(None, max_length=50)
    image_url: Optional[str] = None
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class AdvertisementUpdate(AdvertisementCreate):
    """Partial update; only fields present in the body are applied"""


class AdvertisementResponse(BaseModel):
    id: str
    title: str
    subtitle: str
    description: str
    gradient: str
    icon: str
    image_url: Optional[str] = None
    cta_text: str
    cta_link: str
    is_active: bool
    sort_order: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
