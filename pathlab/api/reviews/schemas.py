from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ReviewCreate(BaseModel):
    name: Optional[str] = None
    location: Optional[str] = None
    rating: Optional[int] = None
    review: Optional[str] = None


class ReviewApproval(BaseModel):
    is_approved: Optional[bool] = None


class ReviewResponse(BaseModel):
    id: str
    name: str
    location: str
    rating: int
    review: str
    is_approved: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewSubmitted(BaseModel):
    message: str
    review: ReviewResponse


class DeletedResponse(BaseModel):
    message: str
