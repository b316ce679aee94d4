from datetime import datetime

from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime
import uuid

from pathlab.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class Review(Base):
    """Patient testimonial; hidden from the public list until approved"""
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False)
    review = Column(Text, nullable=False)
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
