from datetime import datetime

from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime
import uuid

from pathlab.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class Advertisement(Base):
    """Promotional banner shown on the public site while active"""
    __tablename__ = "advertisements"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    title = Column(String(255), nullable=False)
    subtitle = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    gradient = Column(String(100), nullable=False)
    icon = Column(String(50), nullable=False)
    image_url = Column(String(500), nullable=True)
    cta_text = Column(String(100), nullable=False)
    cta_link = Column(String(500), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
