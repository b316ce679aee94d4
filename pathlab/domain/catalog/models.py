from sqlalchemy import Column, String, Text, DateTime, Numeric, JSON
from sqlalchemy.sql import func
import uuid

from pathlab.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class LabTest(Base):
    """Catalog entry with its ordered parameter definitions"""
    __tablename__ = "lab_tests"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    code = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    duration = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    # [{"name", "unit", "normal_range", "code"}]
    parameters = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=func.now(), nullable=False)
