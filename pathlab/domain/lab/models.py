from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
import uuid

from pathlab.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class Result(Base):
    """Recorded measurements for one patient and test; never updated"""
    __tablename__ = "results"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False, index=True)
    test_id = Column(String(36), ForeignKey("lab_tests.id"), nullable=False)
    # [{"parameter_name", "value", "unit", "normal_range", "is_abnormal"}]
    parameter_results = Column(JSON, nullable=False)
    technician = Column(String(255), nullable=False)
    referred_by = Column(String(255), nullable=True)
    collected_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    test = relationship("LabTest", lazy="joined")


class Report(Base):
    """Publishable wrapper around a result; the download token is its only capability"""
    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False, index=True)
    result_id = Column(String(36), ForeignKey("results.id"), nullable=False)
    # Null for legacy reports issued before bookings were linked
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True)
    pdf_path = Column(String(500), nullable=True)
    secure_download_token = Column(String(128), nullable=False, unique=True, index=True)
    generated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    result = relationship("Result", lazy="joined")
    patient = relationship("Patient", lazy="joined")
