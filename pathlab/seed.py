"""
Seed the catalog with the standard test menu and, when configured, an admin.

Run with ``python -m pathlab.seed``; the app also seeds on startup unless
SEED_ON_STARTUP is false.
"""

from decimal import Decimal

from loguru import logger

from pathlab.core.config import settings
from pathlab.domain.auth.models import AdminRole
from pathlab.domain.auth.repository import AdminRepository
from pathlab.domain.catalog.repository import LabTestRepository


def _params(*rows):
    return [
        {"name": name, "unit": unit, "normal_range": normal_range, "code": code}
        for name, unit, normal_range, code in rows
    ]


SEED_TESTS = [
    {
        "code": "CBC",
        "name": "Complete Blood Count (CBC)",
        "category": "Hematology",
        "price": Decimal("450"),
        "duration": "24 hours",
        "description": "Comprehensive blood test that evaluates overall health and detects a wide range of disorders.",
        "parameters": _params(
            ("Hemoglobin", "g/dL", "12-16", "HGB"),
            ("RBC Count", "million/mcL", "4.5-5.5", "RBC"),
            ("WBC Count", "cells/mcL", "4500-11000", "WBC"),
            ("Platelets", "cells/mcL", "150000-400000", "PLT"),
            ("MCV", "fL", "80-100", "MCV"),
            ("MCH", "pg", "27-33", "MCH"),
            ("MCHC", "g/dL", "32-36", "MCHC"),
        ),
    },
    {
        "code": "BSF",
        "name": "Blood Sugar Fasting",
        "category": "Diabetes",
        "price": Decimal("80"),
        "duration": "4 hours",
        "description": "Measures blood glucose levels after an overnight fast.",
        "parameters": _params(("Fasting Blood Glucose", "mg/dL", "70-100", "FBG")),
    },
    {
        "code": "BSPP",
        "name": "Blood Sugar PP (Postprandial)",
        "category": "Diabetes",
        "price": Decimal("80"),
        "duration": "4 hours",
        "description": "Measures blood glucose levels 2 hours after eating.",
        "parameters": _params(("Postprandial Blood Glucose", "mg/dL", "<140", "PPBG")),
    },
    {
        "code": "LFT",
        "name": "Liver Function Test (LFT)",
        "category": "Biochemistry",
        "price": Decimal("650"),
        "duration": "24 hours",
        "description": "Comprehensive panel to assess liver health and function.",
        "parameters": _params(
            ("Bilirubin Total", "mg/dL", "0.1-1.2", "TBIL"),
            ("Bilirubin Direct", "mg/dL", "0-0.3", "DBIL"),
            ("SGOT (AST)", "U/L", "10-40", "AST"),
            ("SGPT (ALT)", "U/L", "7-56", "ALT"),
            ("Alkaline Phosphatase", "U/L", "44-147", "ALP"),
            ("Total Protein", "g/dL", "6-8.3", "TP"),
            ("Albumin", "g/dL", "3.5-5", "ALB"),
        ),
    },
    {
        "code": "KFT",
        "name": "Kidney Function Test (KFT)",
        "category": "Biochemistry",
        "price": Decimal("550"),
        "duration": "24 hours",
        "description": "Evaluates kidney health and function.",
        "parameters": _params(
            ("Blood Urea", "mg/dL", "7-20", "BUN"),
            ("Creatinine", "mg/dL", "0.6-1.2", "CREAT"),
            ("Uric Acid", "mg/dL", "3.5-7.2", "UA"),
            ("Sodium", "mEq/L", "136-145", "NA"),
            ("Potassium", "mEq/L", "3.5-5.0", "K"),
        ),
    },
    {
        "code": "LIPID",
        "name": "Lipid Profile",
        "category": "Biochemistry",
        "price": Decimal("500"),
        "duration": "24 hours",
        "description": "Measures cholesterol and triglyceride levels to assess cardiovascular health.",
        "parameters": _params(
            ("Total Cholesterol", "mg/dL", "<200", "TC"),
            ("HDL Cholesterol", "mg/dL", ">40", "HDL"),
            ("LDL Cholesterol", "mg/dL", "<100", "LDL"),
            ("Triglycerides", "mg/dL", "<150", "TG"),
            ("VLDL", "mg/dL", "<30", "VLDL"),
        ),
    },
    {
        "code": "THYROID",
        "name": "Thyroid Profile (T3, T4, TSH)",
        "category": "Thyroid",
        "price": Decimal("700"),
        "duration": "24 hours",
        "description": "Comprehensive assessment of thyroid function.",
        "parameters": _params(
            ("TSH", "mIU/L", "0.4-4.0", "TSH"),
            ("T3", "ng/dL", "80-200", "T3"),
            ("T4", "mcg/dL", "5-12", "T4"),
        ),
    },
    {
        "code": "VITD",
        "name": "Vitamin D",
        "category": "Biochemistry",
        "price": Decimal("1200"),
        "duration": "48 hours",
        "description": "Measures 25-hydroxyvitamin D levels in blood.",
        "parameters": _params(("Vitamin D (25-OH)", "ng/mL", "30-100", "VITD")),
    },
    {
        "code": "URINE",
        "name": "Urine Routine Examination",
        "category": "Urine",
        "price": Decimal("150"),
        "duration": "4 hours",
        "description": "Physical, chemical, and microscopic examination of urine.",
        "parameters": _params(
            ("pH", "", "4.5-8", "PH"),
            ("Protein", "", "Nil", "PROT"),
            ("Sugar", "", "Nil", "SUG"),
            ("RBC", "/hpf", "0-2", "URBC"),
            ("WBC", "/hpf", "0-5", "UWBC"),
        ),
    },
    {
        "code": "HBA1C",
        "name": "HbA1c (Glycated Hemoglobin)",
        "category": "Diabetes",
        "price": Decimal("550"),
        "duration": "24 hours",
        "description": "Measures average blood sugar control over the past 2-3 months.",
        "parameters": _params(("HbA1c", "%", "<5.7", "A1C")),
    },
]


def seed_tests(db) -> int:
    repo = LabTestRepository(db)
    if repo.count() > 0:
        logger.info("Tests already exist, skipping catalog seed")
        return 0
    for test in SEED_TESTS:
        repo.create(dict(test))
    logger.info(f"Inserted {len(SEED_TESTS)} tests")
    return len(SEED_TESTS)


def seed_admin(db) -> bool:
    """Create the configured admin account if it does not exist yet"""
    if not settings.ADMIN_SEED_USERNAME or not settings.ADMIN_SEED_PASSWORD:
        logger.info("ADMIN_SEED_USERNAME/ADMIN_SEED_PASSWORD not set, skipping admin seed")
        return False

    repo = AdminRepository(db)
    if repo.get_by_username(settings.ADMIN_SEED_USERNAME):
        return False
    repo.create({
        "username": settings.ADMIN_SEED_USERNAME,
        "password": settings.ADMIN_SEED_PASSWORD,
        "name": settings.ADMIN_SEED_NAME,
        "role": AdminRole.ADMIN.value,
    })
    logger.info(f"Created admin user {settings.ADMIN_SEED_USERNAME}")
    return True


def seed_database(db) -> None:
    seed_tests(db)
    seed_admin(db)


if __name__ == "__main__":
    from pathlab.infrastructure.database import SessionLocal, init_db

    init_db()
    session = SessionLocal()
    try:
        seed_database(session)
    finally:
        session.close()
