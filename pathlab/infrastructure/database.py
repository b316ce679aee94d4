import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from pathlab.core.config import settings

logger = logging.getLogger(__name__)

is_sqlite = settings.DATABASE_URL.lower().startswith("sqlite")

engine_kwargs = {"pool_pre_ping": True, "echo": settings.DEBUG}
if is_sqlite:
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs.update(pool_size=10, max_overflow=20, pool_recycle=3600)

engine = create_engine(settings.DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)

# Base model
Base = declarative_base()


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create tables for every registered model"""
    # Import models so they are registered on Base.metadata
    from pathlab.domain.auth import models as auth_models  # noqa: F401
    from pathlab.domain.patients import models as patient_models  # noqa: F401
    from pathlab.domain.catalog import models as catalog_models  # noqa: F401
    from pathlab.domain.bookings import models as booking_models  # noqa: F401
    from pathlab.domain.lab import models as lab_models  # noqa: F401
    from pathlab.domain.reviews import models as review_models  # noqa: F401
    from pathlab.domain.advertisements import models as advertisement_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


def close_db():
    """Close database connections"""
    engine.dispose()
