"""
Database configuration with SQLAlchemy for PostgreSQL (Supabase).
"""
import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

SQLALCHEMY_DATABASE_URL = settings.database_url

engine_kwargs = {
    "echo": settings.debug,
    "pool_pre_ping": True,  # Verify connections before using
}
# Pool sizing only applies to server databases
if not SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    engine_kwargs.update(pool_size=5, max_overflow=10)

engine = create_engine(SQLALCHEMY_DATABASE_URL, **engine_kwargs)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base for models
Base = declarative_base()


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database by creating all tables."""
    from . import models  # Import to register models
    database = engine.url.database
    if engine.url.get_backend_name() == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
