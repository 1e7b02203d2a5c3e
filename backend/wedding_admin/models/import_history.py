"""
ImportHistory model - one summary row per finished bulk import run.
"""
import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Integer, DateTime, JSON

from ..database import Base


class ImportHistoryStatus(str, Enum):
    """Aggregate result of a finished run."""
    SUCCESS = "success"    # Every row created
    PARTIAL = "partial"    # Some rows failed
    FAILED = "failed"      # No row created


class ImportHistory(Base):
    """Summary of a bulk import run."""

    __tablename__ = "import_history"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # What was imported
    type = Column(String(50), nullable=False)  # couples/vendors/venues/service_packages/bookings
    filename = Column(String(255), nullable=False)

    # Who imported it
    user_id = Column(String(36), nullable=False, index=True)

    # Result
    timestamp = Column(DateTime, default=datetime.utcnow)
    rows_added = Column(Integer, default=0)
    errors = Column(Integer, default=0)
    status = Column(String(20), nullable=False)
    error_details = Column(JSON, nullable=True)  # [{"name": ..., "email": ...}]

    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<ImportHistory {self.type} {self.filename} - {self.status}>"
