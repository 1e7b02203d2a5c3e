"""
Import history service: persists a summary of each finished bulk import.
"""
import logging
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..models.import_history import ImportHistory, ImportHistoryStatus
from .row_importer import ImportSession, OutcomeStatus

logger = logging.getLogger(__name__)


def derive_history_status(rows_added: int, errors: int) -> str:
    """Aggregate status for the history row."""
    if errors == 0:
        return ImportHistoryStatus.SUCCESS.value
    if rows_added > 0:
        return ImportHistoryStatus.PARTIAL.value
    return ImportHistoryStatus.FAILED.value


def build_history_entry(session: ImportSession) -> ImportHistory:
    """Build an ImportHistory row from a finished session."""
    failed = [
        {"name": o.name, "email": o.email}
        for o in session.outcomes
        if o.status == OutcomeStatus.FAILED
    ]
    rows_added = session.success_count
    return ImportHistory(
        type=session.kind.name,
        filename=session.filename or "upload.csv",
        user_id=session.user_id,
        rows_added=rows_added,
        errors=len(failed),
        status=derive_history_status(rows_added, len(failed)),
        error_details=failed or None,
    )


def save_import_history(session: ImportSession, db: Optional[Session] = None) -> Optional[ImportHistory]:
    """
    Record a finished import.

    Database errors are logged and swallowed so a history failure never
    changes the outcome of the run. Returns the saved row, or None.
    """
    owns_session = db is None
    if owns_session:
        db = SessionLocal()

    try:
        entry = build_history_entry(session)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        logger.info(f"Saved import history {entry.id} ({entry.status})")
        return entry
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Could not save import history for session {session.id}: {e}")
        return None
    finally:
        if owns_session:
            db.close()


def list_import_history(db: Session, user_id: Optional[str] = None, limit: int = 50) -> List[ImportHistory]:
    """Most recent import history rows, newest first."""
    query = db.query(ImportHistory)
    if user_id:
        query = query.filter(ImportHistory.user_id == user_id)
    return query.order_by(desc(ImportHistory.created_at)).limit(limit).all()
