"""
CSV Import schemas for API responses.
"""
from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel

from ..services.row_importer import ImportSession


class ImportOutcomeResponse(BaseModel):
    """Result of one imported row."""
    name: Optional[str] = None
    status: str
    email: Optional[str] = None


class ImportNotification(BaseModel):
    """A message for the operator."""
    level: str
    message: str


class ImportSessionResponse(BaseModel):
    """Current state of an import session."""
    id: str
    kind: str
    filename: Optional[str] = None
    state: str
    progress: int
    total_rows: int
    finished: bool
    success_count: int
    failed_count: int
    outcomes: List[ImportOutcomeResponse]
    notifications: List[ImportNotification]

    @classmethod
    def from_session(cls, session: ImportSession) -> "ImportSessionResponse":
        return cls(
            id=session.id,
            kind=session.kind.name,
            filename=session.filename,
            state=session.state.value,
            progress=session.progress,
            total_rows=session.total_rows,
            finished=session.finished,
            success_count=session.success_count,
            failed_count=session.failed_count,
            outcomes=[
                ImportOutcomeResponse(name=o.name, status=o.status.value, email=o.email)
                for o in session.outcomes
            ],
            notifications=[ImportNotification(**n) for n in session.notifications],
        )


class ImportHistoryResponse(BaseModel):
    """Schema for an import history row."""
    id: str
    type: str
    filename: str
    user_id: str
    timestamp: Optional[datetime] = None
    rows_added: int
    errors: int
    status: str
    error_details: Optional[List[Dict[str, Any]]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
