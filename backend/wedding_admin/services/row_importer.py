"""
Sequential row importer and import sessions.

An import session is the server side state of one open import dialog: the
progress counter, the outcome list and the notifications of its current run.
The importer submits one edge function call per row, strictly in order, and
records exactly one outcome per row whether the call succeeded or not.
"""
import math
import uuid
import logging
from datetime import datetime, timedelta
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional

from ..config import get_settings
from .csv_import_service import ImportKind
from .edge_function_service import EdgeFunctionService
from .supabase_table_service import SupabaseTableService
from .table_rows import RowRejected

logger = logging.getLogger(__name__)
settings = get_settings()


class ImportState(str, Enum):
    """Run state of an import session."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


class OutcomeStatus(str, Enum):
    """Per-row result shown to the operator."""
    SUCCESS = "Success"
    FAILED = "Failed"


@dataclass(frozen=True)
class ImportOutcome:
    """Result of importing one row."""
    name: Optional[str]
    status: OutcomeStatus
    email: Optional[str]


@dataclass
class ImportSession:
    """State of one import dialog, from open to close."""
    kind: ImportKind
    user_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    filename: Optional[str] = None
    state: ImportState = ImportState.IDLE
    progress: int = 0
    total_rows: int = 0
    finished: bool = False
    outcomes: List[ImportOutcome] = field(default_factory=list)
    notifications: List[Dict[str, str]] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == OutcomeStatus.SUCCESS)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == OutcomeStatus.FAILED)

    def begin(self, total_rows: int, filename: Optional[str] = None) -> None:
        """Reset run state and enter RUNNING."""
        if filename is not None:
            self.filename = filename
        self.total_rows = total_rows
        self.progress = 0
        self.outcomes = []
        self.notifications = []
        self.finished = False
        self.finished_at = None
        self.state = ImportState.RUNNING

    def notify(self, level: str, message: str) -> None:
        self.notifications.append({"level": level, "message": message})


def percent_complete(completed: int, total: int) -> int:
    """Percentage of completed rows, rounded half up."""
    if total <= 0:
        return 100
    return int(math.floor(completed / total * 100 + 0.5))


class RowImporter:
    """Creates one backend record per row, one request at a time."""

    def __init__(
        self,
        kind: ImportKind,
        creator: EdgeFunctionService,
        tables: Optional[SupabaseTableService] = None,
    ):
        self.kind = kind
        self.creator = creator
        self.tables = tables

    async def submit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Send one prepared record to the kind's edge function or table."""
        if self.kind.function_name:
            return await self.creator.invoke(self.kind.function_name, payload)
        if self.kind.writer is not None:
            return await self.kind.writer(self.tables, payload)
        return await self.tables.insert(self.kind.table, payload)

    async def import_row(self, row: Dict[str, Optional[str]]) -> ImportOutcome:
        """Submit a single row. Failures become a FAILED outcome, never an exception."""
        name = row.get(self.kind.name_column)
        email = row.get(self.kind.email_column) if self.kind.email_column else None

        try:
            payload = self.kind.payload_for(row)
        except RowRejected as e:
            logger.warning(f"Rejected {self.kind.name} row {name!r}: {e}")
            return ImportOutcome(name=name, status=OutcomeStatus.FAILED, email=email)

        try:
            result = await self.submit(payload)
        except Exception as e:
            logger.error(f"Import error for {self.kind.name} row {name!r}: {e}")
            return ImportOutcome(name=name, status=OutcomeStatus.FAILED, email=email)

        if not result.get("success"):
            logger.error(
                f"Import error for {self.kind.name} row {name!r}: "
                f"{result.get('error') or 'Failed to create record via function'}"
            )
            return ImportOutcome(name=name, status=OutcomeStatus.FAILED, email=email)

        return ImportOutcome(name=name, status=OutcomeStatus.SUCCESS, email=email)

    async def run(self, session: ImportSession, rows: List[Dict[str, Optional[str]]]) -> ImportSession:
        """
        Import all rows into the session.

        Rows are processed in input order without retries. Progress is
        updated after each outcome is recorded. The run always ends in
        COMPLETED with progress 100 and one completion notification, even
        when every row failed.
        """
        if session.state != ImportState.RUNNING:
            session.begin(len(rows))

        total = len(rows)
        logger.info(f"Starting {self.kind.name} import of {total} rows (session {session.id})")

        for i, row in enumerate(rows, start=1):
            outcome = await self.import_row(row)
            session.outcomes.append(outcome)
            session.progress = percent_complete(i, total)

        session.progress = 100
        session.state = ImportState.COMPLETED
        session.finished = True
        session.finished_at = datetime.utcnow()
        session.notify("success", self.kind.completed_message)

        logger.info(
            f"Finished {self.kind.name} import (session {session.id}): "
            f"{session.success_count} succeeded, {session.failed_count} failed"
        )
        return session


class ImportSessionStore:
    """
    In-memory registry of open import sessions.

    Sessions nobody closed are evicted once they have been idle or finished
    for longer than ttl. Running sessions are never evicted.
    """

    def __init__(self, ttl: Optional[timedelta] = None):
        self._sessions: Dict[str, ImportSession] = {}
        self.ttl = ttl if ttl is not None else timedelta(seconds=settings.import_session_ttl_seconds)

    def __len__(self) -> int:
        return len(self._sessions)

    def evict_expired(self, now: Optional[datetime] = None) -> int:
        """Drop expired sessions. Returns how many were removed."""
        cutoff = (now or datetime.utcnow()) - self.ttl
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.state != ImportState.RUNNING
            and (session.finished_at or session.created_at) < cutoff
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Evicted {len(expired)} expired import sessions")
        return len(expired)

    def open(self, kind: ImportKind, user_id: str) -> ImportSession:
        """Open a fresh session."""
        self.evict_expired()
        session = ImportSession(kind=kind, user_id=user_id)
        self._sessions[session.id] = session
        logger.info(f"Opened {kind.name} import session {session.id} for user {user_id}")
        return session

    def get(self, session_id: str, user_id: str) -> Optional[ImportSession]:
        """Get a session owned by the user."""
        session = self._sessions.get(session_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    def close(self, session_id: str, user_id: str) -> bool:
        """
        Discard a session.

        A run in progress is not stopped; it keeps writing to the detached
        session object and its outcomes are never shown.
        """
        session = self.get(session_id, user_id)
        if session is None:
            return False
        del self._sessions[session_id]
        if session.state == ImportState.RUNNING:
            logger.warning(f"Import session {session_id} closed while running")
        logger.info(f"Closed import session {session_id}")
        return True


# Singleton instance
_session_store = None


def get_import_session_store() -> ImportSessionStore:
    """Get the singleton import session store."""
    global _session_store
    if _session_store is None:
        _session_store = ImportSessionStore()
    return _session_store
