"""
CSV Import router for bulk creation of couples, vendors, venues, service
packages and bookings.

Opening a session is the authorization precondition of the workflow; the
uploaded file is then imported row by row in a background task while the
client polls the session for progress and outcomes.
"""
import logging
from typing import List

from fastapi import (
    APIRouter, BackgroundTasks, Depends, File, HTTPException, Query, Response, UploadFile, status,
)
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..database import get_db
from ..dependencies import get_current_admin
from ..schemas.auth import AdminUser
from ..schemas.csv_import import ImportSessionResponse, ImportHistoryResponse
from ..services.csv_import_service import (
    ImportKind,
    get_import_kind,
    parse_csv_text,
    decode_csv_content,
)
from ..services.edge_function_service import EdgeFunctionService, get_edge_function_service
from ..services.import_history_service import save_import_history, list_import_history
from ..services.supabase_table_service import SupabaseTableService, get_supabase_table_service
from ..services.row_importer import (
    ImportSession,
    ImportSessionStore,
    ImportState,
    RowImporter,
    get_import_session_store,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/import", tags=["csv-import"])

ALLOWED_EXTENSIONS = (".csv",)


def _get_kind(kind: str) -> ImportKind:
    import_kind = get_import_kind(kind)
    if import_kind is None:
        raise HTTPException(status_code=404, detail=f"Unknown import type: {kind}")
    return import_kind


def _get_session(store: ImportSessionStore, session_id: str, user: AdminUser) -> ImportSession:
    session = store.get(session_id, user.id)
    if session is None:
        raise HTTPException(status_code=404, detail="Import session not found")
    return session


async def run_import(importer: RowImporter, session: ImportSession, rows: List[dict]) -> None:
    """Background task: import every row, then record the run."""
    await importer.run(session, rows)
    # The history write is blocking database I/O
    await run_in_threadpool(save_import_history, session)


@router.get("/history", response_model=List[ImportHistoryResponse])
def get_import_history(
    limit: int = Query(50, ge=1, le=200),
    current_user: AdminUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """List recent bulk imports, newest first."""
    return list_import_history(db, limit=limit)


@router.get("/{kind}/template")
def download_template(kind: str, current_user: AdminUser = Depends(get_current_admin)):
    """Download the CSV template for an import type."""
    import_kind = _get_kind(kind)
    return Response(
        content=import_kind.template,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{import_kind.template_filename}"'},
    )


@router.post(
    "/{kind}/sessions",
    response_model=ImportSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
def open_import_session(
    kind: str,
    current_user: AdminUser = Depends(get_current_admin),
    store: ImportSessionStore = Depends(get_import_session_store),
):
    """
    Open an import session.

    The operator must be an authenticated admin; otherwise the session is
    never opened (401 "Please log in" / 403 "Unauthorized action").
    """
    import_kind = _get_kind(kind)
    session = store.open(import_kind, current_user.id)
    return ImportSessionResponse.from_session(session)


@router.get("/sessions/{session_id}", response_model=ImportSessionResponse)
def get_import_session(
    session_id: str,
    current_user: AdminUser = Depends(get_current_admin),
    store: ImportSessionStore = Depends(get_import_session_store),
):
    """Get progress, outcomes and notifications of a session."""
    session = _get_session(store, session_id, current_user)
    return ImportSessionResponse.from_session(session)


@router.post(
    "/sessions/{session_id}/upload",
    response_model=ImportSessionResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def upload_import_file(
    session_id: str,
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    current_user: AdminUser = Depends(get_current_admin),
    store: ImportSessionStore = Depends(get_import_session_store),
    edge_functions: EdgeFunctionService = Depends(get_edge_function_service),
    tables: SupabaseTableService = Depends(get_supabase_table_service),
):
    """
    Upload a CSV file and start importing it.

    Choosing a new file resets the session's progress and outcomes. Only one
    run per session may be in progress.
    """
    session = _get_session(store, session_id, current_user)

    if session.state == ImportState.RUNNING:
        raise HTTPException(status_code=409, detail="An import is already running")

    if not file.filename or not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(status_code=400, detail="File must be a CSV file (.csv)")

    content = await file.read()
    try:
        text = decode_csv_content(content)
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=400,
            detail="File encoding not supported. Please use UTF-8.",
        )

    rows = parse_csv_text(text, session.kind.columns)
    session.begin(len(rows), filename=file.filename)

    importer = RowImporter(session.kind, edge_functions, tables)
    background_tasks.add_task(run_import, importer, session, rows)

    logger.info(f"Queued {session.kind.name} import of {len(rows)} rows from {file.filename}")
    return ImportSessionResponse.from_session(session)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_import_session(
    session_id: str,
    current_user: AdminUser = Depends(get_current_admin),
    store: ImportSessionStore = Depends(get_import_session_store),
):
    """Close a session. A running import is not cancelled."""
    if not store.close(session_id, current_user.id):
        raise HTTPException(status_code=404, detail="Import session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
