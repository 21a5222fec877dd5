#studysync/api/dependencies.py
from fastapi import Request, Depends, HTTPException, status
import asyncpg

from ..config.config import settings
from ..db.db_client import AsyncPostgresClient
from ..tools.file_storage import FileStorage
from ..services.auth_service import AuthService
from ..services.note_service import NoteService
from ..services.paper_service import PaperService
from ..services.attendance_service import AttendanceService


def get_postgres_pool(request: Request) -> asyncpg.Pool:
    """
    Returns the PostgreSQL pool created at startup.
    """
    pool = getattr(request.app.state, "postgres_pool", None)
    if pool is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database is not available.")
    return pool


def get_db_client(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> AsyncPostgresClient:
    return AsyncPostgresClient(pool=postgres_pool)


def get_file_storage() -> FileStorage:
    return FileStorage(upload_dir=settings.UPLOAD_DIR, public_base_url=settings.PUBLIC_BASE_URL)


def get_auth_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> AuthService:
    return AuthService(db_client=db_client)


def get_note_service(
    db_client: AsyncPostgresClient = Depends(get_db_client),
    storage: FileStorage = Depends(get_file_storage)
) -> NoteService:
    """
    Builds a fresh NoteService per request on top of the shared pool.
    """
    return NoteService(db_client=db_client, storage=storage)


def get_paper_service(
    db_client: AsyncPostgresClient = Depends(get_db_client),
    storage: FileStorage = Depends(get_file_storage)
) -> PaperService:
    return PaperService(db_client=db_client, storage=storage)


def get_attendance_service(db_client: AsyncPostgresClient = Depends(get_db_client)) -> AttendanceService:
    return AttendanceService(db_client=db_client)
