# studysync/main.py
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from pathlib import Path
import logging

from slowapi.errors import RateLimitExceeded

from .config.config import settings
from .logging.logging_config import setup_logging
from .api import auth, notes, papers, attendance
from .api.utilities.limiter import limiter
from .db.db_client import AsyncPostgresClient, create_pool
from .tools.file_storage import UPLOADS_ROUTE

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Creates the PostgreSQL pool and the upload directory on startup and
    closes the pool on shutdown.
    """
    setup_logging()
    logger.info("Starting StudySync API...")

    if not settings.SECRET_KEY:
        logger.warning("SECRET_KEY is not set; tokens cannot be issued or verified.")

    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)

    app.state.postgres_pool = None
    if settings.DATABASE_URL:
        try:
            postgres_pool = await create_pool(
                settings.DATABASE_URL,
                min_size=settings.DB_POOL_MIN_SIZE,
                max_size=settings.DB_POOL_MAX_SIZE
            )
            await AsyncPostgresClient(pool=postgres_pool).ensure_schema()
            app.state.postgres_pool = postgres_pool
            logger.info("PostgreSQL pool created and schema verified.")
        except Exception as e:
            logger.error(f"Could not connect to PostgreSQL at startup: {e}", exc_info=True)
    else:
        logger.warning("DATABASE_URL is not set; data endpoints will answer 503.")

    yield

    logger.info("Shutting down StudySync API...")
    if app.state.postgres_pool:
        await app.state.postgres_pool.close()
        logger.info("PostgreSQL pool closed.")


app = FastAPI(
    title="StudySync API",
    description="Notes, previous-year papers and attendance tracking for students",
    version="1.0.0",
    lifespan=lifespan
)
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error envelope: every failure is {"success": false, "message": ...} ---

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "form"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Server error"},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    response = JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"success": False, "message": f"Too many requests: {exc.detail}"},
        headers=getattr(exc, "headers", None),
    )
    # Retry-After and X-RateLimit-* when the limiter has headers enabled
    return request.app.state.limiter._inject_headers(response, getattr(request.state, "view_rate_limit", None))


app.include_router(auth.router, prefix="/api")
app.include_router(notes.router, prefix="/api")
app.include_router(papers.router, prefix="/api")
app.include_router(attendance.router, prefix="/api")

app.mount(UPLOADS_ROUTE, StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/health", tags=["System"])
def health_check():
    """Liveness probe."""
    return {"status": "ok", "message": "StudySync API is running."}
