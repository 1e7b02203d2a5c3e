"""
Wedding Admin API - FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import init_db
from .routers import csv_import_router, couples_router, vendors_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

settings = get_settings()

VALUE_ERROR_PREFIX = "Value error, "


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Wedding Admin API...")
    try:
        init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.warning(f"Database initialization failed, import history disabled: {e}")

    yield

    logger.info("Shutting down Wedding Admin API...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Admin backend for the wedding-vendor marketplace: couple and vendor creation and CSV imports",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
# Add production URLs from environment
if settings.cors_origins:
    cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(csv_import_router)
app.include_router(couples_router)
app.include_router(vendors_router)


def _validation_message(error: dict) -> str:
    """Plain text of one pydantic error; custom validator messages lose their prefix."""
    message = error.get("msg", "Validation error")
    if message.startswith(VALUE_ERROR_PREFIX):
        return message[len(VALUE_ERROR_PREFIX):]
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    return f"{'.'.join(loc)}: {message}" if loc else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 with the first message as detail, plus every field error."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": _validation_message(error),
        }
        for error in exc.errors()
    ]
    logger.info(f"Validation error on {request.url.path}: {len(errors)} errors")
    return JSONResponse(
        status_code=422,
        content={"detail": errors[0]["message"] if errors else "Validation error", "errors": errors},
    )


@app.get("/api")
def api_root():
    """API root endpoint - API info."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
