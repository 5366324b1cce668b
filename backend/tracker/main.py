from contextlib import asynccontextmanager
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import api_router
from .config import APP_NAME, APP_VERSION, CORS_ORIGINS, DEFAULT_DB_PATH
from .database import open_store, close_store, is_store_open
from .errors import TrackerError
from .log_config import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    configure_logging()
    if not is_store_open():
        open_store(DEFAULT_DB_PATH)
    yield
    # Cleanup on shutdown
    close_store()


app = FastAPI(
    title=APP_NAME,
    description="Local-first income and expense tracker",
    version=APP_VERSION,
    lifespan=lifespan
)

# CORS for browser clients on other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    """Report a rejected or failed operation without touching prior state."""
    logger.warning(
        "request_failed",
        path=request.url.path,
        error=type(exc).__name__,
        detail=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}

