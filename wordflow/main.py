"""
Main FastAPI application entry point
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
import asyncio
import time
import logging

from wordflow.config import settings
from wordflow.core.errors import (
    ConcurrencyError, ConfigurationError, EntryNotFoundError,
    RemoteStoreError, ValidationError
)
from wordflow.database import engine as default_engine, init_db, check_db_connection
from wordflow.services import (
    ProgressService, RemoteStore, SQLAlchemyVocabularyRepository,
    SpacedRepetitionService, SupabaseRemoteStore, SyncEngine, VocabularyService
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Domain error → HTTP status
ERROR_STATUS_CODES = {
    ConfigurationError: status.HTTP_400_BAD_REQUEST,
    ConcurrencyError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_409_CONFLICT,
    EntryNotFoundError: status.HTTP_404_NOT_FOUND,
    RemoteStoreError: status.HTTP_502_BAD_GATEWAY,
}


def create_app(bind: Optional[Engine] = None, remote_store: Optional[RemoteStore] = None) -> FastAPI:
    """
    Build the application and its services

    Args:
        bind: SQLAlchemy engine, defaults to the one built from DATABASE_URL
        remote_store: RemoteStore used by the sync engine, defaults to
            SupabaseRemoteStore
    """
    bind = bind or default_engine

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize application on startup, cleanup on shutdown"""
        logger.info(f"🚀 Starting {settings.APP_NAME} v{settings.APP_VERSION}")

        init_db(bind)
        if check_db_connection(bind):
            logger.info("✅ Database connection successful")
        else:
            logger.error("❌ Database connection failed")

        if settings.SYNC_CONFIGURED:
            app.state.sync_engine.configure(settings.SYNC_REMOTE_URL, settings.SYNC_API_KEY)
        else:
            logger.info("Sync disabled: SYNC_REMOTE_URL / SYNC_API_KEY not set")

        yield

        logger.info("👋 Shutting down application...")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Vocabulary trainer with spaced-repetition reviews and remote sync",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Services
    session_factory = sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=bind
    )
    scheduler = SpacedRepetitionService()
    repository = SQLAlchemyVocabularyRepository(session_factory)

    app.state.engine = bind
    app.state.session_factory = session_factory
    app.state.scheduler = scheduler
    app.state.repository = repository
    app.state.vocabulary_service = VocabularyService(repository, scheduler)
    app.state.progress_service = ProgressService(settings.REVIEW_SESSION_HISTORY_LIMIT)
    app.state.sync_engine = SyncEngine(
        repository,
        remote_store or SupabaseRemoteStore(timeout=settings.SYNC_TIMEOUT_SECONDS)
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Process-Time"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add request processing time to response headers"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

    register_exception_handlers(app)

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint"""
        return {
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs"
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint"""
        db_status = await asyncio.to_thread(check_db_connection, request.app.state.engine)

        return {
            "status": "healthy" if db_status else "unhealthy",
            "database": "connected" if db_status else "disconnected",
            "sync_enabled": request.app.state.sync_engine.is_enabled,
            "version": settings.APP_VERSION
        }

    # Include routers
    from wordflow.routers import vocabulary, progress, sync

    app.include_router(vocabulary.router, prefix="/api/v1")
    app.include_router(progress.router, prefix="/api/v1")
    app.include_router(sync.router, prefix="/api/v1")

    return app


def register_exception_handlers(app: FastAPI):
    """Map domain errors to HTTP responses"""

    async def domain_exception_handler(request: Request, exc: Exception):
        status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    for error_class in ERROR_STATUS_CODES:
        app.add_exception_handler(error_class, domain_exception_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Global exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error": str(exc) if settings.DEBUG else "An error occurred"
            }
        )


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "wordflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
