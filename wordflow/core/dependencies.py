"""
Dependencies - Providers injected into route handlers with Depends()

Services are built once by create_app() and stored on app.state; these
functions only hand them out, so tests can build an app around their own
engine and remote store.
"""
from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from wordflow.services import (
    ProgressService, SpacedRepetitionService, SyncEngine, VocabularyService
)


# ============= DATABASE SESSION =============

def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency to get a database session

    Usage:
        @app.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


# ============= SERVICES =============

def get_scheduler(request: Request) -> SpacedRepetitionService:
    return request.app.state.scheduler


def get_vocabulary_service(request: Request) -> VocabularyService:
    return request.app.state.vocabulary_service


def get_progress_service(request: Request) -> ProgressService:
    return request.app.state.progress_service


def get_sync_engine(request: Request) -> SyncEngine:
    return request.app.state.sync_engine
