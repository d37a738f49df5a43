"""
Shared pytest fixtures

Every test gets a fresh in-memory SQLite database. StaticPool keeps the single
connection alive so all sessions (and the TestClient threads) see the same data.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wordflow.database import Base
from wordflow.services import (
    ProgressService, SQLAlchemyVocabularyRepository,
    SpacedRepetitionService, VocabularyService
)
import wordflow.models  # noqa: F401  registers tables on Base.metadata

SQLALCHEMY_TEST_DATABASE_URL = "sqlite://"


@pytest.fixture(scope="function")
def test_engine():
    """Create a fresh database for each test"""
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=test_engine
    )


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def scheduler():
    return SpacedRepetitionService()


@pytest.fixture
def repository(session_factory):
    return SQLAlchemyVocabularyRepository(session_factory)


@pytest.fixture
def vocabulary_service(repository, scheduler):
    return VocabularyService(repository, scheduler)


@pytest.fixture
def progress_service():
    return ProgressService(session_history_limit=3)
