"""
Services - Business Logic Layer

- spaced_repetition: SM-2 scheduling, due selection, progress aggregation
- repository: VocabularyEntry and the SQLAlchemy-backed local store
- vocabulary_service: add / edit / archive / review vocabulary entries
- progress_service: daily stats, streak, review sessions
- remote_store: httpx client for the remote vocabulary table
- sync_payload: wire format mapping and sparse merge
- sync_service: push / pull orchestration
"""
from wordflow.services.spaced_repetition import (
    SpacedRepetitionService, ResponseQuality, MasteryLevel, ReviewResult, ProgressSummary
)
from wordflow.services.repository import (
    VocabularyEntry, VocabularyRepository, SQLAlchemyVocabularyRepository
)
from wordflow.services.vocabulary_service import VocabularyService
from wordflow.services.progress_service import ProgressService
from wordflow.services.remote_store import RemoteStore, SupabaseRemoteStore
from wordflow.services.sync_service import SyncEngine, SyncResult, SyncState

__all__ = [
    "SpacedRepetitionService",
    "ResponseQuality",
    "MasteryLevel",
    "ReviewResult",
    "ProgressSummary",
    "VocabularyEntry",
    "VocabularyRepository",
    "SQLAlchemyVocabularyRepository",
    "VocabularyService",
    "ProgressService",
    "RemoteStore",
    "SupabaseRemoteStore",
    "SyncEngine",
    "SyncResult",
    "SyncState",
]
