"""
Vocabulary Repository - Local store for vocabulary entries

=== CONTRACT ===
The review scheduler and the sync engine only see the VocabularyRepository
protocol: async get/put keyed by entry id and by word. Every call is an
atomic single-entry operation; no multi-entry transactions are used.

SQLAlchemyVocabularyRepository opens one short session per call in a worker
thread (asyncio.to_thread), so a single instance can be shared by request
handlers and the long-lived SyncEngine.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional, Protocol

from sqlalchemy import func
from sqlalchemy.orm import Session

from wordflow.models import VocabularyEntryRecord, SyncStatus
from wordflow.utils.timeutil import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def normalize_word(word: str) -> str:
    return (word or "").strip().lower()


def new_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass
class VocabularyEntry:
    """One learned word, as seen by the scheduler and the sync engine"""
    word: str
    id: str = field(default_factory=new_entry_id)

    # Descriptive metadata
    phonetic: Optional[str] = None
    part_of_speech: Optional[str] = None
    definition_en: Optional[str] = None
    definition_cn: Optional[str] = None
    examples: List[Any] = field(default_factory=list)
    synonyms: List[str] = field(default_factory=list)
    antonyms: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    category: Optional[str] = None
    user_context: Optional[str] = None
    notes: Optional[str] = None

    is_favorite: bool = False
    is_archived: bool = False

    # Spaced repetition
    mastery_level: int = 0
    ease_factor: float = 2.5
    interval: int = 0
    review_count: int = 0
    correct_count: int = 0
    last_reviewed_at: Optional[datetime] = None
    next_review_at: Optional[datetime] = None

    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    # Sync bookkeeping
    sync_status: SyncStatus = SyncStatus.PENDING
    backend_id: Optional[str] = None

    def touch(self, now: Optional[datetime] = None):
        """Record a local mutation: bump updated_at and mark for push"""
        self.updated_at = now or utc_now()
        self.sync_status = SyncStatus.PENDING

    @property
    def accuracy(self) -> float:
        return (self.correct_count / self.review_count * 100) if self.review_count > 0 else 0.0


class VocabularyRepository(Protocol):
    """Abstract local store consumed by the core services"""

    async def get_all(self, include_archived: bool = False) -> List[VocabularyEntry]:
        ...

    async def get_by_id(self, entry_id: str) -> Optional[VocabularyEntry]:
        ...

    async def get_by_word(self, word: str) -> Optional[VocabularyEntry]:
        ...

    async def put(self, entry: VocabularyEntry) -> None:
        ...

    async def delete(self, entry_id: str) -> None:
        ...


# ============================================================
# SQLALCHEMY IMPLEMENTATION
# ============================================================

_COPIED_FIELDS = (
    "id", "word", "phonetic", "part_of_speech", "definition_en", "definition_cn",
    "category", "user_context", "notes", "is_favorite", "is_archived",
    "mastery_level", "ease_factor", "review_count", "correct_count",
    "sync_status", "backend_id",
)
_LIST_FIELDS = ("examples", "synonyms", "antonyms", "tags")
_DATETIME_FIELDS = ("last_reviewed_at", "next_review_at", "created_at", "updated_at")


def record_to_entry(record: VocabularyEntryRecord) -> VocabularyEntry:
    values = {name: getattr(record, name) for name in _COPIED_FIELDS}
    values.update({name: list(getattr(record, name) or []) for name in _LIST_FIELDS})
    values.update({name: ensure_utc(getattr(record, name)) for name in _DATETIME_FIELDS})
    values["interval"] = record.interval_days
    return VocabularyEntry(**values)


def apply_entry_to_record(entry: VocabularyEntry, record: VocabularyEntryRecord):
    for name in _COPIED_FIELDS:
        setattr(record, name, getattr(entry, name))
    for name in _LIST_FIELDS:
        setattr(record, name, list(getattr(entry, name) or []))
    for name in _DATETIME_FIELDS:
        setattr(record, name, ensure_utc(getattr(entry, name)))
    record.interval_days = entry.interval


class SQLAlchemyVocabularyRepository:
    """
    VocabularyRepository backed by the vocabulary_entries table

    Session work is blocking, so each call runs its session block in a worker
    thread and the event loop stays free while the database is busy.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def get_all(self, include_archived: bool = False) -> List[VocabularyEntry]:
        return await asyncio.to_thread(self._get_all, include_archived)

    async def get_by_id(self, entry_id: str) -> Optional[VocabularyEntry]:
        return await asyncio.to_thread(self._get_by_id, entry_id)

    async def get_by_word(self, word: str) -> Optional[VocabularyEntry]:
        """Case-insensitive lookup; an active entry wins over archived ones"""
        normalized = normalize_word(word)
        if not normalized:
            return None
        return await asyncio.to_thread(self._get_by_word, normalized)

    async def put(self, entry: VocabularyEntry) -> None:
        await asyncio.to_thread(self._put, entry)

    async def delete(self, entry_id: str) -> None:
        await asyncio.to_thread(self._delete, entry_id)
        logger.info(f"Entry deleted: {entry_id}")

    # ============= BLOCKING HELPERS =============

    def _get_all(self, include_archived: bool) -> List[VocabularyEntry]:
        with self.session_factory() as db:
            query = db.query(VocabularyEntryRecord)
            if not include_archived:
                query = query.filter(VocabularyEntryRecord.is_archived == False)
            query = query.order_by(VocabularyEntryRecord.created_at.asc())
            return [record_to_entry(record) for record in query.all()]

    def _get_by_id(self, entry_id: str) -> Optional[VocabularyEntry]:
        with self.session_factory() as db:
            record = db.get(VocabularyEntryRecord, entry_id)
            return record_to_entry(record) if record else None

    def _get_by_word(self, normalized: str) -> Optional[VocabularyEntry]:
        with self.session_factory() as db:
            record = db.query(VocabularyEntryRecord).filter(
                func.lower(VocabularyEntryRecord.word) == normalized
            ).order_by(
                VocabularyEntryRecord.is_archived.asc(),
                VocabularyEntryRecord.updated_at.desc()
            ).first()
            return record_to_entry(record) if record else None

    def _put(self, entry: VocabularyEntry):
        with self.session_factory() as db:
            record = db.get(VocabularyEntryRecord, entry.id)
            if record is None:
                record = VocabularyEntryRecord(id=entry.id)
                db.add(record)
            apply_entry_to_record(entry, record)
            db.commit()

    def _delete(self, entry_id: str):
        with self.session_factory() as db:
            db.query(VocabularyEntryRecord).filter(
                VocabularyEntryRecord.id == entry_id
            ).delete()
            db.commit()
