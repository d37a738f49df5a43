"""
Vocabulary model - learned words with spaced-repetition and sync state
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Float, Text, Enum, JSON
from wordflow.database import Base
import enum


class SyncStatus(str, enum.Enum):
    """Replication state of a local entry"""
    PENDING = "pending"   # Local changes not yet confirmed by the remote
    SYNCED = "synced"     # Matches the remote copy
    FAILED = "failed"     # Last push attempt failed, retried on next push


class VocabularyEntryRecord(Base):
    """Model VocabularyEntryRecord - one learned word"""

    __tablename__ = "vocabulary_entries"

    id = Column(String(36), primary_key=True, index=True)
    # Not unique: archived entries may share a word with an active one
    word = Column(String(100), nullable=False, index=True)

    # Descriptive metadata
    phonetic = Column(String(100), nullable=True)
    part_of_speech = Column(String(50), nullable=True)
    definition_en = Column(Text, nullable=True)
    definition_cn = Column(Text, nullable=True)
    examples = Column(JSON, nullable=False, default=list)
    synonyms = Column(JSON, nullable=False, default=list)
    antonyms = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    category = Column(String(100), nullable=True, index=True)
    user_context = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    is_favorite = Column(Boolean, nullable=False, default=False)
    is_archived = Column(Boolean, nullable=False, default=False, index=True)

    # Spaced repetition
    mastery_level = Column(Integer, nullable=False, default=0)
    ease_factor = Column(Float, nullable=False, default=2.5)
    interval_days = Column("review_interval", Integer, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    correct_count = Column(Integer, nullable=False, default=0)
    last_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    next_review_at = Column(DateTime(timezone=True), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    # Sync bookkeeping
    sync_status = Column(Enum(SyncStatus), nullable=False, default=SyncStatus.PENDING, index=True)
    backend_id = Column(String(64), nullable=True)

    def __repr__(self):
        return f"<VocabularyEntryRecord(id={self.id}, word={self.word})>"
