"""
Sync schemas - Remote records and the sync HTTP surface

REMOTE RECORD FORMAT:
=====================
Rows of the remote `vocabulary` table as returned by the REST endpoint.
Only `word` is required; every other column may be missing or null and is
then left untouched on merge.

Array columns travel as comma-joined strings:
- synonyms: "happy, glad"
- example_sentences: JSON string '["It was a serendipitous find."]'
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Optional
from datetime import datetime


# ============= REMOTE RECORD =============

class RemoteVocabularyRecord(BaseModel):
    """One row of the remote vocabulary table"""
    id: Optional[str] = None
    word: str = Field(..., min_length=1)

    phonetic: Optional[str] = None
    part_of_speech: Optional[str] = None
    definition_en: Optional[str] = None
    definition_cn: Optional[str] = None
    example_sentences: Optional[str] = None
    synonyms: Optional[str] = None
    antonyms: Optional[str] = None
    tags: Optional[str] = None
    category: Optional[str] = None
    user_context: Optional[str] = None
    notes: Optional[str] = None

    mastery_level: Optional[int] = Field(None, ge=0, le=4)
    ease_factor: Optional[float] = None
    interval: Optional[int] = Field(None, ge=0)
    review_count: Optional[int] = Field(None, ge=0)
    correct_count: Optional[int] = Field(None, ge=0)
    is_favorite: Optional[bool] = None
    is_archived: Optional[bool] = None

    last_reviewed_at: Optional[datetime] = None
    next_review_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Optional[str]:
        # Remote ids may be integers or uuids
        return None if value is None else str(value)

    @field_validator("word")
    @classmethod
    def word_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("word must not be blank")
        return value

    @model_validator(mode="after")
    def correct_within_reviews(self) -> "RemoteVocabularyRecord":
        if (self.review_count is not None and self.correct_count is not None
                and self.correct_count > self.review_count):
            raise ValueError("correct_count must not exceed review_count")
        return self

    class Config:
        extra = "ignore"


# ============= REQUEST SCHEMAS =============

class SyncConfigureRequest(BaseModel):
    """Schema for POST /sync/configure"""
    remote_url: str = Field(..., min_length=1, description="Base URL of the remote REST store")
    api_key: str = Field(..., min_length=1, description="API key sent as Bearer token and apikey header")


# ============= RESPONSE SCHEMAS =============

class SyncResultResponse(BaseModel):
    """Counts of one sync run"""
    pushed: int = 0
    pulled: int = 0


class SyncStatusResponse(BaseModel):
    """Snapshot of the sync engine state"""
    is_enabled: bool
    is_syncing: bool
    remote_url: Optional[str] = None
    last_sync_date: Optional[datetime] = None
    last_pull_cursor: Optional[datetime] = None
    last_error: Optional[str] = None
    pending_count: int = 0
    failed_count: int = 0

    class Config:
        from_attributes = True
