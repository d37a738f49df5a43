"""
Vocabulary schemas - Request / response shapes for vocabulary entries

VOCABULARY ENTRY:
=================
One word the learner saved, with its definitions and its review schedule.

Example:
- word: "serendipity"
- phonetic: "/ˌserənˈdɪpəti/"
- definition_en: "The occurrence of events by chance in a happy way"
- synonyms: ["chance", "fluke"]
- mastery_level: 1 (Learning), interval: 3, ease_factor: 2.6

REVIEW QUALITY:
===============
- 0 Forgot, 1 Hard, 2 Good
- Only Good counts as a correct answer and grows the interval
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from wordflow.models import SyncStatus


# ============= REQUEST SCHEMAS =============

class VocabularyCreate(BaseModel):
    """Schema for adding a new word"""
    word: str = Field(..., min_length=1, max_length=100, description="English word or phrase")
    phonetic: Optional[str] = Field(None, max_length=100, description="IPA transcription")
    part_of_speech: Optional[str] = Field(None, max_length=50, description="noun, verb, adjective, ...")
    definition_en: Optional[str] = None
    definition_cn: Optional[str] = None
    examples: List[Any] = Field(default_factory=list)
    synonyms: List[str] = Field(default_factory=list)
    antonyms: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    category: Optional[str] = Field(None, max_length=100)
    user_context: Optional[str] = Field(None, description="Sentence where the word was met")
    notes: Optional[str] = None


class VocabularyUpdate(BaseModel):
    """Schema for editing metadata; omitted fields are left unchanged"""
    phonetic: Optional[str] = Field(None, max_length=100)
    part_of_speech: Optional[str] = Field(None, max_length=50)
    definition_en: Optional[str] = None
    definition_cn: Optional[str] = None
    examples: Optional[List[Any]] = None
    synonyms: Optional[List[str]] = None
    antonyms: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    category: Optional[str] = Field(None, max_length=100)
    user_context: Optional[str] = None
    notes: Optional[str] = None


class ArchiveRequest(BaseModel):
    archived: bool = True


class ReviewSubmitRequest(BaseModel):
    """Schema for rating one review"""
    quality: int = Field(..., ge=0, le=2, description="0 = Forgot, 1 = Hard, 2 = Good")


# ============= RESPONSE SCHEMAS =============

class VocabularyResponse(BaseModel):
    """Schema returned for a vocabulary entry"""
    id: str
    word: str
    phonetic: Optional[str] = None
    part_of_speech: Optional[str] = None
    definition_en: Optional[str] = None
    definition_cn: Optional[str] = None
    examples: List[Any] = []
    synonyms: List[str] = []
    antonyms: List[str] = []
    tags: List[str] = []
    category: Optional[str] = None
    user_context: Optional[str] = None
    notes: Optional[str] = None

    is_favorite: bool = False
    is_archived: bool = False

    mastery_level: int = 0
    ease_factor: float = 2.5
    interval: int = 0
    review_count: int = 0
    correct_count: int = 0
    accuracy: float = 0.0
    last_reviewed_at: Optional[datetime] = None
    next_review_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime

    sync_status: SyncStatus
    backend_id: Optional[str] = None

    class Config:
        from_attributes = True


class DueVocabularyResponse(BaseModel):
    """Due queue plus an estimate of how long reviewing it takes"""
    total: int
    estimated_minutes: int
    words: List[VocabularyResponse]


class ReviewResultResponse(BaseModel):
    """Outcome of one review"""
    entry: VocabularyResponse
    was_correct: bool
    next_interval: int
    new_ease_factor: float
    new_mastery_level: int
    mastery_level_name: str
    next_review_date: datetime


class ProgressOverviewResponse(BaseModel):
    """Aggregate progress over non-archived entries"""
    total_words: int = 0
    new_words: int = 0
    learning_words: int = 0
    mastered_words: int = 0
    level_counts: Dict[int, int] = {}
    mastery_percentage: float = 0.0
    total_reviews: int = 0
    total_correct: int = 0
    accuracy: float = 0.0
    average_ease_factor: float = 2.5
    current_streak: int = 0

    class Config:
        from_attributes = True
