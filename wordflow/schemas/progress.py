"""
Progress schemas - Daily stats, streak and review sessions

DAILY_LEARNING_STATS:
=====================
Counters per calendar day (UTC). A day counts toward the streak when at least
one word was added or reviewed.

REVIEW_SESSIONS:
================
- Created when a review run starts, completed exactly once
- duration_seconds = completed_at - started_at
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, date

from wordflow.models import ReviewMode


# ============= DAILY STATS =============

class DailyStatsResponse(BaseModel):
    """Learning counters for one day"""
    stats_date: date
    words_added: int = 0
    words_reviewed: int = 0
    correct_reviews: int = 0
    incorrect_reviews: int = 0
    study_time_seconds: int = 0

    class Config:
        from_attributes = True


class DailyStatsListResponse(BaseModel):
    start_date: date
    end_date: date
    days: List[DailyStatsResponse]


# ============= STREAK =============

class StreakResponse(BaseModel):
    """Current streak"""
    current_streak: int = 0
    learned_today: bool = False


# ============= REVIEW SESSIONS =============

class ReviewSessionCreate(BaseModel):
    """Schema for starting a review session"""
    total_words: int = Field(..., ge=0)
    review_mode: ReviewMode = ReviewMode.FLASHCARD


class ReviewSessionComplete(BaseModel):
    """Schema for completing a review session"""
    correct_count: int = Field(..., ge=0)
    incorrect_count: int = Field(..., ge=0)
    skipped_count: int = Field(0, ge=0)


class ReviewSessionResponse(BaseModel):
    id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_words: int
    correct_count: int = 0
    incorrect_count: int = 0
    skipped_count: int = 0
    review_mode: ReviewMode
    duration_seconds: int = 0
    accuracy: float = 0.0

    class Config:
        from_attributes = True
