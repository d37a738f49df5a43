"""
Progress Router - API endpoints for learning progress, streak and review sessions

=== WHAT IT COVERS ===
1. Dashboard overview (mastery tiers, accuracy, streak)
2. Streak (consecutive days with activity)
3. Daily stats over a date range
4. Review sessions: start, complete, history

=== STREAK LOGIC ===
- A day counts when at least one word was added or reviewed
- Today without activity yet does not break the streak
- Any other missed day ends it
"""
import asyncio

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date, timedelta
from typing import List, Optional

from wordflow.core.dependencies import get_db, get_progress_service, get_vocabulary_service
from wordflow.schemas.progress import (
    DailyStatsListResponse, DailyStatsResponse, StreakResponse,
    ReviewSessionCreate, ReviewSessionComplete, ReviewSessionResponse
)
from wordflow.schemas.vocabulary import ProgressOverviewResponse
from wordflow.services import ProgressService, VocabularyService
from wordflow.utils.timeutil import utc_today

router = APIRouter(
    prefix="/progress",
    tags=["Progress"]
)


# ============================================================
# GET /progress/overview - Dashboard
# ============================================================
@router.get("/overview", response_model=ProgressOverviewResponse)
async def get_progress_overview(
    db: Session = Depends(get_db),
    vocabulary: VocabularyService = Depends(get_vocabulary_service),
    progress: ProgressService = Depends(get_progress_service)
):
    """
    📊 PROGRESS OVERVIEW

    Logic:
    1. Aggregate non-archived words by mastery tier
    2. Total reviews, accuracy, mean ease factor
    3. Current streak

    Returns:
    - total_words: 120
    - mastered_words: 15
    - accuracy: 82.5
    - current_streak: 5
    """
    summary = await vocabulary.get_progress()
    return ProgressOverviewResponse(
        total_words=summary.total_words,
        new_words=summary.new_words,
        learning_words=summary.learning_words,
        mastered_words=summary.mastered_words,
        level_counts=summary.level_counts,
        mastery_percentage=round(summary.mastery_percentage, 1),
        total_reviews=summary.total_reviews,
        total_correct=summary.total_correct,
        accuracy=round(summary.accuracy, 1),
        average_ease_factor=round(summary.average_ease_factor, 2),
        current_streak=await asyncio.to_thread(progress.calculate_streak, db)
    )


# ============================================================
# GET /progress/streak
# ============================================================
@router.get("/streak", response_model=StreakResponse)
def get_streak(
    db: Session = Depends(get_db),
    progress: ProgressService = Depends(get_progress_service)
):
    """
    🔥 CURRENT STREAK

    Use case:
    - "🔥 5 days in a row" widget
    """
    today = utc_today()
    today_stats = progress.fetch_stats(db, today, today)

    return StreakResponse(
        current_streak=progress.calculate_streak(db, today),
        learned_today=bool(today_stats) and today_stats[0].has_activity
    )


# ============================================================
# GET /progress/daily - Daily stats
# ============================================================
@router.get("/daily", response_model=DailyStatsListResponse)
def get_daily_stats(
    days: int = Query(7, ge=1, le=365, description="Number of days ending today"),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    progress: ProgressService = Depends(get_progress_service)
):
    """
    📅 DAILY STATS

    Only days with a stats row are returned (oldest first).
    """
    end_date = end_date or utc_today()
    start_date = end_date - timedelta(days=days - 1)

    stats = progress.fetch_stats(db, start_date, end_date)
    return DailyStatsListResponse(
        start_date=start_date,
        end_date=end_date,
        days=[DailyStatsResponse.model_validate(row) for row in stats]
    )


# ============================================================
# REVIEW SESSIONS
# ============================================================
@router.post("/sessions", response_model=ReviewSessionResponse, status_code=status.HTTP_201_CREATED)
def start_review_session(
    request: ReviewSessionCreate,
    db: Session = Depends(get_db),
    progress: ProgressService = Depends(get_progress_service)
):
    """
    ▶️ START A REVIEW SESSION

    Only the most recent sessions are kept; older ones are deleted.
    """
    session = progress.create_review_session(db, request.total_words, request.review_mode)
    return ReviewSessionResponse.model_validate(session)


@router.post("/sessions/{session_id}/complete", response_model=ReviewSessionResponse)
def complete_review_session(
    session_id: str,
    request: ReviewSessionComplete,
    db: Session = Depends(get_db),
    progress: ProgressService = Depends(get_progress_service)
):
    """
    ⏹️ COMPLETE A REVIEW SESSION

    Logic:
    1. Store final counters and duration
    2. Add the duration to today's study time
    3. A session can be completed once (409 afterward)
    """
    session = progress.complete_review_session(
        db,
        session_id,
        correct_count=request.correct_count,
        incorrect_count=request.incorrect_count,
        skipped_count=request.skipped_count
    )
    return ReviewSessionResponse.model_validate(session)


@router.get("/sessions", response_model=List[ReviewSessionResponse])
def get_recent_sessions(
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    progress: ProgressService = Depends(get_progress_service)
):
    """Most recent sessions first"""
    return [
        ReviewSessionResponse.model_validate(session)
        for session in progress.get_recent_sessions(db, limit)
    ]
