"""
Progress Service - Daily learning stats, streaks and review sessions

=== RESPONSIBILITIES ===
1. Daily counters (words added / reviewed, correct / incorrect, study time)
2. Streak: consecutive active days counted backward from today
3. Review sessions: start, complete once, list recent

=== DAILY STATS ===
- One row per UTC calendar date, created lazily on the first event of the day
- A day is active when words_added > 0 or words_reviewed > 0

=== STREAK LOGIC ===
- Scan backward from today, at most 365 days
- Today without activity yet does not break the streak
- The first inactive day before today ends the scan

=== REVIEW SESSIONS ===
- Created at session start, completed exactly once, immutable afterward
- Only the most recent sessions are kept (REVIEW_SESSION_HISTORY_LIMIT)
"""
import logging
import uuid
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from wordflow.core.errors import EntryNotFoundError, ValidationError
from wordflow.models import DailyLearningStatsRecord, ReviewSessionRecord, ReviewMode
from wordflow.utils.timeutil import ensure_utc, utc_now, utc_today

logger = logging.getLogger(__name__)


class ProgressService:
    """Service for learning statistics and review sessions"""

    STREAK_MAX_DAYS = 365

    def __init__(self, session_history_limit: int = 50):
        self.session_history_limit = session_history_limit

    # ============================================================
    # DAILY STATS
    # ============================================================

    def get_or_create_today_stats(self, db: Session, today: Optional[date] = None) -> DailyLearningStatsRecord:
        """Get or create the stats row for today"""
        today = today or utc_today()

        stats = db.get(DailyLearningStatsRecord, today)
        if not stats:
            stats = DailyLearningStatsRecord(
                stats_date=today,
                words_added=0,
                words_reviewed=0,
                correct_reviews=0,
                incorrect_reviews=0,
                study_time_seconds=0
            )
            db.add(stats)
            db.flush()

        return stats

    def increment_words_added(self, db: Session, count: int = 1, today: Optional[date] = None) -> DailyLearningStatsRecord:
        stats = self.get_or_create_today_stats(db, today)
        stats.words_added += count
        db.commit()
        return stats

    def record_review(self, db: Session, correct: bool, today: Optional[date] = None) -> DailyLearningStatsRecord:
        stats = self.get_or_create_today_stats(db, today)
        stats.words_reviewed += 1
        if correct:
            stats.correct_reviews += 1
        else:
            stats.incorrect_reviews += 1
        db.commit()
        return stats

    def add_study_time(self, db: Session, seconds: int, today: Optional[date] = None) -> DailyLearningStatsRecord:
        stats = self.get_or_create_today_stats(db, today)
        stats.study_time_seconds += max(0, seconds)
        db.commit()
        return stats

    def fetch_stats(self, db: Session, start_date: date, end_date: date) -> List[DailyLearningStatsRecord]:
        """Stats rows in [start_date, end_date], oldest first"""
        return db.query(DailyLearningStatsRecord).filter(
            DailyLearningStatsRecord.stats_date >= start_date,
            DailyLearningStatsRecord.stats_date <= end_date
        ).order_by(DailyLearningStatsRecord.stats_date.asc()).all()

    # ============================================================
    # STREAK
    # ============================================================

    def calculate_streak(self, db: Session, today: Optional[date] = None) -> int:
        """Number of consecutive active days ending today (or yesterday)"""
        today = today or utc_today()
        window_start = today - timedelta(days=self.STREAK_MAX_DAYS - 1)

        active_days = {
            stats.stats_date
            for stats in self.fetch_stats(db, window_start, today)
            if stats.has_activity
        }

        streak = 0
        for offset in range(self.STREAK_MAX_DAYS):
            day = today - timedelta(days=offset)
            if day in active_days:
                streak += 1
            elif offset > 0:
                break

        return streak

    # ============================================================
    # REVIEW SESSIONS
    # ============================================================

    def create_review_session(
        self,
        db: Session,
        total_words: int,
        mode: ReviewMode = ReviewMode.FLASHCARD,
        now: Optional[datetime] = None
    ) -> ReviewSessionRecord:
        session = ReviewSessionRecord(
            id=uuid.uuid4().hex,
            started_at=now or utc_now(),
            total_words=total_words,
            correct_count=0,
            incorrect_count=0,
            skipped_count=0,
            review_mode=mode,
            duration_seconds=0
        )
        db.add(session)
        db.flush()

        self._trim_sessions(db)
        db.commit()

        logger.info(f"📚 Review session started with {total_words} words")
        return session

    def complete_review_session(
        self,
        db: Session,
        session_id: str,
        correct_count: int,
        incorrect_count: int,
        skipped_count: int = 0,
        now: Optional[datetime] = None
    ) -> ReviewSessionRecord:
        """
        Close a session with its final counters

        Raises:
            EntryNotFoundError: unknown session id
            ValidationError: the session was already completed
        """
        session = db.get(ReviewSessionRecord, session_id)
        if not session:
            raise EntryNotFoundError("Review session", session_id)
        if session.completed_at is not None:
            raise ValidationError(f"Review session already completed: {session_id}")

        now = ensure_utc(now) if now else utc_now()
        session.correct_count = correct_count
        session.incorrect_count = incorrect_count
        session.skipped_count = skipped_count
        session.completed_at = now
        session.duration_seconds = max(0, int((now - ensure_utc(session.started_at)).total_seconds()))

        stats = self.get_or_create_today_stats(db, now.date())
        stats.study_time_seconds += session.duration_seconds

        db.commit()

        logger.info(
            f"✅ Review session completed: correct={correct_count} "
            f"incorrect={incorrect_count} skipped={skipped_count}"
        )
        return session

    def get_recent_sessions(self, db: Session, limit: int = 10) -> List[ReviewSessionRecord]:
        return db.query(ReviewSessionRecord).order_by(
            ReviewSessionRecord.started_at.desc()
        ).limit(limit).all()

    def _trim_sessions(self, db: Session):
        """Delete sessions beyond the retention limit"""
        stale = db.query(ReviewSessionRecord).order_by(
            ReviewSessionRecord.started_at.desc()
        ).offset(self.session_history_limit).all()

        for session in stale:
            db.delete(session)
