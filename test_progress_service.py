"""
Test suite for ProgressService

Tests:
1. Daily stats counters
2. Streak calculation
3. Review session lifecycle and retention

Running tests:
    pytest test_progress_service.py -v
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from wordflow.core.errors import EntryNotFoundError, ValidationError
from wordflow.models import DailyLearningStatsRecord, ReviewMode, ReviewSessionRecord

TODAY = date(2024, 5, 10)


def add_activity(db, day: date, words_added: int = 0, words_reviewed: int = 0):
    db.add(DailyLearningStatsRecord(
        stats_date=day,
        words_added=words_added,
        words_reviewed=words_reviewed,
        correct_reviews=0,
        incorrect_reviews=0,
        study_time_seconds=0
    ))
    db.commit()


# ============================================================
# Daily stats
# ============================================================

class TestDailyStats:

    def test_counters(self, db_session, progress_service):
        progress_service.increment_words_added(db_session, today=TODAY)
        progress_service.increment_words_added(db_session, count=2, today=TODAY)
        progress_service.record_review(db_session, correct=True, today=TODAY)
        progress_service.record_review(db_session, correct=False, today=TODAY)
        progress_service.add_study_time(db_session, 90, today=TODAY)
        progress_service.add_study_time(db_session, -5, today=TODAY)

        stats = db_session.get(DailyLearningStatsRecord, TODAY)

        assert stats.words_added == 3
        assert stats.words_reviewed == 2
        assert stats.correct_reviews == 1
        assert stats.incorrect_reviews == 1
        assert stats.study_time_seconds == 90
        assert stats.has_activity is True

    def test_one_row_per_day(self, db_session, progress_service):
        progress_service.increment_words_added(db_session, today=TODAY)
        progress_service.increment_words_added(db_session, today=TODAY + timedelta(days=1))

        rows = progress_service.fetch_stats(db_session, TODAY, TODAY + timedelta(days=1))

        assert [row.stats_date for row in rows] == [TODAY, TODAY + timedelta(days=1)]


# ============================================================
# Streak
# ============================================================

class TestStreak:

    def test_no_activity(self, db_session, progress_service):
        assert progress_service.calculate_streak(db_session, today=TODAY) == 0

    def test_consecutive_days_including_today(self, db_session, progress_service):
        for offset in range(3):
            add_activity(db_session, TODAY - timedelta(days=offset), words_reviewed=1)

        assert progress_service.calculate_streak(db_session, today=TODAY) == 3

    def test_today_without_activity_keeps_streak(self, db_session, progress_service):
        add_activity(db_session, TODAY - timedelta(days=1), words_added=1)
        add_activity(db_session, TODAY - timedelta(days=2), words_added=1)

        assert progress_service.calculate_streak(db_session, today=TODAY) == 2

    def test_gap_breaks_streak(self, db_session, progress_service):
        add_activity(db_session, TODAY, words_added=1)
        add_activity(db_session, TODAY - timedelta(days=2), words_added=1)

        assert progress_service.calculate_streak(db_session, today=TODAY) == 1

    def test_row_without_activity_breaks_streak(self, db_session, progress_service):
        add_activity(db_session, TODAY, words_added=1)
        add_activity(db_session, TODAY - timedelta(days=1))
        add_activity(db_session, TODAY - timedelta(days=2), words_added=1)

        assert progress_service.calculate_streak(db_session, today=TODAY) == 1


# ============================================================
# Review sessions
# ============================================================

class TestReviewSessions:

    def test_complete_session(self, db_session, progress_service):
        started = datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)
        session = progress_service.create_review_session(
            db_session, total_words=10, mode=ReviewMode.REVERSE, now=started
        )

        completed = progress_service.complete_review_session(
            db_session, session.id,
            correct_count=7, incorrect_count=2, skipped_count=1,
            now=started + timedelta(minutes=5)
        )

        assert completed.duration_seconds == 300
        assert completed.accuracy == pytest.approx(7 / 9 * 100)
        assert completed.review_mode == ReviewMode.REVERSE
        assert db_session.get(DailyLearningStatsRecord, TODAY).study_time_seconds == 300

    def test_complete_twice_rejected(self, db_session, progress_service):
        session = progress_service.create_review_session(db_session, total_words=3)
        progress_service.complete_review_session(db_session, session.id, 3, 0)

        with pytest.raises(ValidationError):
            progress_service.complete_review_session(db_session, session.id, 1, 1)

    def test_complete_unknown_session(self, db_session, progress_service):
        with pytest.raises(EntryNotFoundError):
            progress_service.complete_review_session(db_session, "missing", 1, 0)

    def test_old_sessions_trimmed(self, db_session, progress_service):
        base = datetime(2024, 5, 1, tzinfo=timezone.utc)
        for hour in range(5):
            progress_service.create_review_session(db_session, total_words=hour, now=base + timedelta(hours=hour))

        sessions = progress_service.get_recent_sessions(db_session, limit=10)

        # progress_service fixture keeps 3 sessions
        assert db_session.query(ReviewSessionRecord).count() == 3
        assert [s.total_words for s in sessions] == [4, 3, 2]
