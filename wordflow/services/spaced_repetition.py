"""
Spaced Repetition Service - SM-2 style review scheduling

=== RESPONSIBILITIES ===
1. Compute the next interval / ease factor / mastery level after a review
2. Select the entries that are due for review
3. Aggregate learning progress over a vocabulary set

=== QUALITY SCALE ===
- 0 FORGOT: complete blackout
- 1 HARD:   struggled but recalled (still counted as incorrect)
- 2 GOOD:   recalled correctly

=== INTERVAL RULES ===
- Correct:   0 → 1 day, 1 → 3 days, otherwise round(interval * ease_factor)
             ease_factor += 0.1 - (2 - quality) * 0.08
- Incorrect: interval = 1 day, ease_factor -= 0.2
- ease_factor is clamped to >= 1.3 before and after the update

=== MASTERY LEVEL (interval only) ===
- 0 NEW:       interval == 0
- 1 LEARNING:  < 7 days
- 2 REVIEWING: < 21 days
- 3 FAMILIAR:  < 60 days
- 4 MASTERED:  >= 60 days
"""
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, TYPE_CHECKING

from wordflow.utils.timeutil import EPOCH, ensure_utc, round_half_up, utc_now

if TYPE_CHECKING:
    from wordflow.services.repository import VocabularyEntry

logger = logging.getLogger(__name__)


class ResponseQuality(enum.IntEnum):
    """Learner's self-reported recall quality"""
    FORGOT = 0
    HARD = 1
    GOOD = 2


class MasteryLevel(enum.IntEnum):
    """Five-tier classification derived from the review interval"""
    NEW = 0
    LEARNING = 1
    REVIEWING = 2
    FAMILIAR = 3
    MASTERED = 4


MASTERY_LEVEL_NAMES = {
    MasteryLevel.NEW: "New",
    MasteryLevel.LEARNING: "Learning",
    MasteryLevel.REVIEWING: "Reviewing",
    MasteryLevel.FAMILIAR: "Familiar",
    MasteryLevel.MASTERED: "Mastered",
}


@dataclass
class ReviewResult:
    """Result of one scheduling calculation"""
    next_interval: int
    new_ease_factor: float
    new_mastery_level: int
    next_review_date: datetime
    was_correct: bool


@dataclass
class ProgressSummary:
    """Aggregate statistics over the non-archived vocabulary"""
    total_words: int = 0
    new_words: int = 0
    learning_words: int = 0
    mastered_words: int = 0
    level_counts: Dict[int, int] = field(
        default_factory=lambda: {int(level): 0 for level in MasteryLevel}
    )
    mastery_percentage: float = 0.0
    total_reviews: int = 0
    total_correct: int = 0
    accuracy: float = 0.0
    average_ease_factor: float = 2.5


class SpacedRepetitionService:
    """Pure, stateless review scheduler"""

    MIN_EASE_FACTOR = 1.3
    DEFAULT_EASE_FACTOR = 2.5
    EASE_BONUS = 0.1
    EASE_QUALITY_PENALTY = 0.08
    EASE_LAPSE_PENALTY = 0.2
    SECONDS_PER_WORD = 18

    # ============================================================
    # SCHEDULING
    # ============================================================

    def compute_next_review(
        self,
        current_interval: int,
        ease_factor: float,
        quality: int,
        now: Optional[datetime] = None
    ) -> ReviewResult:
        """
        Calculate the next review from the learner's rating

        Args:
            current_interval: Current interval in days (0 for new words)
            ease_factor: Current ease factor
            quality: ResponseQuality or its int value (0-2)
            now: Reference time, defaults to the current UTC time

        Returns:
            ReviewResult with the updated scheduling parameters

        Raises:
            ValueError: quality outside {0, 1, 2}
        """
        quality = ResponseQuality(quality)
        now = ensure_utc(now) if now else utc_now()

        interval = current_interval
        ef = max(self.MIN_EASE_FACTOR, ease_factor)

        was_correct = quality >= ResponseQuality.GOOD

        if was_correct:
            if interval == 0:
                interval = 1
            elif interval == 1:
                interval = 3
            else:
                interval = round_half_up(interval * ef)

            # Only GOOD reaches this branch, so the adjustment is +0.1
            ef = ef + (self.EASE_BONUS - (2.0 - int(quality)) * self.EASE_QUALITY_PENALTY)
        else:
            interval = 1
            ef = ef - self.EASE_LAPSE_PENALTY

        ef = max(self.MIN_EASE_FACTOR, ef)

        mastery_level = self.calculate_mastery_level(interval)

        logger.debug(
            "Review computed: quality=%s interval %s -> %s ease %.2f -> %.2f mastery=%s",
            quality.name, current_interval, interval, ease_factor, ef, mastery_level,
        )

        return ReviewResult(
            next_interval=interval,
            new_ease_factor=ef,
            new_mastery_level=mastery_level,
            next_review_date=now + timedelta(days=interval),
            was_correct=was_correct,
        )

    def calculate_mastery_level(self, interval: int) -> int:
        """Mastery level (0-4) from an interval in days"""
        if interval == 0:
            return MasteryLevel.NEW
        if interval < 7:
            return MasteryLevel.LEARNING
        if interval < 21:
            return MasteryLevel.REVIEWING
        if interval < 60:
            return MasteryLevel.FAMILIAR
        return MasteryLevel.MASTERED

    def mastery_level_name(self, level: int) -> str:
        try:
            return MASTERY_LEVEL_NAMES[MasteryLevel(level)]
        except ValueError:
            return "Unknown"

    def estimate_review_time(self, word_count: int) -> int:
        """Estimated minutes for a review of word_count cards (at least 1)"""
        return max(1, round_half_up(word_count * self.SECONDS_PER_WORD / 60))

    # ============================================================
    # DUE SELECTION
    # ============================================================

    def select_due(
        self,
        entries: Sequence["VocabularyEntry"],
        limit: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> List["VocabularyEntry"]:
        """
        Entries due for review, most overdue first

        Archived entries and entries scheduled in the future are dropped.
        Never-scheduled entries sort as the epoch; ties go to the lower
        mastery level.
        """
        now = ensure_utc(now) if now else utc_now()

        due = [
            entry for entry in entries
            if not entry.is_archived
            and (entry.next_review_at is None or ensure_utc(entry.next_review_at) <= now)
        ]

        due.sort(key=lambda entry: (
            ensure_utc(entry.next_review_at) if entry.next_review_at else EPOCH,
            entry.mastery_level,
        ))

        if limit is not None and limit > 0:
            due = due[:limit]

        return due

    # ============================================================
    # PROGRESS
    # ============================================================

    def aggregate_progress(self, entries: Sequence["VocabularyEntry"]) -> ProgressSummary:
        """Progress statistics over the non-archived entries"""
        active = [entry for entry in entries if not entry.is_archived]
        total_words = len(active)

        if total_words == 0:
            return ProgressSummary(average_ease_factor=self.DEFAULT_EASE_FACTOR)

        summary = ProgressSummary(total_words=total_words)
        for entry in active:
            level = entry.mastery_level
            summary.level_counts[level] = summary.level_counts.get(level, 0) + 1
            summary.total_reviews += entry.review_count
            summary.total_correct += entry.correct_count

        summary.new_words = summary.level_counts[MasteryLevel.NEW]
        summary.mastered_words = summary.level_counts[MasteryLevel.MASTERED]
        summary.learning_words = sum(
            count for level, count in summary.level_counts.items()
            if MasteryLevel.LEARNING <= level < MasteryLevel.MASTERED
        )
        summary.mastery_percentage = summary.mastered_words / total_words * 100
        if summary.total_reviews > 0:
            summary.accuracy = summary.total_correct / summary.total_reviews * 100
        summary.average_ease_factor = sum(entry.ease_factor for entry in active) / total_words

        return summary
