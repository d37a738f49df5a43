"""
Progress models - review sessions and daily learning statistics
"""
from sqlalchemy import Column, String, DateTime, Integer, Date, Enum
from wordflow.database import Base
import enum


class ReviewMode(str, enum.Enum):
    """How cards are presented during a review session"""
    FLASHCARD = "flashcard"   # Show word, recall meaning
    REVERSE = "reverse"       # Show meaning, recall word
    CONTEXT = "context"       # Show context, recall word


class ReviewSessionRecord(Base):
    """Model ReviewSessionRecord - one review run"""

    __tablename__ = "review_sessions"

    id = Column(String(36), primary_key=True, index=True)
    started_at = Column(DateTime(timezone=True), nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    total_words = Column(Integer, nullable=False, default=0)
    correct_count = Column(Integer, nullable=False, default=0)
    incorrect_count = Column(Integer, nullable=False, default=0)
    skipped_count = Column(Integer, nullable=False, default=0)
    review_mode = Column(Enum(ReviewMode), nullable=False, default=ReviewMode.FLASHCARD)
    duration_seconds = Column(Integer, nullable=False, default=0)

    @property
    def accuracy(self) -> float:
        answered = self.correct_count + self.incorrect_count
        return (self.correct_count / answered * 100) if answered > 0 else 0.0

    def __repr__(self):
        return f"<ReviewSessionRecord(id={self.id}, total={self.total_words})>"


class DailyLearningStatsRecord(Base):
    """Model DailyLearningStatsRecord - activity counters for one calendar day"""

    __tablename__ = "daily_learning_stats"

    stats_date = Column(Date, primary_key=True)
    words_added = Column(Integer, nullable=False, default=0)
    words_reviewed = Column(Integer, nullable=False, default=0)
    correct_reviews = Column(Integer, nullable=False, default=0)
    incorrect_reviews = Column(Integer, nullable=False, default=0)
    study_time_seconds = Column(Integer, nullable=False, default=0)

    @property
    def has_activity(self) -> bool:
        return (self.words_added or 0) > 0 or (self.words_reviewed or 0) > 0

    def __repr__(self):
        return f"<DailyLearningStatsRecord(date={self.stats_date})>"
