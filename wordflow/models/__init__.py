"""
Database models - Export all models
"""
from wordflow.models.vocabulary import VocabularyEntryRecord, SyncStatus
from wordflow.models.progress import ReviewSessionRecord, DailyLearningStatsRecord, ReviewMode

__all__ = [
    # Vocabulary
    "VocabularyEntryRecord",

    # Progress
    "ReviewSessionRecord",
    "DailyLearningStatsRecord",

    # Enums
    "SyncStatus",
    "ReviewMode",
]
