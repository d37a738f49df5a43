"""
Schemas package initialization - Export all Pydantic schemas
"""
# Vocabulary schemas
from wordflow.schemas.vocabulary import (
    VocabularyCreate, VocabularyUpdate, VocabularyResponse,
    ArchiveRequest, ReviewSubmitRequest, ReviewResultResponse,
    DueVocabularyResponse, ProgressOverviewResponse
)

# Progress schemas
from wordflow.schemas.progress import (
    DailyStatsResponse, DailyStatsListResponse, StreakResponse,
    ReviewSessionCreate, ReviewSessionComplete, ReviewSessionResponse
)

# Sync schemas
from wordflow.schemas.sync import (
    RemoteVocabularyRecord, SyncConfigureRequest,
    SyncResultResponse, SyncStatusResponse
)

__all__ = [
    # Vocabulary
    "VocabularyCreate", "VocabularyUpdate", "VocabularyResponse",
    "ArchiveRequest", "ReviewSubmitRequest", "ReviewResultResponse",
    "DueVocabularyResponse", "ProgressOverviewResponse",

    # Progress
    "DailyStatsResponse", "DailyStatsListResponse", "StreakResponse",
    "ReviewSessionCreate", "ReviewSessionComplete", "ReviewSessionResponse",

    # Sync
    "RemoteVocabularyRecord", "SyncConfigureRequest",
    "SyncResultResponse", "SyncStatusResponse",
]
