"""
Vocabulary Router - API endpoints for vocabulary entries and reviews

=== WHAT IT COVERS ===
1. Add, list, search, edit, favorite, archive and delete words
2. Due queue for the next review run
3. Submit a review rating (Forgot / Hard / Good)

=== REVIEW FLOW ===
1. Client calls GET /vocabulary/due → receives the most overdue words
2. For each card the learner rates recall
3. Client calls POST /vocabulary/{id}/review with quality 0-2
4. Server reschedules the word and updates today's stats
"""
import asyncio

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from wordflow.config import settings
from wordflow.core.dependencies import (
    get_db, get_progress_service, get_scheduler, get_vocabulary_service
)
from wordflow.schemas.vocabulary import (
    VocabularyCreate, VocabularyUpdate, VocabularyResponse,
    ArchiveRequest, ReviewSubmitRequest, ReviewResultResponse,
    DueVocabularyResponse
)
from wordflow.services import (
    ProgressService, SpacedRepetitionService, VocabularyEntry, VocabularyService
)

router = APIRouter(
    prefix="/vocabulary",
    tags=["Vocabulary"]
)


def to_response(entry: VocabularyEntry) -> VocabularyResponse:
    return VocabularyResponse.model_validate(entry)


# ============================================================
# POST /vocabulary - Add a word
# ============================================================
@router.post("", response_model=VocabularyResponse, status_code=status.HTTP_201_CREATED)
async def add_word(
    request: VocabularyCreate,
    db: Session = Depends(get_db),
    vocabulary: VocabularyService = Depends(get_vocabulary_service),
    progress: ProgressService = Depends(get_progress_service)
):
    """
    ➕ ADD A WORD

    Logic:
    1. Normalize the word (trim, lower-case)
    2. Reject it if an active entry with the same word exists (409)
    3. Create the entry, due for review immediately
    4. Count it in today's words_added
    """
    entry = await vocabulary.add_word(**request.model_dump())
    await asyncio.to_thread(progress.increment_words_added, db)
    return to_response(entry)


# ============================================================
# GET /vocabulary - List / search words
# ============================================================
@router.get("", response_model=List[VocabularyResponse])
async def list_words(
    q: Optional[str] = Query(None, description="Search word, definitions and tags"),
    category: Optional[str] = Query(None),
    favorites_only: bool = Query(False),
    mastery_level: Optional[int] = Query(None, ge=0, le=4),
    include_archived: bool = Query(False),
    vocabulary: VocabularyService = Depends(get_vocabulary_service)
):
    """
    📚 LIST WORDS (newest first)

    Use case:
    - Vocabulary page with search box and filters
    """
    entries = await vocabulary.list_words(
        query=q,
        category=category,
        favorites_only=favorites_only,
        mastery_level=mastery_level,
        include_archived=include_archived
    )
    return [to_response(entry) for entry in entries]


# ============================================================
# GET /vocabulary/due - Due queue
# ============================================================
@router.get("/due", response_model=DueVocabularyResponse)
async def get_due_words(
    limit: int = Query(settings.DEFAULT_DUE_LIMIT, ge=0, le=500, description="0 = no limit"),
    vocabulary: VocabularyService = Depends(get_vocabulary_service),
    scheduler: SpacedRepetitionService = Depends(get_scheduler)
):
    """
    ⏰ WORDS DUE FOR REVIEW

    Logic:
    1. Skip archived words and words scheduled in the future
    2. Most overdue first; ties go to the lower mastery level
    3. Truncate to limit
    """
    due = await vocabulary.get_due(limit=limit)
    return DueVocabularyResponse(
        total=len(due),
        estimated_minutes=scheduler.estimate_review_time(len(due)),
        words=[to_response(entry) for entry in due]
    )


@router.get("/categories", response_model=List[str])
async def get_categories(vocabulary: VocabularyService = Depends(get_vocabulary_service)):
    return await vocabulary.get_categories()


# ============================================================
# /vocabulary/{entry_id}
# ============================================================
@router.get("/{entry_id}", response_model=VocabularyResponse)
async def get_word(entry_id: str, vocabulary: VocabularyService = Depends(get_vocabulary_service)):
    return to_response(await vocabulary.get_word(entry_id))


@router.patch("/{entry_id}", response_model=VocabularyResponse)
async def update_word(
    entry_id: str,
    request: VocabularyUpdate,
    vocabulary: VocabularyService = Depends(get_vocabulary_service)
):
    """
    ✏️ EDIT METADATA

    Only the fields sent in the body change; the review schedule is untouched.
    """
    entry = await vocabulary.update_metadata(entry_id, **request.model_dump(exclude_unset=True))
    return to_response(entry)


@router.post("/{entry_id}/favorite", response_model=VocabularyResponse)
async def toggle_favorite(entry_id: str, vocabulary: VocabularyService = Depends(get_vocabulary_service)):
    return to_response(await vocabulary.toggle_favorite(entry_id))


@router.post("/{entry_id}/archive", response_model=VocabularyResponse)
async def archive_word(
    entry_id: str,
    request: ArchiveRequest,
    vocabulary: VocabularyService = Depends(get_vocabulary_service)
):
    """
    📦 ARCHIVE / RESTORE

    Archived words leave the due queue and the default listing.
    Restoring fails with 409 when the same word was added again meanwhile.
    """
    entry = await vocabulary.set_archived(entry_id, request.archived)
    return to_response(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_word(entry_id: str, vocabulary: VocabularyService = Depends(get_vocabulary_service)):
    await vocabulary.delete_word(entry_id)


# ============================================================
# POST /vocabulary/{entry_id}/review - Rate one review
# ============================================================
@router.post("/{entry_id}/review", response_model=ReviewResultResponse)
async def review_word(
    entry_id: str,
    request: ReviewSubmitRequest,
    db: Session = Depends(get_db),
    vocabulary: VocabularyService = Depends(get_vocabulary_service),
    progress: ProgressService = Depends(get_progress_service),
    scheduler: SpacedRepetitionService = Depends(get_scheduler)
):
    """
    🎯 SUBMIT A REVIEW

    Logic:
    1. Good (2): interval grows (0 → 1 → 3 → interval × ease), ease +0.1
    2. Forgot / Hard: interval back to 1 day, ease -0.2 (never below 1.3)
    3. Mastery level follows the new interval
    4. Today's words_reviewed and correct / incorrect counters are updated

    Example request:
    {"quality": 2}
    """
    entry, result = await vocabulary.record_review(entry_id, request.quality)
    await asyncio.to_thread(progress.record_review, db, correct=result.was_correct)

    return ReviewResultResponse(
        entry=to_response(entry),
        was_correct=result.was_correct,
        next_interval=result.next_interval,
        new_ease_factor=result.new_ease_factor,
        new_mastery_level=result.new_mastery_level,
        mastery_level_name=scheduler.mastery_level_name(result.new_mastery_level),
        next_review_date=result.next_review_date
    )
