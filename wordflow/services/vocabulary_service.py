"""
Vocabulary Service - Lifecycle of vocabulary entries

=== RESPONSIBILITIES ===
1. Create entries (normalized word, unique among non-archived entries)
2. Edit metadata, toggle favorite, archive / unarchive, delete
3. Apply a review rating through the SpacedRepetitionService
4. Search, filter and due-queue queries

Every mutation goes through VocabularyEntry.touch(), which bumps updated_at
and resets sync_status to pending so the next push picks it up.
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from wordflow.core.errors import EntryNotFoundError, ValidationError
from wordflow.services.repository import (
    VocabularyEntry, VocabularyRepository, normalize_word
)
from wordflow.services.spaced_repetition import (
    ProgressSummary, ReviewResult, SpacedRepetitionService
)
from wordflow.utils.timeutil import utc_now

logger = logging.getLogger(__name__)


class VocabularyService:
    """Service managing the learner's vocabulary"""

    METADATA_FIELDS = (
        "phonetic", "part_of_speech", "definition_en", "definition_cn",
        "examples", "synonyms", "antonyms", "tags", "category",
        "user_context", "notes",
    )
    LIST_FIELDS = ("examples", "synonyms", "antonyms", "tags")

    def __init__(self, repository: VocabularyRepository, scheduler: SpacedRepetitionService):
        self.repository = repository
        self.scheduler = scheduler

    # ============================================================
    # CREATE
    # ============================================================

    async def add_word(self, word: str, **metadata) -> VocabularyEntry:
        """
        Add a new word

        Raises:
            ValidationError: empty word, unknown field, or the word already
                exists among non-archived entries
        """
        normalized = normalize_word(word)
        if not normalized:
            raise ValidationError("Word must not be empty")

        existing = await self.repository.get_by_word(normalized)
        if existing and not existing.is_archived:
            raise ValidationError(f'Word "{normalized}" already exists in vocabulary')

        now = utc_now()
        entry = VocabularyEntry(
            word=normalized,
            created_at=now,
            updated_at=now,
            # Due immediately
            next_review_at=now,
        )
        self._apply_metadata(entry, metadata)

        await self.repository.put(entry)
        logger.info(f"Word added: {entry.word}")
        return entry

    # ============================================================
    # READ
    # ============================================================

    async def get_word(self, entry_id: str) -> VocabularyEntry:
        entry = await self.repository.get_by_id(entry_id)
        if entry is None:
            raise EntryNotFoundError("Vocabulary entry", entry_id)
        return entry

    async def list_words(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        favorites_only: bool = False,
        mastery_level: Optional[int] = None,
        include_archived: bool = False
    ) -> List[VocabularyEntry]:
        """Filter entries; newest first"""
        entries = await self.repository.get_all(include_archived=include_archived)

        if query and query.strip():
            needle = query.strip().lower()
            entries = [entry for entry in entries if self._matches(entry, needle)]
        if category:
            entries = [entry for entry in entries if entry.category == category]
        if favorites_only:
            entries = [entry for entry in entries if entry.is_favorite]
        if mastery_level is not None:
            entries = [entry for entry in entries if entry.mastery_level == mastery_level]

        entries.sort(key=lambda entry: entry.created_at, reverse=True)
        return entries

    async def get_due(self, limit: Optional[int] = None, now: Optional[datetime] = None) -> List[VocabularyEntry]:
        entries = await self.repository.get_all()
        return self.scheduler.select_due(entries, limit=limit, now=now)

    async def get_categories(self) -> List[str]:
        entries = await self.repository.get_all()
        return sorted({entry.category for entry in entries if entry.category})

    async def get_progress(self) -> ProgressSummary:
        entries = await self.repository.get_all()
        return self.scheduler.aggregate_progress(entries)

    # ============================================================
    # UPDATE
    # ============================================================

    async def update_metadata(self, entry_id: str, **metadata) -> VocabularyEntry:
        """Overwrite the given metadata fields; None values are ignored"""
        entry = await self.get_word(entry_id)
        changes = {name: value for name, value in metadata.items() if value is not None}
        if not changes:
            return entry

        self._apply_metadata(entry, changes)
        entry.touch()
        await self.repository.put(entry)
        logger.info(f"Metadata updated: {entry.word}")
        return entry

    async def toggle_favorite(self, entry_id: str) -> VocabularyEntry:
        entry = await self.get_word(entry_id)
        entry.is_favorite = not entry.is_favorite
        entry.touch()
        await self.repository.put(entry)
        logger.info(f"⭐ Favorite toggled for {entry.word}: {entry.is_favorite}")
        return entry

    async def set_archived(self, entry_id: str, archived: bool) -> VocabularyEntry:
        """
        Archive (soft delete) or restore an entry

        Raises:
            ValidationError: restoring would duplicate an active word
        """
        entry = await self.get_word(entry_id)
        if entry.is_archived == archived:
            return entry

        if not archived:
            active = await self.repository.get_by_word(entry.word)
            if active and active.id != entry.id and not active.is_archived:
                raise ValidationError(f'Word "{entry.word}" already exists in vocabulary')

        entry.is_archived = archived
        entry.touch()
        await self.repository.put(entry)
        logger.info(f"📦 Archive status for {entry.word}: {archived}")
        return entry

    async def delete_word(self, entry_id: str) -> None:
        entry = await self.get_word(entry_id)
        await self.repository.delete(entry.id)
        logger.info(f"🗑️ Word deleted: {entry.word}")

    # ============================================================
    # REVIEW
    # ============================================================

    async def record_review(
        self,
        entry_id: str,
        quality: int,
        now: Optional[datetime] = None
    ) -> Tuple[VocabularyEntry, ReviewResult]:
        """
        Apply one review rating to an entry

        Logic:
        1. Compute the next schedule from (interval, ease_factor, quality)
        2. review_count += 1, correct_count += 1 only when the answer was correct
        3. Store interval / ease factor / mastery level / next review date
        4. Mark the entry pending for sync
        """
        entry = await self.get_word(entry_id)
        now = now or utc_now()

        try:
            result = self.scheduler.compute_next_review(
                current_interval=entry.interval,
                ease_factor=entry.ease_factor,
                quality=quality,
                now=now,
            )
        except ValueError as e:
            raise ValidationError(f"Invalid review quality: {quality}") from e

        entry.review_count += 1
        if result.was_correct:
            entry.correct_count += 1
        entry.last_reviewed_at = now
        entry.next_review_at = result.next_review_date
        entry.ease_factor = result.new_ease_factor
        entry.interval = result.next_interval
        entry.mastery_level = int(result.new_mastery_level)
        entry.touch(now)

        await self.repository.put(entry)
        logger.info(
            f"📝 Reviewed {entry.word}: interval={entry.interval}d "
            f"mastery={self.scheduler.mastery_level_name(entry.mastery_level)}"
        )
        return entry, result

    # ============================================================
    # HELPERS
    # ============================================================

    def _apply_metadata(self, entry: VocabularyEntry, metadata: dict):
        for name, value in metadata.items():
            if name not in self.METADATA_FIELDS:
                raise ValidationError(f"Unknown vocabulary field: {name}")
            if name in self.LIST_FIELDS:
                value = list(value or [])
            setattr(entry, name, value)

    @staticmethod
    def _matches(entry: VocabularyEntry, needle: str) -> bool:
        if needle in entry.word:
            return True
        if entry.definition_en and needle in entry.definition_en.lower():
            return True
        if entry.definition_cn and needle in entry.definition_cn:
            return True
        return any(needle in tag.lower() for tag in entry.tags)
