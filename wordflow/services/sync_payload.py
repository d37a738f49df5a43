"""
Sync Payload - Mapping between VocabularyEntry and the remote wire format

=== WIRE FORMAT ===
- Always sent: word, mastery_level, ease_factor, interval, review_count,
  correct_count, is_favorite, is_archived, created_at, updated_at, local_id
- Sent only when present: phonetic, part_of_speech, definition_en,
  definition_cn, example_sentences, synonyms, antonyms, tags, user_context,
  category, notes, last_reviewed_at, next_review_at
- Timestamps are ISO-8601 strings
- synonyms / antonyms / tags are comma-joined strings
- example_sentences is a JSON-encoded array

=== MERGE RULE (sparse) ===
Only fields present in the remote record overwrite local values. Empty text
fields count as absent; numbers and booleans count when not null.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from wordflow.models import SyncStatus
from wordflow.schemas.sync import RemoteVocabularyRecord
from wordflow.services.repository import VocabularyEntry, normalize_word
from wordflow.services.spaced_repetition import SpacedRepetitionService
from wordflow.utils.timeutil import ensure_utc, utc_now

logger = logging.getLogger(__name__)

MIN_EASE_FACTOR = SpacedRepetitionService.MIN_EASE_FACTOR

_TEXT_FIELDS = (
    "phonetic", "part_of_speech", "definition_en", "definition_cn",
    "user_context", "category", "notes",
)
_CSV_FIELDS = ("synonyms", "antonyms", "tags")
_VALUE_FIELDS = (
    "mastery_level", "ease_factor", "interval", "review_count",
    "correct_count", "is_favorite", "is_archived",
)


# ============================================================
# HELPERS
# ============================================================

def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def split_csv(value: Optional[str]) -> List[str]:
    """'a, b,,c ' -> ['a', 'b', 'c']"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def join_csv(values: List[str]) -> str:
    return ",".join(values)


def parse_examples(value: Optional[str]) -> List[Any]:
    """Decode the JSON example array; malformed input yields an empty list"""
    if not value:
        return []
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        logger.warning(f"Malformed example_sentences ignored: {value[:80]!r}")
        return []
    return decoded if isinstance(decoded, list) else []


# ============================================================
# LOCAL -> WIRE
# ============================================================

def build_sync_payload(entry: VocabularyEntry) -> Dict[str, Any]:
    """Serialize an entry for POST / PATCH"""
    payload: Dict[str, Any] = {
        "word": entry.word,
        "mastery_level": entry.mastery_level,
        "ease_factor": entry.ease_factor,
        "interval": entry.interval,
        "review_count": entry.review_count,
        "correct_count": entry.correct_count,
        "is_favorite": entry.is_favorite,
        "is_archived": entry.is_archived,
        "created_at": to_iso(entry.created_at),
        "updated_at": to_iso(entry.updated_at),
    }

    for name in _TEXT_FIELDS:
        value = getattr(entry, name)
        if value is not None:
            payload[name] = value

    if entry.examples:
        payload["example_sentences"] = json.dumps(entry.examples, ensure_ascii=False)
    for name in _CSV_FIELDS:
        values = getattr(entry, name)
        if values:
            payload[name] = join_csv(values)

    if entry.last_reviewed_at is not None:
        payload["last_reviewed_at"] = to_iso(entry.last_reviewed_at)
    if entry.next_review_at is not None:
        payload["next_review_at"] = to_iso(entry.next_review_at)

    payload["local_id"] = entry.id
    return payload


# ============================================================
# WIRE -> LOCAL
# ============================================================

def parse_remote_record(raw: Dict[str, Any]) -> RemoteVocabularyRecord:
    """
    Validate one remote row

    Raises:
        ValueError: the row is not a mapping or fails validation
            (pydantic.ValidationError is a ValueError subclass)
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Remote record is not an object: {type(raw).__name__}")
    return RemoteVocabularyRecord.model_validate(raw)


def apply_remote_record(entry: VocabularyEntry, record: RemoteVocabularyRecord) -> VocabularyEntry:
    """
    Sparse-merge a remote record into entry and mark it synced

    Raises:
        ValueError: merged counters would give correct_count > review_count;
            entry is left untouched
    """
    review_count = record.review_count if record.review_count is not None else entry.review_count
    correct_count = record.correct_count if record.correct_count is not None else entry.correct_count
    if correct_count > review_count:
        raise ValueError(
            f"Remote record for '{record.word}' gives correct_count {correct_count} "
            f"> review_count {review_count}"
        )

    for name in _TEXT_FIELDS:
        value = getattr(record, name)
        if value:
            setattr(entry, name, value)

    if record.example_sentences:
        entry.examples = parse_examples(record.example_sentences)
    for name in _CSV_FIELDS:
        value = getattr(record, name)
        if value:
            setattr(entry, name, split_csv(value))

    for name in _VALUE_FIELDS:
        value = getattr(record, name)
        if value is not None:
            setattr(entry, name, value)
    entry.ease_factor = max(MIN_EASE_FACTOR, entry.ease_factor)

    if record.last_reviewed_at is not None:
        entry.last_reviewed_at = ensure_utc(record.last_reviewed_at)
    if record.next_review_at is not None:
        entry.next_review_at = ensure_utc(record.next_review_at)
    if record.updated_at is not None:
        entry.updated_at = ensure_utc(record.updated_at)

    if record.id is not None:
        entry.backend_id = record.id
    entry.sync_status = SyncStatus.SYNCED
    return entry


def entry_from_remote_record(record: RemoteVocabularyRecord) -> VocabularyEntry:
    """Build a new local entry from a remote word never seen locally"""
    now = utc_now()
    entry = VocabularyEntry(
        word=normalize_word(record.word),
        created_at=ensure_utc(record.created_at) if record.created_at else now,
        updated_at=now,
    )
    apply_remote_record(entry, record)
    if entry.next_review_at is None and entry.interval == 0:
        # Never reviewed remotely: due immediately, like a local add
        entry.next_review_at = entry.created_at
    return entry

