"""
Test suite for VocabularyService and the SQLAlchemy repository

Tests:
1. add_word - normalization, uniqueness among active entries, due immediately
2. list / search / due queue / categories
3. metadata edits, favorite, archive, delete
4. record_review - scheduling applied to the stored entry

Running tests:
    pytest test_vocabulary_service.py -v
"""
import asyncio
import threading
import pytest
from datetime import datetime, timedelta, timezone

from wordflow.core.errors import EntryNotFoundError, ValidationError
from wordflow.models import SyncStatus
from wordflow.services.repository import SQLAlchemyVocabularyRepository, VocabularyEntry


def run(coro):
    return asyncio.run(coro)


# ============================================================
# Repository
# ============================================================

class TestRepository:

    def test_put_and_get_round_trip(self, repository):
        entry = VocabularyEntry(
            word="ephemeral",
            definition_en="lasting a very short time",
            synonyms=["fleeting", "transient"],
            examples=["Fame is ephemeral."],
            next_review_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )
        run(repository.put(entry))

        stored = run(repository.get_by_id(entry.id))

        assert stored == entry
        assert stored.next_review_at.tzinfo is not None

    def test_get_by_word_is_case_insensitive(self, repository):
        run(repository.put(VocabularyEntry(word="serendipity")))

        assert run(repository.get_by_word("  SERENDIPITY ")).word == "serendipity"
        assert run(repository.get_by_word("unknown")) is None
        assert run(repository.get_by_word("")) is None

    def test_get_by_word_prefers_active_entry(self, repository):
        archived = VocabularyEntry(word="gist", is_archived=True)
        active = VocabularyEntry(word="gist")
        run(repository.put(archived))
        run(repository.put(active))

        assert run(repository.get_by_word("gist")).id == active.id

    def test_get_all_excludes_archived_by_default(self, repository):
        run(repository.put(VocabularyEntry(word="kept")))
        run(repository.put(VocabularyEntry(word="gone", is_archived=True)))

        assert [e.word for e in run(repository.get_all())] == ["kept"]
        assert len(run(repository.get_all(include_archived=True))) == 2

    def test_delete(self, repository):
        entry = VocabularyEntry(word="temp")
        run(repository.put(entry))
        run(repository.delete(entry.id))

        assert run(repository.get_by_id(entry.id)) is None

    def test_session_work_runs_off_the_event_loop(self, session_factory):
        session_threads = []

        def recording_factory():
            session_threads.append(threading.get_ident())
            return session_factory()

        repository = SQLAlchemyVocabularyRepository(recording_factory)

        async def scenario():
            loop_thread = threading.get_ident()
            ticks = []

            async def ticker():
                for _ in range(3):
                    ticks.append(1)
                    await asyncio.sleep(0)

            await repository.put(VocabularyEntry(word="async"))
            entries, _ = await asyncio.gather(repository.get_all(), ticker())
            return loop_thread, ticks, entries

        loop_thread, ticks, entries = run(scenario())

        assert [e.word for e in entries] == ["async"]
        assert len(session_threads) == 2
        assert loop_thread not in session_threads
        assert len(ticks) == 3


# ============================================================
# add_word
# ============================================================

class TestAddWord:

    def test_add_normalizes_and_is_due(self, vocabulary_service):
        entry = run(vocabulary_service.add_word("  Ubiquitous ", definition_en="found everywhere"))

        assert entry.word == "ubiquitous"
        assert entry.mastery_level == 0
        assert entry.ease_factor == 2.5
        assert entry.interval == 0
        assert entry.sync_status == SyncStatus.PENDING
        assert entry.next_review_at == entry.created_at

        due = run(vocabulary_service.get_due())
        assert [e.id for e in due] == [entry.id]

    def test_empty_word_rejected(self, vocabulary_service):
        with pytest.raises(ValidationError):
            run(vocabulary_service.add_word("   "))

    def test_duplicate_active_word_rejected(self, vocabulary_service):
        run(vocabulary_service.add_word("resilient"))

        with pytest.raises(ValidationError):
            run(vocabulary_service.add_word("RESILIENT"))

    def test_archived_duplicate_allowed(self, vocabulary_service):
        first = run(vocabulary_service.add_word("resilient"))
        run(vocabulary_service.set_archived(first.id, True))

        second = run(vocabulary_service.add_word("resilient"))

        assert second.id != first.id

    def test_unknown_field_rejected(self, vocabulary_service):
        with pytest.raises(ValidationError):
            run(vocabulary_service.add_word("word", color="blue"))


# ============================================================
# Queries
# ============================================================

class TestQueries:

    def test_search_and_filters(self, vocabulary_service):
        run(vocabulary_service.add_word("apple", definition_en="a fruit", category="food", tags=["Kitchen"]))
        run(vocabulary_service.add_word("run", definition_en="move fast", category="verbs"))
        pear = run(vocabulary_service.add_word("pear", definition_en="another fruit", category="food"))
        run(vocabulary_service.toggle_favorite(pear.id))

        assert {e.word for e in run(vocabulary_service.list_words(query="FRUIT"))} == {"apple", "pear"}
        assert {e.word for e in run(vocabulary_service.list_words(query="kitchen"))} == {"apple"}
        assert {e.word for e in run(vocabulary_service.list_words(category="verbs"))} == {"run"}
        assert [e.word for e in run(vocabulary_service.list_words(favorites_only=True))] == ["pear"]
        assert run(vocabulary_service.get_categories()) == ["food", "verbs"]

    def test_get_missing_word(self, vocabulary_service):
        with pytest.raises(EntryNotFoundError):
            run(vocabulary_service.get_word("nope"))


# ============================================================
# Mutations
# ============================================================

class TestMutations:

    def test_update_metadata_marks_pending(self, vocabulary_service, repository):
        entry = run(vocabulary_service.add_word("candid"))
        entry.sync_status = SyncStatus.SYNCED
        run(repository.put(entry))

        updated = run(vocabulary_service.update_metadata(
            entry.id, phonetic="/ˈkændɪd/", synonyms=["frank"], notes=None
        ))

        assert updated.phonetic == "/ˈkændɪd/"
        assert updated.synonyms == ["frank"]
        assert updated.sync_status == SyncStatus.PENDING
        assert updated.updated_at >= entry.updated_at
        assert run(repository.get_by_id(entry.id)).phonetic == "/ˈkændɪd/"

    def test_archive_removes_from_due(self, vocabulary_service):
        entry = run(vocabulary_service.add_word("obsolete"))
        run(vocabulary_service.set_archived(entry.id, True))

        assert run(vocabulary_service.get_due()) == []
        assert run(vocabulary_service.list_words()) == []
        assert len(run(vocabulary_service.list_words(include_archived=True))) == 1

    def test_unarchive_onto_active_duplicate_rejected(self, vocabulary_service):
        old = run(vocabulary_service.add_word("novel"))
        run(vocabulary_service.set_archived(old.id, True))
        run(vocabulary_service.add_word("novel"))

        with pytest.raises(ValidationError):
            run(vocabulary_service.set_archived(old.id, False))

    def test_delete(self, vocabulary_service):
        entry = run(vocabulary_service.add_word("fleeting"))
        run(vocabulary_service.delete_word(entry.id))

        with pytest.raises(EntryNotFoundError):
            run(vocabulary_service.get_word(entry.id))


# ============================================================
# record_review
# ============================================================

class TestRecordReview:

    def test_good_review_updates_schedule(self, vocabulary_service):
        entry = run(vocabulary_service.add_word("lucid"))
        now = datetime.now(timezone.utc)

        reviewed, result = run(vocabulary_service.record_review(entry.id, 2, now=now))

        assert result.was_correct is True
        assert reviewed.interval == 1
        assert reviewed.ease_factor == pytest.approx(2.6)
        assert reviewed.mastery_level == 1
        assert reviewed.review_count == 1
        assert reviewed.correct_count == 1
        assert reviewed.last_reviewed_at == now
        assert reviewed.next_review_at == now + timedelta(days=1)
        assert reviewed.sync_status == SyncStatus.PENDING

        # Scheduled tomorrow: no longer due
        assert run(vocabulary_service.get_due()) == []

    def test_incorrect_review_does_not_count_as_correct(self, vocabulary_service):
        entry = run(vocabulary_service.add_word("arcane"))

        run(vocabulary_service.record_review(entry.id, 2))
        reviewed, result = run(vocabulary_service.record_review(entry.id, 1))

        assert result.was_correct is False
        assert reviewed.review_count == 2
        assert reviewed.correct_count == 1
        assert reviewed.interval == 1
        assert reviewed.ease_factor == pytest.approx(2.4)

    def test_invalid_quality(self, vocabulary_service):
        entry = run(vocabulary_service.add_word("vivid"))

        with pytest.raises(ValidationError):
            run(vocabulary_service.record_review(entry.id, 7))

    def test_progress_summary(self, vocabulary_service):
        first = run(vocabulary_service.add_word("alpha"))
        run(vocabulary_service.add_word("beta"))
        run(vocabulary_service.record_review(first.id, 2))

        summary = run(vocabulary_service.get_progress())

        assert summary.total_words == 2
        assert summary.new_words == 1
        assert summary.learning_words == 1
        assert summary.accuracy == pytest.approx(100.0)
