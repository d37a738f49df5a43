"""
Sync Engine - Bidirectional replication with the remote vocabulary store

=== PUSH (sync_to_backend) ===
1. Read every entry (archived included) whose sync_status is pending or failed
2. POST entries without backend_id, PATCH the others
3. Success: re-read the entry, store backend_id, mark synced unless it was
   edited while the request was in flight
4. Failure: log, mark failed (same in-flight check), continue with the next one;
   a local store error while marking is logged and never aborts the batch

=== PULL (sync_from_backend) ===
1. Fetch remote rows newer than last_pull_cursor (everything the first time)
2. Match each row to a local entry by case-insensitive word
   - found, remote updated_at strictly newer: sparse merge, mark synced
   - found, local newer or equal (or remote has no updated_at): keep local
   - not found: create a local entry from the row, marked synced
3. last_pull_cursor = newest remote updated_at processed

=== GUARDS ===
- ConfigurationError when url / key are missing
- ConcurrencyError when another sync is in flight (no queueing)
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from wordflow.core.errors import ConcurrencyError, ConfigurationError, RemoteStoreError
from wordflow.models import SyncStatus
from wordflow.services.remote_store import RemoteStore
from wordflow.services.repository import VocabularyEntry, VocabularyRepository
from wordflow.services.sync_payload import (
    apply_remote_record, build_sync_payload, entry_from_remote_record, parse_remote_record
)
from wordflow.schemas.sync import RemoteVocabularyRecord
from wordflow.utils.timeutil import ensure_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Counts returned by full_sync"""
    pushed: int
    pulled: int


@dataclass
class SyncState:
    """Point-in-time view of the engine, for the HTTP surface"""
    is_enabled: bool
    is_syncing: bool
    remote_url: Optional[str]
    last_sync_date: Optional[datetime]
    last_pull_cursor: Optional[datetime]
    last_error: Optional[str]
    pending_count: int
    failed_count: int


class SyncEngine:
    """Coordinates push / pull between the local repository and a RemoteStore"""

    def __init__(self, repository: VocabularyRepository, remote_store: RemoteStore):
        self.repository = repository
        self.remote_store = remote_store

        self.is_syncing = False
        self.last_sync_date: Optional[datetime] = None
        self.last_pull_cursor: Optional[datetime] = None
        self.last_error: Optional[str] = None

        self.remote_url: Optional[str] = None
        self.api_key: Optional[str] = None

    # ============================================================
    # CONFIGURATION
    # ============================================================

    def configure(self, url: str, key: str):
        """Bind remote credentials"""
        self.remote_url = url
        self.api_key = key
        self.remote_store.configure(url, key)
        logger.info(f"✅ Sync configured with URL: {url}")

    @property
    def is_enabled(self) -> bool:
        return bool(self.remote_url and self.api_key)

    async def status(self) -> SyncState:
        entries = await self.repository.get_all(include_archived=True)
        return SyncState(
            is_enabled=self.is_enabled,
            is_syncing=self.is_syncing,
            remote_url=self.remote_url,
            last_sync_date=self.last_sync_date,
            last_pull_cursor=self.last_pull_cursor,
            last_error=self.last_error,
            pending_count=sum(1 for e in entries if e.sync_status == SyncStatus.PENDING),
            failed_count=sum(1 for e in entries if e.sync_status == SyncStatus.FAILED),
        )

    # ============================================================
    # TOP-LEVEL OPERATIONS
    # ============================================================

    async def sync_to_backend(self) -> int:
        """
        Push local changes

        Returns:
            Number of entries accepted by the remote

        Raises:
            ConfigurationError: credentials missing
            ConcurrencyError: another sync in flight
        """
        self._guard()
        self.is_syncing = True
        try:
            entries = await self.repository.get_all(include_archived=True)
            candidates = [
                entry for entry in entries
                if entry.sync_status in (SyncStatus.PENDING, SyncStatus.FAILED)
            ]
            logger.info(f"📤 Found {len(candidates)} entries to push")

            pushed = 0
            for entry in candidates:
                try:
                    await self._push_entry(entry)
                    pushed += 1
                except Exception as e:
                    logger.error(f"❌ Failed to push entry {entry.word}: {e}")
                    self.last_error = str(e)
                    try:
                        await self._mark_failed(entry)
                    except Exception as mark_error:
                        logger.error(f"❌ Failed to mark entry {entry.word} as failed: {mark_error}")

            self.last_sync_date = utc_now()
            logger.info(f"✅ Push completed: {pushed}/{len(candidates)} entries")
            return pushed
        finally:
            self.is_syncing = False

    async def sync_from_backend(self) -> int:
        """
        Pull remote changes

        Returns:
            Number of remote rows processed without error (0 if the fetch failed)

        Raises:
            ConfigurationError: credentials missing
            ConcurrencyError: another sync in flight
        """
        self._guard()
        self.is_syncing = True
        try:
            try:
                rows = await self.remote_store.fetch_updated_since(self.last_pull_cursor)
            except RemoteStoreError as e:
                logger.error(f"❌ Failed to fetch remote entries: {e}")
                self.last_error = str(e)
                return 0

            logger.info(f"📥 Fetched {len(rows)} remote entries")

            processed = 0
            cursor = self.last_pull_cursor
            for raw in rows:
                try:
                    record = parse_remote_record(raw)
                    await self._merge_record(record)
                except Exception as e:
                    logger.error(f"❌ Failed to process remote entry: {e}")
                    continue

                processed += 1
                if record.updated_at is not None:
                    remote_updated = ensure_utc(record.updated_at)
                    if cursor is None or remote_updated > cursor:
                        cursor = remote_updated

            self.last_pull_cursor = cursor
            self.last_sync_date = utc_now()
            logger.info(f"✅ Pull completed: {processed}/{len(rows)} entries")
            return processed
        finally:
            self.is_syncing = False

    async def full_sync(self) -> SyncResult:
        """Push then pull; errors from push propagate and skip the pull"""
        pushed = await self.sync_to_backend()
        pulled = await self.sync_from_backend()
        return SyncResult(pushed=pushed, pulled=pulled)

    # ============================================================
    # HELPERS
    # ============================================================

    def _guard(self):
        if not self.is_enabled:
            raise ConfigurationError()
        if self.is_syncing:
            raise ConcurrencyError()

    async def _push_entry(self, entry: VocabularyEntry):
        payload = build_sync_payload(entry)
        if entry.backend_id:
            row = await self.remote_store.update(entry.backend_id, payload)
        else:
            row = await self.remote_store.create(payload)
        backend_id = str(row["id"])

        current = await self.repository.get_by_id(entry.id)
        if current is None:
            logger.warning(f"Entry {entry.word} was deleted during push")
            return

        current.backend_id = backend_id
        if current.updated_at == entry.updated_at:
            current.sync_status = SyncStatus.SYNCED
        await self.repository.put(current)
        logger.info(f"✅ Synced entry: {entry.word} -> {backend_id}")

    async def _mark_failed(self, entry: VocabularyEntry):
        current = await self.repository.get_by_id(entry.id)
        if current is None or current.updated_at != entry.updated_at:
            # Edited in flight: stays pending
            return
        current.sync_status = SyncStatus.FAILED
        await self.repository.put(current)

    async def _merge_record(self, record: RemoteVocabularyRecord):
        local = await self.repository.get_by_word(record.word)

        if local is None:
            entry = entry_from_remote_record(record)
            await self.repository.put(entry)
            logger.info(f"📥 Created local entry from remote: {entry.word}")
            return

        if record.updated_at is None or ensure_utc(record.updated_at) <= local.updated_at:
            # Local wins ties
            return

        apply_remote_record(local, record)
        await self.repository.put(local)
        logger.info(f"📥 Updated local entry: {local.word}")
