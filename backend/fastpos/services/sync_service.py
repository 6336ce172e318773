"""
Sync Service - local-first persistence with best-effort remote mirroring

Every mutation is written to the in-memory ledger and the local store
first. When Supabase is configured, the remote write is queued on a
background worker and the caller returns immediately. Outcomes are kept
in a transaction log:

    pending -> confirmed
    pending -> failed -> resolved

Failed entries are resolved by one fixed policy:
- insert failed: roll back the optimistic record (SYNC_INSERT_FAILURE_POLICY
  = rollback) or keep it locally as the authoritative copy (= keep)
- update/delete failed: re-fetch the record from the remote store and
  overwrite the local copy; if that fails too, local state is accepted as
  diverged and a `sync_diverged` event is published

Author: TM3
Date: 2026-10-19
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from fastpos.core.exceptions import RemoteStoreError
from fastpos.services import events as ev
from fastpos.services.ledger import local_now

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    CONNECTED = "connected"
    SYNCING = "syncing"
    OFFLINE = "offline"


class EntryState(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    RESOLVED = "resolved"


class Operation(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class InsertFailurePolicy(str, Enum):
    ROLLBACK = "rollback"
    KEEP = "keep"


class Resolution(str, Enum):
    ROLLED_BACK = "rolled_back"
    KEPT = "kept"
    REFETCHED = "refetched"
    NOT_ON_REMOTE = "not_on_remote"
    DIVERGED = "diverged"


# ============================================================================
# Transaction log
# ============================================================================

@dataclass
class SyncEntry:
    id: int
    collection: str
    operation: Operation
    record_id: str
    payload: Optional[Dict[str, Any]]
    state: EntryState = EntryState.PENDING
    error: Optional[str] = None
    resolution: Optional[Resolution] = None
    created_at: datetime = field(default_factory=local_now)
    completed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'collection': self.collection,
            'operation': self.operation.value,
            'record_id': self.record_id,
            'state': self.state.value,
            'error': self.error,
            'resolution': self.resolution.value if self.resolution else None,
            'created_at': self.created_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }


# ============================================================================
# Sync Coordinator
# ============================================================================

class SyncCoordinator:
    """
    Persists ledger mutations locally and mirrors them to Supabase

    Remote writes run on a single background worker so they reach the
    remote store in the order they were made (an insert always lands
    before a status update of the same sale). Nothing here ever blocks a
    local mutation or raises a remote failure to the caller.
    """

    def __init__(
        self,
        remote=None,
        event_bus=None,
        insert_failure_policy: str = InsertFailurePolicy.ROLLBACK,
        fetch_limit: int = 200
    ):
        """
        Args:
            remote: SupabaseConnector, or None for offline mode
            event_bus: EventBus for sync events
            insert_failure_policy: 'rollback' or 'keep'
            fetch_limit: Rows of sales/expenses loaded from the remote store
        """
        self.remote = remote
        self.events = event_bus
        self.insert_failure_policy = InsertFailurePolicy(insert_failure_policy)
        self.fetch_limit = fetch_limit

        self._ledgers: Dict[str, Any] = {}
        self._log: List[SyncEntry] = []
        self._futures: Set[Future] = set()
        self._next_id = 1
        self._lock = threading.Lock()
        self._store_lock = threading.RLock()
        self._reconcile_lock = threading.Lock()
        self._last_status: Optional[SyncStatus] = None

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fastpos-sync") if remote else None

        if not self.is_online:
            logger.info("SyncCoordinator running offline - local store is authoritative")

    def register(self, ledger) -> None:
        self._ledgers[ledger.collection] = ledger

    # =========================================================================
    # Status
    # =========================================================================

    @property
    def is_online(self) -> bool:
        return self.remote is not None

    @property
    def status(self) -> SyncStatus:
        if not self.is_online:
            return SyncStatus.OFFLINE
        with self._lock:
            pending = any(entry.state == EntryState.PENDING for entry in self._log)
        return SyncStatus.SYNCING if pending else SyncStatus.CONNECTED

    def entries(self, state: Optional[EntryState] = None) -> List[SyncEntry]:
        """Copies of the transaction log entries, oldest first"""
        with self._lock:
            return [replace(entry) for entry in self._log if state is None or entry.state == state]

    def get_status(self) -> dict:
        """Summary for display: status plus entry counts per state"""
        with self._lock:
            counts = {state.value: 0 for state in EntryState}
            for entry in self._log:
                counts[entry.state.value] += 1
        return {
            'status': self.status.value,
            'online': self.is_online,
            'insert_failure_policy': self.insert_failure_policy.value,
            'entries': counts,
        }

    def _publish_status(self) -> None:
        status = self.status
        with self._lock:
            changed = status != self._last_status
            self._last_status = status
        if changed and self.events:
            self.events.publish(ev.SYNC_STATUS_CHANGED, status=status.value)

    def _publish(self, name: str, **payload) -> None:
        if self.events:
            self.events.publish(name, **payload)

    # =========================================================================
    # Mutations (called by the ledgers after updating memory)
    # =========================================================================

    def record_insert(self, ledger, record) -> Optional[SyncEntry]:
        with self._store_lock:
            ledger.repository.save(record)
        return self._dispatch(ledger, Operation.INSERT, record.id, ledger.repository.to_row(record))

    def record_update(self, ledger, record, changes: Optional[Dict[str, Any]] = None) -> Optional[SyncEntry]:
        """
        Persist an updated record

        Args:
            changes: Columns sent to the remote store (defaults to the full row)

        Returns None without writing when the record has already left the
        ledger (rolled back while the caller was updating it).
        """
        with ledger.lock, self._store_lock:
            if ledger.get(record.id) is None:
                logger.warning(f"Skipping update of {ledger.collection}/{record.id}, no longer in the ledger")
                return None
            ledger.repository.save(record)
        payload = changes if changes is not None else ledger.repository.to_row(record)
        return self._dispatch(ledger, Operation.UPDATE, record.id, payload)

    def record_delete(self, ledger, record_id: str) -> Optional[SyncEntry]:
        with self._store_lock:
            ledger.repository.delete(record_id)
        return self._dispatch(ledger, Operation.DELETE, record_id, None)

    def restore(self, ledger, records) -> None:
        """Replace a ledger and its local table (backup import). Not mirrored remotely"""
        records = list(records)
        with ledger.lock, self._store_lock:
            ledger.repository.replace_all(records)
            ledger.load(records)

    def _dispatch(self, ledger, operation: Operation, record_id: str, payload) -> Optional[SyncEntry]:
        if not self.is_online:
            return None

        with self._lock:
            entry = SyncEntry(
                id=self._next_id,
                collection=ledger.collection,
                operation=operation,
                record_id=record_id,
                payload=payload,
            )
            self._next_id += 1
            self._log.append(entry)
            future = self._executor.submit(self._execute, entry)
            self._futures.add(future)

        future.add_done_callback(self._forget_future)
        self._publish_status()
        logger.debug(f"Queued remote {operation.value} {ledger.collection}/{record_id}")
        return replace(entry)

    def _forget_future(self, future: Future) -> None:
        with self._lock:
            self._futures.discard(future)

    # =========================================================================
    # Remote execution (worker thread)
    # =========================================================================

    def _execute(self, entry: SyncEntry) -> None:
        try:
            if entry.operation == Operation.INSERT:
                self.remote.insert(entry.collection, entry.payload)
            elif entry.operation == Operation.UPDATE:
                self.remote.update(entry.collection, entry.record_id, entry.payload)
            else:
                self.remote.delete(entry.collection, entry.record_id)
        except Exception as e:
            logger.error(f"Remote {entry.operation.value} {entry.collection}/{entry.record_id} failed: {e}")
            self._mark(entry, EntryState.FAILED, error=str(e))
            self._publish(
                ev.SYNC_FAILED,
                collection=entry.collection,
                operation=entry.operation.value,
                record_id=entry.record_id,
                error=str(e),
            )
            self.reconcile()
        else:
            self._mark(entry, EntryState.CONFIRMED)
        finally:
            self._publish_status()

    def _mark(self, entry: SyncEntry, state: EntryState, error: Optional[str] = None,
              resolution: Optional[Resolution] = None) -> None:
        with self._lock:
            entry.state = state
            if error is not None:
                entry.error = error
            if resolution is not None:
                entry.resolution = resolution
            entry.completed_at = local_now()

    # =========================================================================
    # Reconciler
    # =========================================================================

    def reconcile(self) -> List[SyncEntry]:
        """
        Resolve every failed entry with the configured policy

        Returns:
            Copies of the entries resolved by this call
        """
        resolved = []
        with self._reconcile_lock:
            with self._lock:
                failed = [entry for entry in self._log if entry.state == EntryState.FAILED]

            for entry in failed:
                resolution = self._resolve(entry)
                self._mark(entry, EntryState.RESOLVED, resolution=resolution)
                resolved.append(replace(entry))

        return resolved

    def _resolve(self, entry: SyncEntry) -> Resolution:
        ledger = self._ledgers[entry.collection]

        if entry.operation == Operation.INSERT:
            if self.insert_failure_policy == InsertFailurePolicy.KEEP:
                logger.warning(f"Keeping {entry.collection}/{entry.record_id} locally after failed remote insert")
                return Resolution.KEPT

            with ledger.lock, self._store_lock:
                ledger.discard(entry.record_id)
                ledger.repository.delete(entry.record_id)
            logger.warning(f"Rolled back {entry.collection}/{entry.record_id} after failed remote insert")
            self._publish(ev.SYNC_ROLLED_BACK, collection=entry.collection, record_id=entry.record_id)
            return Resolution.ROLLED_BACK

        # update / delete: the remote copy wins
        try:
            row = self.remote.select_by_id(entry.collection, entry.record_id)
            record = ledger.repository.from_row(row) if row is not None else None
        except (RemoteStoreError, KeyError, ValueError) as e:
            logger.error(f"Could not re-fetch {entry.collection}/{entry.record_id}, local copy diverges: {e}")
            self._publish(ev.SYNC_DIVERGED, collection=entry.collection, record_id=entry.record_id, error=str(e))
            return Resolution.DIVERGED

        if record is None:
            logger.warning(f"{entry.collection}/{entry.record_id} not on remote store, local copy kept")
            return Resolution.NOT_ON_REMOTE

        with ledger.lock, self._store_lock:
            ledger.merge(record)
            ledger.repository.save(record)
        logger.info(f"Re-fetched {entry.collection}/{entry.record_id} after failed remote {entry.operation.value}")
        self._publish(ev.SYNC_REFETCHED, collection=entry.collection, record_id=entry.record_id)
        return Resolution.REFETCHED

    def flush(self, timeout: Optional[float] = None) -> List[SyncEntry]:
        """
        Wait for queued remote writes, then run the reconciler

        Returns:
            Entries resolved by the final reconcile pass
        """
        with self._lock:
            futures = list(self._futures)
        if futures:
            wait(futures, timeout=timeout)
        return self.reconcile()

    def shutdown(self) -> None:
        self.flush()
        if self._executor:
            self._executor.shutdown(wait=True)

    # =========================================================================
    # Initial load
    # =========================================================================

    def load_initial_state(self) -> None:
        """
        Fill every registered ledger

        Online: remote rows are mirrored into the local store first (products
        by name; sales and expenses newest first, up to fetch_limit). Any
        remote failure falls back to what the local store has. The ledgers
        are then loaded from the local store, so records that only exist
        locally are never lost.
        """
        for ledger in self._ledgers.values():
            if self.is_online:
                try:
                    rows = self.remote.select_all(
                        ledger.collection,
                        order_by=ledger.remote_order_by,
                        descending=ledger.remote_descending,
                        limit=self.fetch_limit if ledger.remote_limited else None,
                    )
                    records = [ledger.repository.from_row(row) for row in rows]
                    with self._store_lock:
                        ledger.repository.save_all(records)
                    logger.info(f"Loaded {len(records)} {ledger.collection} from remote store")
                except (RemoteStoreError, KeyError, ValueError) as e:
                    logger.error(f"Error fetching {ledger.collection} from remote store, using local copy: {e}")

            with ledger.lock, self._store_lock:
                ledger.load(ledger.repository.find_all())

        self._publish_status()
