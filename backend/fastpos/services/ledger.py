"""
Ledger base - in-memory state owned by one service

The ledgers keep the working copy of their records in memory, hand out
immutable snapshots, and route every mutation through the
SyncCoordinator, which persists it locally and mirrors it remotely.

Author: TM3
Date: 2026-10-19
"""
import threading
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Tuple


def local_now() -> datetime:
    """Current local time with its UTC offset"""
    return datetime.now().astimezone()


def new_id() -> str:
    return str(uuid.uuid4())


class Ledger:
    """
    Base class for OrderLedger, ExpenseLedger and ProductCatalog

    Attributes:
        collection: Remote table name (products, sales, expenses)
        remote_order_by: Column used when loading from the remote store
        remote_descending: Newest first
        remote_limited: Apply the fetch limit on initial load
    """

    collection: str = ""
    remote_order_by: Optional[str] = None
    remote_descending: bool = False
    remote_limited: bool = False

    def __init__(self, repository, sync, event_bus, clock: Optional[Callable[[], datetime]] = None):
        self.repository = repository
        self.sync = sync
        self.events = event_bus
        self._clock = clock or local_now
        self._records: Dict[str, Any] = {}
        self._lock = threading.RLock()
        sync.register(self)

    def now(self) -> datetime:
        return self._clock()

    @property
    def lock(self):
        """Guards the in-memory records; held around local writes that must agree with them"""
        return self._lock

    # =========================================================================
    # Snapshots
    # =========================================================================

    def snapshot(self) -> Tuple:
        """Point-in-time copy of all records (insertion order)"""
        with self._lock:
            return tuple(self._records.values())

    def get(self, record_id: str) -> Optional[Any]:
        with self._lock:
            return self._records.get(record_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # =========================================================================
    # State replacement (no sync side effects)
    # =========================================================================

    def load(self, records: Iterable) -> None:
        """Replace the in-memory state wholesale"""
        with self._lock:
            self._records = {record.id: record for record in records}

    def discard(self, record_id: str) -> bool:
        """Drop a record (insert rollback). Returns False if it wasn't there"""
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def merge(self, record) -> None:
        """Insert or overwrite a record with a copy fetched from the remote store"""
        with self._lock:
            self._records[record.id] = record
