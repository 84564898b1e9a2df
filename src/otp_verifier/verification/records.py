"""In-memory verification record store."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


@dataclass
class VerificationRecord:
    """One outstanding code for one identity."""

    code: str
    expires_at: float
    otp_id: str
    attempts: int = 0

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class RecordStore:
    """Thread-safe map of ``identity → VerificationRecord``.

    Every primitive takes the same re-entrant lock, so callers can wrap a
    read-check-write sequence in :pymethod:`locked` and still use the
    primitives inside it.  Records handed out by :pymethod:`get` are copies;
    changes only land in the store through :pymethod:`put`.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, VerificationRecord] = {}

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store lock for a multi-step critical section."""
        with self._lock:
            yield

    def get(self, identity: str) -> VerificationRecord | None:
        with self._lock:
            record = self._records.get(identity)
            return replace(record) if record is not None else None

    def put(self, identity: str, record: VerificationRecord) -> None:
        with self._lock:
            self._records[identity] = replace(record)

    def delete(self, identity: str) -> None:
        with self._lock:
            self._records.pop(identity, None)

    def for_each_expired(
        self, now: float, fn: Callable[[str, VerificationRecord], None]
    ) -> None:
        """Call *fn* for every record whose ``expires_at <= now``.

        Iterates over a snapshot, so *fn* may delete from the store.
        """
        with self._lock:
            expired = [
                (identity, replace(record))
                for identity, record in self._records.items()
                if record.expires_at <= now
            ]
            for identity, record in expired:
                fn(identity, record)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
