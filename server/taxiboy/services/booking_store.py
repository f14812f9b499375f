"""In-memory store of active bookings keyed by cancellation token."""

import logging
import threading
from typing import Dict, Optional, Set

from ..models.booking import BookingRecord

logger = logging.getLogger(__name__)


class BookingStore:
    """
    Process-lifetime mapping from cancellation token to booking record.

    All operations are guarded by a single lock so the store can be shared by
    concurrent request handlers and worker threads. Records are never evicted;
    they stay until cancelled or until the process exits.

    A cancellation first ``claim``s its token. While a token is claimed, other
    claims for it fail, so two simultaneous cancellations of the same booking
    cannot both succeed. The claim is ended with ``delete`` (cancellation
    done) or ``release`` (cancellation failed, retry allowed).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, BookingRecord] = {}
        self._booking_numbers: Set[str] = set()
        self._claimed: Set[str] = set()

    def put(self, token: str, record: BookingRecord) -> None:
        """Store a record under its cancellation token."""
        with self._lock:
            previous = self._records.get(token)
            if previous is not None:
                self._booking_numbers.discard(previous.booking_number)
            self._records[token] = record
            self._booking_numbers.add(record.booking_number)

    def get(self, token: str) -> Optional[BookingRecord]:
        """Return the record for a token, or None."""
        with self._lock:
            return self._records.get(token)

    def has(self, token: str) -> bool:
        """Return True if an active booking exists for the token."""
        with self._lock:
            return token in self._records

    def has_booking_number(self, booking_number: str) -> bool:
        """Return True if an active booking already uses this number."""
        with self._lock:
            return booking_number in self._booking_numbers

    def delete(self, token: str) -> Optional[BookingRecord]:
        """Remove a record and any claim on it; return the removed record."""
        with self._lock:
            return self._remove(token)

    def pop(self, token: str) -> Optional[BookingRecord]:
        """Atomically remove a record if present and not claimed."""
        with self._lock:
            if token in self._claimed:
                return None
            return self._remove(token)

    def claim(self, token: str) -> Optional[BookingRecord]:
        """
        Reserve a booking for cancellation.

        Returns:
            The record if it exists and no other cancellation holds it,
            None otherwise.
        """
        with self._lock:
            record = self._records.get(token)
            if record is None or token in self._claimed:
                return None
            self._claimed.add(token)
            return record

    def release(self, token: str) -> None:
        """End a claim without removing the record."""
        with self._lock:
            self._claimed.discard(token)

    def clear(self) -> int:
        """Drop every record; return how many were dropped."""
        with self._lock:
            count = len(self._records)
            self._records.clear()
            self._booking_numbers.clear()
            self._claimed.clear()
        if count:
            logger.warning(
                "Discarded active bookings",
                extra={"discarded_count": count}
            )
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _remove(self, token: str) -> Optional[BookingRecord]:
        record = self._records.pop(token, None)
        self._claimed.discard(token)
        if record is not None:
            self._booking_numbers.discard(record.booking_number)
        return record
