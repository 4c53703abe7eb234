"""Two-layer duplicate detection: receive-time cache and the persisted-record rule"""

import threading
from collections import OrderedDict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Protocol

from sms_gateway.domain.models import DuplicateCacheEntry, ExtractedTransaction
from sms_gateway.domain.references import ReferenceExtractor

MANUAL_SENDERS = frozenset({"manual entry", "manual approval"})

AMOUNT_TOLERANCE = Decimal("0.01")


def is_manual_sender(sender: Optional[str]) -> bool:
    return (sender or "").strip().lower() in MANUAL_SENDERS


class DuplicateCache:
    """
    Bounded, time-windowed memory of recently seen fingerprints.

    Owned by one engine instance. Stale entries are evicted lazily on every
    lookup, so no background timer is needed. check_and_record is atomic:
    of two near-simultaneous copies exactly one is accepted.
    """

    def __init__(self, window: timedelta = timedelta(minutes=30), max_entries: int = 1024):
        self.window = window
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, DuplicateCacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict_stale(self, now: datetime) -> None:
        stale = [key for key, entry in self._entries.items() if abs(now - entry.first_seen_at) > self.window]
        for key in stale:
            del self._entries[key]

    def check_and_record(self, keys: Iterable[str], seen_at: datetime) -> bool:
        """
        Return True if any key was seen within the window; otherwise remember
        all keys and return False.
        """
        keys = [k for k in keys if k]
        with self._lock:
            self._evict_stale(seen_at)
            if any(key in self._entries for key in keys):
                return True
            for key in keys:
                self._entries[key] = DuplicateCacheEntry(fingerprint=key, first_seen_at=seen_at)
                self._entries.move_to_end(key)
            # Capacity bound: drop the oldest insertions first
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
            return False

    def forget(self, keys: Iterable[str]) -> None:
        """Drop keys recorded for a message that was never stored"""
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class StoredTransaction(Protocol):
    """Shape of a persisted record as seen by the persisted duplicate rule"""

    sms_sender: Optional[str]
    sms_body: Optional[str]
    reference: Optional[str]
    amount: Decimal
    counterparty: str
    observed_at: datetime


def is_persisted_duplicate(
    candidate: ExtractedTransaction,
    recent: Iterable[StoredTransaction],
    similar: Optional[Iterable[StoredTransaction]] = None,
    reference_extractor: Optional[ReferenceExtractor] = None,
    fallback_window: timedelta = timedelta(seconds=30),
) -> bool:
    """
    Compare a fresh extraction against records stored within the last few minutes.

    recent holds every record of the window; similar, when the storage can
    answer that query directly, holds only records sharing sender, amount and
    counterparty and feeds the unreferenced fallback rule (recent otherwise).

    Rules per stored record, in order:
    1. byte-identical SMS body -> duplicate
    2. both carry reference numbers -> duplicate iff equal; different references
       are never duplicates, whatever else matches
    3. neither carries a reference -> duplicate when sender, amount (within 0.01)
       and counterparty match and the two are at most 30 seconds apart
    """
    if is_manual_sender(candidate.source_sender):
        return False

    extractor = reference_extractor or ReferenceExtractor()
    new_ref = candidate.reference or extractor.extract(candidate.source_body)

    recent = list(recent)
    for existing in recent:
        existing_body = existing.sms_body or ""
        if existing_body and existing_body == candidate.source_body:
            return True

        existing_ref = existing.reference or extractor.extract(existing_body)
        if new_ref and existing_ref and new_ref.upper() == existing_ref.upper():
            return True

    if new_ref:
        return False

    for existing in recent if similar is None else similar:
        if existing.reference or extractor.extract(existing.sms_body or ""):
            continue
        same_sender = (existing.sms_sender or "").lower() == candidate.source_sender.lower()
        very_recent = abs(candidate.observed_at - existing.observed_at) <= fallback_window
        same_amount = abs(Decimal(existing.amount) - candidate.amount) <= AMOUNT_TOLERANCE
        same_party = existing.counterparty.lower() == candidate.counterparty.lower()
        if same_sender and very_recent and same_amount and same_party:
            return True

    return False
