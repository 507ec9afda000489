"""Typed records kept on top of a document store."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from ..contracts import IsoEntry, SellerRecord
from ..errors import CooldownActiveError
from .repository import DocumentStore

logger = logging.getLogger(__name__)

SELLERS_DOCUMENT = "sellers"
ISO_DOCUMENT = "iso_listings"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SellerLedger:
    """Active listing thread and last publish time per seller.

    Both facts live in one record under one document so a single ``put``
    updates them together.
    """

    def __init__(
        self,
        store: DocumentStore,
        cooldown: timedelta = timedelta(days=14),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self.cooldown = cooldown
        self._clock = clock

    def get(self, user_id: str) -> Optional[SellerRecord]:
        raw = self._store.get(SELLERS_DOCUMENT).get(user_id)
        if not raw:
            return None
        record = SellerRecord.model_validate(raw)
        record.listed_at = as_utc(record.listed_at)
        return record

    def all(self) -> Dict[str, SellerRecord]:
        return {
            user_id: SellerRecord.model_validate(raw)
            for user_id, raw in self._store.get(SELLERS_DOCUMENT).items()
        }

    def next_eligible(self, user_id: str, now: Optional[datetime] = None) -> Optional[datetime]:
        """Return when ``user_id`` may publish again, or ``None`` if they may now."""
        record = self.get(user_id)
        if record is None:
            return None
        now = as_utc(now or self._clock())
        eligible_at = record.listed_at + self.cooldown
        return eligible_at if now < eligible_at else None

    def check_cooldown(self, user_id: str, now: Optional[datetime] = None) -> None:
        """Raise ``CooldownActiveError`` while the seller is inside the window."""
        now = as_utc(now or self._clock())
        eligible_at = self.next_eligible(user_id, now)
        if eligible_at is None:
            return
        days_left = math.ceil((eligible_at - now).total_seconds() / 86400)
        raise CooldownActiveError(eligible_at, days_left)

    def record_listing(self, user_id: str, thread_id: str, now: Optional[datetime] = None) -> SellerRecord:
        """Store ``thread_id`` as the seller's active listing, stamped ``now``."""
        record = SellerRecord(thread_id=thread_id, listed_at=as_utc(now or self._clock()))
        document = self._store.get(SELLERS_DOCUMENT)
        document[user_id] = record.model_dump(mode="json")
        self._store.put(SELLERS_DOCUMENT, document)
        return record

    def import_legacy(self, cooldowns: Dict[str, str], threads: Dict[str, str]) -> int:
        """Merge the old separate cooldown and thread documents.

        Existing records win. Users with a thread but no cooldown stamp are
        skipped because their cooldown cannot be reconstructed.
        """
        document = self._store.get(SELLERS_DOCUMENT)
        imported = 0
        for user_id, stamp in cooldowns.items():
            if user_id in document:
                continue
            record = SellerRecord(thread_id=threads.get(user_id), listed_at=stamp)
            record.listed_at = as_utc(record.listed_at)
            document[user_id] = record.model_dump(mode="json")
            imported += 1
        skipped = set(threads) - set(cooldowns)
        if skipped:
            logger.warning(f"Skipped {len(skipped)} legacy threads without cooldown stamps")
        self._store.put(SELLERS_DOCUMENT, document)
        return imported


class IsoLedger:
    """ISO posts per user, keyed by the thread they were posted in."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def entries(self, user_id: str) -> Dict[str, IsoEntry]:
        raw: Dict[str, Any] = self._store.get(ISO_DOCUMENT).get(user_id) or {}
        return {thread_id: IsoEntry.model_validate(entry) for thread_id, entry in raw.items()}

    def get(self, user_id: str, thread_id: str) -> Optional[IsoEntry]:
        return self.entries(user_id).get(thread_id)

    def put(self, user_id: str, thread_id: str, entry: IsoEntry) -> None:
        document = self._store.get(ISO_DOCUMENT)
        document.setdefault(user_id, {})[thread_id] = entry.model_dump(mode="json")
        self._store.put(ISO_DOCUMENT, document)

    def remove(self, user_id: str, thread_id: str) -> None:
        document = self._store.get(ISO_DOCUMENT)
        user_entries = document.get(user_id) or {}
        user_entries.pop(thread_id, None)
        if user_entries:
            document[user_id] = user_entries
        else:
            document.pop(user_id, None)
        self._store.put(ISO_DOCUMENT, document)
