"""
Balance summary cache.

Holds one computed summary per hostel for a short TTL. Expiry is
decided against the injected clock, which lets callers control time.

Each hostel also has a generation counter in the backend. Invalidation
bumps it, and an entry is only served while its generation is still
current, so a summary computed before a write can never be stored (or
read back) after that write's invalidation.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from hostel_ledger.core.cache import CacheBackend, MemoryBackend
from hostel_ledger.schemas.payment.payment import HostelPaymentSummary
from hostel_ledger.utils.date_utils import Clock, now_utc

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_TTL_SECONDS = 10


@dataclass(frozen=True)
class SummaryCacheEntry:
    data: HostelPaymentSummary
    expires_at: datetime
    generation: int = 0


class BalanceSummaryCache:
    """
    Per-hostel cache of payment summaries.

    Args:
        backend: Storage for entries, in-process memory by default
        ttl_seconds: Lifetime of an entry from the moment it is stored
        clock: Returns the current aware UTC datetime
    """

    namespace = "ledger:summary"

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        ttl_seconds: int = DEFAULT_SUMMARY_TTL_SECONDS,
        clock: Optional[Clock] = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._backend = backend or MemoryBackend()
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or now_utc

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def _key(self, hostel_id: UUID) -> str:
        return f"{self.namespace}:{hostel_id}"

    def _generation_key(self, hostel_id: UUID) -> str:
        return f"{self.namespace}:{hostel_id}:generation"

    def generation(self, hostel_id: UUID) -> Optional[int]:
        """
        Current generation of the hostel's summary; capture it before
        computing and pass it to ``put``. None when the backend cannot
        tell, in which case nothing is cached.
        """
        return self._backend.get_counter(self._generation_key(hostel_id))

    def get(self, hostel_id: UUID) -> Optional[HostelPaymentSummary]:
        """Return the live summary for the hostel, or None when absent, expired or stale."""
        key = self._key(hostel_id)
        entry = self._backend.get(key)
        if entry is None:
            logger.debug("Cache miss", extra={"key": key})
            return None
        if entry.expires_at <= self._clock():
            logger.debug("Cache entry expired", extra={"key": key})
            self._backend.delete(key)
            return None
        if entry.generation != self.generation(hostel_id):
            logger.debug("Cache entry superseded", extra={"key": key})
            self._backend.delete(key)
            return None
        logger.debug("Cache hit", extra={"key": key})
        return entry.data

    def put(
        self,
        hostel_id: UUID,
        summary: HostelPaymentSummary,
        generation: Optional[int] = None,
    ) -> Optional[SummaryCacheEntry]:
        """
        Store a summary computed at ``generation`` (the current one when
        omitted). Returns None without storing when the hostel was
        invalidated since then.
        """
        current = self.generation(hostel_id)
        if generation is None:
            generation = current
        if current is None or generation != current:
            logger.debug(
                "Summary not cached, invalidated while computing",
                extra={"hostel_id": str(hostel_id), "generation": generation, "current": current},
            )
            return None

        entry = SummaryCacheEntry(
            data=summary,
            expires_at=self._clock() + self._ttl,
            generation=generation,
        )
        # Server-side expiry is a backstop; the clock check above is authoritative.
        self._backend.set(self._key(hostel_id), entry, expire=self.ttl_seconds + 1)
        return entry

    def invalidate(self, hostel_id: UUID) -> None:
        """Drop the hostel's entry and retire any summary still being computed."""
        generation = self._backend.incr(self._generation_key(hostel_id))
        removed = self._backend.delete(self._key(hostel_id))
        logger.debug(
            "Summary cache invalidated",
            extra={"hostel_id": str(hostel_id), "removed": removed, "generation": generation},
        )
