import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .config import CACHE_TTL
from .schema import ScrapeResult
from .storage import CacheStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


class ScrapeCache:
    """
    Latest scrape result per store. Entries carry no expiry of their own;
    freshness is ``now - result.timestamp < ttl`` evaluated on every read.
    """

    def __init__(self, store: CacheStore, ttl: timedelta = CACHE_TTL, clock: Optional[Clock] = None):
        self.store = store
        self.ttl = ttl
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def is_fresh(self, result: ScrapeResult, now: Optional[datetime] = None) -> bool:
        now = _aware(now or self.clock())
        return now - _aware(result.timestamp) < self.ttl

    def get_fresh(self, store_id: int) -> Optional[ScrapeResult]:
        cached = self.store.get(store_id)
        if cached is None:
            return None
        if not self.is_fresh(cached):
            logger.info("[CACHE] stale entry for store %s from %s", store_id, cached.timestamp.isoformat())
            return None
        logger.info(
            "[CACHE] hit for store %s from %s (%d products)",
            store_id, cached.timestamp.isoformat(), len(cached.products),
        )
        return cached

    def put(self, store_id: int, result: ScrapeResult) -> None:
        self.store.put(store_id, result)
