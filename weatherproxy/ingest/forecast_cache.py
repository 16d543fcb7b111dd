"""In-memory TTL cache of transformed forecasts keyed by city."""

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from weatherproxy.models.common import utc_now
from weatherproxy.models.forecast import CacheRecord, ForecastResult

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=30)


class ForecastCache:
    """Freshness is checked lazily on read; stale records stay until overwritten."""

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._records: dict[str, CacheRecord] = {}

    def get(self, key: str) -> ForecastResult | None:
        with self._lock:
            record = self._records.get(key)
        if record is None:
            return None
        if self._clock() - record.captured_at < self.ttl:
            return record.payload
        logger.debug("Cache record for %s is stale (captured %s)", key, record.captured_at)
        return None

    def put(self, key: str, payload: ForecastResult) -> None:
        record = CacheRecord(payload=payload, captured_at=self._clock())
        with self._lock:
            self._records[key] = record

    def clear(self) -> int:
        with self._lock:
            count = len(self._records)
            self._records.clear()
        return count

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._records)

    def captured_at(self, key: str) -> datetime | None:
        with self._lock:
            record = self._records.get(key)
        return record.captured_at if record is not None else None
