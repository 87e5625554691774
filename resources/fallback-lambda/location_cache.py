import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Optional

from aws_lambda_powertools import Logger

FALLBACK_LOOKUP_WORKERS = int(os.environ.get("FALLBACK_LOOKUP_WORKERS", "4"))
FALLBACK_CACHE_FAILED_LOOKUPS = os.environ.get("FALLBACK_CACHE_FAILED_LOOKUPS", "true").lower() == "true"
log = Logger(child=True)

Resolver = Callable[[str, str], Optional[str]]


class LocationCache:
    """
    Process wide memo of fallback location lookups, keyed by distribution id.

    The cache stores the Future of a lookup, not its value. The Future is
    stored while the lock is held, so concurrent callers for the same
    distribution share one outstanding lookup. Entries never expire; clear()
    drops all of them.

    With cache_failures=False a failed lookup is evicted once it settles and
    the next call starts a new one. Eviction runs in a done callback, so a
    caller arriving right after the failure may still get the failed Future.
    """

    def __init__(
        self,
        resolver: Resolver,
        executor: Optional[ThreadPoolExecutor] = None,
        cache_failures: bool = FALLBACK_CACHE_FAILED_LOOKUPS,
    ):
        self.resolver = resolver
        self.executor = executor or ThreadPoolExecutor(
            max_workers=FALLBACK_LOOKUP_WORKERS, thread_name_prefix="fallback-lookup"
        )
        self.cache_failures = cache_failures
        self._lock = threading.Lock()
        self._entries: Dict[str, Future] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, distribution_id: str) -> bool:
        with self._lock:
            return distribution_id in self._entries

    def get_or_resolve(self, account_id: str, distribution_id: str) -> Future:
        with self._lock:
            future = self._entries.get(distribution_id)
            if future is not None:
                log.info(f"Cache hit for {distribution_id}")
                return future
            log.info(f"Cache miss for {distribution_id}, looking up fallback location")
            future = self.executor.submit(self.resolver, account_id, distribution_id)
            self._entries[distribution_id] = future

        if not self.cache_failures:
            future.add_done_callback(lambda f: self._evict_failed(distribution_id, f))
        return future

    def clear(self):
        with self._lock:
            self._entries.clear()

    def _evict_failed(self, distribution_id: str, future: Future):
        if future.cancelled() or future.exception() is None:
            return
        with self._lock:
            # a clear() followed by a new lookup may have replaced the entry
            if self._entries.get(distribution_id) is future:
                log.info(f"Dropping failed lookup for {distribution_id}")
                del self._entries[distribution_id]
