"""
Batching, deduplicating resource loader.

Loads issued during the same event-loop tick are collected and dispatched
together on the next tick. Identical keys share one pending future, and
resolved payloads stay cached so repeat loads never reach the network.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Set, TYPE_CHECKING

from shared.logging import get_logger
from .resource_cache import ResourceCache
from .resource_key import CacheKey, ResourceKey, TypeAliasTable

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import ClientMetrics


BatchFn = Callable[[List[ResourceKey]], Awaitable[Sequence[Any]]]

_MISSING = object()


class BatchLoader:
    """
    Coalesces concurrent ``load`` calls into batches handed to ``batch_fn``.

    ``batch_fn`` receives the unique keys of one batch and must return a
    sequence of the same length, holding either the payload or an exception
    instance for each key.
    """

    def __init__(
        self,
        batch_fn: BatchFn,
        *,
        cache: Optional[ResourceCache] = None,
        aliases: Optional[TypeAliasTable] = None,
        max_batch_size: Optional[int] = None,
        share_include_variants: bool = False,
        metrics: Optional["ClientMetrics"] = None,
    ):
        self._batch_fn = batch_fn
        self.cache = cache if cache is not None else ResourceCache()
        self.aliases = aliases if aliases is not None else TypeAliasTable()
        self.max_batch_size = max_batch_size
        self.share_include_variants = share_include_variants
        self.metrics = metrics
        self.logger = get_logger("platform_client.batch_loader")

        self._queue: List[ResourceKey] = []
        self._pending: Dict[CacheKey, asyncio.Future] = {}
        self._dispatch_scheduled = False
        self._batch_tasks: Set[asyncio.Task] = set()

    def _cache_key(self, key: ResourceKey) -> CacheKey:
        return key.cache_key(self.share_include_variants)

    def _lookup(self, key: ResourceKey) -> Any:
        for resource_type in self.aliases.equivalents(key.type):
            cache_key = self._cache_key(key.with_type(resource_type))
            if cache_key in self.cache:
                return self.cache.get(cache_key)
        return _MISSING

    def _count(self, metric_name: str, **labels):
        if self.metrics is not None:
            self.metrics.increment_counter(metric_name, **labels)

    def load(self, key: ResourceKey) -> "asyncio.Future[Any]":
        """Return an awaitable for the resource at ``key``. Must be called with a running loop."""
        loop = asyncio.get_running_loop()

        cached = self._lookup(key)
        if cached is not _MISSING:
            self._count("loader_cache_hits_total", resource_type=key.type)
            future = loop.create_future()
            future.set_result(cached)
            return future

        self._count("loader_cache_misses_total", resource_type=key.type)
        cache_key = self._cache_key(key)
        pending = self._pending.get(cache_key)
        if pending is None:
            pending = loop.create_future()
            self._pending[cache_key] = pending
            self._queue.append(key)
            if not self._dispatch_scheduled:
                self._dispatch_scheduled = True
                loop.call_soon(self._dispatch)

        # A waiter that gets cancelled must not cancel the fetch shared with others
        return asyncio.shield(pending)

    async def load_many(self, keys: Iterable[ResourceKey]) -> List[Any]:
        return list(await asyncio.gather(*(self.load(key) for key in keys)))

    def prime(self, key: ResourceKey, value: Any) -> "BatchLoader":
        """Cache ``value`` for ``key`` without fetching, replacing any existing entry."""
        self.cache.set(self._cache_key(key), value)
        return self

    def clear(self, key: ResourceKey) -> "BatchLoader":
        self.cache.delete(self._cache_key(key))
        return self

    def clear_resource(self, key: ResourceKey) -> "BatchLoader":
        """Drop every include variant of ``key``'s resource, under every alias-equivalent type."""
        identities = {(resource_type, key.id) for resource_type in self.aliases.equivalents(key.type)}
        self.cache.delete_where(lambda cache_key: cache_key[:2] in identities)
        return self

    def clear_all(self) -> "BatchLoader":
        self.cache.clear()
        return self

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _dispatch(self):
        self._dispatch_scheduled = False
        queued, self._queue = self._queue, []

        # Keys primed while queued resolve from the cache without a fetch
        batch: List[ResourceKey] = []
        for key in queued:
            cached = self._lookup(key)
            if cached is _MISSING:
                batch.append(key)
                continue
            future = self._pending.pop(self._cache_key(key), None)
            if future is not None and not future.done():
                future.set_result(cached)
        if not batch:
            return

        size = self.max_batch_size or len(batch)
        for start in range(0, len(batch), size):
            task = asyncio.ensure_future(self._run_batch(batch[start:start + size]))
            self._batch_tasks.add(task)
            task.add_done_callback(self._batch_tasks.discard)

    async def _run_batch(self, keys: List[ResourceKey]):
        self.logger.debug("Dispatching loader batch", size=len(keys))
        if self.metrics is not None:
            self.metrics.observe_histogram("loader_batch_size", len(keys))

        try:
            results = await self._batch_fn(keys)
            if len(results) != len(keys):
                raise TypeError(
                    f"Batch function returned {len(results)} results for {len(keys)} keys"
                )
        except Exception as exc:
            self.logger.warning("Loader batch failed", size=len(keys), error=str(exc))
            for key in keys:
                self._reject(key, exc)
            return

        for key, result in zip(keys, results):
            if isinstance(result, BaseException):
                self._reject(key, result)
            else:
                self._resolve(key, result)

    def _resolve(self, key: ResourceKey, value: Any):
        cache_key = self._cache_key(key)
        future = self._pending.pop(cache_key, None)
        self._count("loader_fetches_total", resource_type=key.type, status="ok")
        # A prime that landed while the fetch was in flight wins
        if cache_key not in self.cache:
            self.cache.set(cache_key, value)
        if future is not None and not future.done():
            future.set_result(value)

    def _reject(self, key: ResourceKey, exc: BaseException):
        future = self._pending.pop(self._cache_key(key), None)
        self._count("loader_fetches_total", resource_type=key.type, status="error")
        self.logger.info("Resource fetch failed", type=key.type, id=key.id, error=str(exc))
        if future is not None and not future.done():
            future.set_exception(exc)
