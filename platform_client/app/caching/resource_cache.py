"""
In-process resource cache backing the batch loader.
"""

from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional

from shared.logging import get_logger


_MISSING = object()


class ResourceCache:
    """
    Mapping of cache key -> resource payload.

    Entries live for the life of the process unless ``max_entries`` is set,
    in which case the least recently used entry is evicted on overflow.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries
        self.logger = get_logger("platform_client.resource_cache")
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()

    def get(self, key: Hashable, default: Any = None) -> Any:
        value = self._entries.get(key, _MISSING)
        if value is _MISSING:
            return default
        if self.max_entries is not None:
            self._entries.move_to_end(key)
        return value

    def set(self, key: Hashable, value: Any) -> None:
        """Insert or overwrite an entry."""
        self._entries[key] = value
        self._entries.move_to_end(key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self.logger.debug("Evicted cached resource", key=evicted)

    def delete(self, key: Hashable) -> bool:
        return self._entries.pop(key, _MISSING) is not _MISSING

    def delete_where(self, predicate: Callable[[Hashable], bool]) -> int:
        """Delete every entry whose key matches ``predicate``; returns how many went."""
        doomed = [key for key in self._entries if predicate(key)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
