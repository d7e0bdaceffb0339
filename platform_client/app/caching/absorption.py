"""
Primes the loader cache from every successful platform response.
"""

from typing import Any, Iterable, List, Mapping, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import ValidationError
from .batch_loader import BatchLoader
from .resource_key import ResourceKey

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import ClientMetrics


class ResponseAbsorber:
    """
    Transport response interceptor.

    Every resource found in ``data`` (single or list) and ``included`` is
    primed under its own type and every alias-equivalent type. Bodies of an
    unexpected shape prime nothing; the caller still gets the raw body.
    """

    def __init__(self, loader: BatchLoader, metrics: Optional["ClientMetrics"] = None):
        self.loader = loader
        self.metrics = metrics
        self.logger = get_logger("platform_client.absorption")

    def __call__(self, body: Any) -> Any:
        self.absorb(body)
        return body

    def absorb(self, body: Any) -> int:
        """Prime the cache from ``body`` and return how many resources were primed."""
        try:
            resources = self._collect(body)
        except Exception as exc:
            self.logger.warning("Skipping absorption of malformed response", error=str(exc))
            return 0

        primed = 0
        for resource in resources:
            try:
                key = ResourceKey(resource["type"], resource["id"])
            except (KeyError, TypeError, ValidationError):
                self.logger.debug("Skipping resource without identity")
                continue

            for resource_type in self.loader.aliases.equivalents(key.type):
                self.loader.prime(key.with_type(resource_type), resource)
            primed += 1
            if self.metrics is not None:
                self.metrics.increment_counter("absorbed_resources_total", resource_type=key.type)

        if primed:
            self.logger.debug("Absorbed resources into cache", count=primed)
        return primed

    @staticmethod
    def _collect(body: Any) -> List[Mapping[str, Any]]:
        if not isinstance(body, Mapping):
            return []

        found: List[Mapping[str, Any]] = []
        included = body.get("included") or []
        data = body.get("data")
        primary: Iterable[Any] = data if isinstance(data, list) else [data]

        for candidate in list(included) + list(primary):
            if isinstance(candidate, Mapping) and "type" in candidate and "id" in candidate:
                found.append(candidate)
        return found
