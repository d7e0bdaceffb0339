"""
Resource caching package.

Provides the batch loader that deduplicates and caches single-resource
fetches, and the response absorber that primes it from every response.
"""

from .resource_key import ResourceKey, TypeAliasTable, DEFAULT_TYPE_ALIASES
from .resource_cache import ResourceCache
from .batch_loader import BatchLoader
from .absorption import ResponseAbsorber

__all__ = [
    "ResourceKey",
    "TypeAliasTable",
    "DEFAULT_TYPE_ALIASES",
    "ResourceCache",
    "BatchLoader",
    "ResponseAbsorber",
]
