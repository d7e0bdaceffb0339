"""
Async client for the workplace platform's resource API and plugin storage.
"""

from .app.api import PlatformAPI
from .app.caching import BatchLoader, ResourceKey, TypeAliasTable
from .app.storage import StorageItem, StoragePipeline

__all__ = [
    "PlatformAPI",
    "BatchLoader",
    "ResourceKey",
    "TypeAliasTable",
    "StorageItem",
    "StoragePipeline",
]
