"""
Plugin storage package.

Typed storage commands and the pipeline that submits them in one request.
"""

from .commands import (
    BaseStorageCommand,
    GetCommand,
    SetCommand,
    SetUniqueCommand,
    SetUniqueNumCommand,
    UnsetCommand,
    StorageCommand,
    StorageItem,
    parse_command,
    parse_result,
)
from .pipeline import StoragePipeline

__all__ = [
    "BaseStorageCommand",
    "GetCommand",
    "SetCommand",
    "SetUniqueCommand",
    "SetUniqueNumCommand",
    "UnsetCommand",
    "StorageCommand",
    "StorageItem",
    "StoragePipeline",
    "parse_command",
    "parse_result",
]
