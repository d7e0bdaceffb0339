"""
Fluent builder for batched plugin storage requests.
"""

from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from shared.logging import get_logger
from .commands import (
    BaseStorageCommand,
    GetCommand,
    SetCommand,
    SetUniqueCommand,
    SetUniqueNumCommand,
    StorageItem,
    UnsetCommand,
    parse_command,
)


class StorageSubmitter(Protocol):
    async def storage_pipeline(
        self,
        commands: Sequence[BaseStorageCommand],
        install_id: Optional[str] = None,
    ) -> List[Optional[StorageItem]]:
        ...


class StoragePipeline:
    """
    Builds up an ordered batch of storage commands and submits it as one request.

    The pipeline is a request builder, not an operation log: calling
    ``execute`` twice sends the same commands twice, so ``set_unique`` and
    ``set_unique_num`` commands will not behave the same on the replay.
    """

    def __init__(self, api: StorageSubmitter, install_id: Optional[str] = None):
        self.api = api
        self.install_id = install_id
        self._commands: List[BaseStorageCommand] = []
        self.logger = get_logger("platform_client.storage_pipeline")

    @property
    def commands(self) -> Tuple[BaseStorageCommand, ...]:
        return tuple(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    async def execute(self) -> List[Optional[StorageItem]]:
        """
        Executes all the commands in the pipeline.

        Returns one entry per command, in command order. ``None`` marks either
        a missing key or a failed uniqueness check; the service does not say
        which.
        """
        if not self._commands:
            self.logger.debug("Skipping execution of empty storage pipeline")
            return []
        return await self.api.storage_pipeline(self.commands, self.install_id)

    async def execute_single(self) -> Optional[StorageItem]:
        """Executes the pipeline and returns the first result."""
        results = await self.execute()
        return results[0] if results else None

    def add_command(self, command: Union[BaseStorageCommand, Mapping[str, Any]]) -> "StoragePipeline":
        self._commands.append(parse_command(command))
        return self

    def get(self, key: str) -> "StoragePipeline":
        """Gets a storage item."""
        return self.add_command(GetCommand(key=key))

    def set(self, key: str, value: Any) -> "StoragePipeline":
        """Sets a value for a storage item, and returns that item."""
        return self.add_command(SetCommand(key=key, value=value))

    def set_unique(self, key: str, **options: Any) -> "StoragePipeline":
        """
        Sets a unique value for a storage item, and returns that item.

        Accepts ``value``, ``if_not_exists`` and any further options the
        storage service understands.
        """
        return self.add_command(SetUniqueCommand(key=key, **options))

    def set_unique_num(self, key: str, start: Optional[int] = None,
                       increment: Optional[int] = None, **options: Any) -> "StoragePipeline":
        """Sets a unique number value for a storage item, and returns that item."""
        if start is not None:
            options["start"] = start
        if increment is not None:
            options["increment"] = increment
        return self.add_command(SetUniqueNumCommand(key=key, **options))

    def unset(self, key: str) -> "StoragePipeline":
        """Unsets a storage item."""
        return self.add_command(UnsetCommand(key=key))
