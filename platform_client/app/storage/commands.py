"""
Plugin storage command and result models.

Commands serialize to the wire shape ``{"action": ..., "key": ..., ...}``.
Options that were never set are left off the wire.
"""

from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ValidationError


class BaseStorageCommand(BaseModel):
    """A single operation on the plugin's key/value storage."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: str
    key: str = Field(min_length=1)

    def to_wire(self) -> Dict[str, Any]:
        body = self.model_dump(by_alias=True, exclude_unset=True, exclude={"action"})
        body.update(self.model_extra or {})
        return {"action": self.action, **body}


class GetCommand(BaseStorageCommand):
    action: Literal["get"] = "get"


class SetCommand(BaseStorageCommand):
    action: Literal["set"] = "set"
    value: Any


class SetUniqueCommand(BaseStorageCommand):
    """Only stores a value when nothing exists for it yet; the server decides uniqueness."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    action: Literal["set_unique"] = "set_unique"
    value: Any = None
    if_not_exists: Optional[bool] = Field(None, alias="ifNotExists")


class SetUniqueNumCommand(BaseStorageCommand):
    """Assigns the next unused number of the sequence scoped to ``key``."""

    model_config = ConfigDict(extra="allow")

    action: Literal["set_unique_num"] = "set_unique_num"
    start: Optional[int] = None
    increment: Optional[int] = None


class UnsetCommand(BaseStorageCommand):
    action: Literal["unset"] = "unset"


StorageCommand = Annotated[
    Union[GetCommand, SetCommand, SetUniqueCommand, SetUniqueNumCommand, UnsetCommand],
    Field(discriminator="action"),
]

_command_adapter: TypeAdapter = TypeAdapter(StorageCommand)


class StorageItem(BaseModel):
    """A stored ``{key, value}`` pair as returned by the storage service."""

    model_config = ConfigDict(extra="allow")

    key: str
    value: Any = None


def parse_command(command: Union[BaseStorageCommand, Mapping[str, Any]]) -> BaseStorageCommand:
    """Validate a raw ``{"action": ..., "key": ...}`` mapping into a typed command."""
    if isinstance(command, BaseStorageCommand):
        return command
    try:
        return _command_adapter.validate_python(dict(command))
    except (PydanticValidationError, TypeError, ValueError) as exc:
        raise ValidationError(
            "Invalid storage command",
            details={"command": repr(command), "error": str(exc)}
        ) from exc


def parse_result(raw: Any) -> Optional[StorageItem]:
    """``None`` stays ``None``: the key was absent or a uniqueness check failed."""
    if raw is None:
        return None
    return StorageItem.model_validate(raw)
