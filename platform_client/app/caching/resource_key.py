"""
Resource identities and type aliases used as loader cache keys.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Mapping, Optional, Tuple

from shared.errors import ValidationError


CacheKey = Tuple[str, str, Optional[str]]

# The platform sometimes labels included relationship data with the
# relationship name instead of the model type.
DEFAULT_TYPE_ALIASES: Dict[str, str] = {
    "employee-screening-flows": "flows",
}


@dataclass(frozen=True)
class ResourceKey:
    """A ``(type, id)`` identity plus the optional include directive it was requested with."""

    type: str
    id: str
    include: Optional[str] = None

    def __post_init__(self):
        if not self.type or self.id is None or not str(self.id):
            raise ValidationError(
                "Resource key needs a type and an id",
                details={"type": self.type, "id": self.id}
            )
        # ids arrive as ints from some payloads
        object.__setattr__(self, "id", str(self.id))

    def identity(self) -> "ResourceKey":
        """Same resource without the include directive."""
        if self.include is None:
            return self
        return replace(self, include=None)

    def with_type(self, resource_type: str) -> "ResourceKey":
        return replace(self, type=resource_type)

    def cache_key(self, share_include_variants: bool = False) -> CacheKey:
        include = None if share_include_variants else self.include
        return (self.type, self.id, include)

    def path(self) -> str:
        return f"/api/v3/{self.type}/{self.id}"


class TypeAliasTable:
    """
    Static alias -> canonical type mapping.

    Lookups are symmetric: a resource stored under any label of an alias
    group is addressable under every other label of that group.
    """

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        self._canonical: Dict[str, str] = dict(DEFAULT_TYPE_ALIASES if aliases is None else aliases)
        self._groups: Dict[str, List[str]] = {}
        for alias, canonical in self._canonical.items():
            group = self._groups.setdefault(canonical, [canonical])
            if alias not in group:
                group.append(alias)

    def canonical(self, resource_type: str) -> str:
        return self._canonical.get(resource_type, resource_type)

    def equivalents(self, resource_type: str) -> List[str]:
        """Every label sharing an identity with ``resource_type``, the requested label first."""
        group = self._groups.get(self.canonical(resource_type))
        if not group:
            return [resource_type]
        return [resource_type] + [label for label in group if label != resource_type]

    def __contains__(self, resource_type: str) -> bool:
        return resource_type in self._canonical or resource_type in self._groups

    def as_dict(self) -> Dict[str, str]:
        return dict(self._canonical)
