"""
Invite resource: query fields and write payloads.
"""

from typing import Any, Dict, Literal, Mapping, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field

from shared.errors import ValidationError
from .models import ResourceType


InviteSortFields = Literal["name", "created_at", "-name", "-created_at"]
INVITE_SORT_FIELDS = frozenset(get_args(InviteSortFields))

INVITE_FILTER_FIELDS = frozenset({
    "email",
    "employee",
    "flow",
    "location",
    "date-from",
    "date-to",
    "datetime-from",
    "datetime-to",
    "for-date",
    "employee-centric",
    "scope",
})

INVITE_RELATIONSHIPS = frozenset({"attendee", "creator", "employee", "entry", "flow", "location"})


def validate_invite_query(params: Mapping[str, Any]) -> None:
    """Reject filter or sort fields the invites endpoint does not support."""
    unknown_filters = set(params.get("filter") or {}) - INVITE_FILTER_FIELDS
    if unknown_filters:
        raise ValidationError("Unknown invite filter fields", details={"fields": sorted(unknown_filters)})

    sort = params.get("sort") or []
    if isinstance(sort, str):
        sort = sort.split(",")
    unknown_sort = [field for field in sort if field not in INVITE_SORT_FIELDS]
    if unknown_sort:
        raise ValidationError("Unknown invite sort fields", details={"fields": unknown_sort})


class InviteCreationAttributes(BaseModel):
    """Writable invite attributes, serialized with the platform's dashed names."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    expected_arrival_time: Optional[str] = Field(None, alias="expected-arrival-time")
    expected_departure_time: Optional[str] = Field(None, alias="expected-departure-time")
    full_name: Optional[str] = Field(None, alias="full-name")
    private_notes: Optional[str] = Field(None, alias="private-notes")
    user_data: Optional[Dict[str, Optional[str]]] = Field(None, alias="user-data")
    notify_visitor: Optional[bool] = Field(None, alias="notify-visitor")
    attested: Optional[bool] = None
    phone: Optional[str] = None


class InviteCreation(BaseModel):
    """Body of an invite create or update request."""

    attributes: InviteCreationAttributes = Field(default_factory=InviteCreationAttributes)
    relationships: Dict[str, Any] = Field(default_factory=dict)

    def to_document(self, invite_id: Optional[str] = None) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": ResourceType.INVITES.value,
            "attributes": self.attributes.model_dump(by_alias=True, exclude_none=True),
        }
        if self.relationships:
            unknown = set(self.relationships) - INVITE_RELATIONSHIPS
            if unknown:
                raise ValidationError(
                    "Unknown invite relationships",
                    details={"relationships": sorted(unknown)}
                )
            data["relationships"] = self.relationships
        if invite_id is not None:
            data["id"] = invite_id
        return {"data": data}
