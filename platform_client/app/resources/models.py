"""
JSON:API resource models for the platform API.
"""

from typing import Any, Dict, List, Optional, Union
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ResourceType(str, Enum):
    """Canonical resource type names."""
    AGREEMENT_PAGES = "agreement-pages"
    AGREEMENTS = "agreements"
    COMPANIES = "companies"
    EMPLOYEES = "employees"
    FLOWS = "flows"
    LOCATIONS = "locations"
    SIGN_IN_FIELD_PAGES = "sign-in-field-pages"
    SIGN_IN_FIELDS = "sign-in-fields"
    INVITES = "invites"


class Resource(BaseModel):
    """A typed, identified record with opaque attributes and relationship links."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="Resource type")
    id: str = Field(..., description="Resource ID")
    attributes: Dict[str, Any] = Field(default_factory=dict)
    relationships: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Resource":
        data = dict(payload)
        data["id"] = str(data.get("id"))
        return cls.model_validate(data)

    def related(self, name: str) -> Optional[Union[Dict[str, Any], List[Dict[str, Any]]]]:
        """Linkage (``{"type", "id"}`` or a list of them) of a relationship, if present."""
        relationship = self.relationships.get(name)
        if not isinstance(relationship, dict):
            return None
        return relationship.get("data")


class PaginationParams(BaseModel):
    """Filter, sort and page parameters for collection queries."""

    filter: Dict[str, Any] = Field(default_factory=dict)
    sort: Optional[Union[str, List[str]]] = None
    page: Dict[str, int] = Field(default_factory=dict)
    include: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.include:
            params["include"] = self.include
        if self.filter:
            params["filter"] = self.filter
        if self.sort:
            params["sort"] = self.sort if isinstance(self.sort, str) else ",".join(self.sort)
        if self.page:
            params["page"] = self.page
        return params
