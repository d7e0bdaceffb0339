"""
Resource models package.

Resource payloads stay opaque to the loader; these models exist for
callers that want typed access and for building write requests.
"""

from .models import Resource, ResourceType, PaginationParams
from .invites import (
    InviteCreation,
    InviteCreationAttributes,
    InviteSortFields,
    INVITE_FILTER_FIELDS,
    INVITE_SORT_FIELDS,
    validate_invite_query,
)

__all__ = [
    "Resource",
    "ResourceType",
    "PaginationParams",
    "InviteCreation",
    "InviteCreationAttributes",
    "InviteSortFields",
    "INVITE_FILTER_FIELDS",
    "INVITE_SORT_FIELDS",
    "validate_invite_query",
]
