"""
Bitbucket workspace models.

This module provides Pydantic models for workspaces and the permission
memberships returned by `/2.0/user/permissions/workspaces`.
"""

import logging
from typing import Any

from .base import ApiModel
from .common import link_href
from .constants import EMPTY_STRING, UNKNOWN

logger = logging.getLogger(__name__)


class BitbucketWorkspace(ApiModel):
    """Model representing a Bitbucket workspace."""

    uuid: str = EMPTY_STRING
    slug: str = EMPTY_STRING
    name: str = UNKNOWN
    is_private: bool | None = None
    created_on: str | None = None
    url: str | None = None

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketWorkspace":
        if not data or not isinstance(data, dict):
            logger.debug("Received empty or non-dictionary workspace data")
            return cls()

        return cls(
            uuid=data.get("uuid") or EMPTY_STRING,
            slug=data.get("slug") or EMPTY_STRING,
            name=data.get("name") or data.get("slug") or UNKNOWN,
            is_private=data.get("is_private"),
            created_on=data.get("created_on"),
            url=link_href(data, "html"),
        )


class BitbucketWorkspaceMembership(ApiModel):
    """A workspace together with the caller's permission on it."""

    permission: str = UNKNOWN
    last_accessed: str | None = None
    added_on: str | None = None
    workspace: BitbucketWorkspace = BitbucketWorkspace()

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketWorkspaceMembership":
        if not data or not isinstance(data, dict):
            return cls()

        return cls(
            permission=data.get("permission") or UNKNOWN,
            last_accessed=data.get("last_accessed"),
            added_on=data.get("added_on"),
            workspace=BitbucketWorkspace.from_api_response(data.get("workspace", {})),
        )
