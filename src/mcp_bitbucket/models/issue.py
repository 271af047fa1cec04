"""
Bitbucket issue tracker models.

This module provides Pydantic models for repository issues and their
comments.
"""

import logging
from typing import Any

from .base import ApiModel, nested_get
from .common import BitbucketUser, link_href, user_or_none
from .constants import UNKNOWN

logger = logging.getLogger(__name__)


class BitbucketIssue(ApiModel):
    """Model representing a Bitbucket repository issue."""

    id: int = 0
    title: str = UNKNOWN
    content: str | None = None
    state: str | None = None
    kind: str | None = None
    priority: str | None = None
    reporter: BitbucketUser | None = None
    assignee: BitbucketUser | None = None
    created_on: str | None = None
    updated_on: str | None = None
    votes: int | None = None
    watches: int | None = None
    url: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "BitbucketIssue":
        """
        Create a BitbucketIssue from a Bitbucket API response.

        Args:
            data: The issue data from the Bitbucket API

        Returns:
            A BitbucketIssue instance
        """
        if not data or not isinstance(data, dict):
            logger.debug("Received empty or non-dictionary issue data")
            return cls()

        return cls(
            id=data.get("id") or 0,
            title=data.get("title") or UNKNOWN,
            content=nested_get(data, "content", "raw"),
            state=data.get("state"),
            kind=data.get("kind"),
            priority=data.get("priority"),
            reporter=user_or_none(data.get("reporter")),
            assignee=user_or_none(data.get("assignee")),
            created_on=data.get("created_on"),
            updated_on=data.get("updated_on"),
            votes=data.get("votes"),
            watches=data.get("watches"),
            url=link_href(data, "html"),
        )


class BitbucketIssueComment(ApiModel):
    """Model representing a comment on a Bitbucket issue."""

    id: int = 0
    content: str | None = None
    user: BitbucketUser | None = None
    created_on: str | None = None
    updated_on: str | None = None

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketIssueComment":
        if not data or not isinstance(data, dict):
            return cls()

        return cls(
            id=data.get("id") or 0,
            content=nested_get(data, "content", "raw"),
            user=user_or_none(data.get("user")),
            created_on=data.get("created_on"),
            updated_on=data.get("updated_on"),
        )
