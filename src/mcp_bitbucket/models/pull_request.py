"""
Bitbucket pull request models.

This module provides Pydantic models for Bitbucket Cloud pull requests,
their comments and diffstat entries.
"""

import logging
from typing import Any

from .base import ApiModel, nested_get
from .common import BitbucketUser, link_href, user_or_none
from .constants import EMPTY_STRING, UNKNOWN

logger = logging.getLogger(__name__)


class BitbucketPullRequest(ApiModel):
    """
    Model representing a Bitbucket pull request.

    The Cloud payload nests branch names under `source.branch.name` and
    `destination.branch.name`; they are flattened here.
    """

    id: int = 0
    title: str = UNKNOWN
    description: str | None = None
    state: str = EMPTY_STRING
    repository: str | None = None
    source_branch: str = UNKNOWN
    destination_branch: str = UNKNOWN
    author: BitbucketUser | None = None
    reviewers: list[BitbucketUser] = []
    created_on: str | None = None
    updated_on: str | None = None
    comment_count: int = 0
    task_count: int = 0
    links: dict[str, str] = {}

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketPullRequest":
        """
        Create a BitbucketPullRequest from a Bitbucket API response.

        Args:
            data: The pull request data from the Bitbucket API

        Returns:
            A BitbucketPullRequest instance
        """
        if not data or not isinstance(data, dict):
            logger.debug("Received empty or non-dictionary pull request data")
            return cls()

        description = nested_get(data, "summary", "raw") or nested_get(
            data, "rendered", "description", "raw"
        )
        if description is None and isinstance(data.get("description"), str):
            description = data["description"]

        reviewers = [
            BitbucketUser.from_api_response(reviewer)
            for reviewer in data.get("reviewers") or []
            if isinstance(reviewer, dict)
        ]

        links = {
            name: href
            for name in ("html", "commits", "comments", "diff", "diffstat")
            if (href := link_href(data, name))
        }

        return cls(
            id=data.get("id") or 0,
            title=data.get("title") or UNKNOWN,
            description=description,
            state=data.get("state") or EMPTY_STRING,
            repository=nested_get(data, "destination", "repository", "full_name"),
            source_branch=nested_get(data, "source", "branch", "name", default=UNKNOWN),
            destination_branch=nested_get(
                data, "destination", "branch", "name", default=UNKNOWN
            ),
            author=user_or_none(data.get("author")),
            reviewers=reviewers,
            created_on=data.get("created_on"),
            updated_on=data.get("updated_on"),
            comment_count=data.get("comment_count") or 0,
            task_count=data.get("task_count") or 0,
            links=links,
        )


class BitbucketPullRequestComment(ApiModel):
    """Model representing a (possibly inline) pull request comment."""

    id: int = 0
    content: str = EMPTY_STRING
    user: BitbucketUser | None = None
    created_on: str | None = None
    updated_on: str | None = None
    deleted: bool = False
    parent_id: int | None = None
    inline_path: str | None = None
    inline_from: int | None = None
    inline_to: int | None = None
    url: str | None = None
    code_url: str | None = None

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketPullRequestComment":
        if not data or not isinstance(data, dict):
            return cls()

        inline = data.get("inline") if isinstance(data.get("inline"), dict) else {}
        return cls(
            id=data.get("id") or 0,
            content=nested_get(data, "content", "raw", default=EMPTY_STRING),
            user=user_or_none(data.get("user")),
            created_on=data.get("created_on"),
            updated_on=data.get("updated_on"),
            deleted=bool(data.get("deleted", False)),
            parent_id=nested_get(data, "parent", "id"),
            inline_path=inline.get("path"),
            inline_from=inline.get("from"),
            inline_to=inline.get("to"),
            url=link_href(data, "html"),
            code_url=link_href(data, "code"),
        )

    @property
    def is_inline(self) -> bool:
        return self.inline_path is not None


class BitbucketDiffStat(ApiModel):
    """Per-file line counts from the pull request diffstat endpoint."""

    path: str = UNKNOWN
    status: str | None = None
    lines_added: int = 0
    lines_removed: int = 0

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketDiffStat":
        if not data or not isinstance(data, dict):
            return cls()

        path = nested_get(data, "old", "path") or nested_get(data, "new", "path")
        return cls(
            path=path or UNKNOWN,
            status=data.get("status"),
            lines_added=data.get("lines_added") or 0,
            lines_removed=data.get("lines_removed") or 0,
        )
