"""
Bitbucket repository models.

This module provides Pydantic models for repositories, branches, commits and
code search hits.
"""

import logging
from typing import Any

from .base import ApiModel, nested_get
from .common import BitbucketUser, link_href, user_or_none
from .constants import EMPTY_STRING, UNKNOWN

logger = logging.getLogger(__name__)


class BitbucketRepository(ApiModel):
    """Model representing a Bitbucket repository."""

    uuid: str = EMPTY_STRING
    name: str = UNKNOWN
    full_name: str = EMPTY_STRING
    description: str | None = None
    is_private: bool | None = None
    language: str | None = None
    size: int | None = None
    project_key: str | None = None
    project_name: str | None = None
    owner: BitbucketUser | None = None
    mainbranch: str | None = None
    created_on: str | None = None
    updated_on: str | None = None
    url: str | None = None

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketRepository":
        if not data or not isinstance(data, dict):
            logger.debug("Received empty or non-dictionary repository data")
            return cls()

        return cls(
            uuid=data.get("uuid") or EMPTY_STRING,
            name=data.get("name") or data.get("slug") or UNKNOWN,
            full_name=data.get("full_name") or EMPTY_STRING,
            description=data.get("description") or None,
            is_private=data.get("is_private"),
            language=data.get("language") or None,
            size=data.get("size") if isinstance(data.get("size"), int) else None,
            project_key=nested_get(data, "project", "key"),
            project_name=nested_get(data, "project", "name"),
            owner=user_or_none(data.get("owner")),
            mainbranch=nested_get(data, "mainbranch", "name"),
            created_on=data.get("created_on"),
            updated_on=data.get("updated_on"),
            url=link_href(data, "html"),
        )


class BitbucketBranch(ApiModel):
    """A branch ref with the commit it points at."""

    name: str = UNKNOWN
    target_hash: str | None = None
    target_date: str | None = None
    target_message: str | None = None
    target_author: str | None = None
    url: str | None = None

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketBranch":
        if not data or not isinstance(data, dict):
            return cls()

        target = data.get("target") if isinstance(data.get("target"), dict) else {}
        author = nested_get(target, "author", "user", "display_name") or nested_get(
            target, "author", "raw"
        )
        return cls(
            name=data.get("name") or UNKNOWN,
            target_hash=target.get("hash"),
            target_date=target.get("date"),
            target_message=target.get("message"),
            target_author=author,
            url=link_href(data, "html"),
        )

    @property
    def short_hash(self) -> str | None:
        return self.target_hash[:12] if self.target_hash else None


class BitbucketCommit(ApiModel):
    """Model representing a commit as returned by the commits endpoint."""

    hash: str = EMPTY_STRING
    message: str = EMPTY_STRING
    date: str | None = None
    author: str | None = None
    repository: str | None = None
    url: str | None = None

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketCommit":
        if not data or not isinstance(data, dict):
            return cls()

        author = nested_get(data, "author", "user", "display_name") or nested_get(
            data, "author", "raw"
        )
        return cls(
            hash=data.get("hash") or EMPTY_STRING,
            message=data.get("message") or EMPTY_STRING,
            date=data.get("date"),
            author=author,
            repository=nested_get(data, "repository", "full_name"),
            url=link_href(data, "html"),
        )

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.strip().split("\n", 1)[0] if self.message else ""


class BitbucketCodeSearchLine(ApiModel):
    """One line of a code search hit, split into highlighted segments."""

    line: int = 0
    segments: list[tuple[str, bool]] = []

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketCodeSearchLine":
        if not data or not isinstance(data, dict):
            return cls()

        segments = [
            (segment.get("text") or "", bool(segment.get("match")))
            for segment in data.get("segments") or []
            if isinstance(segment, dict)
        ]
        return cls(line=data.get("line") or 0, segments=segments)


class BitbucketCodeSearchResult(ApiModel):
    """A file matched by the workspace code search endpoint."""

    path: str = UNKNOWN
    url: str | None = None
    match_count: int = 0
    matches: list[list[BitbucketCodeSearchLine]] = []

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "BitbucketCodeSearchResult":
        if not data or not isinstance(data, dict):
            return cls()

        matches = [
            [
                BitbucketCodeSearchLine.from_api_response(line)
                for line in content_match.get("lines") or []
            ]
            for content_match in data.get("content_matches") or []
            if isinstance(content_match, dict)
        ]
        return cls(
            path=nested_get(data, "file", "path", default=UNKNOWN),
            url=nested_get(data, "file", "links", "self", "href"),
            match_count=data.get("content_match_count") or 0,
            matches=matches,
        )
