"""Common model classes shared by Bitbucket resources."""

from typing import Any
from urllib.parse import parse_qs, urlparse

from .base import ApiModel, nested_get


class BitbucketUser(ApiModel):
    """Bitbucket account reference as embedded in other resources."""

    uuid: str | None = None
    display_name: str | None = None
    nickname: str | None = None
    account_id: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "BitbucketUser":
        if not isinstance(data, dict):
            return cls()
        return cls(
            uuid=data.get("uuid"),
            display_name=data.get("display_name"),
            nickname=data.get("nickname"),
            account_id=data.get("account_id"),
        )

    @property
    def name(self) -> str | None:
        return self.display_name or self.nickname


def user_or_none(data: Any) -> BitbucketUser | None:
    """Build a user only when the payload carries one."""
    if isinstance(data, dict) and data:
        return BitbucketUser.from_api_response(data)
    return None


def link_href(data: dict[str, Any], name: str) -> str | None:
    """Return `links.<name>.href` from a resource payload."""
    return nested_get(data, "links", name, "href")


class ResponsePagination(ApiModel):
    """Pagination state extracted from a Bitbucket page response."""

    count: int = 0
    has_more: bool = False
    next_cursor: str | None = None
    total: int | None = None
    page: int | None = None
    page_size: int | None = None

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], **kwargs: Any
    ) -> "ResponsePagination":
        """
        Build pagination state from a page response.

        Bitbucket pages carry `values`, `page`, `pagelen`, `size` and, when
        more results exist, a `next` URL whose `page` query value becomes the
        next cursor.
        """
        if not isinstance(data, dict):
            return cls()

        values = data.get("values")
        count = len(values) if isinstance(values, list) else 0
        page = data.get("page") if isinstance(data.get("page"), int) else None
        next_url = data.get("next")

        next_cursor = None
        if isinstance(next_url, str) and next_url:
            query = parse_qs(urlparse(next_url).query)
            if query.get("page"):
                next_cursor = query["page"][0]
            elif page is not None:
                next_cursor = str(page + 1)

        return cls(
            count=count,
            has_more=bool(next_url),
            next_cursor=next_cursor,
            total=data.get("size") if isinstance(data.get("size"), int) else None,
            page=page,
            page_size=(
                data.get("pagelen") if isinstance(data.get("pagelen"), int) else None
            ),
        )
