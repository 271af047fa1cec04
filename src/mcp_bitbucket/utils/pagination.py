"""Pagination helpers for Bitbucket page responses."""

import logging
from typing import Any

from ..models.common import ResponsePagination

logger = logging.getLogger("mcp-bitbucket.utils.pagination")


def extract_pagination_info(data: Any, source: str = "") -> ResponsePagination:
    """Extract pagination state from a Bitbucket page response.

    Args:
        data: Raw page response (`values`, `page`, `pagelen`, `size`, `next`)
        source: Optional caller name used in debug logs

    Returns:
        ResponsePagination describing the current page
    """
    pagination = ResponsePagination.from_api_response(data)
    logger.debug(
        f"{source or 'pagination'}: count={pagination.count}, "
        f"has_more={pagination.has_more}, next_cursor={pagination.next_cursor}"
    )
    return pagination


def cursor_to_page(cursor: str | int | None) -> int | None:
    """Convert a cursor value (page number) into an integer page.

    Raises:
        ValueError: If the cursor is not a positive page number
    """
    if cursor is None or cursor == "":
        return None
    try:
        page = int(cursor)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid cursor '{cursor}': expected a page number") from e
    if page < 1:
        raise ValueError(f"Invalid cursor '{cursor}': page numbers start at 1")
    return page
