"""Module for Bitbucket workspace operations."""

import logging

from ..formatters import format_workspace_details, format_workspaces_list
from ..models import BitbucketWorkspace, BitbucketWorkspaceMembership
from ..utils.formatting import format_pagination
from ..utils.pagination import cursor_to_page, extract_pagination_info
from .api import build_api_path, resource_path
from .client import BitbucketClient

logger = logging.getLogger("mcp-bitbucket.bitbucket.workspaces")

DEFAULT_WORKSPACE_PAGE_LENGTH = 25


class WorkspacesMixin(BitbucketClient):
    """Mixin for Bitbucket workspace operations."""

    def list_workspaces(
        self,
        query: str | None = None,
        limit: int = DEFAULT_WORKSPACE_PAGE_LENGTH,
        cursor: str | None = None,
    ) -> str:
        """
        List workspaces the authenticated user has access to.

        Args:
            query: Optional BBQL filter (e.g. 'workspace.slug ~ "team"')
            limit: Maximum number of workspaces per page
            cursor: Page number returned by a previous call

        Returns:
            Markdown list with a pagination footer
        """
        params = {
            "q": query,
            "pagelen": limit or DEFAULT_WORKSPACE_PAGE_LENGTH,
            "page": cursor_to_page(cursor),
        }
        data = self.get(build_api_path("/user/permissions/workspaces", params))
        memberships = [
            BitbucketWorkspaceMembership.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]
        logger.debug(f"Retrieved {len(memberships)} workspaces")

        pagination = extract_pagination_info(data, source="list_workspaces")
        return "\n\n".join(
            [
                format_workspaces_list(memberships),
                format_pagination(
                    pagination.count, pagination.has_more, pagination.next_cursor
                ),
            ]
        )

    def get_workspace(self, workspace_slug: str) -> str:
        """Get details of a single workspace as markdown."""
        data = self.get(build_api_path(resource_path("workspaces", workspace_slug)))
        return format_workspace_details(BitbucketWorkspace.from_api_response(data))
