"""Module for Bitbucket repository and branch operations."""

import logging

from ..formatters import (
    format_branch_success,
    format_branches_list,
    format_repositories_list,
)
from ..models import BitbucketBranch, BitbucketRepository
from ..models.constants import UNKNOWN
from ..utils.formatting import format_pagination
from ..utils.pagination import cursor_to_page, extract_pagination_info
from .api import build_api_path, resource_path
from .client import BitbucketClient
from .constants import REPOSITORY_ROLES

logger = logging.getLogger("mcp-bitbucket.bitbucket.repositories")

DEFAULT_REPOSITORY_PAGE_LENGTH = 25
DEFAULT_REPOSITORY_SORT = "-updated_on"
DEFAULT_BRANCH_SORT = "name"


def bbql_string(value: str) -> str:
    """Quote a value for use inside a BBQL expression."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _repositories_path(workspace: str, *parts: object) -> str:
    return resource_path("repositories", workspace, *parts)


class RepositoriesMixin(BitbucketClient):
    """Mixin for Bitbucket repository and branch operations."""

    def list_repositories(
        self,
        workspace: str,
        query: str | None = None,
        role: str | None = None,
        project_key: str | None = None,
        sort: str | None = None,
        limit: int = DEFAULT_REPOSITORY_PAGE_LENGTH,
        cursor: str | None = None,
    ) -> str:
        """
        List repositories in a workspace.

        Args:
            workspace: Workspace slug
            query: Text matched against repository name and description
            role: owner, admin, contributor or member
            project_key: Only repositories in this project
            sort: Sort field, most recently updated first by default
            limit: Maximum number of repositories per page
            cursor: Page number returned by a previous call

        Returns:
            Markdown list with a pagination footer
        """
        if role is not None and role not in REPOSITORY_ROLES:
            raise ValueError(
                f"Invalid role '{role}'. Expected one of: "
                f"{', '.join(REPOSITORY_ROLES)}"
            )

        filters = []
        if query:
            filters.append(
                f"(name ~ {bbql_string(query)} OR description ~ {bbql_string(query)})"
            )
        if project_key:
            filters.append(f"project.key = {bbql_string(project_key)}")

        params = {
            "q": " AND ".join(filters) or None,
            "role": role,
            "sort": sort or DEFAULT_REPOSITORY_SORT,
            "pagelen": limit or DEFAULT_REPOSITORY_PAGE_LENGTH,
            "page": cursor_to_page(cursor),
        }
        data = self.get(build_api_path(_repositories_path(workspace), params))
        repositories = [
            BitbucketRepository.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]
        logger.debug(f"Retrieved {len(repositories)} repositories from {workspace}")

        pagination = extract_pagination_info(data, source="list_repositories")
        return "\n\n".join(
            [
                format_repositories_list(repositories, workspace),
                format_pagination(
                    pagination.count, pagination.has_more, pagination.next_cursor
                ),
            ]
        )

    def list_branches(
        self,
        workspace: str,
        repo: str,
        query: str | None = None,
        sort: str | None = None,
        limit: int = DEFAULT_REPOSITORY_PAGE_LENGTH,
        cursor: str | None = None,
    ) -> str:
        """List branches of a repository, filtering on the branch name."""
        params = {
            "q": f"name ~ {bbql_string(query)}" if query else None,
            "sort": sort or DEFAULT_BRANCH_SORT,
            "pagelen": limit or DEFAULT_REPOSITORY_PAGE_LENGTH,
            "page": cursor_to_page(cursor),
        }
        data = self.get(
            build_api_path(
                _repositories_path(workspace, repo, "refs", "branches"), params
            )
        )
        branches = [
            BitbucketBranch.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]
        pagination = extract_pagination_info(data, source="list_branches")
        return "\n\n".join(
            [
                format_branches_list(branches, workspace, repo),
                format_pagination(
                    pagination.count, pagination.has_more, pagination.next_cursor
                ),
            ]
        )

    def add_branch(self, workspace: str, repo: str, name: str, source: str) -> str:
        """
        Create a branch.

        Args:
            workspace: Workspace slug
            repo: Repository slug
            name: Name of the new branch
            source: Existing branch name or full commit hash to branch from

        Returns:
            Confirmation message

        Raises:
            ValueError: If the name or source is blank
        """
        if not name or not name.strip():
            raise ValueError("Branch name is required")
        if not source or not source.strip():
            raise ValueError("Source branch or commit is required")

        body = {"name": name, "target": {"hash": source}}
        data = self.post(
            build_api_path(_repositories_path(workspace, repo, "refs", "branches")),
            body,
        )
        branch = BitbucketBranch.from_api_response(data)
        if branch.name == UNKNOWN:
            branch = branch.model_copy(update={"name": name})
        logger.info(f"Created branch {name} from {source} in {workspace}/{repo}")
        return format_branch_success(branch, workspace, repo)
