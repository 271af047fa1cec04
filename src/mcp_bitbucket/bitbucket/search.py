"""Module for searching Bitbucket content across a workspace."""

import logging

from ..exceptions import BitbucketError
from ..formatters import format_code_search_results, format_commits_list
from ..models import BitbucketCodeSearchResult, BitbucketCommit
from ..utils.formatting import format_pagination
from ..utils.pagination import cursor_to_page, extract_pagination_info
from .api import build_api_path, resource_path
from .constants import SEARCH_SCOPES
from .pull_requests import PullRequestsMixin
from .repositories import DEFAULT_REPOSITORY_PAGE_LENGTH, RepositoriesMixin, bbql_string

logger = logging.getLogger("mcp-bitbucket.bitbucket.search")


class SearchMixin(RepositoriesMixin, PullRequestsMixin):
    """Mixin for searching repositories, pull requests, commits and code."""

    def search(
        self,
        workspace: str,
        query: str | None = None,
        repo: str | None = None,
        scope: str = "all",
        limit: int = DEFAULT_REPOSITORY_PAGE_LENGTH,
        cursor: str | None = None,
    ) -> str:
        """
        Search a workspace.

        Scopes:
            repositories: name and description match `query`
            pullrequests: title and description match `query`; needs `repo`
            commits: message matches `query`; needs `repo` and `query`
            code: workspace code search for `query`, narrowed to `repo`
            all: repositories, plus pull requests when `repo` is given, plus
                code when `query` is given

        The cursor is the page number and applies to every section.

        Raises:
            ValueError: If the scope is unknown or a required value is missing
        """
        scope = (scope or "all").lower()
        if scope not in SEARCH_SCOPES:
            raise ValueError(
                f"Invalid scope '{scope}'. Expected one of: {', '.join(SEARCH_SCOPES)}"
            )

        if scope == "repositories":
            return self.list_repositories(
                workspace, query=query, limit=limit, cursor=cursor
            )
        if scope == "pullrequests":
            if not repo:
                raise ValueError(
                    "A repository slug is required for pull request search"
                )
            return self._search_pull_requests(workspace, repo, query, limit, cursor)
        if scope == "commits":
            if not repo or not query:
                raise ValueError(
                    "A repository slug and a query are required for commit search"
                )
            return self.search_commits(workspace, repo, query, limit, cursor)
        if scope == "code":
            if not query:
                raise ValueError("A query is required for code search")
            return self.search_code(workspace, query, repo, limit, cursor)

        sections = [
            self.list_repositories(workspace, query=query, limit=limit, cursor=cursor)
        ]
        if repo:
            sections.append(
                self._search_pull_requests(workspace, repo, query, limit, cursor)
            )
        if query:
            try:
                sections.append(
                    self.search_code(workspace, query, repo, limit, cursor)
                )
            except BitbucketError as e:
                logger.warning(f"Code search failed for workspace {workspace}: {e}")
                sections.append(f"*Code search unavailable: {e}*")
        return "\n\n".join(sections)

    def _search_pull_requests(
        self,
        workspace: str,
        repo: str,
        query: str | None,
        limit: int,
        cursor: str | None,
    ) -> str:
        bbql = None
        if query:
            bbql = f"title ~ {bbql_string(query)} OR description ~ {bbql_string(query)}"
        return self.list_pull_requests(
            workspace, repo, query=bbql, limit=limit, cursor=cursor
        )

    def search_commits(
        self,
        workspace: str,
        repo: str,
        query: str,
        limit: int = DEFAULT_REPOSITORY_PAGE_LENGTH,
        cursor: str | None = None,
    ) -> str:
        """Find commits in a repository whose message contains `query`."""
        params = {
            "q": f"message ~ {bbql_string(query)}",
            "pagelen": limit or DEFAULT_REPOSITORY_PAGE_LENGTH,
            "page": cursor_to_page(cursor),
        }
        data = self.get(
            build_api_path(
                resource_path("repositories", workspace, repo, "commits"), params
            )
        )
        commits = [
            BitbucketCommit.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]
        pagination = extract_pagination_info(data, source="search_commits")
        return "\n\n".join(
            [
                format_commits_list(commits),
                format_pagination(
                    pagination.count, pagination.has_more, pagination.next_cursor
                ),
            ]
        )

    def search_code(
        self,
        workspace: str,
        query: str,
        repo: str | None = None,
        limit: int = DEFAULT_REPOSITORY_PAGE_LENGTH,
        cursor: str | None = None,
    ) -> str:
        """
        Search file contents across a workspace.

        Code search must be enabled for the workspace. A repository narrows
        the search through the `repo:` modifier.
        """
        search_query = f"{query} repo:{repo}" if repo else query
        params = {
            "search_query": search_query,
            "pagelen": limit or DEFAULT_REPOSITORY_PAGE_LENGTH,
            "page": cursor_to_page(cursor),
        }
        data = self.get(
            build_api_path(
                resource_path("workspaces", workspace, "search", "code"), params
            )
        )
        results = [
            BitbucketCodeSearchResult.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]
        total = (data or {}).get("size")
        pagination = extract_pagination_info(data, source="search_code")
        return "\n\n".join(
            [
                format_code_search_results(
                    results, total if isinstance(total, int) else None
                ),
                format_pagination(
                    pagination.count, pagination.has_more, pagination.next_cursor
                ),
            ]
        )
