"""Module for Bitbucket pull request operations."""

import logging

from ..exceptions import BitbucketError
from ..formatters import (
    format_pull_request_comments,
    format_pull_request_details,
    format_pull_requests_list,
)
from ..models import (
    BitbucketDiffStat,
    BitbucketPullRequest,
    BitbucketPullRequestComment,
)
from ..utils.formatting import format_pagination
from ..utils.pagination import cursor_to_page, extract_pagination_info
from .api import build_api_path, resource_path
from .client import BitbucketClient
from .constants import MAX_PAGE_SIZE, PULL_REQUEST_STATES

logger = logging.getLogger("mcp-bitbucket.bitbucket.pull_requests")

DEFAULT_PR_PAGE_LENGTH = 25


def _pr_path(workspace: str, repo: str, *parts: object) -> str:
    return resource_path("repositories", workspace, repo, "pullrequests", *parts)


class PullRequestsMixin(BitbucketClient):
    """Mixin for Bitbucket pull request operations."""

    def list_pull_requests(
        self,
        workspace: str,
        repo: str,
        state: str | None = None,
        query: str | None = None,
        limit: int = DEFAULT_PR_PAGE_LENGTH,
        cursor: str | None = None,
    ) -> str:
        """
        List pull requests in a repository.

        Args:
            workspace: Workspace slug
            repo: Repository slug
            state: OPEN, MERGED, DECLINED or SUPERSEDED
            query: Optional BBQL filter (e.g. 'title ~ "fix"')
            limit: Maximum number of pull requests per page
            cursor: Page number returned by a previous call

        Returns:
            Markdown list with a pagination footer
        """
        if state is not None:
            state = state.upper()
            if state not in PULL_REQUEST_STATES:
                raise ValueError(
                    f"Invalid state '{state}'. Expected one of: "
                    f"{', '.join(PULL_REQUEST_STATES)}"
                )

        params = {
            "state": state,
            "q": query,
            "pagelen": limit or DEFAULT_PR_PAGE_LENGTH,
            "page": cursor_to_page(cursor),
        }
        data = self.get(build_api_path(_pr_path(workspace, repo), params))
        pull_requests = [
            BitbucketPullRequest.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]
        pagination = extract_pagination_info(data, source="list_pull_requests")
        return "\n\n".join(
            [
                format_pull_requests_list(pull_requests),
                format_pagination(
                    pagination.count, pagination.has_more, pagination.next_cursor
                ),
            ]
        )

    def get_pull_request(
        self,
        workspace: str,
        repo: str,
        pr_id: int,
        include_full_diff: bool = False,
        include_comments: bool = False,
    ) -> str:
        """
        Get a pull request with its change summary.

        The diffstat is always requested; a failure there is logged and the
        summary omitted. The raw diff and comments are fetched on request.
        """
        data = self.get(build_api_path(_pr_path(workspace, repo, pr_id)))
        pull_request = BitbucketPullRequest.from_api_response(data)

        diffstat: list[BitbucketDiffStat] | None = None
        try:
            diffstat_data = self.get(
                build_api_path(_pr_path(workspace, repo, pr_id, "diffstat"))
            )
            diffstat = [
                BitbucketDiffStat.from_api_response(value)
                for value in (diffstat_data or {}).get("values", [])
            ]
        except BitbucketError as e:
            logger.warning(f"Could not retrieve diffstat for PR #{pr_id}: {e}")

        raw_diff = None
        if include_full_diff:
            raw_diff = self.get_pull_request_diff(workspace, repo, pr_id)

        comments = None
        if include_comments:
            comments = self._fetch_comments(workspace, repo, pr_id, MAX_PAGE_SIZE)

        return format_pull_request_details(
            pull_request, diffstat=diffstat, raw_diff=raw_diff, comments=comments
        )

    def get_pull_request_diff(self, workspace: str, repo: str, pr_id: int) -> str:
        """Fetch the unified diff of a pull request as plain text."""
        diff = self.get(
            build_api_path(_pr_path(workspace, repo, pr_id, "diff")),
            headers={"Accept": "text/plain", "Content-Type": "text/plain"},
        )
        return diff if isinstance(diff, str) else ""

    def _fetch_comments(
        self,
        workspace: str,
        repo: str,
        pr_id: int,
        limit: int,
    ) -> list[BitbucketPullRequestComment]:
        data = self.get(
            build_api_path(
                _pr_path(workspace, repo, pr_id, "comments"), {"pagelen": limit}
            )
        )
        return [
            BitbucketPullRequestComment.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]

    def list_pull_request_comments(
        self,
        workspace: str,
        repo: str,
        pr_id: int,
        limit: int = DEFAULT_PR_PAGE_LENGTH,
        cursor: str | None = None,
    ) -> str:
        params = {
            "pagelen": limit or DEFAULT_PR_PAGE_LENGTH,
            "page": cursor_to_page(cursor),
        }
        data = self.get(
            build_api_path(_pr_path(workspace, repo, pr_id, "comments"), params)
        )
        comments = [
            BitbucketPullRequestComment.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]
        pagination = extract_pagination_info(data, source="list_pr_comments")
        return "\n\n".join(
            [
                format_pull_request_comments(comments, pr_id),
                format_pagination(
                    pagination.count, pagination.has_more, pagination.next_cursor
                ),
            ]
        )
