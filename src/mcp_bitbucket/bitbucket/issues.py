"""Module for Bitbucket issue tracker operations."""

import logging
from typing import Any

from ..exceptions import BitbucketApiError
from ..formatters import (
    format_comment_success,
    format_issue_comments,
    format_issue_details,
    format_issue_success,
    format_issues_list,
)
from ..models import BitbucketIssue, BitbucketIssueComment
from ..utils.formatting import format_pagination
from ..utils.pagination import extract_pagination_info
from .api import build_api_path, resource_path
from .client import BitbucketClient
from .constants import ISSUE_KINDS, ISSUE_PRIORITIES, ISSUE_STATUSES

logger = logging.getLogger("mcp-bitbucket.bitbucket.issues")

DEFAULT_ISSUE_PAGE_LENGTH = 10
DEFAULT_COMMENT_PAGE_LENGTH = 20

BBQL_HINT = (
    "Hint: The 'query' parameter expects BBQL (Bitbucket Query Language) syntax.\n"
    'Examples: title ~ "bug", state="open" AND priority>="major", '
    'content.raw ~ "login"\n'
    "Operators: ~ (contains), = (equals), !=, >, >=, <, <=, AND, OR"
)


def _check_choice(name: str, value: str | None, choices: tuple[str, ...]) -> None:
    if value is not None and value not in choices:
        raise ValueError(
            f"Invalid {name} '{value}'. Expected one of: {', '.join(choices)}"
        )


def _issues_path(workspace: str, repo: str, *parts: Any) -> str:
    return resource_path("repositories", workspace, repo, "issues", *parts)


class IssuesMixin(BitbucketClient):
    """Mixin for Bitbucket repository issue operations.

    The repository must have the issue tracker enabled, otherwise Bitbucket
    answers with 404.
    """

    def list_issues(
        self,
        workspace: str,
        repo: str,
        status: str | None = None,
        kind: str | None = None,
        priority: str | None = None,
        query: str | None = None,
        sort: str | None = None,
        limit: int = DEFAULT_ISSUE_PAGE_LENGTH,
        page: int | None = None,
    ) -> str:
        """
        List issues in a repository.

        Status, kind and priority filters are combined with a BBQL `query`
        into a single `q` expression.

        Returns:
            Markdown list with a pagination footer

        Raises:
            ValueError: If a filter value is not a known Bitbucket value
            BitbucketApiError: If the API rejects the request; BBQL syntax
                errors carry a usage hint
        """
        _check_choice("status", status, ISSUE_STATUSES)
        _check_choice("kind", kind, ISSUE_KINDS)
        _check_choice("priority", priority, ISSUE_PRIORITIES)

        filters = []
        if status:
            filters.append(f'state="{status}"')
        if kind:
            filters.append(f'kind="{kind}"')
        if priority:
            filters.append(f'priority="{priority}"')
        if query:
            filters.append(f"({query})" if filters else query)

        params = {
            "q": " AND ".join(filters) or None,
            "sort": sort,
            "pagelen": limit or DEFAULT_ISSUE_PAGE_LENGTH,
            "page": page,
        }
        try:
            data = self.get(build_api_path(_issues_path(workspace, repo), params))
        except BitbucketApiError as e:
            if "Invalid filter query expression" in str(e):
                raise BitbucketApiError(
                    f"{e}\n\n{BBQL_HINT}",
                    status_code=e.status_code,
                    response_body=e.response_body,
                ) from e
            raise

        issues = [
            BitbucketIssue.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]
        pagination = extract_pagination_info(data, source="list_issues")
        return "\n\n".join(
            [
                format_issues_list(issues),
                format_pagination(
                    pagination.count, pagination.has_more, pagination.next_cursor
                ),
            ]
        )

    def get_issue(self, workspace: str, repo: str, issue_id: int) -> str:
        data = self.get(build_api_path(_issues_path(workspace, repo, issue_id)))
        return format_issue_details(BitbucketIssue.from_api_response(data))

    def create_issue(
        self,
        workspace: str,
        repo: str,
        title: str,
        content: str | None = None,
        kind: str | None = None,
        priority: str | None = None,
    ) -> str:
        """
        Create an issue.

        Args:
            workspace: Workspace slug
            repo: Repository slug
            title: Issue title (required)
            content: Markdown description
            kind: bug, enhancement, proposal or task
            priority: trivial, minor, major, critical or blocker

        Returns:
            Confirmation message

        Raises:
            ValueError: If the title is blank or an enum value is unknown
        """
        if not title or not title.strip():
            raise ValueError("Issue title is required")
        _check_choice("kind", kind, ISSUE_KINDS)
        _check_choice("priority", priority, ISSUE_PRIORITIES)

        body: dict[str, Any] = {"title": title}
        if content:
            body["content"] = {"raw": content, "markup": "markdown"}
        if kind:
            body["kind"] = kind
        if priority:
            body["priority"] = priority

        data = self.post(build_api_path(_issues_path(workspace, repo)), body)
        issue = BitbucketIssue.from_api_response(data)
        logger.info(f"Created issue #{issue.id} in {workspace}/{repo}")
        return format_issue_success(issue, "created")

    def update_issue(
        self,
        workspace: str,
        repo: str,
        issue_id: int,
        title: str | None = None,
        content: str | None = None,
        status: str | None = None,
        kind: str | None = None,
        priority: str | None = None,
        assignee: str | None = None,
    ) -> str:
        """
        Update an issue, sending only the fields that were provided.

        `status` maps to the API's `state` field and `assignee` is an account
        UUID.

        Raises:
            ValueError: If nothing would be updated or an enum value is unknown
        """
        _check_choice("status", status, ISSUE_STATUSES)
        _check_choice("kind", kind, ISSUE_KINDS)
        _check_choice("priority", priority, ISSUE_PRIORITIES)

        body: dict[str, Any] = {}
        if title is not None:
            body["title"] = title
        if content is not None:
            body["content"] = {"raw": content, "markup": "markdown"}
        if status is not None:
            body["state"] = status
        if kind is not None:
            body["kind"] = kind
        if priority is not None:
            body["priority"] = priority
        if assignee is not None:
            body["assignee"] = {"uuid": assignee}
        if not body:
            raise ValueError("At least one field must be provided to update an issue")

        data = self.put(
            build_api_path(_issues_path(workspace, repo, issue_id)), body
        )
        return format_issue_success(BitbucketIssue.from_api_response(data), "updated")

    def delete_issue(self, workspace: str, repo: str, issue_id: int) -> str:
        self.delete(build_api_path(_issues_path(workspace, repo, issue_id)))
        logger.info(f"Deleted issue #{issue_id} in {workspace}/{repo}")
        return f"✓ Issue #{issue_id} deleted successfully"

    def list_issue_comments(
        self,
        workspace: str,
        repo: str,
        issue_id: int,
        limit: int = DEFAULT_COMMENT_PAGE_LENGTH,
        page: int | None = None,
    ) -> str:
        params = {"pagelen": limit or DEFAULT_COMMENT_PAGE_LENGTH, "page": page}
        data = self.get(
            build_api_path(_issues_path(workspace, repo, issue_id, "comments"), params)
        )
        comments = [
            BitbucketIssueComment.from_api_response(value)
            for value in (data or {}).get("values", [])
        ]
        pagination = extract_pagination_info(data, source="list_issue_comments")
        return "\n\n".join(
            [
                format_issue_comments(comments),
                format_pagination(
                    pagination.count, pagination.has_more, pagination.next_cursor
                ),
            ]
        )

    def add_issue_comment(
        self, workspace: str, repo: str, issue_id: int, content: str
    ) -> str:
        if not content or not content.strip():
            raise ValueError("Comment content is required")
        data = self.post(
            build_api_path(_issues_path(workspace, repo, issue_id, "comments")),
            {"content": {"raw": content}},
        )
        return format_comment_success(BitbucketIssueComment.from_api_response(data))
