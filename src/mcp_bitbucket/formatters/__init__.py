"""Markdown renderers for Bitbucket resources."""

from .issues import (
    format_comment_success,
    format_issue_comments,
    format_issue_details,
    format_issue_success,
    format_issues_list,
)
from .pull_requests import (
    format_pull_request_comments,
    format_pull_request_details,
    format_pull_requests_list,
)
from .repositories import (
    format_branch_success,
    format_branches_list,
    format_commits_list,
    format_repositories_list,
)
from .search import format_code_search_results
from .workspaces import format_workspace_details, format_workspaces_list

__all__ = [
    "format_comment_success",
    "format_issue_comments",
    "format_issue_details",
    "format_issue_success",
    "format_issues_list",
    "format_pull_request_comments",
    "format_pull_request_details",
    "format_pull_requests_list",
    "format_branch_success",
    "format_branches_list",
    "format_commits_list",
    "format_repositories_list",
    "format_code_search_results",
    "format_workspace_details",
    "format_workspaces_list",
]
