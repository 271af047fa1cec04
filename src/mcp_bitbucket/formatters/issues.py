"""Markdown rendering for Bitbucket issues and issue comments."""

from typing import Any

from ..models import BitbucketIssue, BitbucketIssueComment
from ..models.constants import NOT_AVAILABLE
from ..utils.formatting import (
    format_bullet_list,
    format_date,
    format_heading,
    format_relative_time,
    format_separator,
    format_url,
    optimize_bitbucket_markdown,
    truncate,
)


def _issue_properties(issue: BitbucketIssue) -> dict[str, Any]:
    properties: dict[str, Any] = {
        "ID": issue.id,
        "State": issue.state or NOT_AVAILABLE,
        "Kind": issue.kind or NOT_AVAILABLE,
        "Priority": issue.priority or NOT_AVAILABLE,
        "Reporter": (issue.reporter and issue.reporter.name) or "Unknown",
        "Assignee": (issue.assignee and issue.assignee.name) or "Unassigned",
        "Created": format_date(issue.created_on),
        "Updated": format_date(issue.updated_on),
    }
    return properties


def format_issues_list(issues: list[BitbucketIssue]) -> str:
    if not issues:
        return "No issues found matching your criteria."

    lines = [format_heading("Issues", 1), ""]
    for issue in issues:
        lines.append(format_heading(f"#{issue.id}: {issue.title}", 2))

        description = "No description"
        if issue.content and issue.content.strip():
            description = truncate(issue.content, 150)

        properties = _issue_properties(issue)
        if issue.updated_on:
            properties["Last Activity"] = format_relative_time(issue.updated_on)
        properties["Description"] = description
        if issue.url:
            properties["URL"] = format_url(issue.url, f"Issue #{issue.id}")
        properties["Votes"] = issue.votes
        properties["Watchers"] = issue.watches

        lines.append(format_bullet_list(properties))
        lines.append("")
    return "\n".join(lines)


def format_issue_details(issue: BitbucketIssue) -> str:
    lines = [
        format_heading(f"Issue #{issue.id}: {issue.title}", 1),
        "",
        format_heading("Details", 2),
    ]
    properties = _issue_properties(issue)
    properties["Votes"] = issue.votes
    properties["Watchers"] = issue.watches
    lines.extend([format_bullet_list(properties), ""])

    if issue.content and issue.content.strip():
        lines.extend(
            [
                format_heading("Description", 2),
                "",
                optimize_bitbucket_markdown(issue.content),
                "",
            ]
        )

    if issue.url:
        lines.extend(
            [
                format_heading("Links", 2),
                "",
                f"- {format_url(issue.url, 'View in Bitbucket')}",
                "",
            ]
        )
    return "\n".join(lines)


def format_issue_comments(comments: list[BitbucketIssueComment]) -> str:
    if not comments:
        return "No comments found on this issue."

    lines = [format_heading("Comments", 1), ""]
    for comment in comments:
        lines.append(format_heading(f"Comment #{comment.id}", 2))
        author = (comment.user and comment.user.name) or "Unknown"
        lines.append(f"**Author**: {author}")
        lines.append(f"**Posted**: {format_date(comment.created_on)}")
        if comment.updated_on and comment.updated_on != comment.created_on:
            lines.append(f"**Updated**: {format_date(comment.updated_on)}")
        lines.append("")
        if comment.content:
            lines.append(optimize_bitbucket_markdown(comment.content))
        lines.extend(["", format_separator(), ""])
    return "\n".join(lines)


def format_issue_success(issue: BitbucketIssue, action: str) -> str:
    """Confirmation shown after an issue is created or updated."""
    lines = [f"✓ Issue {action}: #{issue.id} - {issue.title}", ""]
    if issue.url:
        lines.extend([f"View at: {issue.url}", ""])
    lines.append(
        format_bullet_list(
            {
                "State": issue.state or NOT_AVAILABLE,
                "Kind": issue.kind or NOT_AVAILABLE,
                "Priority": issue.priority or NOT_AVAILABLE,
            }
        )
    )
    return "\n".join(lines)


def format_comment_success(comment: BitbucketIssueComment) -> str:
    lines = [f"✓ Comment #{comment.id} added successfully", ""]
    if comment.user and comment.user.name:
        lines.append(f"**Author**: {comment.user.name}")
    lines.extend([f"**Posted**: {format_date(comment.created_on)}", ""])
    if comment.content:
        lines.append(f"**Content**: {truncate(comment.content, 100)}")
    return "\n".join(lines)
