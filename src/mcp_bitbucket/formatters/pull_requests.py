"""Markdown rendering for Bitbucket pull requests, diffs and comments."""

from collections import defaultdict

from ..models import (
    BitbucketDiffStat,
    BitbucketPullRequest,
    BitbucketPullRequestComment,
)
from ..models.constants import UNKNOWN, UNKNOWN_USER
from ..utils.formatting import (
    format_bullet_list,
    format_date,
    format_diff,
    format_heading,
    format_numbered_list,
    format_relative_time,
    format_separator,
    format_url,
    information_footer,
    optimize_bitbucket_markdown,
    truncate,
)

MAX_FILES_IN_SUMMARY = 10
MAX_COMMENTS_IN_DETAILS = 5
MAX_REPLIES_IN_DETAILS = 3


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def format_pull_requests_list(pull_requests: list[BitbucketPullRequest]) -> str:
    if not pull_requests:
        return "No pull requests found matching your criteria."

    def render(pr: BitbucketPullRequest, _index: int) -> str:
        description = "No description provided"
        if pr.description and pr.description.strip():
            description = pr.description
        properties = {
            "ID": pr.id,
            "State": pr.state,
            "Author": (pr.author and pr.author.name) or UNKNOWN,
            "Created": format_date(pr.created_on),
            "Updated": format_date(pr.updated_on),
            "Last Activity": (
                format_relative_time(pr.updated_on) if pr.updated_on else None
            ),
            "Source Branch": pr.source_branch,
            "Destination Branch": pr.destination_branch,
            "Description": truncate(description, 150),
            "URL": (
                format_url(pr.links["html"], f"PR #{pr.id}")
                if pr.links.get("html")
                else "N/A"
            ),
        }
        heading = format_heading(f"#{pr.id}: {pr.title}", 2)
        return "\n".join([heading, format_bullet_list(properties)])

    lines = [format_heading("Bitbucket Pull Requests", 1), ""]
    lines.append(format_numbered_list(pull_requests, render))
    lines.extend(information_footer())
    return "\n".join(lines)


def _format_comment(comment: BitbucketPullRequestComment, lines: list[str]) -> None:
    author = (comment.user and comment.user.name) or UNKNOWN_USER
    header = f"Comment by {author}"
    if comment.deleted:
        header = f"[DELETED] {header}"
    lines.append(format_heading(header, 3))
    lines.append(f"*Posted on {format_date(comment.created_on)}*")
    if comment.updated_on and comment.updated_on != comment.created_on:
        lines.append(f"*Updated on {format_date(comment.updated_on)}*")

    if comment.is_inline:
        line_info = ""
        if comment.inline_from is not None and comment.inline_to is not None:
            line_info = f"(changed line {comment.inline_from} -> {comment.inline_to})"
        elif comment.inline_to is not None:
            line_info = f"(line {comment.inline_to})"
        lines.append(f"**Inline Comment: File: `{comment.inline_path}`** {line_info}")
        if comment.code_url:
            lines.append(f"[View code context in browser]({comment.code_url})")

    lines.append("")
    if comment.deleted:
        lines.append("*This comment has been deleted.*")
    else:
        lines.append(
            optimize_bitbucket_markdown(comment.content) or "*No content provided.*"
        )

    if comment.url:
        lines.extend(["", f"[View full comment thread in browser]({comment.url})"])


def _format_reply(reply: BitbucketPullRequestComment, lines: list[str]) -> None:
    author = (reply.user and reply.user.name) or UNKNOWN_USER
    lines.append("")
    lines.append(f"> **{author}** ({format_date(reply.created_on)})")
    content = optimize_bitbucket_markdown(reply.content)
    lines.append("> " + content.replace("\n", "\n> "))


def _thread_comments(
    comments: list[BitbucketPullRequestComment],
) -> tuple[
    list[BitbucketPullRequestComment], dict[int, list[BitbucketPullRequestComment]]
]:
    top_level: list[BitbucketPullRequestComment] = []
    replies: dict[int, list[BitbucketPullRequestComment]] = defaultdict(list)
    for comment in comments:
        if comment.parent_id is not None:
            replies[comment.parent_id].append(comment)
        else:
            top_level.append(comment)
    return top_level, replies


def _format_threads(
    comments: list[BitbucketPullRequestComment],
    lines: list[str],
    max_comments: int | None = None,
    max_replies: int | None = None,
) -> None:
    top_level, replies = _thread_comments(comments)
    shown = top_level[:max_comments] if max_comments else top_level

    for index, comment in enumerate(shown):
        _format_comment(comment, lines)
        thread = replies.get(comment.id, [])
        if thread:
            lines.extend(["", "**Replies:**"])
            for reply in thread[:max_replies] if max_replies else thread:
                _format_reply(reply, lines)
            if max_replies and len(thread) > max_replies:
                lines.extend(
                    ["", f"> *...and {len(thread) - max_replies} more replies*"]
                )
        if index < len(shown) - 1:
            lines.extend(["", format_separator()])

    if max_comments and len(top_level) > max_comments:
        lines.extend(["", f"*...and {len(top_level) - max_comments} more comments*"])


def _format_diffstat(diffstat: list[BitbucketDiffStat], lines: list[str]) -> None:
    additions = sum(entry.lines_added for entry in diffstat)
    deletions = sum(entry.lines_removed for entry in diffstat)
    lines.extend(["", format_heading("File Changes", 2)])
    lines.append(
        f"{_plural(len(diffstat), 'file')} changed with "
        f"{_plural(additions, 'insertion')} and {_plural(deletions, 'deletion')}"
    )
    lines.append("")
    for entry in diffstat[:MAX_FILES_IN_SUMMARY]:
        changes = []
        if entry.lines_added:
            changes.append(f"+{entry.lines_added}")
        if entry.lines_removed:
            changes.append(f"-{entry.lines_removed}")
        suffix = f" ({', '.join(changes)})" if changes else ""
        lines.append(f"- `{entry.path}`{suffix}")
    if len(diffstat) > MAX_FILES_IN_SUMMARY:
        lines.append(f"- ... and {len(diffstat) - MAX_FILES_IN_SUMMARY} more files")


def format_pull_request_details(
    pull_request: BitbucketPullRequest,
    diffstat: list[BitbucketDiffStat] | None = None,
    raw_diff: str | None = None,
    comments: list[BitbucketPullRequestComment] | None = None,
) -> str:
    """
    Render a pull request with optional change summary, diff and comments.

    Args:
        pull_request: The pull request
        diffstat: Per-file change counts, when available
        raw_diff: Unified diff text, when requested
        comments: Comments, when requested; an empty list renders a notice

    Returns:
        Markdown document
    """
    pr = pull_request
    lines = [
        format_heading(f"Pull Request #{pr.id}: {pr.title}", 1),
        "",
        format_heading("Basic Information", 2),
        format_bullet_list(
            {
                "State": pr.state,
                "Repository": pr.repository,
                "Source": pr.source_branch,
                "Destination": pr.destination_branch,
                "Author": pr.author and pr.author.name,
                "Created": format_date(pr.created_on),
                "Updated": format_date(pr.updated_on),
                "Comment Count": pr.comment_count,
                "Task Count": pr.task_count,
            }
        ),
    ]

    if pr.reviewers:
        lines.extend(["", format_heading("Reviewers", 2)])
        lines.append(
            "\n".join(f"- {reviewer.name or UNKNOWN}" for reviewer in pr.reviewers)
        )

    if pr.description:
        lines.extend(
            [
                "",
                format_heading("Description", 2),
                optimize_bitbucket_markdown(pr.description),
            ]
        )

    if diffstat:
        _format_diffstat(diffstat, lines)

    if raw_diff:
        lines.extend(["", format_heading("Code Changes (Full Diff)", 2)])
        lines.append(format_diff(raw_diff))

    if comments:
        lines.extend(["", format_heading("Comments", 2)])
        _format_threads(
            comments,
            lines,
            max_comments=MAX_COMMENTS_IN_DETAILS,
            max_replies=MAX_REPLIES_IN_DETAILS,
        )
        if pr.links.get("comments"):
            lines.extend(
                ["", f"[View all comments in browser]({pr.links['comments']})"]
            )
    elif comments is not None:
        lines.extend(
            [
                "",
                format_heading("Comments", 2),
                "*No comments found on this pull request.*",
            ]
        )

    lines.extend(["", format_heading("Links", 2)])
    link_titles = {
        "html": "View in Browser",
        "commits": "Commits",
        "comments": "Comments",
        "diff": "Diff",
    }
    lines.append(
        "\n".join(
            f"- {format_url(pr.links[name], title)}"
            for name, title in link_titles.items()
            if pr.links.get(name)
        )
    )
    lines.extend(information_footer())
    return "\n".join(lines)


def format_pull_request_comments(
    comments: list[BitbucketPullRequestComment], pr_id: int | str
) -> str:
    lines = [format_heading(f"Comments on Pull Request #{pr_id}", 1), ""]
    if not comments:
        lines.append("*No comments found on this pull request.*")
    else:
        _format_threads(comments, lines)
    lines.extend(information_footer())
    return "\n".join(lines)
