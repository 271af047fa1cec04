"""Tests for the markdown formatters."""

from datetime import datetime, timedelta, timezone

from mcp_bitbucket.formatters import (
    format_branch_success,
    format_branches_list,
    format_code_search_results,
    format_comment_success,
    format_commits_list,
    format_issue_details,
    format_issue_success,
    format_issues_list,
    format_pull_request_comments,
    format_pull_request_details,
    format_pull_requests_list,
    format_repositories_list,
    format_workspace_details,
    format_workspaces_list,
)
from mcp_bitbucket.models import (
    BitbucketBranch,
    BitbucketCodeSearchLine,
    BitbucketCodeSearchResult,
    BitbucketDiffStat,
    BitbucketIssue,
    BitbucketIssueComment,
    BitbucketPullRequest,
    BitbucketPullRequestComment,
    BitbucketRepository,
    BitbucketUser,
    BitbucketWorkspace,
)


def _days_ago(days):
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


def _comment(comment_id, parent_id=None, **kwargs):
    return BitbucketPullRequestComment(
        id=comment_id,
        content=f"comment {comment_id}",
        user=BitbucketUser(display_name=f"user{comment_id}"),
        created_on="2024-01-01T00:00:00+00:00",
        parent_id=parent_id,
        **kwargs,
    )


class TestWorkspaceFormatters:
    def test_empty_list(self):
        assert format_workspaces_list([]) == "No Bitbucket workspaces found."

    def test_details_without_url(self):
        result = format_workspace_details(
            BitbucketWorkspace(slug="acme", name="Acme", is_private=False)
        )
        assert "- **Private**: No" in result
        assert "## Links" not in result


class TestIssueFormatters:
    def test_list_truncates_description(self):
        issue = BitbucketIssue(id=1, title="Long", content="x" * 200)
        result = format_issues_list([issue])
        assert f"- **Description**: {'x' * 150}..." in result
        assert "- **State**: N/A" in result

    def test_list_without_description(self):
        result = format_issues_list([BitbucketIssue(id=2, title="Empty", content=" ")])
        assert "- **Description**: No description" in result
        assert "Last Activity" not in result

    def test_list_shows_last_activity(self):
        issue = BitbucketIssue(id=5, title="Stale", updated_on=_days_ago(3))
        assert "- **Last Activity**: 3 days ago" in format_issues_list([issue])

    def test_details_without_content_or_url(self):
        result = format_issue_details(BitbucketIssue(id=3, title="Bare"))
        assert result.startswith("# Issue #3: Bare")
        assert "## Description" not in result
        assert "## Links" not in result
        assert "- **Reporter**: Unknown" in result

    def test_success_messages(self):
        issue = BitbucketIssue(id=4, title="Done", state="closed")
        assert format_issue_success(issue, "updated").startswith(
            "✓ Issue updated: #4 - Done"
        )
        comment = BitbucketIssueComment(id=8, content="y" * 120)
        result = format_comment_success(comment)
        assert result.startswith("✓ Comment #8 added successfully")
        assert f"**Content**: {'y' * 100}..." in result
        assert "**Author**" not in result


class TestPullRequestFormatters:
    def test_empty_list(self):
        assert format_pull_requests_list([]) == (
            "No pull requests found matching your criteria."
        )

    def test_list_entry_without_description_or_link(self):
        result = format_pull_requests_list(
            [BitbucketPullRequest(id=9, title="Quiet", state="OPEN")]
        )
        assert "- **Description**: No description provided" in result
        assert "- **URL**: N/A" in result
        assert "- **Author**: Unknown" in result
        assert "Last Activity" not in result

    def test_list_shows_last_activity(self):
        pr = BitbucketPullRequest(id=10, title="Recent", updated_on=_days_ago(1))
        assert "- **Last Activity**: 1 day ago" in format_pull_requests_list([pr])

    def test_details_limits_comment_threads(self):
        comments = [_comment(i) for i in range(1, 8)]
        comments += [_comment(100 + i, parent_id=1) for i in range(5)]

        result = format_pull_request_details(
            BitbucketPullRequest(id=1, title="Busy"), comments=comments
        )

        assert "### Comment by user5" in result
        assert "### Comment by user6" not in result
        assert "*...and 2 more comments*" in result
        assert "> **user102**" in result
        assert "> **user103**" not in result
        assert "> *...and 2 more replies*" in result

    def test_diffstat_summary_caps_file_list(self):
        diffstat = [
            BitbucketDiffStat(path=f"f{i}.py", lines_added=1) for i in range(12)
        ]
        result = format_pull_request_details(
            BitbucketPullRequest(id=1, title="Wide"), diffstat=diffstat
        )
        assert "12 files changed with 12 insertions and 0 deletions" in result
        assert "- `f9.py` (+1)" in result
        assert "- `f10.py`" not in result
        assert "- ... and 2 more files" in result

    def test_comment_listing_shows_all_threads(self):
        comments = [_comment(i) for i in range(1, 8)]
        comments.append(
            _comment(
                50,
                inline_path="app.py",
                inline_from=3,
                inline_to=4,
                updated_on="2024-01-02T00:00:00+00:00",
            )
        )

        result = format_pull_request_comments(comments, 12)

        assert result.startswith("# Comments on Pull Request #12")
        assert "### Comment by user7" in result
        assert "more comments" not in result
        assert "(changed line 3 -> 4)" in result
        assert "*Updated on 2024-01-02 00:00:00 UTC*" in result


class TestRepositoryFormatters:
    def test_repository_list(self):
        repository = BitbucketRepository(
            name="backend",
            full_name="acme/backend",
            project_key="CORE",
            updated_on=_days_ago(40),
            url="https://bitbucket.org/acme/backend",
        )

        result = format_repositories_list([repository], "acme")

        assert result.startswith("# Bitbucket Repositories in acme")
        assert "- **Last Activity**: 1 month ago" in result
        assert "[acme/backend](https://bitbucket.org/acme/backend)" in result
        assert "Owner" not in result

    def test_empty_lists(self):
        assert format_repositories_list([]) == (
            "No repositories found matching your criteria."
        )
        assert format_branches_list([], "acme", "api") == (
            "No branches found in acme/api."
        )
        assert format_commits_list([]) == "No commits found matching your criteria."

    def test_branch_success_without_commit(self):
        result = format_branch_success(BitbucketBranch(name="dev"), "acme", "api")
        assert result.startswith("✓ Branch created: dev in acme/api")
        assert "- **Commit**: Unknown" in result
        assert "URL" not in result


class TestCodeSearchFormatter:
    def test_no_matches(self):
        assert format_code_search_results([]).startswith("**No code matches found.**")

    def test_multi_line_match_and_language_hint(self):
        result = BitbucketCodeSearchResult(
            path="deploy/Dockerfile",
            match_count=2,
            matches=[
                [
                    BitbucketCodeSearchLine(line=1, segments=[("FROM ", False)]),
                    BitbucketCodeSearchLine(line=2, segments=[("python", True)]),
                ]
            ],
        )

        markdown = format_code_search_results([result], total=2)

        assert "### deploy/Dockerfile" in markdown
        assert "2 matches found" in markdown
        assert "```dockerfile\n1: FROM \n2: `python`\n\n```" in markdown
