"""Markdown rendering for Bitbucket repositories, branches and commits."""

from ..models import BitbucketBranch, BitbucketCommit, BitbucketRepository
from ..models.constants import UNKNOWN
from ..utils.formatting import (
    format_bullet_list,
    format_date,
    format_heading,
    format_numbered_list,
    format_relative_time,
    format_url,
    information_footer,
    truncate,
)


def format_repositories_list(
    repositories: list[BitbucketRepository], workspace: str | None = None
) -> str:
    if not repositories:
        return "No repositories found matching your criteria."

    title = "Bitbucket Repositories"
    if workspace:
        title = f"{title} in {workspace}"

    def render(repository: BitbucketRepository, index: int) -> str:
        properties = {
            "Name": repository.name,
            "Full Name": repository.full_name or None,
            "Project": repository.project_key,
            "Private": repository.is_private,
            "Language": repository.language,
            "Main Branch": repository.mainbranch,
            "Owner": repository.owner and repository.owner.name,
            "Updated": format_date(repository.updated_on),
            "Last Activity": (
                format_relative_time(repository.updated_on)
                if repository.updated_on
                else None
            ),
            "Description": (
                truncate(repository.description, 150)
                if repository.description
                else None
            ),
            "URL": (
                format_url(repository.url, repository.full_name or repository.name)
                if repository.url
                else None
            ),
        }
        return "\n".join(
            [
                format_heading(f"{index + 1}. {repository.name}", 2),
                format_bullet_list(properties),
            ]
        )

    lines = [format_heading(title, 1), ""]
    lines.append(format_numbered_list(repositories, render))
    lines.extend(information_footer())
    return "\n".join(lines)


def format_branches_list(
    branches: list[BitbucketBranch], workspace: str, repo: str
) -> str:
    if not branches:
        return f"No branches found in {workspace}/{repo}."

    def render(branch: BitbucketBranch, _index: int) -> str:
        properties = {
            "Commit": branch.short_hash,
            "Author": branch.target_author,
            "Date": format_date(branch.target_date) if branch.target_date else None,
            "Message": (
                truncate(branch.target_message.strip(), 100)
                if branch.target_message
                else None
            ),
            "URL": format_url(branch.url, branch.name) if branch.url else None,
        }
        return "\n".join(
            [format_heading(branch.name, 2), format_bullet_list(properties)]
        )

    lines = [format_heading(f"Branches in {workspace}/{repo}", 1), ""]
    lines.append(format_numbered_list(branches, render))
    lines.extend(information_footer())
    return "\n".join(lines)


def format_branch_success(branch: BitbucketBranch, workspace: str, repo: str) -> str:
    """Confirmation shown after a branch is created."""
    lines = [f"✓ Branch created: {branch.name} in {workspace}/{repo}", ""]
    lines.append(
        format_bullet_list(
            {
                "Commit": branch.target_hash or UNKNOWN,
                "URL": format_url(branch.url, branch.name) if branch.url else None,
            }
        )
    )
    return "\n".join(lines)


def format_commits_list(commits: list[BitbucketCommit]) -> str:
    if not commits:
        return "No commits found matching your criteria."

    def render(commit: BitbucketCommit, _index: int) -> str:
        properties = {
            "Hash": commit.hash or None,
            "Author": commit.author or UNKNOWN,
            "Date": format_date(commit.date),
            "Repository": commit.repository,
            "URL": format_url(commit.url, commit.hash[:12]) if commit.url else None,
        }
        return "\n".join(
            [
                format_heading(truncate(commit.summary or UNKNOWN, 100), 2),
                format_bullet_list(properties),
            ]
        )

    lines = [format_heading("Commits", 1), ""]
    lines.append(format_numbered_list(commits, render))
    lines.extend(information_footer())
    return "\n".join(lines)
