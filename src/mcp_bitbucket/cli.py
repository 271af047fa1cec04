"""Command line access to the Bitbucket operations exposed by the MCP server."""

import json
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import click

from .bitbucket import BitbucketConfig, BitbucketFetcher
from .bitbucket.constants import (
    ISSUE_KINDS,
    ISSUE_PRIORITIES,
    ISSUE_STATUSES,
    PULL_REQUEST_STATES,
    REPOSITORY_ROLES,
    SEARCH_SCOPES,
)
from .exceptions import BitbucketError

logger = logging.getLogger("mcp-bitbucket.cli")

F = TypeVar("F", bound=Callable[..., Any])


class JsonObjectParamType(click.ParamType):
    """Click parameter accepting a JSON object."""

    name = "json"

    def convert(
        self, value: Any, param: click.Parameter | None, ctx: click.Context | None
    ) -> dict[str, Any]:
        if isinstance(value, dict):
            return value
        option = param.name.replace("_", "-") if param and param.name else "value"
        try:
            parsed = json.loads(value)
        except ValueError:
            self.fail(
                f"Invalid JSON in --{option}. Please provide valid JSON.", param, ctx
            )
        if not isinstance(parsed, dict):
            self.fail(f"--{option} must be a JSON object.", param, ctx)
        return parsed


JSON_OBJECT = JsonObjectParamType()


def _create_fetcher() -> BitbucketFetcher:
    return BitbucketFetcher(config=BitbucketConfig.from_env())


def bitbucket_command(func: F) -> F:
    """Run a command against a fresh fetcher and echo its text result.

    Bitbucket and validation errors become click errors (exit code 1).
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> None:
        try:
            with _create_fetcher() as bitbucket:
                result = func(bitbucket, *args, **kwargs)
        except (BitbucketError, ValueError) as e:
            logger.debug(f"{func.__name__} failed: {e}")
            raise click.ClickException(str(e)) from e
        click.echo(result)

    return wrapper  # type: ignore


path_option = click.option(
    "-p",
    "--path",
    required=True,
    help='API path, e.g. "/repositories/{workspace}/{repo}" ("/2.0" is optional)',
)
query_params_option = click.option(
    "-q",
    "--query-params",
    type=JSON_OBJECT,
    help='Query parameters as a JSON object, e.g. \'{"pagelen": "10"}\'',
)
body_option = click.option(
    "-b", "--body", type=JSON_OBJECT, required=True, help="Request body as JSON"
)
jq_option = click.option(
    "--jq", help="JMESPath expression to filter the response, e.g. 'values[*].slug'"
)
workspace_option = click.option(
    "-w",
    "--workspace",
    "--workspace-slug",
    "workspace",
    required=True,
    help="Workspace slug",
)
repo_option = click.option(
    "-r", "--repo", "--repo-slug", "repo", required=True, help="Repository slug"
)


@click.command("get")
@path_option
@query_params_option
@jq_option
@bitbucket_command
def get_command(
    bitbucket: BitbucketFetcher,
    path: str,
    query_params: dict[str, Any] | None,
    jq: str | None,
) -> str:
    """GET any Bitbucket API endpoint and print JSON."""
    return bitbucket.api_get(path, query_params=query_params, jq=jq)


@click.command("post")
@path_option
@body_option
@query_params_option
@jq_option
@bitbucket_command
def post_command(
    bitbucket: BitbucketFetcher,
    path: str,
    body: dict[str, Any],
    query_params: dict[str, Any] | None,
    jq: str | None,
) -> str:
    """POST to any Bitbucket API endpoint and print JSON."""
    return bitbucket.api_post(path, body, query_params=query_params, jq=jq)


@click.command("put")
@path_option
@body_option
@query_params_option
@jq_option
@bitbucket_command
def put_command(
    bitbucket: BitbucketFetcher,
    path: str,
    body: dict[str, Any],
    query_params: dict[str, Any] | None,
    jq: str | None,
) -> str:
    """PUT to any Bitbucket API endpoint and print JSON."""
    return bitbucket.api_put(path, body, query_params=query_params, jq=jq)


@click.command("patch")
@path_option
@body_option
@query_params_option
@jq_option
@bitbucket_command
def patch_command(
    bitbucket: BitbucketFetcher,
    path: str,
    body: dict[str, Any],
    query_params: dict[str, Any] | None,
    jq: str | None,
) -> str:
    """PATCH any Bitbucket API endpoint and print JSON."""
    return bitbucket.api_patch(path, body, query_params=query_params, jq=jq)


@click.command("delete")
@path_option
@query_params_option
@jq_option
@bitbucket_command
def delete_command(
    bitbucket: BitbucketFetcher,
    path: str,
    query_params: dict[str, Any] | None,
    jq: str | None,
) -> str:
    """DELETE any Bitbucket API endpoint and print the response."""
    return bitbucket.api_delete(path, query_params=query_params, jq=jq)


@click.command("ls-workspaces")
@click.option("-q", "--query", help="BBQL filter")
@click.option(
    "-l", "--limit", type=click.IntRange(1, 100), default=25, show_default=True
)
@click.option("-c", "--cursor", help="Page number from a previous listing")
@bitbucket_command
def ls_workspaces_command(
    bitbucket: BitbucketFetcher, query: str | None, limit: int, cursor: str | None
) -> str:
    """List workspaces you have access to."""
    return bitbucket.list_workspaces(query=query, limit=limit, cursor=cursor)


@click.command("get-workspace")
@workspace_option
@bitbucket_command
def get_workspace_command(bitbucket: BitbucketFetcher, workspace: str) -> str:
    """Show details of a workspace."""
    return bitbucket.get_workspace(workspace)


@click.command("ls-issues")
@workspace_option
@repo_option
@click.option("-s", "--status", type=click.Choice(ISSUE_STATUSES))
@click.option("-k", "--kind", type=click.Choice(ISSUE_KINDS))
@click.option("--priority", type=click.Choice(ISSUE_PRIORITIES))
@click.option("-q", "--query", help="BBQL filter, e.g. 'title ~ \"bug\"'")
@click.option("--sort", help="Sort field, e.g. '-updated_on'")
@click.option(
    "-l", "--limit", type=click.IntRange(1, 100), default=10, show_default=True
)
@click.option("--page", type=click.IntRange(min=1))
@bitbucket_command
def ls_issues_command(
    bitbucket: BitbucketFetcher,
    workspace: str,
    repo: str,
    status: str | None,
    kind: str | None,
    priority: str | None,
    query: str | None,
    sort: str | None,
    limit: int,
    page: int | None,
) -> str:
    """List issues in a repository."""
    return bitbucket.list_issues(
        workspace,
        repo,
        status=status,
        kind=kind,
        priority=priority,
        query=query,
        sort=sort,
        limit=limit,
        page=page,
    )


@click.command("get-issue")
@workspace_option
@repo_option
@click.option("-i", "--issue-id", type=click.IntRange(min=1), required=True)
@bitbucket_command
def get_issue_command(
    bitbucket: BitbucketFetcher, workspace: str, repo: str, issue_id: int
) -> str:
    """Show details of an issue."""
    return bitbucket.get_issue(workspace, repo, issue_id)


@click.command("ls-prs")
@workspace_option
@repo_option
@click.option(
    "-s",
    "--state",
    type=click.Choice(PULL_REQUEST_STATES, case_sensitive=False),
)
@click.option("-q", "--query", help="BBQL filter")
@click.option(
    "-l", "--limit", type=click.IntRange(1, 100), default=25, show_default=True
)
@click.option("-c", "--cursor", help="Page number from a previous listing")
@bitbucket_command
def ls_prs_command(
    bitbucket: BitbucketFetcher,
    workspace: str,
    repo: str,
    state: str | None,
    query: str | None,
    limit: int,
    cursor: str | None,
) -> str:
    """List pull requests in a repository."""
    return bitbucket.list_pull_requests(
        workspace, repo, state=state, query=query, limit=limit, cursor=cursor
    )


@click.command("get-pr")
@workspace_option
@repo_option
@click.option("-i", "--pr-id", type=click.IntRange(min=1), required=True)
@click.option("--include-full-diff", is_flag=True, help="Include the unified diff")
@click.option("--include-comments", is_flag=True, help="Include comment threads")
@bitbucket_command
def get_pr_command(
    bitbucket: BitbucketFetcher,
    workspace: str,
    repo: str,
    pr_id: int,
    include_full_diff: bool,
    include_comments: bool,
) -> str:
    """Show details of a pull request."""
    return bitbucket.get_pull_request(
        workspace,
        repo,
        pr_id,
        include_full_diff=include_full_diff,
        include_comments=include_comments,
    )


@click.command("ls-repos")
@workspace_option
@click.option("-q", "--query", help="Text matched against name and description")
@click.option("-p", "--project-key", help="Only repositories in this project")
@click.option("-r", "--role", type=click.Choice(REPOSITORY_ROLES))
@click.option("-s", "--sort", help="Sort field, e.g. 'name' (default: '-updated_on')")
@click.option(
    "-l", "--limit", type=click.IntRange(1, 100), default=25, show_default=True
)
@click.option("-c", "--cursor", help="Page number from a previous listing")
@bitbucket_command
def ls_repos_command(
    bitbucket: BitbucketFetcher,
    workspace: str,
    query: str | None,
    project_key: str | None,
    role: str | None,
    sort: str | None,
    limit: int,
    cursor: str | None,
) -> str:
    """List repositories in a workspace."""
    return bitbucket.list_repositories(
        workspace,
        query=query,
        role=role,
        project_key=project_key,
        sort=sort,
        limit=limit,
        cursor=cursor,
    )


@click.command("list-branches")
@workspace_option
@repo_option
@click.option("-q", "--query", help="Text matched against branch names")
@click.option("-s", "--sort", help="Sort field, e.g. '-name' (default: 'name')")
@click.option(
    "-l", "--limit", type=click.IntRange(1, 100), default=25, show_default=True
)
@click.option("-c", "--cursor", help="Page number from a previous listing")
@bitbucket_command
def list_branches_command(
    bitbucket: BitbucketFetcher,
    workspace: str,
    repo: str,
    query: str | None,
    sort: str | None,
    limit: int,
    cursor: str | None,
) -> str:
    """List branches in a repository."""
    return bitbucket.list_branches(
        workspace, repo, query=query, sort=sort, limit=limit, cursor=cursor
    )


@click.command("add-branch")
@workspace_option
@repo_option
@click.option("-n", "--new-branch-name", required=True, help="Name for the new branch")
@click.option(
    "-s",
    "--source-branch-or-commit",
    required=True,
    help="Existing branch name or full commit hash to branch from",
)
@bitbucket_command
def add_branch_command(
    bitbucket: BitbucketFetcher,
    workspace: str,
    repo: str,
    new_branch_name: str,
    source_branch_or_commit: str,
) -> str:
    """Create a branch in a repository."""
    return bitbucket.add_branch(
        workspace, repo, new_branch_name, source_branch_or_commit
    )


@click.command("search")
@workspace_option
@click.option(
    "-r", "--repo", "--repo-slug", "repo", help="Repository slug (needed for PRs)"
)
@click.option("-q", "--query", help="Search text (needed for code and commits)")
@click.option(
    "-s",
    "--scope",
    type=click.Choice(SEARCH_SCOPES, case_sensitive=False),
    default="all",
    show_default=True,
)
@click.option(
    "-l", "--limit", type=click.IntRange(1, 100), default=25, show_default=True
)
@click.option("-c", "--cursor", help="Page number from a previous search")
@bitbucket_command
def search_command(
    bitbucket: BitbucketFetcher,
    workspace: str,
    repo: str | None,
    query: str | None,
    scope: str,
    limit: int,
    cursor: str | None,
) -> str:
    """Search repositories, pull requests, commits and code in a workspace."""
    return bitbucket.search(
        workspace, query=query, repo=repo, scope=scope, limit=limit, cursor=cursor
    )


COMMANDS = [
    get_command,
    post_command,
    put_command,
    patch_command,
    delete_command,
    ls_workspaces_command,
    get_workspace_command,
    ls_issues_command,
    get_issue_command,
    ls_prs_command,
    get_pr_command,
    ls_repos_command,
    list_branches_command,
    add_branch_command,
    search_command,
]
