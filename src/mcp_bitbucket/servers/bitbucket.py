"""Bitbucket FastMCP server instance and tool definitions."""

import logging
from typing import Annotated, Any

from fastmcp import Context, FastMCP
from pydantic import Field

from mcp_bitbucket.bitbucket.constants import (
    ISSUE_KINDS,
    ISSUE_PRIORITIES,
    ISSUE_STATUSES,
    MAX_PAGE_SIZE,
)
from mcp_bitbucket.servers.dependencies import get_bitbucket_fetcher
from mcp_bitbucket.utils.decorators import check_write_access, handle_tool_errors

logger = logging.getLogger("mcp-bitbucket.servers.bitbucket")

bitbucket_mcp = FastMCP(
    name="Bitbucket MCP Service",
    instructions="Provides tools for interacting with the Bitbucket Cloud REST API.",
)

PathArg = Annotated[
    str,
    Field(
        description=(
            'API path starting with "/", e.g. "/repositories/{workspace}/{repo}". '
            'The "/2.0" prefix is added automatically if omitted.'
        ),
        min_length=1,
    ),
]
QueryParamsArg = Annotated[
    dict[str, str] | None,
    Field(
        description=(
            "Key-value pairs for the query string (pagelen, page, q, sort, "
            "fields). Values are URL-encoded."
        ),
    ),
]
BodyArg = Annotated[
    dict[str, Any],
    Field(description="JSON object sent as the request body."),
]
JqArg = Annotated[
    str | None,
    Field(
        description=(
            "JMESPath expression to filter or reshape the JSON response, e.g. "
            '"values[*].name" or "{count:size,repos:values[*].slug}".'
        ),
    ),
]
WorkspaceArg = Annotated[str, Field(description="Workspace slug, e.g. 'my-team'")]
RepoArg = Annotated[str, Field(description="Repository slug, e.g. 'backend-api'")]
IssueIdArg = Annotated[int, Field(description="Issue ID number", ge=1)]
PullRequestIdArg = Annotated[int, Field(description="Pull request ID number", ge=1)]


@bitbucket_mcp.tool(
    tags={"bitbucket", "read"},
    annotations={"title": "Bitbucket GET Request", "readOnlyHint": True},
)
@handle_tool_errors
async def bb_get(
    ctx: Context,
    path: PathArg,
    query_params: QueryParamsArg = None,
    jq: JqArg = None,
) -> str:
    """
    Fetches any Bitbucket Cloud REST API endpoint. Returns raw JSON (optionally filtered via JMESPath).

    This is the primary tool for reading Bitbucket data: workspaces, repositories,
    pull requests, commits, branches, file contents, diffs and more.
    Paths follow REST conventions, `/repositories/{workspace}/{repo}` for repo
    details, then append `/pullrequests`, `/commits`, `/refs/branches`,
    `/src/{ref}/{filepath}`, `/diff/{base}..{head}` or `/diffstat/{base}..{head}`.
    Use `query_params` for `pagelen`, `page`, `q` (filter), `sort` and `fields`,
    and `jq` to extract specific fields from the response.

    Docs: https://developer.atlassian.com/cloud/bitbucket/rest/

    Args:
        ctx: The FastMCP context.
        path: API path.
        query_params: Optional query string values.
        jq: Optional JMESPath expression.

    Returns:
        JSON string with the (filtered) response, or raw text for text endpoints.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.api_get(path, query_params=query_params, jq=jq)


@bitbucket_mcp.tool(
    tags={"bitbucket", "write"},
    annotations={"title": "Bitbucket POST Request", "readOnlyHint": False},
)
@check_write_access
@handle_tool_errors
async def bb_post(
    ctx: Context,
    path: PathArg,
    body: BodyArg,
    query_params: QueryParamsArg = None,
    jq: JqArg = None,
) -> str:
    """
    Creates resources via the Bitbucket Cloud REST API. Returns the created resource as JSON (optionally filtered via JMESPath).

    Use this for any POST operation: creating pull requests, adding comments,
    approving pull requests or creating branches. For example POST to
    `/repositories/{workspace}/{repo}/pullrequests` with `title` and
    `source.branch.name`, or to `.../pullrequests/{id}/comments` with
    `content.raw`.

    Args:
        ctx: The FastMCP context.
        path: API path.
        body: JSON request body.
        query_params: Optional query string values.
        jq: Optional JMESPath expression.

    Returns:
        JSON string with the (filtered) response.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.api_post(path, body, query_params=query_params, jq=jq)


@bitbucket_mcp.tool(
    tags={"bitbucket", "write"},
    annotations={"title": "Bitbucket PUT Request", "readOnlyHint": False},
)
@check_write_access
@handle_tool_errors
async def bb_put(
    ctx: Context,
    path: PathArg,
    body: BodyArg,
    query_params: QueryParamsArg = None,
    jq: JqArg = None,
) -> str:
    """
    Replaces resources via the Bitbucket Cloud REST API. Returns the updated resource as JSON (optionally filtered via JMESPath).

    Use this to update repository settings, pull request titles and
    descriptions, or issues; the body replaces the resource's writable fields.

    Args:
        ctx: The FastMCP context.
        path: API path.
        body: JSON request body.
        query_params: Optional query string values.
        jq: Optional JMESPath expression.

    Returns:
        JSON string with the (filtered) response.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.api_put(path, body, query_params=query_params, jq=jq)


@bitbucket_mcp.tool(
    tags={"bitbucket", "write"},
    annotations={"title": "Bitbucket PATCH Request", "readOnlyHint": False},
)
@check_write_access
@handle_tool_errors
async def bb_patch(
    ctx: Context,
    path: PathArg,
    body: BodyArg,
    query_params: QueryParamsArg = None,
    jq: JqArg = None,
) -> str:
    """
    Partially updates resources via the Bitbucket Cloud REST API. Returns the updated resource as JSON (optionally filtered via JMESPath).

    Only the fields present in the body are changed.

    Args:
        ctx: The FastMCP context.
        path: API path.
        body: JSON request body with the fields to change.
        query_params: Optional query string values.
        jq: Optional JMESPath expression.

    Returns:
        JSON string with the (filtered) response.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.api_patch(path, body, query_params=query_params, jq=jq)


@bitbucket_mcp.tool(
    tags={"bitbucket", "write"},
    annotations={
        "title": "Bitbucket DELETE Request",
        "readOnlyHint": False,
        "destructiveHint": True,
    },
)
@check_write_access
@handle_tool_errors
async def bb_delete(
    ctx: Context,
    path: PathArg,
    query_params: QueryParamsArg = None,
    jq: JqArg = None,
) -> str:
    """
    Deletes resources via the Bitbucket Cloud REST API. Most deletions return an empty response.

    Use this to delete branches, comments, or to remove an approval
    (`DELETE .../pullrequests/{id}/approve`).

    Args:
        ctx: The FastMCP context.
        path: API path.
        query_params: Optional query string values.
        jq: Optional JMESPath expression.

    Returns:
        JSON string with the (filtered) response, or an empty-response notice.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.api_delete(path, query_params=query_params, jq=jq)


@bitbucket_mcp.tool(
    tags={"bitbucket", "read"},
    annotations={"title": "List Bitbucket Workspaces", "readOnlyHint": True},
)
@handle_tool_errors
async def bb_ls_workspaces(
    ctx: Context,
    query: Annotated[
        str | None,
        Field(description='Optional BBQL filter, e.g. \'workspace.slug ~ "team"\''),
    ] = None,
    limit: Annotated[
        int,
        Field(
            description="Maximum number of workspaces to return (default: 25)",
            ge=1,
            le=MAX_PAGE_SIZE,
        ),
    ] = 25,
    cursor: Annotated[
        str | None,
        Field(description="Page number from a previous call's 'Next cursor'"),
    ] = None,
) -> str:
    """
    Lists workspaces the authenticated user can access, with their permission level.

    Args:
        ctx: The FastMCP context.
        query: Optional BBQL filter.
        limit: Page size.
        cursor: Pagination cursor.

    Returns:
        Markdown list of workspaces with pagination information.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.list_workspaces(query=query, limit=limit, cursor=cursor)


@bitbucket_mcp.tool(
    tags={"bitbucket", "read"},
    annotations={"title": "Get Bitbucket Workspace", "readOnlyHint": True},
)
@handle_tool_errors
async def bb_get_workspace(ctx: Context, workspace: WorkspaceArg) -> str:
    """
    Gets details of a single workspace.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.

    Returns:
        Markdown workspace details.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.get_workspace(workspace)


@bitbucket_mcp.tool(
    tags={"bitbucket", "read"},
    annotations={"title": "List Issues", "readOnlyHint": True},
)
@handle_tool_errors
async def bb_ls_issues(
    ctx: Context,
    workspace: WorkspaceArg,
    repo: RepoArg,
    status: Annotated[
        str | None,
        Field(description=f"Filter by issue status: {', '.join(ISSUE_STATUSES)}"),
    ] = None,
    kind: Annotated[
        str | None,
        Field(description=f"Filter by issue kind: {', '.join(ISSUE_KINDS)}"),
    ] = None,
    priority: Annotated[
        str | None,
        Field(description=f"Filter by priority: {', '.join(ISSUE_PRIORITIES)}"),
    ] = None,
    query: Annotated[
        str | None,
        Field(
            description=(
                'BBQL filter, e.g. title ~ "bug" or '
                'state="open" AND priority>="major"'
            )
        ),
    ] = None,
    sort: Annotated[
        str | None,
        Field(description="Sort field, prefix with '-' for descending (e.g. '-updated_on')"),
    ] = None,
    limit: Annotated[
        int,
        Field(
            description="Maximum number of issues to return (default: 10)",
            ge=1,
            le=MAX_PAGE_SIZE,
        ),
    ] = 10,
    page: Annotated[
        int | None, Field(description="Page number for pagination", ge=1)
    ] = None,
) -> str:
    """
    Lists issues in a repository's issue tracker.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        status: Optional status filter.
        kind: Optional kind filter.
        priority: Optional priority filter.
        query: Optional BBQL filter.
        sort: Optional sort field.
        limit: Page size.
        page: Page number.

    Returns:
        Markdown list of issues with pagination information.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
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


@bitbucket_mcp.tool(
    tags={"bitbucket", "read"},
    annotations={"title": "Get Issue", "readOnlyHint": True},
)
@handle_tool_errors
async def bb_get_issue(
    ctx: Context, workspace: WorkspaceArg, repo: RepoArg, issue_id: IssueIdArg
) -> str:
    """
    Gets details of a single issue.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        issue_id: Issue ID.

    Returns:
        Markdown issue details.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.get_issue(workspace, repo, issue_id)


@bitbucket_mcp.tool(
    tags={"bitbucket", "write"},
    annotations={"title": "Create Issue", "readOnlyHint": False},
)
@check_write_access
@handle_tool_errors
async def bb_create_issue(
    ctx: Context,
    workspace: WorkspaceArg,
    repo: RepoArg,
    title: Annotated[str, Field(description="Issue title", min_length=1)],
    content: Annotated[
        str | None, Field(description="Issue description in markdown")
    ] = None,
    kind: Annotated[
        str | None,
        Field(description=f"Issue kind: {', '.join(ISSUE_KINDS)} (default: bug)"),
    ] = None,
    priority: Annotated[
        str | None,
        Field(
            description=f"Issue priority: {', '.join(ISSUE_PRIORITIES)} (default: major)"
        ),
    ] = None,
) -> str:
    """
    Creates an issue in a repository's issue tracker.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        title: Issue title.
        content: Optional markdown description.
        kind: Optional kind.
        priority: Optional priority.

    Returns:
        Confirmation message with the new issue number.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.create_issue(
            workspace, repo, title, content=content, kind=kind, priority=priority
        )


@bitbucket_mcp.tool(
    tags={"bitbucket", "write"},
    annotations={"title": "Update Issue", "readOnlyHint": False},
)
@check_write_access
@handle_tool_errors
async def bb_update_issue(
    ctx: Context,
    workspace: WorkspaceArg,
    repo: RepoArg,
    issue_id: IssueIdArg,
    title: Annotated[str | None, Field(description="New issue title")] = None,
    content: Annotated[
        str | None, Field(description="New issue description in markdown")
    ] = None,
    status: Annotated[
        str | None,
        Field(description=f"New status: {', '.join(ISSUE_STATUSES)}"),
    ] = None,
    kind: Annotated[
        str | None, Field(description=f"New kind: {', '.join(ISSUE_KINDS)}")
    ] = None,
    priority: Annotated[
        str | None,
        Field(description=f"New priority: {', '.join(ISSUE_PRIORITIES)}"),
    ] = None,
    assignee: Annotated[
        str | None, Field(description="UUID of the user to assign the issue to")
    ] = None,
) -> str:
    """
    Updates an issue. Only the provided fields are changed.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        issue_id: Issue ID.
        title: Optional new title.
        content: Optional new description.
        status: Optional new status.
        kind: Optional new kind.
        priority: Optional new priority.
        assignee: Optional assignee UUID.

    Returns:
        Confirmation message.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.update_issue(
            workspace,
            repo,
            issue_id,
            title=title,
            content=content,
            status=status,
            kind=kind,
            priority=priority,
            assignee=assignee,
        )


@bitbucket_mcp.tool(
    tags={"bitbucket", "write"},
    annotations={
        "title": "Delete Issue",
        "readOnlyHint": False,
        "destructiveHint": True,
    },
)
@check_write_access
@handle_tool_errors
async def bb_delete_issue(
    ctx: Context, workspace: WorkspaceArg, repo: RepoArg, issue_id: IssueIdArg
) -> str:
    """
    Deletes an issue permanently.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        issue_id: Issue ID.

    Returns:
        Confirmation message.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.delete_issue(workspace, repo, issue_id)


@bitbucket_mcp.tool(
    tags={"bitbucket", "read"},
    annotations={"title": "List Issue Comments", "readOnlyHint": True},
)
@handle_tool_errors
async def bb_ls_issue_comments(
    ctx: Context,
    workspace: WorkspaceArg,
    repo: RepoArg,
    issue_id: IssueIdArg,
    limit: Annotated[
        int,
        Field(
            description="Maximum number of comments (default: 20)",
            ge=1,
            le=MAX_PAGE_SIZE,
        ),
    ] = 20,
    page: Annotated[
        int | None, Field(description="Page number for pagination", ge=1)
    ] = None,
) -> str:
    """
    Lists comments on an issue.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        issue_id: Issue ID.
        limit: Page size.
        page: Page number.

    Returns:
        Markdown list of comments with pagination information.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.list_issue_comments(
            workspace, repo, issue_id, limit=limit, page=page
        )


@bitbucket_mcp.tool(
    tags={"bitbucket", "write"},
    annotations={"title": "Add Issue Comment", "readOnlyHint": False},
)
@check_write_access
@handle_tool_errors
async def bb_add_issue_comment(
    ctx: Context,
    workspace: WorkspaceArg,
    repo: RepoArg,
    issue_id: IssueIdArg,
    content: Annotated[
        str, Field(description="Comment content in markdown", min_length=1)
    ],
) -> str:
    """
    Adds a comment to an issue.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        issue_id: Issue ID.
        content: Markdown comment.

    Returns:
        Confirmation message.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.add_issue_comment(workspace, repo, issue_id, content)


@bitbucket_mcp.tool(
    tags={"bitbucket", "read"},
    annotations={"title": "List Pull Requests", "readOnlyHint": True},
)
@handle_tool_errors
async def bb_ls_prs(
    ctx: Context,
    workspace: WorkspaceArg,
    repo: RepoArg,
    state: Annotated[
        str | None,
        Field(description="Filter by state: OPEN, MERGED, DECLINED or SUPERSEDED"),
    ] = None,
    query: Annotated[
        str | None, Field(description='BBQL filter, e.g. title ~ "fix"')
    ] = None,
    limit: Annotated[
        int,
        Field(
            description="Maximum number of pull requests to return (default: 25)",
            ge=1,
            le=MAX_PAGE_SIZE,
        ),
    ] = 25,
    cursor: Annotated[
        str | None,
        Field(description="Page number from a previous call's 'Next cursor'"),
    ] = None,
) -> str:
    """
    Lists pull requests in a repository.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        state: Optional state filter.
        query: Optional BBQL filter.
        limit: Page size.
        cursor: Pagination cursor.

    Returns:
        Markdown list of pull requests with pagination information.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.list_pull_requests(
            workspace, repo, state=state, query=query, limit=limit, cursor=cursor
        )


@bitbucket_mcp.tool(
    tags={"bitbucket", "read"},
    annotations={"title": "Get Pull Request", "readOnlyHint": True},
)
@handle_tool_errors
async def bb_get_pr(
    ctx: Context,
    workspace: WorkspaceArg,
    repo: RepoArg,
    pr_id: PullRequestIdArg,
    include_full_diff: Annotated[
        bool, Field(description="Include the full code diff (default: false)")
    ] = False,
    include_comments: Annotated[
        bool, Field(description="Include comment threads (default: false)")
    ] = False,
) -> str:
    """
    Gets a pull request with its file change summary and, optionally, the full diff and comments.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        pr_id: Pull request ID.
        include_full_diff: Whether to include the unified diff.
        include_comments: Whether to include comments.

    Returns:
        Markdown pull request details.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.get_pull_request(
            workspace,
            repo,
            pr_id,
            include_full_diff=include_full_diff,
            include_comments=include_comments,
        )


@bitbucket_mcp.tool(
    tags={"bitbucket", "read"},
    annotations={"title": "List Pull Request Comments", "readOnlyHint": True},
)
@handle_tool_errors
async def bb_ls_pr_comments(
    ctx: Context,
    workspace: WorkspaceArg,
    repo: RepoArg,
    pr_id: PullRequestIdArg,
    limit: Annotated[
        int,
        Field(
            description="Maximum number of comments to return (default: 25)",
            ge=1,
            le=MAX_PAGE_SIZE,
        ),
    ] = 25,
    cursor: Annotated[
        str | None,
        Field(description="Page number from a previous call's 'Next cursor'"),
    ] = None,
) -> str:
    """
    Lists comments on a pull request, grouped into threads.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        pr_id: Pull request ID.
        limit: Page size.
        cursor: Pagination cursor.

    Returns:
        Markdown comment threads with pagination information.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.list_pull_request_comments(
            workspace, repo, pr_id, limit=limit, cursor=cursor
        )


@bitbucket_mcp.tool(
    tags={"bitbucket", "write"},
    annotations={"title": "Add Branch", "readOnlyHint": False},
)
@check_write_access
@handle_tool_errors
async def bb_add_branch(
    ctx: Context,
    workspace: WorkspaceArg,
    repo: RepoArg,
    new_branch_name: Annotated[
        str, Field(description="Name for the new branch", min_length=1)
    ],
    source_branch_or_commit: Annotated[
        str,
        Field(
            description="Existing branch name or full commit hash to branch from",
            min_length=1,
        ),
    ],
) -> str:
    """
    Creates a branch in a repository.

    Args:
        ctx: The FastMCP context.
        workspace: Workspace slug.
        repo: Repository slug.
        new_branch_name: Name of the branch to create.
        source_branch_or_commit: Branch or commit the new branch points at.

    Returns:
        Confirmation message with the commit the branch points at.
    """
    bitbucket = await get_bitbucket_fetcher(ctx)
    with bitbucket:
        return bitbucket.add_branch(
            workspace, repo, new_branch_name, source_branch_or_commit
        )
