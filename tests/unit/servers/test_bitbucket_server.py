"""Unit tests for the Bitbucket FastMCP server implementation."""

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastmcp import Client, FastMCP
from fastmcp.client import FastMCPTransport
from fastmcp.exceptions import ToolError

from mcp_bitbucket.bitbucket import BitbucketFetcher
from mcp_bitbucket.servers.bitbucket import bitbucket_mcp
from mcp_bitbucket.servers.context import MainAppContext
from mcp_bitbucket.servers.main import BitbucketMCP

READ_TOOLS = {
    "bb_get",
    "bb_ls_workspaces",
    "bb_get_workspace",
    "bb_ls_issues",
    "bb_get_issue",
    "bb_ls_issue_comments",
    "bb_ls_prs",
    "bb_get_pr",
    "bb_ls_pr_comments",
}
WRITE_TOOLS = {
    "bb_post",
    "bb_put",
    "bb_patch",
    "bb_delete",
    "bb_create_issue",
    "bb_update_issue",
    "bb_delete_issue",
    "bb_add_issue_comment",
    "bb_add_branch",
}


@pytest.fixture
def mock_bitbucket_fetcher():
    """Create a mock BitbucketFetcher with canned text results."""
    mock_fetcher = MagicMock(spec=BitbucketFetcher)
    mock_fetcher.api_get.return_value = '{\n  "slug": "backend"\n}'
    mock_fetcher.api_post.return_value = '{\n  "id": 1\n}'
    mock_fetcher.api_delete.return_value = "No content returned (empty response)."
    mock_fetcher.list_issues.return_value = "# Issues"
    mock_fetcher.create_issue.return_value = "✓ Issue created: #1 - Bug"
    mock_fetcher.get_pull_request.return_value = "# Pull Request #7: Feature"
    mock_fetcher.list_workspaces.return_value = "# Bitbucket Workspaces"
    mock_fetcher.add_branch.return_value = (
        "✓ Branch created: feature/x in acme/backend"
    )
    return mock_fetcher


def make_test_mcp(
    app_password_config=None, read_only=False, enabled_tools=None
) -> FastMCP:
    @asynccontextmanager
    async def test_lifespan(app: FastMCP) -> AsyncGenerator[dict, None]:
        yield {
            "app_lifespan_context": MainAppContext(
                bitbucket_config=app_password_config,
                read_only=read_only,
                enabled_tools=enabled_tools,
            )
        }

    test_mcp = BitbucketMCP("TestBitbucket", lifespan=test_lifespan)
    test_mcp.mount(bitbucket_mcp)
    return test_mcp


@asynccontextmanager
async def connected_client(test_mcp, fetcher):
    with patch(
        "mcp_bitbucket.servers.bitbucket.get_bitbucket_fetcher",
        AsyncMock(return_value=fetcher),
    ):
        async with Client(transport=FastMCPTransport(test_mcp)) as client_instance:
            yield client_instance


@pytest.fixture
async def bitbucket_client(app_password_config, mock_bitbucket_fetcher):
    test_mcp = make_test_mcp(app_password_config)
    async with connected_client(test_mcp, mock_bitbucket_fetcher) as client:
        yield client


@pytest.fixture
async def read_only_client(app_password_config, mock_bitbucket_fetcher):
    test_mcp = make_test_mcp(app_password_config, read_only=True)
    async with connected_client(test_mcp, mock_bitbucket_fetcher) as client:
        yield client


def _text(response) -> str:
    assert len(response.content) > 0
    text_content = response.content[0]
    assert text_content.type == "text"
    return text_content.text


@pytest.mark.anyio
async def test_list_tools_exposes_all_tools(bitbucket_client):
    tools = await bitbucket_client.list_tools()
    assert {tool.name for tool in tools} == READ_TOOLS | WRITE_TOOLS


@pytest.mark.anyio
async def test_list_tools_hides_write_tools_in_read_only(read_only_client):
    tools = await read_only_client.list_tools()
    assert {tool.name for tool in tools} == READ_TOOLS


@pytest.mark.anyio
async def test_list_tools_honours_enabled_tools(
    app_password_config, mock_bitbucket_fetcher
):
    test_mcp = make_test_mcp(
        app_password_config, enabled_tools=["bb_get", "bb_post", "bb_unknown"]
    )
    async with connected_client(test_mcp, mock_bitbucket_fetcher) as client:
        tools = await client.list_tools()
    assert {tool.name for tool in tools} == {"bb_get", "bb_post"}


@pytest.mark.anyio
async def test_bb_get(bitbucket_client, mock_bitbucket_fetcher):
    response = await bitbucket_client.call_tool(
        "bb_get",
        {
            "path": "/repositories/acme/backend",
            "query_params": {"fields": "slug"},
            "jq": "slug",
        },
    )
    assert json.loads(_text(response)) == {"slug": "backend"}
    mock_bitbucket_fetcher.api_get.assert_called_once_with(
        "/repositories/acme/backend", query_params={"fields": "slug"}, jq="slug"
    )


@pytest.mark.anyio
async def test_bb_post(bitbucket_client, mock_bitbucket_fetcher):
    body = {"title": "New PR", "source": {"branch": {"name": "feature"}}}
    response = await bitbucket_client.call_tool(
        "bb_post",
        {"path": "/repositories/acme/backend/pullrequests", "body": body},
    )
    assert json.loads(_text(response)) == {"id": 1}
    mock_bitbucket_fetcher.api_post.assert_called_once_with(
        "/repositories/acme/backend/pullrequests", body, query_params=None, jq=None
    )


@pytest.mark.anyio
async def test_bb_delete(bitbucket_client, mock_bitbucket_fetcher):
    response = await bitbucket_client.call_tool(
        "bb_delete", {"path": "/repositories/acme/old"}
    )
    assert _text(response) == "No content returned (empty response)."


@pytest.mark.anyio
async def test_write_tool_refused_in_read_only(
    read_only_client, mock_bitbucket_fetcher
):
    with pytest.raises(ToolError) as exc_info:
        await read_only_client.call_tool(
            "bb_post", {"path": "/repositories/acme/backend", "body": {}}
        )
    assert "read-only mode" in str(exc_info.value)
    mock_bitbucket_fetcher.api_post.assert_not_called()


@pytest.mark.anyio
async def test_bb_ls_issues(bitbucket_client, mock_bitbucket_fetcher):
    response = await bitbucket_client.call_tool(
        "bb_ls_issues",
        {"workspace": "acme", "repo": "backend", "status": "open", "limit": 5},
    )
    assert _text(response) == "# Issues"
    mock_bitbucket_fetcher.list_issues.assert_called_once_with(
        "acme",
        "backend",
        status="open",
        kind=None,
        priority=None,
        query=None,
        sort=None,
        limit=5,
        page=None,
    )


@pytest.mark.anyio
async def test_bb_create_issue(bitbucket_client, mock_bitbucket_fetcher):
    response = await bitbucket_client.call_tool(
        "bb_create_issue",
        {"workspace": "acme", "repo": "backend", "title": "Bug", "kind": "bug"},
    )
    assert _text(response) == "✓ Issue created: #1 - Bug"
    mock_bitbucket_fetcher.create_issue.assert_called_once_with(
        "acme", "backend", "Bug", content=None, kind="bug", priority=None
    )


@pytest.mark.anyio
async def test_bb_add_branch(bitbucket_client, mock_bitbucket_fetcher):
    response = await bitbucket_client.call_tool(
        "bb_add_branch",
        {
            "workspace": "acme",
            "repo": "backend",
            "new_branch_name": "feature/x",
            "source_branch_or_commit": "main",
        },
    )
    assert _text(response) == "✓ Branch created: feature/x in acme/backend"
    mock_bitbucket_fetcher.add_branch.assert_called_once_with(
        "acme", "backend", "feature/x", "main"
    )


@pytest.mark.anyio
async def test_bb_add_branch_refused_in_read_only(
    read_only_client, mock_bitbucket_fetcher
):
    with pytest.raises(ToolError) as exc_info:
        await read_only_client.call_tool(
            "bb_add_branch",
            {
                "workspace": "acme",
                "repo": "backend",
                "new_branch_name": "feature/x",
                "source_branch_or_commit": "main",
            },
        )
    assert "Cannot bb add branch in read-only mode." in str(exc_info.value)
    mock_bitbucket_fetcher.add_branch.assert_not_called()

@pytest.mark.anyio
async def test_bb_get_pr(bitbucket_client, mock_bitbucket_fetcher):
    response = await bitbucket_client.call_tool(
        "bb_get_pr",
        {
            "workspace": "acme",
            "repo": "backend",
            "pr_id": 7,
            "include_comments": True,
        },
    )
    assert _text(response).startswith("# Pull Request #7")
    mock_bitbucket_fetcher.get_pull_request.assert_called_once_with(
        "acme", "backend", 7, include_full_diff=False, include_comments=True
    )


@pytest.mark.anyio
async def test_bb_ls_workspaces_defaults(bitbucket_client, mock_bitbucket_fetcher):
    await bitbucket_client.call_tool("bb_ls_workspaces", {})
    mock_bitbucket_fetcher.list_workspaces.assert_called_once_with(
        query=None, limit=25, cursor=None
    )


@pytest.mark.anyio
async def test_tool_error_is_returned_as_payload(
    bitbucket_client, mock_bitbucket_fetcher
):
    mock_bitbucket_fetcher.get_issue.side_effect = ValueError("Bad issue")
    response = await bitbucket_client.call_tool(
        "bb_get_issue", {"workspace": "acme", "repo": "backend", "issue_id": 3}
    )
    assert json.loads(_text(response)) == {
        "success": False,
        "error": "Bad issue",
        "error_type": "ValueError",
    }


@pytest.mark.anyio
async def test_tool_against_fake_api(
    app_password_config, fake_bitbucket, make_fetcher
):
    fake_bitbucket.add(
        "GET",
        "/2.0/repositories/acme",
        {"values": [{"slug": "backend"}, {"slug": "frontend"}]},
    )
    test_mcp = make_test_mcp(app_password_config)

    # Each tool call closes its fetcher, so hand out a fresh one per call.
    with patch(
        "mcp_bitbucket.servers.bitbucket.get_bitbucket_fetcher",
        AsyncMock(side_effect=lambda ctx: make_fetcher(fake_bitbucket)),
    ):
        async with Client(transport=FastMCPTransport(test_mcp)) as client:
            found = await client.call_tool(
                "bb_get", {"path": "/repositories/acme", "jq": "values[*].slug"}
            )
            missing = await client.call_tool(
                "bb_get", {"path": "/repositories/nope"}
            )

    assert json.loads(_text(found)) == ["backend", "frontend"]
    assert json.loads(_text(missing)) == {
        "success": False,
        "error": "Resource not found",
        "error_type": "NOT_FOUND",
        "status_code": 404,
    }


@pytest.mark.anyio
async def test_missing_credentials_reported_by_tools():
    test_mcp = make_test_mcp(None)
    async with Client(transport=FastMCPTransport(test_mcp)) as client:
        response = await client.call_tool("bb_get", {"path": "/user"})
    payload = json.loads(_text(response))
    assert payload["success"] is False
    assert payload["error_type"] == "AUTH_MISSING"
