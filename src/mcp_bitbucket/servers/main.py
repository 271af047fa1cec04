"""Main FastMCP server setup for Bitbucket integration."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastmcp import FastMCP
from fastmcp.tools import Tool as FastMCPTool
from mcp.types import Tool as MCPTool
from starlette.requests import Request
from starlette.responses import JSONResponse

from mcp_bitbucket.bitbucket.config import BitbucketConfig
from mcp_bitbucket.exceptions import BitbucketAuthMissingError
from mcp_bitbucket.utils.io import is_read_only_mode
from mcp_bitbucket.utils.tools import get_enabled_tools, should_include_tool

from .bitbucket import bitbucket_mcp
from .context import MainAppContext

logger = logging.getLogger("mcp-bitbucket.server.main")


async def health_check(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


@asynccontextmanager
async def main_lifespan(app: FastMCP[MainAppContext]) -> AsyncIterator[dict]:
    logger.info("Main Bitbucket MCP server lifespan starting...")
    read_only = is_read_only_mode()
    enabled_tools = get_enabled_tools()

    loaded_bitbucket_config: BitbucketConfig | None = None
    try:
        loaded_bitbucket_config = BitbucketConfig.from_env()
        auth_kind = (
            "Atlassian API token"
            if loaded_bitbucket_config.is_standard_auth
            else "app password"
        )
        logger.info(f"Bitbucket configuration loaded ({auth_kind}).")
    except BitbucketAuthMissingError:
        logger.warning(
            "Bitbucket credentials are not configured; tools will report "
            "authentication errors until they are provided."
        )

    app_context = MainAppContext(
        bitbucket_config=loaded_bitbucket_config,
        read_only=read_only,
        enabled_tools=enabled_tools,
    )
    logger.info(f"Read-only mode: {'ENABLED' if read_only else 'DISABLED'}")
    logger.info(f"Enabled tools filter: {enabled_tools or 'All tools enabled'}")

    try:
        yield {"app_lifespan_context": app_context}
    except Exception as e:
        logger.error(f"Error during lifespan: {e}", exc_info=True)
        raise
    finally:
        logger.info("Main Bitbucket MCP server lifespan shutdown complete.")


class BitbucketMCP(FastMCP[MainAppContext]):
    """Custom FastMCP server class for Bitbucket integration with tool filtering."""

    async def _mcp_list_tools(self) -> list[MCPTool]:
        # Filter tools based on enabled_tools and read_only mode from the lifespan context.
        req_context = self._mcp_server.request_context
        if req_context is None or req_context.lifespan_context is None:
            logger.warning("Lifespan context not available during _mcp_list_tools call.")
            return []

        lifespan_ctx_dict = req_context.lifespan_context
        app_lifespan_state: MainAppContext | None = (
            lifespan_ctx_dict.get("app_lifespan_context")
            if isinstance(lifespan_ctx_dict, dict)
            else None
        )
        read_only = (
            getattr(app_lifespan_state, "read_only", False)
            if app_lifespan_state
            else False
        )
        enabled_tools_filter = (
            getattr(app_lifespan_state, "enabled_tools", None)
            if app_lifespan_state
            else None
        )
        logger.debug(
            f"_mcp_list_tools: read_only={read_only}, enabled_tools_filter={enabled_tools_filter}"
        )

        all_tools: dict[str, FastMCPTool] = await self.get_tools()
        logger.debug(
            f"Aggregated {len(all_tools)} tools before filtering: {list(all_tools.keys())}"
        )

        filtered_tools: list[MCPTool] = []
        for registered_name, tool_obj in all_tools.items():
            if not should_include_tool(registered_name, enabled_tools_filter):
                logger.debug(f"Excluding tool '{registered_name}' (not enabled)")
                continue

            if read_only and "write" in tool_obj.tags:
                logger.debug(
                    f"Excluding tool '{registered_name}' due to read-only mode and 'write' tag"
                )
                continue

            filtered_tools.append(tool_obj.to_mcp_tool(name=registered_name))

        logger.debug(f"_mcp_list_tools: {len(filtered_tools)} tools enabled")
        return filtered_tools


main_mcp = BitbucketMCP(name="Bitbucket MCP", lifespan=main_lifespan)
main_mcp.mount(bitbucket_mcp)


@main_mcp.custom_route("/healthz", methods=["GET"], include_in_schema=False)
async def _health_check_route(request: Request) -> JSONResponse:
    return await health_check(request)
