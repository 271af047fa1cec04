"""Tool-related utility functions for MCP Bitbucket."""

import logging
import os

logger = logging.getLogger("mcp-bitbucket.utils.tools")


def get_enabled_tools() -> list[str] | None:
    """Get the list of enabled tools from environment variable.

    This function reads and parses the ENABLED_TOOLS environment variable
    to determine which tools should be available in the server.

    The environment variable should contain a comma-separated list of tool names.
    Whitespace around tool names is stripped.

    Returns:
        List of enabled tool names if ENABLED_TOOLS is set and non-empty,
        None if ENABLED_TOOLS is not set or empty after stripping whitespace.

    Examples:
        ENABLED_TOOLS="bb_get,bb_ls_issues" -> ["bb_get", "bb_ls_issues"]
        ENABLED_TOOLS="" -> None
        ENABLED_TOOLS not set -> None
    """
    enabled_tools_str = os.getenv("ENABLED_TOOLS")
    if not enabled_tools_str:
        logger.debug("ENABLED_TOOLS environment variable not set or empty.")
        return None

    tools = [tool.strip() for tool in enabled_tools_str.split(",") if tool.strip()]
    if not tools:
        logger.debug("ENABLED_TOOLS contained only separators or whitespace.")
        return None
    logger.debug(f"Parsed enabled tools from environment: {tools}")
    return tools


def should_include_tool(tool_name: str, enabled_tools: list[str] | None) -> bool:
    """Check if a tool should be included based on the enabled tools list.

    Args:
        tool_name: The name of the tool to check.
        enabled_tools: List of enabled tool names, or None to include all tools.

    Returns:
        True if the tool should be included, False otherwise.
    """
    if enabled_tools is None:
        return True
    return tool_name in enabled_tools
