"""FastMCP server instances for MCP Bitbucket."""

from .main import main_mcp

__all__ = ["main_mcp"]
