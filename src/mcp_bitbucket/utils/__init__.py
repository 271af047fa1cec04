"""
Utility functions for the MCP Bitbucket integration.
"""

from .io import is_read_only_mode
from .jq import apply_jq_filter, to_json_string
from .logging import mask_sensitive
from .tools import get_enabled_tools, should_include_tool

__all__ = [
    "apply_jq_filter",
    "get_enabled_tools",
    "is_read_only_mode",
    "mask_sensitive",
    "should_include_tool",
    "to_json_string",
]
