import json
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from fastmcp import Context

from mcp_bitbucket.exceptions import (
    BitbucketAuthenticationError,
    BitbucketAuthMissingError,
    BitbucketError,
    BitbucketNotFoundError,
)

logger = logging.getLogger("mcp-bitbucket.utils.decorators")


F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def check_write_access(func: F) -> F:
    """
    Decorator for FastMCP tools to check if the application is in read-only mode.
    If in read-only mode, it raises a ValueError.
    Assumes the decorated function is async and has `ctx: Context` as its first argument.
    """

    @wraps(func)
    async def wrapper(ctx: Context, *args: Any, **kwargs: Any) -> Any:
        lifespan_ctx_dict = ctx.request_context.lifespan_context
        app_lifespan_ctx = (
            lifespan_ctx_dict.get("app_lifespan_context")
            if isinstance(lifespan_ctx_dict, dict)
            else None
        )  # type: ignore

        if app_lifespan_ctx is not None and app_lifespan_ctx.read_only:
            tool_name = func.__name__
            action_description = tool_name.replace("_", " ")
            logger.warning(f"Attempted to call tool '{tool_name}' in read-only mode.")
            raise ValueError(f"Cannot {action_description} in read-only mode.")

        return await func(ctx, *args, **kwargs)

    return wrapper  # type: ignore


def error_payload(error: Exception) -> dict[str, Any]:
    """Build the JSON error payload returned to MCP clients."""
    if isinstance(error, BitbucketError):
        return error.to_dict()
    return {
        "success": False,
        "error": str(error),
        "error_type": type(error).__name__,
    }


def handle_tool_errors(func: F) -> F:
    """
    Decorator turning Bitbucket failures into a JSON error payload.

    Tool functions stay focused on the happy path; errors are logged with a
    level matching their kind and returned as `{"success": false, ...}`.
    Nothing raised here terminates the server.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        tool_name = func.__name__
        try:
            return await func(*args, **kwargs)
        except Exception as e:  # noqa: BLE001 - reported to the client below
            log_level = logging.ERROR
            if isinstance(e, ValueError | BitbucketNotFoundError):
                log_level = logging.WARNING
                error_message = str(e)
            elif isinstance(e, BitbucketAuthMissingError | BitbucketAuthenticationError):
                error_message = f"Authentication/Permission Error: {e}"
            elif isinstance(e, BitbucketError):
                error_message = f"Bitbucket API Error: {e}"
            else:
                error_message = f"An unexpected error occurred in {tool_name}."
                logger.exception(f"Unexpected error in {tool_name}:")

            logger.log(log_level, f"{tool_name} failed: {error_message}")
            return json.dumps(error_payload(e), indent=2, ensure_ascii=False)

    return wrapper  # type: ignore
