"""Dependency provider for BitbucketFetcher with context awareness.

Provides get_bitbucket_fetcher for use in tool functions.
"""

from __future__ import annotations

import logging

from fastmcp import Context

from mcp_bitbucket.bitbucket import BitbucketFetcher
from mcp_bitbucket.exceptions import BitbucketAuthMissingError
from mcp_bitbucket.servers.context import MainAppContext

logger = logging.getLogger("mcp-bitbucket.servers.dependencies")


async def get_bitbucket_fetcher(ctx: Context) -> BitbucketFetcher:
    """Returns a BitbucketFetcher built from the credentials resolved at start-up.

    Raises:
        BitbucketAuthMissingError: If the server started without credentials
    """
    lifespan_ctx_dict = ctx.request_context.lifespan_context
    app_lifespan_ctx: MainAppContext | None = (
        lifespan_ctx_dict.get("app_lifespan_context")
        if isinstance(lifespan_ctx_dict, dict)
        else None
    )
    if app_lifespan_ctx is None or app_lifespan_ctx.bitbucket_config is None:
        logger.warning("Bitbucket tool called without configured credentials.")
        raise BitbucketAuthMissingError()

    logger.debug("get_bitbucket_fetcher: creating fetcher from global config.")
    return BitbucketFetcher(config=app_lifespan_ctx.bitbucket_config)
