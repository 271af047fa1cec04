import asyncio
import os

import click
from dotenv import load_dotenv

__version__ = "3.1.0"

from .cli import COMMANDS
from .logging_config import log_operation, resolve_log_level, setup_logger

logger = setup_logger()

TRANSPORTS = ("stdio", "sse", "streamable-http")


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="mcp-bitbucket")
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (can be used multiple times)",
)
@click.option(
    "--env-file", type=click.Path(exists=True, dir_okay=False), help="Path to .env file"
)
@click.option(
    "--transport",
    type=click.Choice(TRANSPORTS),
    help="Transport type. Defaults to TRANSPORT or stdio",
)
@click.option(
    "--port",
    type=int,
    help="Port to listen on for HTTP transports. Defaults to PORT or 8000",
)
@click.option(
    "--host",
    help="Host to bind to for HTTP transports. Defaults to HOST or 0.0.0.0",
)
@click.option(
    "--log-dir",
    help="Directory to store log files",
)
@click.option(
    "--log-to-file/--no-log-to-file",
    default=False,
    help="Enable/disable file logging",
)
@click.option(
    "--read-only",
    is_flag=True,
    default=False,
    help="Hide and refuse tools that modify Bitbucket data",
)
@click.option(
    "--enabled-tools",
    help="Comma-separated list of tools to enable (e.g. bb_get,bb_ls_issues)",
)
@click.option(
    "--site-name", help="Atlassian site name (the <name> in <name>.atlassian.net)"
)
@click.option("--user-email", help="Atlassian account email")
@click.option("--api-token", help="Atlassian API token")
@click.option("--bitbucket-username", help="Bitbucket username (app password auth)")
@click.option("--bitbucket-app-password", help="Bitbucket app password")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: int,
    env_file: str | None,
    transport: str | None,
    port: int | None,
    host: str | None,
    log_dir: str | None,
    log_to_file: bool,
    read_only: bool,
    enabled_tools: str | None,
    site_name: str | None,
    user_email: str | None,
    api_token: str | None,
    bitbucket_username: str | None,
    bitbucket_app_password: str | None,
) -> None:
    """MCP Bitbucket Server - Bitbucket Cloud functionality for MCP

    Without a subcommand the MCP server is started. The subcommands call the
    same operations directly and print the result.
    """
    # Load environment variables from file if specified, otherwise try default .env
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    logging_level = resolve_log_level(verbose)
    setup_logger(
        name="mcp-bitbucket",
        level=logging_level,
        log_to_file=log_to_file,
        log_dir=log_dir,
    )
    if env_file:
        logger.info(f"Loaded environment from file: {env_file}")

    # Set environment variables from command line arguments if provided
    if site_name:
        os.environ["ATLASSIAN_SITE_NAME"] = site_name
    if user_email:
        os.environ["ATLASSIAN_USER_EMAIL"] = user_email
    if api_token:
        os.environ["ATLASSIAN_API_TOKEN"] = api_token
    if bitbucket_username:
        os.environ["ATLASSIAN_BITBUCKET_USERNAME"] = bitbucket_username
    if bitbucket_app_password:
        os.environ["ATLASSIAN_BITBUCKET_APP_PASSWORD"] = bitbucket_app_password
    if log_dir:
        os.environ["LOG_DIR"] = log_dir
    if read_only:
        os.environ["READ_ONLY_MODE"] = "true"
    if enabled_tools:
        os.environ["ENABLED_TOOLS"] = enabled_tools

    if ctx.invoked_subcommand is not None:
        return

    final_transport = transport or os.getenv("TRANSPORT", "stdio").lower()
    if final_transport not in TRANSPORTS:
        raise click.BadParameter(
            f"Unsupported transport '{final_transport}'", param_hint="TRANSPORT"
        )
    final_port = port or int(os.getenv("PORT", "8000"))
    final_host = host or os.getenv("HOST", "0.0.0.0")  # noqa: S104

    from .servers import main_mcp

    with log_operation(logger, "server_run", transport=final_transport):
        logger.info(
            f"Starting MCP Bitbucket v{__version__} with {final_transport} transport"
        )
        if final_transport == "stdio":
            asyncio.run(main_mcp.run_async(transport="stdio"))
        else:
            logger.info(f"Listening on {final_host}:{final_port}")
            asyncio.run(
                main_mcp.run_async(
                    transport=final_transport, host=final_host, port=final_port
                )
            )


for command in COMMANDS:
    main.add_command(command)


__all__ = ["main", "__version__", "setup_logger", "log_operation"]

if __name__ == "__main__":
    main()
