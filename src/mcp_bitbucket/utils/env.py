"""Environment variable utility functions for MCP Bitbucket."""

import os
from collections.abc import Mapping


def is_env_truthy(env_var_name: str, default: str = "") -> bool:
    """Check if environment variable is set to a standard truthy value.

    Considers 'true', '1', 'yes' as truthy values (case-insensitive).

    Args:
        env_var_name: Name of the environment variable to check
        default: Default value if environment variable is not set

    Returns:
        True if the environment variable is set to a truthy value, False otherwise
    """
    return os.getenv(env_var_name, default).lower() in ("true", "1", "yes")


def is_env_extended_truthy(env_var_name: str, default: str = "") -> bool:
    """Check if environment variable is set to an extended truthy value.

    Considers 'true', '1', 'yes', 'y', 'on' as truthy values (case-insensitive).
    Used for READ_ONLY_MODE and similar flags.

    Args:
        env_var_name: Name of the environment variable to check
        default: Default value if environment variable is not set

    Returns:
        True if the environment variable is set to a truthy value, False otherwise
    """
    return os.getenv(env_var_name, default).lower() in ("true", "1", "yes", "y", "on")


def is_env_ssl_verify(
    env: Mapping[str, str], env_var_name: str, default: str = "true"
) -> bool:
    """Check SSL verification setting with secure defaults.

    Defaults to true unless explicitly set to false values.

    Args:
        env: Explicit variables consulted before the process environment
        env_var_name: Name of the environment variable to check
        default: Default value if environment variable is not set

    Returns:
        True unless explicitly set to false values
    """
    return (getenv(env, env_var_name, default) or default).lower() not in (
        "false",
        "0",
        "no",
    )


def getenv(
    env: Mapping[str, str], env_var_name: str, default: str | None = None
) -> str | None:
    """Retrieve the value of an environment variable.

    The explicit `env` mapping is checked first, then the process environment.

    Args:
        env: A mapping containing environment variables and their values.
        env_var_name: The name of the environment variable to retrieve.
        default: Value returned when the variable is set nowhere.

    Returns:
        The value of the environment variable if found, otherwise `default`.
    """
    if env_var_name in env:
        return env[env_var_name]
    return os.getenv(env_var_name, default)
