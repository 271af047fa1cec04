"""Configuration module for Bitbucket Cloud API interactions."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Union

from ..exceptions import BitbucketAuthMissingError
from ..utils.env import getenv, is_env_ssl_verify
from .constants import (
    DEFAULT_SSL_VERIFY,
    DEFAULT_TIMEOUT,
    ENV_ATLASSIAN_API_TOKEN,
    ENV_ATLASSIAN_SITE_NAME,
    ENV_ATLASSIAN_USER_EMAIL,
    ENV_BITBUCKET_APP_PASSWORD,
    ENV_BITBUCKET_SSL_VERIFY,
    ENV_BITBUCKET_TIMEOUT,
    ENV_BITBUCKET_USERNAME,
)

logger = logging.getLogger("mcp-bitbucket.bitbucket.config")


@dataclass(frozen=True)
class StandardCredential:
    """Atlassian account credential (site name, account email, API token)."""

    site_name: str
    user_email: str
    api_token: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.site_name and self.user_email and self.api_token)


@dataclass(frozen=True)
class BitbucketCredential:
    """Bitbucket-specific credential (username, app password)."""

    username: str
    app_password: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.username and self.app_password)


Credential = Union[StandardCredential, BitbucketCredential]


def resolve_credentials(env: Mapping[str, str] | None = None) -> Credential | None:
    """Resolve the credential to use for Bitbucket requests.

    The Atlassian API token triple takes priority; the Bitbucket app password
    pair is used only when the triple is incomplete. Absence of both is not an
    error, callers decide whether missing credentials are fatal.

    Args:
        env: Optional mapping consulted before the process environment

    Returns:
        The resolved credential, or None when neither variant is fully configured
    """
    env = env or {}

    site_name = getenv(env, ENV_ATLASSIAN_SITE_NAME)
    user_email = getenv(env, ENV_ATLASSIAN_USER_EMAIL)
    api_token = getenv(env, ENV_ATLASSIAN_API_TOKEN)
    if site_name and user_email and api_token:
        logger.debug(f"Using standard Atlassian credentials for site '{site_name}'")
        return StandardCredential(
            site_name=site_name, user_email=user_email, api_token=api_token
        )

    username = getenv(env, ENV_BITBUCKET_USERNAME)
    app_password = getenv(env, ENV_BITBUCKET_APP_PASSWORD)
    if username and app_password:
        logger.debug(f"Using Bitbucket app password credentials for '{username}'")
        return BitbucketCredential(username=username, app_password=app_password)

    logger.warning(
        "No Atlassian credentials found. Set "
        f"{ENV_ATLASSIAN_SITE_NAME}, {ENV_ATLASSIAN_USER_EMAIL} and "
        f"{ENV_ATLASSIAN_API_TOKEN}, or {ENV_BITBUCKET_USERNAME} and "
        f"{ENV_BITBUCKET_APP_PASSWORD}."
    )
    return None


@dataclass
class BitbucketConfig:
    """Configuration for Bitbucket Cloud API access.

    Wraps the resolved credential together with transport settings.
    """

    credential: Credential
    ssl_verify: bool = DEFAULT_SSL_VERIFY
    timeout: float = DEFAULT_TIMEOUT

    @property
    def is_standard_auth(self) -> bool:
        return isinstance(self.credential, StandardCredential)

    def is_auth_configured(self) -> bool:
        """Check whether the wrapped credential carries all of its fields.

        Returns:
            True if the credential is complete, False otherwise
        """
        return self.credential.is_complete

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "BitbucketConfig":
        """Create configuration from environment variables.

        Environment variables:
            ATLASSIAN_SITE_NAME, ATLASSIAN_USER_EMAIL, ATLASSIAN_API_TOKEN:
                standard Atlassian credentials (preferred)
            ATLASSIAN_BITBUCKET_USERNAME, ATLASSIAN_BITBUCKET_APP_PASSWORD:
                Bitbucket app password credentials
            ATLASSIAN_BITBUCKET_SSL_VERIFY: SSL verification (default: true)
            ATLASSIAN_BITBUCKET_TIMEOUT: request timeout in seconds (default: 30)

        Returns:
            BitbucketConfig instance

        Raises:
            BitbucketAuthMissingError: If no credentials are configured
        """
        env = env or {}
        credential = resolve_credentials(env)
        if credential is None:
            raise BitbucketAuthMissingError()

        timeout = DEFAULT_TIMEOUT
        timeout_str = getenv(env, ENV_BITBUCKET_TIMEOUT)
        if timeout_str:
            try:
                timeout = float(timeout_str)
            except ValueError:
                logger.warning(
                    f"Invalid {ENV_BITBUCKET_TIMEOUT} value '{timeout_str}', "
                    f"using default of {DEFAULT_TIMEOUT}s"
                )

        return cls(
            credential=credential,
            ssl_verify=is_env_ssl_verify(env, ENV_BITBUCKET_SSL_VERIFY),
            timeout=timeout,
        )
