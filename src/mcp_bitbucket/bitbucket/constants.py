"""Constants for Bitbucket Cloud integration."""

from typing import Final

# Environment variable names
ENV_ATLASSIAN_SITE_NAME: Final[str] = "ATLASSIAN_SITE_NAME"
ENV_ATLASSIAN_USER_EMAIL: Final[str] = "ATLASSIAN_USER_EMAIL"
ENV_ATLASSIAN_API_TOKEN: Final[str] = "ATLASSIAN_API_TOKEN"
ENV_BITBUCKET_USERNAME: Final[str] = "ATLASSIAN_BITBUCKET_USERNAME"
ENV_BITBUCKET_APP_PASSWORD: Final[str] = "ATLASSIAN_BITBUCKET_APP_PASSWORD"
ENV_BITBUCKET_SSL_VERIFY: Final[str] = "ATLASSIAN_BITBUCKET_SSL_VERIFY"
ENV_BITBUCKET_TIMEOUT: Final[str] = "ATLASSIAN_BITBUCKET_TIMEOUT"

# API endpoints
BITBUCKET_CLOUD_URL: Final[str] = "https://api.bitbucket.org"
ATLASSIAN_SITE_URL_TEMPLATE: Final[str] = "https://{site_name}.atlassian.net"
API_VERSION_PATH: Final[str] = "/2.0"

# Default values
DEFAULT_SSL_VERIFY: Final[bool] = True
DEFAULT_TIMEOUT: Final[float] = 30.0
MAX_PAGE_SIZE: Final[int] = 100

# Issue tracker enumerations
ISSUE_STATUSES: Final[tuple[str, ...]] = (
    "new",
    "open",
    "resolved",
    "on hold",
    "invalid",
    "duplicate",
    "wontfix",
    "closed",
)
ISSUE_KINDS: Final[tuple[str, ...]] = ("bug", "enhancement", "proposal", "task")
ISSUE_PRIORITIES: Final[tuple[str, ...]] = (
    "trivial",
    "minor",
    "major",
    "critical",
    "blocker",
)

# Pull request states
PULL_REQUEST_STATES: Final[tuple[str, ...]] = (
    "OPEN",
    "MERGED",
    "DECLINED",
    "SUPERSEDED",
)

# Repository roles accepted by the repositories listing
REPOSITORY_ROLES: Final[tuple[str, ...]] = ("owner", "admin", "contributor", "member")

# Search scopes
SEARCH_SCOPES: Final[tuple[str, ...]] = (
    "all",
    "repositories",
    "pullrequests",
    "commits",
    "code",
)
