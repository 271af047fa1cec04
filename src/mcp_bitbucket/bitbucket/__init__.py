"""Bitbucket Cloud API module for mcp_bitbucket.

This module provides the Bitbucket Cloud client and its operation mixins.
"""

from .api import ApiMixin, build_api_path, resource_path
from .client import BitbucketClient
from .config import (
    BitbucketConfig,
    BitbucketCredential,
    Credential,
    StandardCredential,
    resolve_credentials,
)
from .issues import IssuesMixin
from .pull_requests import PullRequestsMixin
from .repositories import RepositoriesMixin
from .search import SearchMixin
from .workspaces import WorkspacesMixin


class BitbucketFetcher(
    ApiMixin,
    WorkspacesMixin,
    IssuesMixin,
    SearchMixin,
    RepositoriesMixin,
    PullRequestsMixin,
):
    """
    The main Bitbucket client class providing access to all Bitbucket operations.

    This class inherits from multiple mixins that provide specific functionality:
    - ApiMixin: Generic GET/POST/PUT/PATCH/DELETE on any REST path
    - WorkspacesMixin: Workspace listing and details
    - IssuesMixin: Repository issue tracker operations
    - SearchMixin: Repository, pull request, commit and code search
    - RepositoriesMixin: Repository listing, branch listing and creation
    - PullRequestsMixin: Pull request listing, details, diffs and comments
    """

    pass


__all__ = [
    "BitbucketFetcher",
    "BitbucketConfig",
    "BitbucketClient",
    "BitbucketCredential",
    "StandardCredential",
    "Credential",
    "resolve_credentials",
    "build_api_path",
    "resource_path",
]
