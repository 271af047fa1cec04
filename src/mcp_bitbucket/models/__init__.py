"""Bitbucket data models."""

from .base import ApiModel
from .common import BitbucketUser, ResponsePagination
from .issue import BitbucketIssue, BitbucketIssueComment
from .pull_request import (
    BitbucketDiffStat,
    BitbucketPullRequest,
    BitbucketPullRequestComment,
)
from .repository import (
    BitbucketBranch,
    BitbucketCodeSearchLine,
    BitbucketCodeSearchResult,
    BitbucketCommit,
    BitbucketRepository,
)
from .workspace import BitbucketWorkspace, BitbucketWorkspaceMembership

__all__ = [
    "ApiModel",
    "BitbucketUser",
    "ResponsePagination",
    "BitbucketIssue",
    "BitbucketIssueComment",
    "BitbucketPullRequest",
    "BitbucketPullRequestComment",
    "BitbucketDiffStat",
    "BitbucketRepository",
    "BitbucketBranch",
    "BitbucketCommit",
    "BitbucketCodeSearchLine",
    "BitbucketCodeSearchResult",
    "BitbucketWorkspace",
    "BitbucketWorkspaceMembership",
]
