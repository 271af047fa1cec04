"""Exceptions raised by the Bitbucket transport and operations."""

from typing import Any


class BitbucketError(Exception):
    """Base exception for MCP-Bitbucket errors."""

    error_type = "UNEXPECTED_ERROR"

    def to_dict(self) -> dict[str, Any]:
        """Payload returned to MCP clients when a tool fails."""
        return {
            "success": False,
            "error": str(self),
            "error_type": self.error_type,
        }


class BitbucketAuthMissingError(BitbucketError):
    """Raised when no usable Atlassian/Bitbucket credentials are configured."""

    error_type = "AUTH_MISSING"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Authentication credentials are missing. Set ATLASSIAN_SITE_NAME, "
            "ATLASSIAN_USER_EMAIL and ATLASSIAN_API_TOKEN, or "
            "ATLASSIAN_BITBUCKET_USERNAME and ATLASSIAN_BITBUCKET_APP_PASSWORD."
        )


class BitbucketAuthenticationError(BitbucketError):
    """Raised when Bitbucket API authentication fails (401/403)."""

    error_type = "AUTH_INVALID"


class BitbucketApiError(BitbucketError):
    """Raised when the Bitbucket API answers with a non-success status."""

    error_type = "API_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.status_code is not None:
            result["status_code"] = self.status_code
        return result


class BitbucketNotFoundError(BitbucketApiError):
    """Raised when the requested Bitbucket resource does not exist (404)."""

    error_type = "NOT_FOUND"

    def __init__(
        self, message: str = "Resource not found", response_body: Any = None
    ) -> None:
        super().__init__(message, status_code=404, response_body=response_body)


class BitbucketUnexpectedError(BitbucketError):
    """Raised for network failures and undecodable responses."""

    error_type = "UNEXPECTED_ERROR"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
