"""Module for generic Bitbucket REST API operations."""

import logging
from typing import Any
from urllib.parse import quote, urlencode

from ..utils.jq import apply_jq_filter, to_json_string
from .client import BitbucketClient
from .constants import API_VERSION_PATH

logger = logging.getLogger("mcp-bitbucket.bitbucket.api")


def build_api_path(path: str, query_params: dict[str, Any] | None = None) -> str:
    """Normalize an API path and append query parameters.

    The path gets exactly one leading slash and the "/2.0" version prefix
    unless it already carries it.

    Args:
        path: Path such as "/repositories/ws" or "2.0/user"
        query_params: Optional query string values

    Returns:
        The path ready to hand to the transport
    """
    normalized = "/" + path.lstrip("/")
    if not (
        normalized == API_VERSION_PATH or normalized.startswith(f"{API_VERSION_PATH}/")
    ):
        normalized = f"{API_VERSION_PATH}{normalized}"

    if query_params:
        params = {k: str(v) for k, v in query_params.items() if v is not None}
        if params:
            separator = "&" if "?" in normalized else "?"
            normalized = f"{normalized}{separator}{urlencode(params)}"
    return normalized


def resource_path(*segments: object) -> str:
    """Join path segments, percent-encoding each one.

    A slug holding "/", "?" or a space stays inside its own segment.

    Example:
        resource_path("repositories", "my team", "api") ->
        "/repositories/my%20team/api"
    """
    return "".join(f"/{quote(str(segment), safe='')}" for segment in segments)


class ApiMixin(BitbucketClient):
    """Mixin exposing arbitrary REST calls with optional JMESPath filtering."""

    def handle_api_request(
        self,
        method: str,
        path: str,
        query_params: dict[str, Any] | None = None,
        body: Any = None,
        jq: str | None = None,
    ) -> str:
        """Forward a request to any Bitbucket API path.

        Args:
            method: HTTP method
            path: API path; "/2.0" is prefixed when missing
            query_params: Optional query string values
            body: Optional JSON request body
            jq: Optional JMESPath expression applied to the response

        Returns:
            The (filtered) response rendered as a string
        """
        full_path = build_api_path(path, query_params)
        logger.debug(f"{method.upper()} {full_path} (jq={jq!r})")
        data = self.request(method, full_path, body=body)
        return to_json_string(apply_jq_filter(data, jq))

    def api_get(
        self,
        path: str,
        query_params: dict[str, Any] | None = None,
        jq: str | None = None,
    ) -> str:
        return self.handle_api_request("GET", path, query_params=query_params, jq=jq)

    def api_post(
        self,
        path: str,
        body: Any,
        query_params: dict[str, Any] | None = None,
        jq: str | None = None,
    ) -> str:
        return self.handle_api_request(
            "POST", path, query_params=query_params, body=body, jq=jq
        )

    def api_put(
        self,
        path: str,
        body: Any,
        query_params: dict[str, Any] | None = None,
        jq: str | None = None,
    ) -> str:
        return self.handle_api_request(
            "PUT", path, query_params=query_params, body=body, jq=jq
        )

    def api_patch(
        self,
        path: str,
        body: Any,
        query_params: dict[str, Any] | None = None,
        jq: str | None = None,
    ) -> str:
        return self.handle_api_request(
            "PATCH", path, query_params=query_params, body=body, jq=jq
        )

    def api_delete(
        self,
        path: str,
        query_params: dict[str, Any] | None = None,
        jq: str | None = None,
    ) -> str:
        return self.handle_api_request(
            "DELETE", path, query_params=query_params, jq=jq
        )
