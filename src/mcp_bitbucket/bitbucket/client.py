"""Authenticated HTTP transport for the Bitbucket Cloud REST API."""

import base64
import json
import logging
from typing import Any

import httpx

from ..exceptions import (
    BitbucketApiError,
    BitbucketAuthenticationError,
    BitbucketError,
    BitbucketNotFoundError,
    BitbucketUnexpectedError,
)
from ..utils.logging import mask_sensitive
from .config import BitbucketConfig, BitbucketCredential, StandardCredential
from .constants import ATLASSIAN_SITE_URL_TEMPLATE, BITBUCKET_CLOUD_URL

logger = logging.getLogger("mcp-bitbucket.bitbucket.client")

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class BitbucketClient:
    """Base client for Bitbucket Cloud API interactions."""

    config: BitbucketConfig
    session: httpx.Client

    def __init__(self, config: BitbucketConfig | None = None) -> None:
        """Initialize the Bitbucket client with configuration options.

        Args:
            config: Optional configuration object (will use env vars if not provided)

        Raises:
            BitbucketAuthMissingError: If no credentials are configured
        """
        self.config = config or BitbucketConfig.from_env()
        self.base_url = self._get_base_url()
        self.session = self._create_session()

    def _get_base_url(self) -> str:
        credential = self.config.credential
        if isinstance(credential, BitbucketCredential):
            return BITBUCKET_CLOUD_URL
        return ATLASSIAN_SITE_URL_TEMPLATE.format(site_name=credential.site_name)

    def _create_session(
        self, transport: httpx.BaseTransport | None = None
    ) -> httpx.Client:
        """Create the HTTP session.

        Redirects are followed; Bitbucket answers diff and diffstat requests
        with a 302 to the resolved commit range.

        Args:
            transport: Optional transport replacing the network one

        Returns:
            HTTP session honouring the SSL and timeout settings
        """
        return httpx.Client(
            verify=self.config.ssl_verify,
            timeout=self.config.timeout,
            follow_redirects=True,
            transport=transport,
        )

    def _build_auth_header(self) -> str:
        """Build the Basic authorization header for the configured credential.

        Raises:
            BitbucketAuthenticationError: If the credential has an empty field
        """
        credential = self.config.credential
        if isinstance(credential, BitbucketCredential):
            if not credential.username or not credential.app_password:
                raise BitbucketAuthenticationError(
                    "Missing Bitbucket username or app password"
                )
            user, secret = credential.username, credential.app_password
        elif isinstance(credential, StandardCredential):
            if not credential.user_email or not credential.api_token:
                raise BitbucketAuthenticationError("Missing Atlassian credentials")
            user, secret = credential.user_email, credential.api_token
        else:
            raise BitbucketAuthenticationError("Unsupported credential type")

        token = base64.b64encode(f"{user}:{secret}".encode()).decode("ascii")
        logger.debug(
            f"Using Basic authentication for '{user}' "
            f"(secret: {mask_sensitive(secret)})"
        )
        return f"Basic {token}"

    def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send an authenticated request to the Bitbucket API.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH or DELETE)
            path: API path, with or without a leading slash
            body: Optional JSON-serializable request body
            headers: Optional headers; they override the JSON defaults

        Returns:
            Parsed JSON, raw text for text/plain responses, or None when the
            response has no body

        Raises:
            BitbucketAuthenticationError: On 401/403 or incomplete credentials
            BitbucketNotFoundError: On 404
            BitbucketApiError: On any other non-success status
            BitbucketUnexpectedError: On network failures or undecodable JSON
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        auth_header = self._build_auth_header()
        url = f"{self.base_url}/{path.lstrip('/')}"
        request_headers = {
            **DEFAULT_HEADERS,
            "Authorization": auth_header,
            **(headers or {}),
        }
        content = json.dumps(body) if body is not None else None

        logger.debug(f"Sending {method} request to {url}")
        try:
            response = self.session.request(
                method, url, headers=request_headers, content=content
            )
        except httpx.RequestError as e:
            logger.error(f"Request error for {method} {url}: {e}")
            raise BitbucketUnexpectedError(f"Request error: {e}", cause=e) from e

        if not response.is_success:
            raise self._classify_error(response)

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> Any:
        if "text/plain" in response.headers.get("content-type", ""):
            return response.text
        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                f"Failed to decode JSON response from {response.request.url}: {e}"
            )
            raise BitbucketUnexpectedError(
                f"Invalid JSON response from Bitbucket API: {e}", cause=e
            ) from e

    def _classify_error(self, response: httpx.Response) -> BitbucketError:
        """Map an unsuccessful response onto the exception hierarchy."""
        raw_body = response.text
        message = self._extract_error_message(response, raw_body)
        status = response.status_code
        logger.error(f"HTTP error {status} for {response.request.url}: {message}")

        if status in (401, 403):
            return BitbucketAuthenticationError("Invalid Atlassian credentials")
        if status == 404:
            return BitbucketNotFoundError("Resource not found", response_body=raw_body)
        return BitbucketApiError(message, status_code=status, response_body=raw_body)

    @staticmethod
    def _extract_error_message(response: httpx.Response, raw_body: str) -> str:
        """Pull a human readable message out of an error body.

        Never raises; falls back to "<status> <reason>".
        """
        fallback = f"{response.status_code} {response.reason_phrase}".strip()
        stripped = raw_body.strip()
        if not stripped.startswith(("{", "[")):
            return fallback
        try:
            data = json.loads(stripped)
        except ValueError:
            return fallback
        if not isinstance(data, dict):
            return fallback

        errors = data.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            if title := errors[0].get("title"):
                return str(title)
        if message := data.get("message"):
            return str(message)
        error = data.get("error")
        if isinstance(error, dict) and (message := error.get("message")):
            return str(message)
        return fallback

    def get(self, path: str, headers: dict[str, str] | None = None) -> Any:
        return self.request("GET", path, headers=headers)

    def post(self, path: str, body: Any = None) -> Any:
        return self.request("POST", path, body=body)

    def put(self, path: str, body: Any = None) -> Any:
        return self.request("PUT", path, body=body)

    def patch(self, path: str, body: Any = None) -> Any:
        return self.request("PATCH", path, body=body)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self) -> None:
        """Close HTTP session."""
        self.session.close()

    def __enter__(self) -> "BitbucketClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
