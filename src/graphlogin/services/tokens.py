"""Authorization code to access token exchange against the Graph API.

The login helper depends only on the ``TokenExchangeClient`` protocol.
``GraphTokenClient`` is the shipped HTTP implementation.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import parse_qsl

import httpx
from pydantic import ValidationError

from graphlogin.config import LoginConfig
from graphlogin.models.app import AccessToken, AppCredentials
from graphlogin.models.errors import TokenExchangeError

logger = logging.getLogger(__name__)


class TokenExchangeClient(Protocol):
    """Exchanges an authorization code for an access token."""

    def exchange_code(
        self, code: str, app: AppCredentials, redirect_uri: str
    ) -> AccessToken:
        """Perform the exchange.

        Args:
            code: Authorization code from the callback
            app: Application credentials
            redirect_uri: Redirect URL exactly as sent to the login dialog

        Returns:
            AccessToken: The issued token
        """
        ...


class GraphTokenClient:
    """Calls the Graph API ``oauth/access_token`` endpoint.

    Args:
        config: Endpoint and timeout settings
        http_client: Optional preconfigured client. Clients passed in are
            owned by the caller and not closed here.
        version: Graph API version, defaults to the configured default
    """

    def __init__(
        self,
        config: LoginConfig | None = None,
        http_client: httpx.Client | None = None,
        version: str | None = None,
    ):
        self.config = config or LoginConfig()
        self.version = version or self.config.default_graph_version
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.Client(timeout=self.config.timeout)

    @property
    def token_endpoint(self) -> str:
        return f"{self.config.graph_base_url}/{self.version}/oauth/access_token"

    def exchange_code(
        self, code: str, app: AppCredentials, redirect_uri: str
    ) -> AccessToken:
        """Exchange an authorization code for an access token.

        Raises:
            TokenExchangeError: If the request fails or the endpoint
                reports an error
        """
        params = {
            "client_id": app.app_id,
            "redirect_uri": redirect_uri,
            "client_secret": app.app_secret,
            "code": code,
        }

        logger.debug(
            f"Exchanging authorization code at {self.token_endpoint} "
            f"for client {app.app_id}"
        )

        try:
            response = self._http_client.get(
                self.token_endpoint,
                params=params,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"HTTP error during token exchange: {e}") from e

        return self._parse_token_response(response)

    def _parse_token_response(self, response: httpx.Response) -> AccessToken:
        """Turn a token endpoint response into an AccessToken.

        Successful responses are JSON, or a form encoded body on older
        Graph versions. Errors use the Graph error envelope.
        """
        data = self._decode_body(response)

        error = data.get("error")
        if error or not response.is_success:
            raise self._build_error(response.status_code, error)

        try:
            token = AccessToken.from_response(data)
        except (KeyError, ValueError, ValidationError) as e:
            raise TokenExchangeError(f"Invalid token response format: {e}") from e

        logger.info("Token exchange successful")
        return token

    def _decode_body(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            data = dict(parse_qsl(response.text))

        if not isinstance(data, dict):
            raise TokenExchangeError("Token response is not an object")
        return data

    def _build_error(self, status_code: int, error: Any) -> TokenExchangeError:
        if isinstance(error, dict):
            message = error.get("message", "Unknown error")
            code = error.get("code")
            error_type = error.get("type")
        else:
            message = str(error) if error else f"Unexpected status {status_code}"
            code = None
            error_type = None

        logger.warning(f"Token exchange failed with {status_code}: {message}")

        return TokenExchangeError(
            message,
            code=self._error_code(code),
            error_type=error_type,
        )

    def _error_code(self, code: Any) -> int | None:
        """Graph error codes are numeric; anything else is dropped."""
        try:
            return int(code) if code is not None else None
        except (TypeError, ValueError):
            return None

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._http_client.close()

    def __enter__(self) -> GraphTokenClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
