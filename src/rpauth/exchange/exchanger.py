"""Authorization code for token set exchange.

:class:`TokenExchanger` holds the three things that stay fixed for a
client (token endpoint, client authentication strategy, transport) and
performs one exchange per authorization code. It keeps no per-call state,
so a single instance serves concurrent callers.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from rpauth.auth.base import ClientAuthentication
from rpauth.exceptions import ConfigurationError, ProviderError
from rpauth.exchange.response import TokenErrorResponse, parse_token_response
from rpauth.exchange.token_request import AuthorizationCodeGrant, TokenRequest
from rpauth.exchange.transport import Transport
from rpauth.models import TokenSet

logger = logging.getLogger(__name__)


def check_token_endpoint(url: str) -> None:
    """Reject a token endpoint that is not an absolute URL.

    Raises:
        ConfigurationError: If *url* cannot be parsed or lacks a scheme or host.
    """
    try:
        endpoint = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"Invalid token endpoint {url!r}: {exc}") from exc
    if not endpoint.scheme or not endpoint.host:
        raise ConfigurationError(f"Token endpoint {url!r} is not an absolute URL")


class TokenExchanger:
    """Exchanges authorization codes at a token endpoint.

    Args:
        token_endpoint: The provider's token endpoint URL.
        client_authentication: The client's negotiated strategy.
        transport: Sends the request; see
            :class:`~rpauth.exchange.transport.HttpxTransport`.

    Raises:
        ConfigurationError: If *token_endpoint* is not an absolute URL.
    """

    def __init__(
        self,
        token_endpoint: str,
        client_authentication: ClientAuthentication,
        transport: Transport,
    ) -> None:
        check_token_endpoint(token_endpoint)
        self._token_endpoint = token_endpoint
        self._client_authentication = client_authentication
        self._transport = transport

    @property
    def token_endpoint(self) -> str:
        return self._token_endpoint

    @property
    def client_authentication(self) -> ClientAuthentication:
        return self._client_authentication

    def exchange(self, code: Optional[str], callback_url: str) -> Optional[TokenSet]:
        """Exchange *code* for a token set.

        Args:
            code: The authorization code. ``None`` or empty means there is
                nothing to exchange.
            callback_url: The redirect URI the code was issued for.

        Returns:
            The :class:`~rpauth.models.TokenSet`, or ``None`` when *code* is
            absent (no request is sent).

        Raises:
            UriSyntaxError: If *callback_url* is not an absolute URI.
            TransportError: On network failure or timeout.
            ResponseParseError: If the success response cannot be parsed.
            ProviderError: If the provider returned an error response.
        """
        if not code:
            return None

        request = TokenRequest(
            self._token_endpoint,
            self._client_authentication,
            AuthorizationCodeGrant(code, callback_url),
        ).to_http_request()

        http_response = self._transport.send(request)
        logger.debug(
            "Token response: status=%s, content_length=%s",
            http_response.status_code,
            len(http_response.content),
        )

        response = parse_token_response(http_response)
        if isinstance(response, TokenErrorResponse):
            raise ProviderError(response.error_object)

        logger.debug("Token response successful")
        return response.tokens
