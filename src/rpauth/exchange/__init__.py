"""Authorization code token exchange.

Builds the token request, sends it through a :class:`Transport`, and maps
the response to a :class:`~rpauth.models.TokenSet` or a
:class:`~rpauth.exceptions.TechnicalError`.

Classes:
    :class:`TokenExchanger` -- one exchange per authorization code.
    :class:`HttpxTransport` -- default transport backed by :class:`httpx.Client`.
    :class:`TokenRequest` / :class:`AuthorizationCodeGrant` -- request building.

Example::

    from rpauth.exchange import HttpxTransport, TokenExchanger

    with HttpxTransport(connect_timeout=0.5, read_timeout=5.0) as transport:
        exchanger = TokenExchanger(metadata.token_endpoint, strategy, transport)
        tokens = exchanger.exchange(code, "https://app.example.com/callback")
"""

from rpauth.exchange.exchanger import TokenExchanger
from rpauth.exchange.response import (
    TokenErrorResponse,
    TokenResponse,
    TokenSuccessResponse,
    parse_token_response,
)
from rpauth.exchange.token_request import (
    AuthorizationCodeGrant,
    TokenRequest,
    parse_callback_url,
)
from rpauth.exchange.transport import HttpxTransport, Transport

__all__ = [
    "AuthorizationCodeGrant",
    "HttpxTransport",
    "TokenErrorResponse",
    "TokenExchanger",
    "TokenRequest",
    "TokenResponse",
    "TokenSuccessResponse",
    "Transport",
    "parse_callback_url",
    "parse_token_response",
]
