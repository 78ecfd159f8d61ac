"""Exception hierarchy for rpauth.

All exceptions inherit from :class:`RpauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`rpauth.exit_codes`.
The top-level error handler in :func:`rpauth.app.main` catches
``RpauthError`` and exits with the appropriate code.

Per-call failures of a token exchange all derive from
:class:`TechnicalError`, so callers that only care about "the exchange
failed" catch one type, while the :attr:`TechnicalError.kind`
discriminant and the subclass-specific payload keep diagnostics precise.

Subclass hierarchy::

    RpauthError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- ConfigurationError       (exit 1)
    +-- TechnicalError           (exit 1)
        +-- UriSyntaxError       (exit 8)
        +-- TransportError       (exit 6)
        |   +-- ResponseParseError (exit 7)
        +-- ProviderError        (exit 3)
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Optional

from rpauth.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PROVIDER_ERROR,
    EXIT_RESPONSE_PARSE_ERROR,
    EXIT_URI_SYNTAX_ERROR,
)

if TYPE_CHECKING:
    from rpauth.models import TokenErrorObject


class RpauthError(Exception):
    """Base exception for all rpauth errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`rpauth.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RpauthError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigurationError(RpauthError):
    """Raised for configuration problems.

    Covers missing or invalid profiles, unresolvable credential sources,
    unreadable provider metadata, and a negotiated client authentication
    method that has no concrete strategy.
    """

    exit_code = EXIT_GENERIC_FAILURE


class ExchangeErrorKind(str, enum.Enum):
    """Discriminant of a :class:`TechnicalError`."""

    URI_SYNTAX = "uri_syntax"
    TRANSPORT = "transport"
    PARSE = "parse"
    PROVIDER = "provider"


class TechnicalError(RpauthError):
    """A token exchange failed. Never retried by rpauth.

    Args:
        message: Human-readable error description.
        kind: Which stage of the exchange failed.
    """

    kind: ExchangeErrorKind = ExchangeErrorKind.TRANSPORT

    def __init__(self, message: str, kind: ExchangeErrorKind | None = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class UriSyntaxError(TechnicalError):
    """The callback URL is not a well-formed absolute URI.

    Attributes:
        value: The malformed string as received.
    """

    exit_code = EXIT_URI_SYNTAX_ERROR
    kind = ExchangeErrorKind.URI_SYNTAX

    def __init__(self, value: str, reason: str):
        super().__init__(f"Invalid callback URL {value!r}: {reason}")
        self.value = value
        self.reason = reason


class TransportError(TechnicalError):
    """Raised on network-level failures talking to the token endpoint.

    Attributes:
        endpoint: The token endpoint URL the request was sent to.
        cause: The underlying exception, when there is one.
    """

    exit_code = EXIT_CONNECTION_ERROR
    kind = ExchangeErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        endpoint: str = "",
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.endpoint = endpoint
        self.cause = cause


class ResponseParseError(TransportError):
    """The token endpoint answered, but the body is not a valid token response.

    Attributes:
        status_code: HTTP status of the response.
        body: The raw response body.
    """

    exit_code = EXIT_RESPONSE_PARSE_ERROR
    kind = ExchangeErrorKind.PARSE

    def __init__(self, message: str, status_code: int, body: str, endpoint: str = ""):
        super().__init__(message, endpoint=endpoint)
        self.status_code = status_code
        self.body = body


class ProviderError(TechnicalError):
    """The token endpoint returned an OAuth2 error response.

    Attributes:
        error_object: The provider's error payload, unmodified.
    """

    exit_code = EXIT_PROVIDER_ERROR
    kind = ExchangeErrorKind.PROVIDER

    def __init__(self, error_object: TokenErrorObject):
        super().__init__(f"Bad token response, error={error_object}")
        self.error_object = error_object
