"""Token endpoint response parsing.

An HTTP 200 response is the success variant and must carry an OpenID
Connect token response body (``access_token``, ``token_type`` and
``id_token``; ``refresh_token``, ``expires_in`` and ``scope`` optional).
Any other status is the error variant; its body is read as an OAuth2 error
object when it is JSON, and reduced to the HTTP status otherwise.

A success response whose body is not a valid token response raises
:class:`~rpauth.exceptions.ResponseParseError`.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Union

import httpx

from rpauth.exceptions import ResponseParseError
from rpauth.models import AccessToken, TokenErrorObject, TokenSet


class TokenSuccessResponse:
    """The success variant: the extracted :class:`~rpauth.models.TokenSet`."""

    def __init__(self, tokens: TokenSet, raw: dict[str, Any]) -> None:
        self.tokens = tokens
        self.raw = raw

    def indicates_success(self) -> bool:
        return True


class TokenErrorResponse:
    """The error variant: the provider's :class:`~rpauth.models.TokenErrorObject`."""

    def __init__(self, error_object: TokenErrorObject) -> None:
        self.error_object = error_object

    def indicates_success(self) -> bool:
        return False


TokenResponse = Union[TokenSuccessResponse, TokenErrorResponse]


def parse_token_response(response: httpx.Response) -> TokenResponse:
    """Parse a token endpoint response into its success or error variant.

    Args:
        response: The token endpoint's response, body already read.

    Returns:
        A :class:`TokenSuccessResponse` for HTTP 200, otherwise a
        :class:`TokenErrorResponse`.

    Raises:
        ResponseParseError: If a 200 response is not a JSON object with the
            required token fields.
    """
    if response.status_code == 200:
        return _parse_success(response)
    return _parse_error(response)


def _parse_success(response: httpx.Response) -> TokenSuccessResponse:
    body = _json_object(response)
    if body is None:
        raise _parse_failure(response, "body is not a JSON object")

    access_token = _require_str(response, body, "access_token")
    token_type = _require_str(response, body, "token_type")
    id_token = _require_str(response, body, "id_token")
    refresh_token = _optional_str(response, body, "refresh_token")
    scope = _optional_str(response, body, "scope")

    tokens = TokenSet(
        access_token=AccessToken(
            value=access_token,
            token_type=token_type,
            expires_in=_optional_int(response, body, "expires_in"),
            scope=tuple(scope.split()) if scope else (),
        ),
        id_token=id_token,
        refresh_token=refresh_token,
    )
    return TokenSuccessResponse(tokens, body)


def _parse_error(response: httpx.Response) -> TokenErrorResponse:
    body = _json_object(response) or {}

    def _text(key: str) -> Optional[str]:
        value = body.get(key)
        return value if isinstance(value, str) else None

    return TokenErrorResponse(
        TokenErrorObject(
            error=_text("error"),
            error_description=_text("error_description"),
            error_uri=_text("error_uri"),
            http_status=response.status_code,
        )
    )


def _json_object(response: httpx.Response) -> Optional[dict[str, Any]]:
    """Decode the body as a JSON object, or return ``None``."""
    try:
        data = json.loads(response.content)
    except (ValueError, UnicodeDecodeError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def _parse_failure(response: httpx.Response, reason: str) -> ResponseParseError:
    return ResponseParseError(
        f"Invalid token response from {_endpoint(response)} "
        f"(HTTP {response.status_code}): {reason}",
        status_code=response.status_code,
        body=response.text,
        endpoint=_endpoint(response),
    )


def _endpoint(response: httpx.Response) -> str:
    try:
        return str(response.request.url)
    except RuntimeError:
        # Responses built without a request (tests, custom transports).
        return "token endpoint"


def _require_str(response: httpx.Response, body: dict[str, Any], key: str) -> str:
    value = body.get(key)
    if not isinstance(value, str) or not value:
        raise _parse_failure(response, f"missing or invalid '{key}'")
    return value


def _optional_str(response: httpx.Response, body: dict[str, Any], key: str) -> Optional[str]:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise _parse_failure(response, f"'{key}' must be a string")
    return value


def _optional_int(response: httpx.Response, body: dict[str, Any], key: str) -> Optional[int]:
    value = body.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise _parse_failure(response, f"'{key}' must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    raise _parse_failure(response, f"'{key}' must be a number")
