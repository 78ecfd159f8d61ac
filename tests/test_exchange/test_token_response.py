"""Tests for token endpoint response parsing."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from rpauth.exceptions import ExchangeErrorKind, ResponseParseError, TransportError
from rpauth.exchange.response import (
    TokenErrorResponse,
    TokenSuccessResponse,
    parse_token_response,
)


def _response(status: int = 200, **kwargs: Any) -> httpx.Response:
    return httpx.Response(
        status,
        request=httpx.Request("POST", "https://op.example.com/token"),
        **kwargs,
    )


class TestSuccess:
    def test_full_body(self, token_body: dict[str, Any]) -> None:
        parsed = parse_token_response(_response(json=token_body))

        assert isinstance(parsed, TokenSuccessResponse)
        assert parsed.indicates_success()
        tokens = parsed.tokens
        assert tokens.access_token.value == "at-123"
        assert tokens.access_token.token_type == "Bearer"
        assert tokens.access_token.expires_in == 3600
        assert tokens.access_token.scope == ("openid", "profile")
        assert tokens.refresh_token == "rt-123"
        assert tokens.id_token == token_body["id_token"]
        assert parsed.raw == token_body

    def test_refresh_token_optional(self, token_body: dict[str, Any]) -> None:
        del token_body["refresh_token"]
        parsed = parse_token_response(_response(json=token_body))
        assert parsed.tokens.refresh_token is None

    def test_expires_in_as_digit_string(self, token_body: dict[str, Any]) -> None:
        token_body["expires_in"] = "60"
        assert parse_token_response(_response(json=token_body)).tokens.access_token.expires_in == 60

    def test_extra_fields_ignored(self, token_body: dict[str, Any]) -> None:
        token_body["session_state"] = "xyz"
        assert parse_token_response(_response(json=token_body)).tokens.access_token.value == "at-123"

    @pytest.mark.parametrize("field", ["access_token", "token_type", "id_token"])
    def test_missing_required_field(self, token_body: dict[str, Any], field: str) -> None:
        del token_body[field]
        with pytest.raises(ResponseParseError, match=field):
            parse_token_response(_response(json=token_body))

    @pytest.mark.parametrize(
        "field,value",
        [("refresh_token", 5), ("scope", ["openid"]), ("expires_in", True), ("expires_in", "soon")],
    )
    def test_invalid_optional_field(
        self, token_body: dict[str, Any], field: str, value: Any
    ) -> None:
        token_body[field] = value
        with pytest.raises(ResponseParseError):
            parse_token_response(_response(json=token_body))

    def test_non_json_body(self) -> None:
        with pytest.raises(ResponseParseError) as exc_info:
            parse_token_response(_response(content=b"<html>oops</html>"))
        err = exc_info.value
        assert err.status_code == 200
        assert "oops" in err.body
        assert err.kind is ExchangeErrorKind.PARSE
        assert isinstance(err, TransportError)

    def test_json_array_body(self) -> None:
        with pytest.raises(ResponseParseError, match="not a JSON object"):
            parse_token_response(_response(json=["access_token"]))

    def test_deeply_nested_body(self) -> None:
        with pytest.raises(ResponseParseError) as exc_info:
            parse_token_response(_response(content=b"[" * 200_000))
        assert exc_info.value.kind is ExchangeErrorKind.PARSE


class TestError:
    def test_oauth_error_body(self) -> None:
        parsed = parse_token_response(
            _response(
                400,
                json={
                    "error": "invalid_grant",
                    "error_description": "Code expired",
                    "error_uri": "https://op.example.com/errors#invalid_grant",
                },
            )
        )
        assert isinstance(parsed, TokenErrorResponse)
        assert not parsed.indicates_success()
        error = parsed.error_object
        assert error.error == "invalid_grant"
        assert error.error_description == "Code expired"
        assert error.error_uri == "https://op.example.com/errors#invalid_grant"
        assert error.http_status == 400

    def test_non_json_error_body_keeps_status(self) -> None:
        parsed = parse_token_response(_response(502, content=b"Bad Gateway"))
        assert isinstance(parsed, TokenErrorResponse)
        assert parsed.error_object.error is None
        assert parsed.error_object.http_status == 502

    def test_deeply_nested_error_body_keeps_status(self) -> None:
        parsed = parse_token_response(_response(400, content=b"{\"a\":" * 200_000))
        assert isinstance(parsed, TokenErrorResponse)
        assert parsed.error_object.error is None
        assert parsed.error_object.http_status == 400

    def test_tokens_in_error_body_are_not_extracted(self, token_body: dict[str, Any]) -> None:
        parsed = parse_token_response(_response(401, json=token_body))
        assert isinstance(parsed, TokenErrorResponse)
        assert not hasattr(parsed, "tokens")

    def test_error_object_str(self) -> None:
        parsed = parse_token_response(
            _response(400, json={"error": "invalid_client", "error_description": "Bad secret"})
        )
        assert str(parsed.error_object) == "invalid_client: Bad secret (HTTP 400)"

    def test_response_without_request(self) -> None:
        parsed = parse_token_response(httpx.Response(500))
        assert parsed.error_object.http_status == 500
