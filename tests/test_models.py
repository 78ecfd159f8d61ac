"""Tests for rpauth models and the exception hierarchy."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rpauth.exceptions import (
    ConfigurationError,
    ExchangeErrorKind,
    ProviderError,
    ResponseParseError,
    RpauthError,
    TechnicalError,
    TransportError,
    UriSyntaxError,
)
from rpauth.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_PROVIDER_ERROR,
    EXIT_RESPONSE_PARSE_ERROR,
    EXIT_URI_SYNTAX_ERROR,
)
from rpauth.models import (
    AccessToken,
    AuthMethod,
    ClientIdentity,
    OidcCredentials,
    TokenErrorObject,
    TokenSet,
)


class TestAuthMethod:
    def test_values_match_registry_names(self) -> None:
        assert AuthMethod("client_secret_basic") is AuthMethod.CLIENT_SECRET_BASIC
        assert AuthMethod.CLIENT_SECRET_POST == "client_secret_post"

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError):
            AuthMethod("client_secret_magic")


class TestSecretsStayOutOfRepr:
    def test_identity(self) -> None:
        identity = ClientIdentity(client_id="rp-client", client_secret="s3cret")
        assert "s3cret" not in repr(identity)
        assert identity.client_secret.get_secret_value() == "s3cret"

    def test_token_set(self) -> None:
        tokens = TokenSet(
            access_token=AccessToken(value="AT-value"),
            id_token="ID-value",
            refresh_token="RT-value",
        )
        text = repr(tokens)
        assert "AT-value" not in text
        assert "ID-value" not in text
        assert "RT-value" not in text

    def test_credentials(self) -> None:
        assert "the-code" not in repr(OidcCredentials(code="the-code"))


class TestImmutability:
    def test_token_set_frozen(self) -> None:
        tokens = TokenSet(access_token=AccessToken(value="AT"), id_token="ID")
        with pytest.raises(ValidationError):
            tokens.id_token = "other"  # type: ignore[misc]

    def test_credentials_mutable(self) -> None:
        credentials = OidcCredentials(code="abc")
        credentials.id_token = "ID"
        assert credentials.id_token == "ID"


class TestTokenErrorObject:
    def test_str_full(self) -> None:
        error = TokenErrorObject(error="invalid_grant", error_description="expired", http_status=400)
        assert str(error) == "invalid_grant: expired (HTTP 400)"

    def test_str_without_code(self) -> None:
        assert str(TokenErrorObject(http_status=502)) == "(no error code) (HTTP 502)"


class TestExceptionHierarchy:
    def test_exit_codes(self) -> None:
        assert UriSyntaxError("x", "bad").exit_code == EXIT_URI_SYNTAX_ERROR
        assert TransportError("down").exit_code == EXIT_CONNECTION_ERROR
        assert ResponseParseError("bad", 200, "").exit_code == EXIT_RESPONSE_PARSE_ERROR
        assert ProviderError(TokenErrorObject()).exit_code == EXIT_PROVIDER_ERROR

    @pytest.mark.parametrize(
        "exc,kind",
        [
            (UriSyntaxError("x", "bad"), ExchangeErrorKind.URI_SYNTAX),
            (TransportError("down"), ExchangeErrorKind.TRANSPORT),
            (ResponseParseError("bad", 200, ""), ExchangeErrorKind.PARSE),
            (ProviderError(TokenErrorObject(error="invalid_client")), ExchangeErrorKind.PROVIDER),
        ],
    )
    def test_per_call_errors_are_technical(self, exc: TechnicalError, kind: ExchangeErrorKind) -> None:
        assert isinstance(exc, TechnicalError)
        assert isinstance(exc, RpauthError)
        assert exc.kind is kind

    def test_configuration_error_is_not_technical(self) -> None:
        assert not isinstance(ConfigurationError("x"), TechnicalError)

    def test_provider_error_keeps_error_object(self) -> None:
        error = TokenErrorObject(error="invalid_client", error_description="bad secret")
        exc = ProviderError(error)
        assert exc.error_object is error
        assert str(exc) == "Bad token response, error=invalid_client: bad secret"
