"""Canonical Pydantic models shared across all rpauth modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig` and :class:`ClientConfig`.

**Provider-facing models** -- inputs read from the OpenID provider:
    :class:`AuthMethod`, :class:`ProviderMetadata`, and
    :class:`TokenErrorObject`.

**Result models** -- produced by negotiation and token exchange:
    :class:`ClientIdentity`, :class:`NegotiationEvent`,
    :class:`AccessToken`, :class:`TokenSet`, and :class:`OidcCredentials`.

Values that must stay constant once computed (identities, token sets) are
frozen. Token and secret values are excluded from ``repr`` so that they
never leak into logs or tracebacks.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


# --- Provider-facing ---


class AuthMethod(str, enum.Enum):
    """Token endpoint client authentication methods registered for OAuth2/OIDC.

    Only :attr:`CLIENT_SECRET_POST` and :attr:`CLIENT_SECRET_BASIC` have a
    concrete strategy in rpauth; the rest exist so configured or advertised
    values can be recognised and reported by name.
    """

    CLIENT_SECRET_POST = "client_secret_post"
    CLIENT_SECRET_BASIC = "client_secret_basic"
    CLIENT_SECRET_JWT = "client_secret_jwt"
    PRIVATE_KEY_JWT = "private_key_jwt"
    TLS_CLIENT_AUTH = "tls_client_auth"
    SELF_SIGNED_TLS_CLIENT_AUTH = "self_signed_tls_client_auth"
    NONE = "none"


class ProviderMetadata(BaseModel):
    """The subset of an OpenID provider metadata document rpauth reads.

    Unknown keys from the document are preserved in ``model_extra``.
    ``token_endpoint_auth_methods_supported`` keeps the provider's order and
    may contain method names rpauth does not know.

    Example::

        ProviderMetadata(
            issuer="https://idp.example.com",
            token_endpoint="https://idp.example.com/oauth2/token",
            token_endpoint_auth_methods_supported=["client_secret_basic"],
        )
    """

    model_config = ConfigDict(extra="allow")

    issuer: Optional[str] = None
    token_endpoint: str
    token_endpoint_auth_methods_supported: list[str] = Field(default_factory=list)

    @field_validator("token_endpoint_auth_methods_supported", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class TokenErrorObject(BaseModel):
    """OAuth2 error payload returned by a token endpoint (:rfc:`6749` section 5.2)."""

    model_config = ConfigDict(frozen=True, extra="allow")

    error: Optional[str] = None
    error_description: Optional[str] = None
    error_uri: Optional[str] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:
        text = self.error or "(no error code)"
        if self.error_description:
            text += f": {self.error_description}"
        if self.http_status is not None:
            text += f" (HTTP {self.http_status})"
        return text


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings for token endpoint requests."""

    connect_timeout: float = Field(default=0.5, description="Connect timeout in seconds")
    read_timeout: float = Field(default=5.0, description="Read timeout in seconds")
    verify_ssl: bool = True


class ClientConfig(BaseModel):
    """A relying-party client profile.

    Stored as ``<config_dir>/profiles/<name>.json``. The client secret is
    never stored directly; ``client_secret_source`` is a descriptor resolved
    by :func:`rpauth.config.resolve_credential`.

    ``client_authentication_method`` is a free-form string on purpose: an
    unsupported or unknown value is not a validation error, it is downgraded
    during negotiation (or rejected at construction when ``strict_method``
    is set).

    Example::

        ClientConfig(
            name="staging",
            client_id="my-app",
            client_secret_source="env:MY_APP_SECRET",
            client_authentication_method="client_secret_post",
            callback_url="https://app.example.com/callback",
            metadata_source="~/idp/staging-metadata.json",
        )
    """

    name: str = "default"
    client_id: str
    client_secret_source: str = Field(
        default="prompt",
        description="Secret source: env:VAR, file:/path, prompt, literal:VALUE",
    )
    client_authentication_method: Optional[str] = Field(
        default=None,
        description="Preferred token endpoint auth method",
    )
    strict_method: bool = Field(
        default=False,
        description="Reject an unsupported configured method instead of downgrading",
    )
    callback_url: Optional[str] = None
    metadata_source: Optional[str] = Field(
        default=None, description="Path to a provider metadata document (JSON/YAML)"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Negotiation and exchange results ---


class ClientIdentity(BaseModel):
    """Client identifier and secret, fixed for the lifetime of a client."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr


class NegotiationEventKind(str, enum.Enum):
    """Why negotiation fell back from the configured preference."""

    CONFIGURED_UNSUPPORTED = "configured_unsupported"
    PREFERRED_NOT_ADVERTISED = "preferred_not_advertised"
    NO_SUPPORTED_ADVERTISED = "no_supported_advertised"
    NO_ADVERTISED_METHODS = "no_advertised_methods"


class NegotiationEvent(BaseModel):
    """A diagnostic emitted when negotiation downgrades or defaults."""

    model_config = ConfigDict(frozen=True)

    kind: NegotiationEventKind
    message: str
    configured: Optional[str] = None
    advertised: tuple[str, ...] = ()
    chosen: Optional[AuthMethod] = None


class AccessToken(BaseModel):
    """An access token value with the metadata the provider returned alongside it."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(repr=False)
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    scope: tuple[str, ...] = ()


class TokenSet(BaseModel):
    """Tokens obtained from one successful authorization code exchange."""

    model_config = ConfigDict(frozen=True)

    access_token: AccessToken
    id_token: str = Field(repr=False)
    refresh_token: Optional[str] = Field(default=None, repr=False)


class OidcCredentials(BaseModel):
    """Credentials holder filled in by :meth:`OidcAuthenticator.validate`.

    ``code`` is set by the caller from the authorization callback; the token
    fields are populated by a successful exchange and left untouched otherwise.
    """

    code: Optional[str] = Field(default=None, repr=False)
    access_token: Optional[AccessToken] = None
    refresh_token: Optional[str] = Field(default=None, repr=False)
    id_token: Optional[str] = Field(default=None, repr=False)
