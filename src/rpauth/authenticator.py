"""The OpenID Connect authenticator: construction and validation entry points.

:class:`OidcAuthenticator` is built once per relying-party client. Its
constructor negotiates the client authentication method (see
:mod:`rpauth.auth.negotiator`) and fixes it for the lifetime of the object.
:meth:`OidcAuthenticator.validate` is then called once per inbound
authorization callback; when the credentials carry a code it is exchanged
and the resulting tokens are written into the credentials holder.

The callback URL is computed per request by a :class:`CallbackUrlResolver`
supplied by the web framework integration. :class:`StaticCallbackUrl` covers
the common case of a fixed redirect URI.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from pydantic import SecretStr

from rpauth.auth.base import ClientAuthentication
from rpauth.auth.negotiator import NegotiationListener, negotiate
from rpauth.config import resolve_credential
from rpauth.exchange.exchanger import TokenExchanger, check_token_endpoint
from rpauth.exchange.transport import HttpxTransport, Transport
from rpauth.models import (
    AuthMethod,
    ClientConfig,
    ClientIdentity,
    OidcCredentials,
    ProviderMetadata,
)

logger = logging.getLogger(__name__)


class CallbackUrlResolver(Protocol):
    """Computes the redirect URI for the current request."""

    def compute_callback_url(self, context: Any) -> str:
        ...


class StaticCallbackUrl:
    """A :class:`CallbackUrlResolver` that ignores the request context."""

    def __init__(self, url: str) -> None:
        self.url = url

    def compute_callback_url(self, context: Any) -> str:
        return self.url


class OidcAuthenticator:
    """Negotiates client authentication once and exchanges authorization codes.

    Args:
        config: The client profile (client id, secret source, preferred
            method, timeouts).
        metadata: The provider's metadata; only ``token_endpoint`` and
            ``token_endpoint_auth_methods_supported`` are read.
        callback_resolver: Computes the redirect URI per request.
        transport: Token endpoint transport. Defaults to an
            :class:`~rpauth.exchange.transport.HttpxTransport` built from
            ``config.request``, which :meth:`close` then closes.
        listener: Receives a :class:`~rpauth.models.NegotiationEvent` for
            every negotiation fallback.
        client_secret: The client secret itself. When omitted it is resolved
            from ``config.client_secret_source``.

    Raises:
        ConfigurationError: If the client secret cannot be resolved, the
            token endpoint is not a valid URL, or no supported method can
            be fixed.

    Example::

        authenticator = OidcAuthenticator(
            config, metadata, StaticCallbackUrl("https://app.example.com/cb")
        )
        credentials = OidcCredentials(code="abc123")
        authenticator.validate(credentials, request)
    """

    def __init__(
        self,
        config: ClientConfig,
        metadata: ProviderMetadata,
        callback_resolver: CallbackUrlResolver,
        transport: Optional[Transport] = None,
        listener: Optional[NegotiationListener] = None,
        client_secret: Optional[str] = None,
    ) -> None:
        check_token_endpoint(metadata.token_endpoint)

        identity = ClientIdentity(
            client_id=config.client_id,
            client_secret=SecretStr(
                client_secret
                if client_secret is not None
                else resolve_credential(config.client_secret_source)
            ),
        )
        self._config = config
        self._metadata = metadata
        self._callback_resolver = callback_resolver
        self._listener = listener
        self._identity = identity
        self._client_authentication = negotiate(
            config.client_authentication_method,
            metadata.token_endpoint_auth_methods_supported,
            identity,
            listener=listener,
            strict=config.strict_method,
        )

        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport.from_config(config.request)
        self._exchanger = TokenExchanger(
            metadata.token_endpoint, self._client_authentication, self._transport
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def metadata(self) -> ProviderMetadata:
        return self._metadata

    @property
    def client_authentication(self) -> ClientAuthentication:
        """The strategy fixed at construction. There is no setter."""
        return self._client_authentication

    @property
    def exchanger(self) -> TokenExchanger:
        return self._exchanger

    def validate(self, credentials: OidcCredentials, context: Any) -> None:
        """Exchange the credentials' authorization code and store the tokens.

        Does nothing when ``credentials.code`` is absent. On success the
        access, refresh and identity tokens are written together; on failure
        the holder is left untouched.

        Args:
            credentials: The holder to read the code from and write tokens to.
            context: Request context handed to the callback URL resolver.

        Raises:
            TechnicalError: If the exchange fails for any reason (see
                :meth:`TokenExchanger.exchange
                <rpauth.exchange.exchanger.TokenExchanger.exchange>`).
        """
        code = credentials.code
        if not code:
            logger.debug("No authorization code present; nothing to exchange")
            return

        callback_url = self._callback_resolver.compute_callback_url(context)
        tokens = self._exchanger.exchange(code, callback_url)
        if tokens is None:
            return

        credentials.access_token = tokens.access_token
        credentials.refresh_token = tokens.refresh_token
        credentials.id_token = tokens.id_token

    def renegotiate(self, method: AuthMethod | str | None) -> OidcAuthenticator:
        """Return a new authenticator negotiated with a different preferred method.

        This instance keeps its strategy. The new one shares this instance's
        transport, callback resolver and listener, and does not close the
        transport.
        """
        config = self._config.model_copy(
            update={
                "client_authentication_method": (
                    method.value if isinstance(method, AuthMethod) else method
                )
            }
        )
        return OidcAuthenticator(
            config,
            self._metadata,
            self._callback_resolver,
            transport=self._transport,
            listener=self._listener,
            client_secret=self._identity.client_secret.get_secret_value(),
        )

    def close(self) -> None:
        """Close the transport if this authenticator created it."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            self._transport.close()

    def __enter__(self) -> OidcAuthenticator:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
