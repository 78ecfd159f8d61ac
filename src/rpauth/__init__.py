"""rpauth -- OpenID Connect relying-party token exchange.

This package negotiates the client authentication method a relying party
uses at an OpenID provider's token endpoint, and exchanges authorization
codes for token sets using that method.

Typical usage::

    from rpauth import OidcAuthenticator, OidcCredentials, StaticCallbackUrl

    authenticator = OidcAuthenticator(config, metadata, StaticCallbackUrl(url))
    credentials = OidcCredentials(code=request.args.get("code"))
    authenticator.validate(credentials, request)
    # credentials.access_token / .refresh_token / .id_token are now populated.

Modules:
    authenticator: Construction and validation entry points.
    auth: Client authentication strategies and method negotiation.
    exchange: Token request building, transport, and response parsing.
    metadata: Provider metadata document loading (JSON/YAML).
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from rpauth.authenticator import (  # noqa: E402
    CallbackUrlResolver,
    OidcAuthenticator,
    StaticCallbackUrl,
)
from rpauth.models import (  # noqa: E402
    AuthMethod,
    ClientConfig,
    OidcCredentials,
    ProviderMetadata,
    TokenSet,
)

__all__ = [
    "__version__",
    "AuthMethod",
    "CallbackUrlResolver",
    "ClientConfig",
    "OidcAuthenticator",
    "OidcCredentials",
    "ProviderMetadata",
    "StaticCallbackUrl",
    "TokenSet",
]
