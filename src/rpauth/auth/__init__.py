"""Token endpoint client authentication for rpauth.

This package decides how a relying party proves its identity to the
provider's token endpoint and produces the request artifacts for it.

The main entry points are:

- :func:`negotiate` -- choose a method from configuration and provider
  metadata and bind it to a :class:`~rpauth.models.ClientIdentity`.
- :class:`ClientAuthentication` -- abstract base of the resulting strategy.
- :class:`ClientSecretBasic` / :class:`ClientSecretPost` -- the built-in
  strategies.
- :class:`ClientAuthRegistry` -- maps methods to strategy classes.

Typical usage::

    from rpauth.auth import negotiate

    strategy = negotiate("client_secret_post", metadata.token_endpoint_auth_methods_supported, identity)
    auth_result = strategy.apply()
    # auth_result.headers / .form are ready to merge into the token request.
"""

from rpauth.auth.base import AuthResult, ClientAuthentication
from rpauth.auth.manager import (
    ClientAuthRegistry,
    create_client_authentication,
    create_default_registry,
)
from rpauth.auth.methods import ClientSecretBasic, ClientSecretPost
from rpauth.auth.negotiator import (
    DEFAULT_METHOD,
    SUPPORTED_METHODS,
    NegotiationListener,
    choose_method,
    negotiate,
)

__all__ = [
    "AuthResult",
    "ClientAuthentication",
    "ClientAuthRegistry",
    "ClientSecretBasic",
    "ClientSecretPost",
    "DEFAULT_METHOD",
    "NegotiationListener",
    "SUPPORTED_METHODS",
    "choose_method",
    "create_client_authentication",
    "create_default_registry",
    "negotiate",
]
