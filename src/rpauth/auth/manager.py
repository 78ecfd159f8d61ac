"""Client authentication registry -- maps auth methods to strategy classes.

The :class:`ClientAuthRegistry` maintains a mapping from
:class:`~rpauth.models.AuthMethod` values to concrete
:class:`~rpauth.auth.base.ClientAuthentication` subclasses and builds a
strategy for a negotiated method. Asking for a method with no registered
strategy is a :class:`~rpauth.exceptions.ConfigurationError`.

For most use cases, call :func:`create_client_authentication`, which uses
the registry returned by :func:`create_default_registry`.
"""

from __future__ import annotations

from rpauth.auth.base import ClientAuthentication
from rpauth.exceptions import ConfigurationError
from rpauth.models import AuthMethod, ClientIdentity


class ClientAuthRegistry:
    """Registry of client authentication strategy classes.

    Example::

        registry = ClientAuthRegistry()
        registry.register(ClientSecretBasic)
        strategy = registry.create(AuthMethod.CLIENT_SECRET_BASIC, identity)
    """

    def __init__(self) -> None:
        self._strategies: dict[AuthMethod, type[ClientAuthentication]] = {}

    def register(self, strategy_cls: type[ClientAuthentication]) -> None:
        """Register a strategy class, keyed by the method it implements.

        A strategy already registered for the same method is replaced.
        """
        self._strategies[strategy_cls.auth_method] = strategy_cls

    def create(self, method: AuthMethod | str, identity: ClientIdentity) -> ClientAuthentication:
        """Build the strategy for *method* bound to *identity*.

        Raises:
            ConfigurationError: If no strategy is registered for *method*.
        """
        strategy_cls = None
        try:
            strategy_cls = self._strategies.get(AuthMethod(method))
        except ValueError:
            pass
        if strategy_cls is None:
            raise ConfigurationError(
                f"Unsupported client authentication method: {_method_name(method)}"
            )
        return strategy_cls(identity)

    def list_methods(self) -> list[AuthMethod]:
        """Return the registered methods, sorted by name."""
        return sorted(self._strategies, key=lambda m: m.value)


def _method_name(method: AuthMethod | str) -> str:
    return method.value if isinstance(method, AuthMethod) else str(method)


def create_default_registry() -> ClientAuthRegistry:
    """Create a :class:`ClientAuthRegistry` pre-loaded with the built-in strategies.

    - ``client_secret_basic`` -- :class:`~rpauth.auth.methods.ClientSecretBasic`
    - ``client_secret_post`` -- :class:`~rpauth.auth.methods.ClientSecretPost`
    """
    from rpauth.auth.methods import ClientSecretBasic, ClientSecretPost

    registry = ClientAuthRegistry()
    registry.register(ClientSecretBasic)
    registry.register(ClientSecretPost)
    return registry


def create_client_authentication(
    method: AuthMethod | str, identity: ClientIdentity
) -> ClientAuthentication:
    """Build a strategy from the default registry.

    Raises:
        ConfigurationError: If *method* is neither ``client_secret_basic``
            nor ``client_secret_post``.
    """
    return create_default_registry().create(method, identity)
