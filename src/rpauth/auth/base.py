"""Abstract base class for token endpoint client authentication strategies.

This module defines the two foundational types of the auth subsystem:

- :class:`AuthResult` -- a plain container for the HTTP headers and form
  fields a strategy contributes to a token request.
- :class:`ClientAuthentication` -- the abstract base class every client
  authentication method must extend.

A strategy is bound to one :class:`~rpauth.models.ClientIdentity` at
construction and exposes no way to change it afterwards, so a single
instance can be shared by concurrent token exchanges.

To implement a new method, subclass :class:`ClientAuthentication`, set the
:attr:`~ClientAuthentication.auth_method` class attribute, implement
:meth:`~ClientAuthentication.apply`, and register the class with a
:class:`~rpauth.auth.manager.ClientAuthRegistry`.

See Also:
    :mod:`rpauth.auth.methods` for the built-in strategies.
    :mod:`rpauth.auth.negotiator` for how a method is chosen.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from rpauth.models import AuthMethod, ClientIdentity


class AuthResult:
    """Container for client authentication artifacts to merge into a token request.

    Args:
        headers: HTTP headers to add (e.g. ``{"Authorization": "Basic ..."}``).
        form: Form fields to add to the ``application/x-www-form-urlencoded``
            body (e.g. ``{"client_id": "...", "client_secret": "..."}``).

    Example::

        result = AuthResult(form={"client_id": "app"})
        assert result.headers == {}
    """

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        form: dict[str, str] | None = None,
    ):
        self.headers = headers or {}
        self.form = form or {}


class ClientAuthentication(ABC):
    """Abstract base class for client authentication strategies.

    Args:
        identity: The client identifier and secret this strategy presents.
    """

    __slots__ = ("_identity",)

    auth_method: ClassVar[AuthMethod]
    """The method a concrete subclass implements; also its registry key."""

    def __init__(self, identity: ClientIdentity) -> None:
        self._identity = identity

    @property
    def method(self) -> AuthMethod:
        return self.auth_method

    @abstractmethod
    def apply(self) -> AuthResult:
        """Return the headers and form fields that authenticate the client.

        Called once per token request. Implementations must not mutate any
        state, as one strategy instance serves concurrent requests.
        """
        ...

    @property
    def identity(self) -> ClientIdentity:
        return self._identity

    @property
    def client_id(self) -> str:
        return self._identity.client_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClientAuthentication):
            return NotImplemented
        return self.method == other.method and self._identity == other._identity

    def __hash__(self) -> int:
        return hash((self.method, self._identity.client_id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(client_id={self.client_id!r})"
