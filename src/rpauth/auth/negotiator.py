"""Client authentication method negotiation.

Decides which token endpoint auth method a client uses, from the configured
preference and the methods the provider advertises in its metadata
(``token_endpoint_auth_methods_supported``). Precedence:

1. A configured method outside :data:`SUPPORTED_METHODS` is discarded.
2. With a non-empty provider list: the configured method if the provider
   advertises it, else the first supported method in the provider's order,
   else :data:`DEFAULT_METHOD`.
3. With an empty provider list: the configured method if set, else
   :data:`DEFAULT_METHOD`.

Every fallback is logged at WARNING and reported to the optional listener as
a :class:`~rpauth.models.NegotiationEvent`. Fallbacks are not errors.
Negotiation does no I/O.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from rpauth.auth.base import ClientAuthentication
from rpauth.auth.manager import create_client_authentication
from rpauth.exceptions import ConfigurationError
from rpauth.models import (
    AuthMethod,
    ClientIdentity,
    NegotiationEvent,
    NegotiationEventKind,
)

logger = logging.getLogger(__name__)

SUPPORTED_METHODS: tuple[AuthMethod, ...] = (
    AuthMethod.CLIENT_SECRET_POST,
    AuthMethod.CLIENT_SECRET_BASIC,
)
"""Methods rpauth can authenticate with."""

DEFAULT_METHOD: AuthMethod = AuthMethod.CLIENT_SECRET_BASIC
"""Used when neither configuration nor provider metadata settles the choice."""

NegotiationListener = Callable[[NegotiationEvent], None]


def _as_method(value: AuthMethod | str | None) -> Optional[AuthMethod]:
    if value is None or value == "":
        return None
    try:
        return AuthMethod(value)
    except ValueError:
        return None


def _name(value: AuthMethod | str) -> str:
    return value.value if isinstance(value, AuthMethod) else str(value)


class _Reporter:
    """Sends each fallback to the logger and to the listener, if any."""

    def __init__(self, listener: Optional[NegotiationListener]) -> None:
        self._listener = listener

    def __call__(self, event: NegotiationEvent) -> None:
        logger.warning(event.message)
        if self._listener is not None:
            self._listener(event)


def choose_method(
    configured: AuthMethod | str | None,
    provider_methods: Sequence[AuthMethod | str] | None,
    listener: Optional[NegotiationListener] = None,
    strict: bool = False,
) -> AuthMethod:
    """Decide the client authentication method.

    Args:
        configured: The configured preference, or ``None``. Unknown strings
            are accepted and treated as unsupported.
        provider_methods: The provider's advertised methods, in the
            provider's order. ``None`` is treated as empty.
        listener: Optional callback receiving a
            :class:`~rpauth.models.NegotiationEvent` for every fallback.
        strict: Raise instead of discarding an unsupported configured method.

    Returns:
        One of :data:`SUPPORTED_METHODS`.

    Raises:
        ConfigurationError: If *strict* is set and *configured* is not
            supported.
    """
    report = _Reporter(listener)
    advertised = tuple(_name(m) for m in (provider_methods or ()))

    preferred: Optional[AuthMethod] = None
    if configured is not None and configured != "":
        candidate = _as_method(configured)
        if candidate in SUPPORTED_METHODS:
            preferred = candidate
        elif strict:
            raise ConfigurationError(
                f"Configured authentication method ({_name(configured)}) is not supported. "
                f"Supported: {', '.join(m.value for m in SUPPORTED_METHODS)}"
            )
        else:
            report(NegotiationEvent(
                kind=NegotiationEventKind.CONFIGURED_UNSUPPORTED,
                message=f"Configured authentication method ({_name(configured)}) is not supported.",
                configured=_name(configured),
                advertised=advertised,
            ))

    if advertised:
        advertised_methods = [_as_method(m) for m in advertised]
        if preferred is not None and preferred in advertised_methods:
            return preferred

        first_supported = next(
            (m for m in advertised_methods if m in SUPPORTED_METHODS), None
        )
        if first_supported is not None:
            if preferred is not None:
                report(NegotiationEvent(
                    kind=NegotiationEventKind.PREFERRED_NOT_ADVERTISED,
                    message=(
                        f"Preferred authentication method ({preferred.value}) not supported "
                        f"by provider according to provider metadata ({list(advertised)}). "
                        f"Defaulting to: {first_supported.value}"
                    ),
                    configured=preferred.value,
                    advertised=advertised,
                    chosen=first_supported,
                ))
            return first_supported

        report(NegotiationEvent(
            kind=NegotiationEventKind.NO_SUPPORTED_ADVERTISED,
            message=(
                f"None of the Token endpoint provider metadata authentication methods "
                f"({list(advertised)}) are supported. Defaulting to: {DEFAULT_METHOD.value}"
            ),
            configured=preferred.value if preferred else None,
            advertised=advertised,
            chosen=DEFAULT_METHOD,
        ))
        return DEFAULT_METHOD

    chosen = preferred if preferred is not None else DEFAULT_METHOD
    report(NegotiationEvent(
        kind=NegotiationEventKind.NO_ADVERTISED_METHODS,
        message=(
            "Provider metadata does not provide Token endpoint authentication methods. "
            f"Using: {chosen.value}"
        ),
        configured=preferred.value if preferred else None,
        chosen=chosen,
    ))
    return chosen


def negotiate(
    configured: AuthMethod | str | None,
    provider_methods: Sequence[AuthMethod | str] | None,
    identity: ClientIdentity,
    listener: Optional[NegotiationListener] = None,
    strict: bool = False,
) -> ClientAuthentication:
    """Choose a method and bind it to *identity*.

    See :func:`choose_method` for the decision rules.

    Returns:
        An immutable :class:`~rpauth.auth.base.ClientAuthentication`.

    Raises:
        ConfigurationError: If the chosen method has no strategy, or *strict*
            rejects the configured method.
    """
    method = choose_method(configured, provider_methods, listener=listener, strict=strict)
    logger.info("Using client authentication method %s for client %s", method.value, identity.client_id)
    return create_client_authentication(method, identity)
