"""Authorization code token request construction.

:class:`TokenRequest` combines the provider's token endpoint, the client's
fixed :class:`~rpauth.auth.base.ClientAuthentication`, and an
:class:`AuthorizationCodeGrant` into an :class:`httpx.Request` ready for a
:class:`~rpauth.exchange.transport.Transport`.

The callback URL must be an absolute URI; anything else raises
:class:`~rpauth.exceptions.UriSyntaxError` before a request is built.
"""

from __future__ import annotations

import httpx

from rpauth.auth.base import ClientAuthentication
from rpauth.exceptions import UriSyntaxError

_WEB_SCHEMES = ("http", "https")


def parse_callback_url(value: str) -> httpx.URL:
    """Parse *value* as an absolute URI.

    Any scheme is accepted, so private-use redirect URIs of native apps
    (``com.example.app:/oauth2redirect``) and URNs pass. Only ``http`` and
    ``https`` URIs must also name a host.

    Raises:
        UriSyntaxError: If *value* contains whitespace or control characters,
            cannot be parsed, has no scheme, or is a web URL without a host.
    """
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in value):
        raise UriSyntaxError(value, "contains whitespace or control characters")
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as exc:
        raise UriSyntaxError(value, str(exc)) from exc
    if not url.scheme:
        raise UriSyntaxError(value, "not an absolute URI")
    if url.scheme in _WEB_SCHEMES and not url.host:
        raise UriSyntaxError(value, f"{url.scheme} URI has no host")
    return url


class AuthorizationCodeGrant:
    """The ``authorization_code`` grant (:rfc:`6749` section 4.1.3).

    Args:
        code: The authorization code received on the callback.
        redirect_uri: The callback URL the code was issued for. Validated
            with :func:`parse_callback_url`.

    Raises:
        UriSyntaxError: If *redirect_uri* is malformed.
    """

    grant_type = "authorization_code"

    def __init__(self, code: str, redirect_uri: str) -> None:
        parse_callback_url(redirect_uri)
        self.code = code
        self.redirect_uri = redirect_uri

    def to_form(self) -> dict[str, str]:
        return {
            "grant_type": self.grant_type,
            "code": self.code,
            "redirect_uri": self.redirect_uri,
        }

    def __repr__(self) -> str:
        return f"AuthorizationCodeGrant(redirect_uri={self.redirect_uri!r})"


class TokenRequest:
    """A token endpoint request authenticated with a client authentication strategy."""

    def __init__(
        self,
        endpoint: str,
        client_authentication: ClientAuthentication,
        grant: AuthorizationCodeGrant,
    ) -> None:
        self.endpoint = endpoint
        self.client_authentication = client_authentication
        self.grant = grant

    def to_http_request(self) -> httpx.Request:
        """Build the form-encoded ``POST`` for the token endpoint."""
        auth = self.client_authentication.apply()
        form = self.grant.to_form()
        form.update(auth.form)
        headers = {"Accept": "application/json"}
        headers.update(auth.headers)
        return httpx.Request("POST", self.endpoint, headers=headers, data=form)
