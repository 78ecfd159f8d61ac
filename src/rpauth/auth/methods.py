"""Built-in client authentication strategies for the client secret methods.

Both strategies present the same :class:`~rpauth.models.ClientIdentity`;
they differ only in where the credentials travel:

- :class:`ClientSecretBasic` -- ``Authorization: Basic`` header, with the
  client id and secret each form-urlencoded before joining, per
  :rfc:`6749` section 2.3.1.
- :class:`ClientSecretPost` -- ``client_id`` and ``client_secret`` fields in
  the request body.
"""

from __future__ import annotations

import base64
from urllib.parse import quote_plus

from rpauth.auth.base import AuthResult, ClientAuthentication
from rpauth.models import AuthMethod


class ClientSecretBasic(ClientAuthentication):
    """Send the client credentials as an HTTP Basic ``Authorization`` header."""

    __slots__ = ()

    auth_method = AuthMethod.CLIENT_SECRET_BASIC

    def apply(self) -> AuthResult:
        user = quote_plus(self.identity.client_id)
        password = quote_plus(self.identity.client_secret.get_secret_value())
        encoded = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
        return AuthResult(headers={"Authorization": f"Basic {encoded}"})


class ClientSecretPost(ClientAuthentication):
    """Send the client credentials as form parameters in the request body."""

    __slots__ = ()

    auth_method = AuthMethod.CLIENT_SECRET_POST

    def apply(self) -> AuthResult:
        return AuthResult(
            form={
                "client_id": self.identity.client_id,
                "client_secret": self.identity.client_secret.get_secret_value(),
            }
        )
