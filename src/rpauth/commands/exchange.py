"""Exchange command -- trade an authorization code for tokens.

Useful for checking a client registration end to end: paste the ``code``
from a provider redirect and rpauth performs the token request with the
active profile's negotiated client authentication. Tokens are shortened in
the output unless ``--show-tokens`` is given.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from rpauth.commands.negotiate import load_profile_and_metadata
from rpauth.output import emit_record, error, success, suggest, warning


def _redact(value: Optional[str], show: bool) -> Optional[str]:
    if value is None or show:
        return value
    if len(value) <= 12:
        return "***"
    return f"{value[:6]}...{value[-4:]}"


def exchange_command(
    ctx: typer.Context,
    code: str = typer.Option(..., "--code", "-c", help="Authorization code to exchange."),
    callback_url: Optional[str] = typer.Option(
        None,
        "--callback-url",
        help="Redirect URI the code was issued for (defaults to the profile's).",
    ),
    metadata: Optional[str] = typer.Option(
        None, "--metadata", help="Provider metadata file ('-' for stdin)."
    ),
    show_tokens: bool = typer.Option(
        False, "--show-tokens", help="Print tokens in full."
    ),
) -> None:
    """Exchange an authorization code at the provider's token endpoint.

    Example::

        rpauth --profile staging exchange --code SplxlOBeZQQYbYS6WxSbIA
    """
    from rpauth.authenticator import OidcAuthenticator, StaticCallbackUrl
    from rpauth.exceptions import InvalidUsageError, ProviderError, RpauthError
    from rpauth.models import OidcCredentials

    profile, provider = load_profile_and_metadata(ctx, metadata)
    redirect_uri = callback_url or profile.callback_url
    credentials = OidcCredentials(code=code)
    try:
        if not redirect_uri:
            raise InvalidUsageError(
                f'Profile "{profile.name}" has no callback URL; pass --callback-url'
            )
        with OidcAuthenticator(
            profile,
            provider,
            StaticCallbackUrl(redirect_uri),
            listener=lambda event: warning(event.message),
        ) as authenticator:
            method = authenticator.client_authentication.method
            authenticator.validate(credentials, None)
    except RpauthError as exc:
        error(str(exc))
        if isinstance(exc, ProviderError):
            suggest("Authorization codes are single-use; request a fresh one and retry.")
        raise typer.Exit(code=exc.exit_code) from None

    access = credentials.access_token
    result: dict[str, Any] = {
        "profile": profile.name,
        "method": method.value,
        "token_type": access.token_type if access else None,
        "expires_in": access.expires_in if access else None,
        "scope": list(access.scope) if access else [],
        "access_token": _redact(access.value if access else None, show_tokens),
        "refresh_token": _redact(credentials.refresh_token, show_tokens),
        "id_token": _redact(credentials.id_token, show_tokens),
    }
    success("Authorization code exchanged.")
    emit_record(result, title="Token set")
