"""Negotiate command -- preview the client authentication method.

Runs method negotiation for the active profile against its provider
metadata without touching the network or the client secret, and reports
the chosen method together with every fallback that led to it.
"""

from __future__ import annotations

from typing import Optional

import typer

from rpauth.output import emit_record, error, warning


def load_profile_and_metadata(
    ctx: typer.Context,
    metadata_source: Optional[str] = None,
):  # noqa: ANN202
    """Load the active :class:`ClientConfig` and its :class:`ProviderMetadata`.

    The profile is resolved from the root ``--profile`` option (see
    :func:`~rpauth.config.resolve_profile_name`). *metadata_source*
    overrides the profile's own ``metadata_source``.

    Returns:
        A ``(ClientConfig, ProviderMetadata)`` tuple.

    Raises:
        typer.Exit: With the error's exit code when the profile or the
            metadata cannot be loaded.
    """
    from rpauth.config import load_profile, resolve_profile_name
    from rpauth.exceptions import ConfigurationError, RpauthError
    from rpauth.metadata import load_provider_metadata

    cli_profile = ctx.obj.get("profile") if ctx.obj else None
    try:
        profile = load_profile(resolve_profile_name(cli_profile))
        source = metadata_source or profile.metadata_source
        if not source:
            raise ConfigurationError(
                f'Profile "{profile.name}" has no provider metadata; pass --metadata'
            )
        metadata = load_provider_metadata(source)
    except RpauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    return profile, metadata


def negotiate_command(
    ctx: typer.Context,
    method: Optional[str] = typer.Option(
        None,
        "--method",
        "-m",
        help="Preferred method to try instead of the profile's.",
    ),
    metadata: Optional[str] = typer.Option(
        None, "--metadata", help="Provider metadata file ('-' for stdin)."
    ),
) -> None:
    """Show which client authentication method the active profile would use.

    Example::

        rpauth negotiate --method client_secret_post --metadata idp.json
    """
    from rpauth.auth.negotiator import choose_method
    from rpauth.exceptions import RpauthError
    from rpauth.models import NegotiationEvent

    profile, provider = load_profile_and_metadata(ctx, metadata)
    configured = method if method is not None else profile.client_authentication_method

    events: list[NegotiationEvent] = []
    try:
        chosen = choose_method(
            configured,
            provider.token_endpoint_auth_methods_supported,
            listener=events.append,
            strict=profile.strict_method,
        )
    except RpauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    for event in events:
        warning(event.message)

    emit_record(
        {
            "profile": profile.name,
            "configured": configured,
            "advertised": list(provider.token_endpoint_auth_methods_supported),
            "chosen": chosen.value,
            "fallbacks": [event.kind.value for event in events],
        },
        title="Client authentication",
    )
