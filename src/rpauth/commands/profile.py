"""Profile commands -- manage relying-party client profiles.

Provides the ``rpauth profile`` sub-command group to create, list,
inspect and delete client profiles. The client secret is never written to
the profile; only its source descriptor is.

Typical workflow::

    rpauth profile add staging --client-id my-app --secret-source env:MY_APP_SECRET \\
        --metadata ~/idp/staging.json --callback-url https://app.example.com/cb
    rpauth profile list
    rpauth profile show staging
"""

from __future__ import annotations

from typing import Optional

import typer

from rpauth.output import emit_record, emit_rows, error, info, success, suggest


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name."),
    client_id: str = typer.Option(..., "--client-id", help="OAuth2 client identifier."),
    secret_source: str = typer.Option(
        "prompt",
        "--secret-source",
        "-s",
        help="Client secret source: env:VAR, file:/path, prompt.",
    ),
    method: Optional[str] = typer.Option(
        None,
        "--method",
        "-m",
        help="Preferred auth method: client_secret_basic, client_secret_post.",
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Fail instead of downgrading an unsupported method."
    ),
    callback_url: Optional[str] = typer.Option(
        None, "--callback-url", help="Redirect URI registered with the provider."
    ),
    metadata: Optional[str] = typer.Option(
        None, "--metadata", help="Path to the provider metadata document (JSON/YAML)."
    ),
    connect_timeout: float = typer.Option(0.5, "--connect-timeout", help="Seconds."),
    read_timeout: float = typer.Option(5.0, "--read-timeout", help="Seconds."),
    insecure: bool = typer.Option(
        False, "--insecure", help="Skip TLS certificate verification."
    ),
) -> None:
    """Create or replace a client profile.

    Example::

        rpauth profile add staging --client-id my-app --secret-source env:SECRET
    """
    from rpauth.config import profile_exists, save_profile
    from rpauth.models import ClientConfig, RequestConfig

    replacing = profile_exists(name)
    profile = ClientConfig(
        name=name,
        client_id=client_id,
        client_secret_source=secret_source,
        client_authentication_method=method,
        strict_method=strict,
        callback_url=callback_url,
        metadata_source=metadata,
        request=RequestConfig(
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            verify_ssl=not insecure,
        ),
    )
    save_profile(profile)
    success(f'Profile "{name}" {"updated" if replacing else "created"}.')
    if metadata is None:
        suggest("Point it at provider metadata with --metadata before exchanging codes.")


@profile_app.command("list")
def profile_list() -> None:
    """List all client profiles.

    Profiles that fail to load are shown with an ``error`` status.
    """
    from rpauth.config import list_profiles, load_profile

    profiles = list_profiles()
    if not profiles:
        info("No profiles configured.")
        suggest("Create one: rpauth profile add <name> --client-id <id>")
        return

    headers = ["Profile", "Client ID", "Method", "Metadata"]
    rows: list[list[str]] = []
    for name in profiles:
        try:
            profile = load_profile(name)
        except Exception:
            rows.append([name, "error", "-", "-"])
            continue
        rows.append([
            name,
            profile.client_id,
            profile.client_authentication_method or "(negotiated)",
            profile.metadata_source or "-",
        ])

    emit_rows(headers, rows, title="Client Profiles")


@profile_app.command("show")
def profile_show(
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Print a profile as structured data."""
    from rpauth.config import load_profile
    from rpauth.exceptions import RpauthError

    try:
        profile = load_profile(name)
    except RpauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    emit_record(profile.model_dump(mode="json"), title=f"Profile {name}")


@profile_app.command("remove")
def profile_remove(
    ctx: typer.Context,
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Delete a profile. Asks for confirmation unless ``--force`` is active."""
    from rpauth.config import delete_profile, profile_exists
    from rpauth.exit_codes import EXIT_INVALID_USAGE

    if not profile_exists(name):
        error(f'Profile "{name}" does not exist.')
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm(f'Delete profile "{name}"?')
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    delete_profile(name)
    success(f'Profile "{name}" removed.')
