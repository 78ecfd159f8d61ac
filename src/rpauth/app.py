"""Typer application and CLI entry point for rpauth.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``profile``, ``negotiate``, ``exchange``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~rpauth.exceptions.RpauthError` instances exit with their own exit
code; any other exception is written to a crash log under the data
directory.

See Also:
    :mod:`rpauth.config`: Profile resolution.
    :mod:`rpauth.output`: The reporter installed in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from rpauth import __version__
from rpauth.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="rpauth",
    help="OpenID Connect relying-party client authentication and code exchange.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from rpauth.commands.exchange import exchange_command  # noqa: E402
from rpauth.commands.negotiate import negotiate_command  # noqa: E402
from rpauth.commands.profile import profile_app  # noqa: E402

app.add_typer(profile_app, name="profile", help="Client profile management.")
app.command("negotiate")(negotiate_command)
app.command("exchange")(exchange_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"rpauth {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route the ``rpauth`` logger to stderr via Rich when *verbose*.

    Without ``--verbose`` the logger gets a :class:`logging.NullHandler`;
    commands report negotiation fallbacks themselves.
    """
    from rich.logging import RichHandler

    from rpauth.output import get_reporter

    package_logger = logging.getLogger("rpauth")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)

    if verbose:
        handler: logging.Handler = RichHandler(
            console=get_reporter().stderr_console,
            show_path=False,
            rich_tracebacks=True,
        )
        package_logger.setLevel(logging.DEBUG)
    else:
        handler = logging.NullHandler()
        package_logger.setLevel(logging.WARNING)
    package_logger.addHandler(handler)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the process-wide :class:`~rpauth.output.Reporter` and the
    ``rpauth`` logger from CLI flags, and stores shared options
    (``profile``, ``force``) in ``ctx.obj`` for sub-commands.
    """
    from rpauth.output import OutputFormat, Reporter, set_reporter

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_reporter(
        Reporter(format=fmt, no_color=no_color, quiet=quiet, output_file=output_file)
    )
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from rpauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``rpauth`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from rpauth.exceptions import RpauthError
        from rpauth.output import error

        if isinstance(exc, RpauthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
