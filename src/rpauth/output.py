"""Terminal reporting for the rpauth CLI.

Data and diagnostics never share a stream: the records a command produces
(a profile, a negotiation report, a token set, the profile listing) go to
stdout or the ``--output`` file, while status lines, warnings and errors go
to stderr. ``NO_COLOR`` and ``TERM=dumb`` are honoured like ``--no-color``.

Commands talk to the process-wide :class:`Reporter` through the
module-level helpers (:func:`emit_record`, :func:`warning`, ...); the root
callback in :mod:`rpauth.app` installs it with :func:`set_reporter`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence

from rich.console import Console
from rich.table import Table


class OutputFormat(str, Enum):
    """How records are rendered. ``AUTO`` means Rich on a colour TTY, plain otherwise."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (style, prefix, hidden by --quiet)
_LEVELS: dict[str, tuple[str, str, bool]] = {
    "info": ("", "", True),
    "success": ("green", "", True),
    "suggest": ("dim", "→ ", True),
    "warning": ("yellow", "Warning: ", False),
    "error": ("bold red", "Error: ", False),
}


def _cell(value: Any) -> str:
    """Flatten one record value into a single line of text."""
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value) or "-"
    if isinstance(value, Mapping):
        return json.dumps(value, sort_keys=True)
    return str(value)


class Reporter:
    """Renders CLI records and diagnostics.

    Args:
        format: Record format; ``AUTO`` is resolved once, here.
        no_color: Strip Rich styling from both streams.
        quiet: Drop ``info``, ``success`` and ``suggest`` lines.
        output_file: Write records to this path (always as JSON) instead of
            stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._output_file = output_file
        if format == OutputFormat.AUTO:
            use_rich = _stdout_is_tty() and not self._no_color
            format = OutputFormat.RICH if use_rich else OutputFormat.PLAIN
        self._format = format
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def stderr_console(self) -> Console:
        """The diagnostics console, shared with the ``--verbose`` log handler."""
        return self._stderr

    # -- records (stdout) ---------------------------------------------

    def emit_record(self, record: Mapping[str, Any], title: str) -> None:
        """Write one named record, e.g. a negotiation report or a token set."""
        if self._output_file or self._format == OutputFormat.JSON:
            self._write_json(dict(record))
        elif self._format == OutputFormat.PLAIN:
            self._write_lines(f"{key}\t{_cell(value)}" for key, value in record.items())
        else:
            table = Table(title=title, show_header=False, title_justify="left")
            table.add_column(style="bold cyan")
            table.add_column()
            for key, value in record.items():
                table.add_row(key, _cell(value))
            self._stdout.print(table)

    def emit_rows(
        self, columns: Sequence[str], rows: Sequence[Sequence[str]], title: str
    ) -> None:
        """Write a listing; JSON output is an array of objects keyed by *columns*."""
        if self._output_file or self._format == OutputFormat.JSON:
            self._write_json([dict(zip(columns, row)) for row in rows])
        elif self._format == OutputFormat.PLAIN:
            self._write_lines(["\t".join(columns), *("\t".join(row) for row in rows)])
        else:
            table = Table(title=title, header_style="bold cyan")
            for column in columns:
                table.add_column(column)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # -- diagnostics (stderr) -----------------------------------------

    def report(self, level: str, message: str) -> None:
        """Print *message* on stderr at *level* (see ``_LEVELS``)."""
        style, prefix, quietable = _LEVELS[level]
        if quietable and self._quiet:
            return
        text = f"{prefix}{message}"
        if self._no_color:
            print(text, file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[{style}]{text}[/{style}]" if style else text)

    def _write_json(self, data: Any) -> None:
        text = json.dumps(data, indent=2, ensure_ascii=False)
        if self._output_file:
            with open(self._output_file, "w", encoding="utf-8") as f:
                f.write(text + "\n")
        else:
            print(text, file=sys.stdout, flush=True)

    def _write_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            print(line, file=sys.stdout, flush=True)


def _stdout_is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _color_disabled_by_env() -> bool:
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_reporter: Optional[Reporter] = None


def get_reporter() -> Reporter:
    """Return the installed :class:`Reporter`, creating a default one on first use."""
    global _reporter
    if _reporter is None:
        _reporter = Reporter()
    return _reporter


def set_reporter(reporter: Optional[Reporter]) -> None:
    """Install *reporter*; ``None`` drops it so the next call builds a fresh one."""
    global _reporter
    _reporter = reporter


def emit_record(record: Mapping[str, Any], title: str) -> None:
    get_reporter().emit_record(record, title)


def emit_rows(columns: Sequence[str], rows: Sequence[Sequence[str]], title: str) -> None:
    get_reporter().emit_rows(columns, rows, title)


def info(message: str) -> None:
    get_reporter().report("info", message)


def success(message: str) -> None:
    get_reporter().report("success", message)


def suggest(message: str) -> None:
    get_reporter().report("suggest", message)


def warning(message: str) -> None:
    get_reporter().report("warning", message)


def error(message: str) -> None:
    get_reporter().report("error", message)
