"""Load OpenID provider metadata documents from a local file or stdin.

Provider metadata is normally fetched and cached by the surrounding
application. This module covers the case where an operator has the document
on disk (exported from the provider's ``.well-known/openid-configuration``
or written by hand) and wants rpauth to use it as-is. Both JSON and YAML
are accepted, with format detection by extension and then by content.

The public function is :func:`load_provider_metadata`. It deliberately does
not fetch URLs; discovery belongs to the caller.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from rpauth.exceptions import ConfigurationError
from rpauth.models import ProviderMetadata


def load_provider_metadata(source: str) -> ProviderMetadata:
    """Load provider metadata from a file path, or stdin when *source* is ``'-'``.

    Args:
        source: A local file path (``~`` is expanded) or ``'-'``.

    Returns:
        The validated :class:`~rpauth.models.ProviderMetadata`.

    Raises:
        ConfigurationError: If the document cannot be read, parsed, or lacks
            a ``token_endpoint``.
    """
    if source == "-":
        raw = _load_from_stdin()
    else:
        raw = _load_from_file(source)
    return parse_provider_metadata(raw)


def parse_provider_metadata(raw: dict[str, Any]) -> ProviderMetadata:
    """Validate an already-decoded metadata document."""
    try:
        return ProviderMetadata.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid provider metadata: {exc}") from exc


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise ConfigurationError(f"Failed to read metadata from stdin: {exc}") from exc

    if not content.strip():
        raise ConfigurationError("No metadata received from stdin")

    return _parse_content(content)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a metadata document, using the file extension as a format hint."""
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigurationError(f"Metadata file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read metadata file {path}: {exc}") from exc

    if not content.strip():
        raise ConfigurationError(f"Metadata file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and gives
    better error messages.

    Raises:
        ConfigurationError: If the content cannot be parsed as either format,
            or does not decode to a mapping.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise ConfigurationError(
                    "Provider metadata must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise ConfigurationError(f"Invalid JSON metadata: {exc}") from exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise ConfigurationError(
                "Provider metadata must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse provider metadata as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise ConfigurationError(msg)
