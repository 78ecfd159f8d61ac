"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for rpauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.rpauth/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_profiles_dir`.
* **Profiles** -- One JSON file per relying-party client, each deserialised
  into a :class:`~rpauth.models.ClientConfig`. Managed via
  :func:`load_profile`, :func:`save_profile`, :func:`delete_profile`.
* **Precedence resolution** -- :func:`resolve_profile_name` picks the active
  profile from the CLI flag, the ``RPAUTH_PROFILE`` environment variable, or
  the only profile on disk.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, interactive prompts, or inline literals.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from rpauth.exceptions import ConfigurationError
from rpauth.models import ClientConfig

_APP_NAME = "rpauth"
_PROFILE_ENV_VAR = "RPAUTH_PROFILE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/rpauth/`` (default ``~/.config/rpauth/``).
    On macOS/Windows: ``~/.rpauth/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/rpauth/`` (default ``~/.local/share/rpauth/``).
    On macOS/Windows: ``~/.rpauth/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return the profiles directory (``<config_dir>/profiles/``), creating it if necessary."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    On success the temp file is renamed over *path*; on any failure the temp
    file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Profiles ---


def _profile_path(name: str) -> Path:
    """Path to a named profile's JSON file."""
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return all profile names found in the profiles directory, sorted alphabetically."""
    profiles_dir = get_profiles_dir()
    return sorted(
        p.stem for p in profiles_dir.glob("*.json") if p.is_file()
    )


def load_profile(name: str) -> ClientConfig:
    """Load and validate a client profile from disk.

    Args:
        name: Profile name (corresponds to ``<name>.json`` in the profiles
            directory).

    Returns:
        The deserialised :class:`~rpauth.models.ClientConfig`.

    Raises:
        ConfigurationError: If the profile file does not exist, contains
            invalid JSON, or fails Pydantic validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigurationError(f"Profile '{name}' not found at {path}")
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return ClientConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: ClientConfig) -> None:
    """Persist a profile atomically to the profiles directory.

    Args:
        profile: The profile to save. The file name is derived from
            ``profile.name``.
    """
    data = profile.model_dump(mode="json")
    _atomic_write(_profile_path(profile.name), json.dumps(data, indent=2) + "\n")


def delete_profile(name: str) -> None:
    """Delete a profile's JSON file from disk.

    Raises:
        ConfigurationError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigurationError(f"Profile '{name}' not found at {path}")
    path.unlink()


def profile_exists(name: str) -> bool:
    """Check whether a profile file exists on disk."""
    return _profile_path(name).is_file()


# --- Precedence resolution ---


def resolve_profile_name(cli_profile: Optional[str] = None) -> str:
    """Resolve the active profile name.

    Precedence (high to low):
        1. CLI flag (``cli_profile``)
        2. Environment variable ``RPAUTH_PROFILE``
        3. The only profile on disk, when exactly one exists

    Returns:
        The resolved profile name.

    Raises:
        ConfigurationError: If no profile can be determined.
    """
    if cli_profile:
        return cli_profile
    env_profile = os.environ.get(_PROFILE_ENV_VAR)
    if env_profile:
        return env_profile
    profiles = list_profiles()
    if len(profiles) == 1:
        return profiles[0]
    if not profiles:
        raise ConfigurationError(
            "No profiles configured. Create one with 'rpauth profile add'."
        )
    raise ConfigurationError(
        f"Several profiles exist ({', '.join(profiles)}); "
        f"select one with --profile or {_PROFILE_ENV_VAR}"
    )


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)
        - ``"literal:VALUE"`` -- the value itself, for programmatic callers

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigurationError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigurationError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        file_path = source[5:]
        path = Path(file_path).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigurationError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigurationError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter client secret: ")

    if source.startswith("literal:"):
        return source[8:]

    raise ConfigurationError(f"Unknown credential source format: {source}")
