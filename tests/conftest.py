"""Shared test fixtures for rpauth.

Provides reusable fixtures for provider metadata documents, client
profiles, isolated config environments, output state, and the CLI runner.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from rpauth.models import ClientConfig, ClientIdentity, ProviderMetadata, RequestConfig
from rpauth.output import set_reporter


TOKEN_ENDPOINT = "https://op.example.com/token"
CALLBACK_URL = "https://rp.example.com/callback"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_reporter_between_tests() -> None:
    """Drop the installed Reporter after every test.

    A Reporter caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    set_reporter(None)


# ---------------------------------------------------------------------------
# Provider metadata
# ---------------------------------------------------------------------------


@pytest.fixture
def metadata_raw() -> dict[str, Any]:
    """A minimal discovery document advertising both secret methods."""
    return {
        "issuer": "https://op.example.com",
        "authorization_endpoint": "https://op.example.com/authorize",
        "token_endpoint": TOKEN_ENDPOINT,
        "token_endpoint_auth_methods_supported": [
            "client_secret_post",
            "client_secret_basic",
        ],
    }


@pytest.fixture
def metadata(metadata_raw: dict[str, Any]) -> ProviderMetadata:
    return ProviderMetadata.model_validate(metadata_raw)


@pytest.fixture
def metadata_file(tmp_path: Path, metadata_raw: dict[str, Any]) -> Path:
    path = tmp_path / "op-metadata.json"
    path.write_text(json.dumps(metadata_raw), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def identity() -> ClientIdentity:
    return ClientIdentity(client_id="rp-client", client_secret="s3cret")


@pytest.fixture
def client_config() -> ClientConfig:
    """A client profile whose secret comes from an inline literal."""
    return ClientConfig(
        name="test-rp",
        client_id="rp-client",
        client_secret_source="literal:s3cret",
        callback_url=CALLBACK_URL,
        request=RequestConfig(connect_timeout=0.5, read_timeout=5.0),
    )


# ---------------------------------------------------------------------------
# Token endpoint fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def token_body() -> dict[str, Any]:
    """A successful OpenID Connect token response body."""
    return {
        "access_token": "at-123",
        "token_type": "Bearer",
        "expires_in": 3600,
        "refresh_token": "rt-123",
        "id_token": "eyJhbGciOiJSUzI1NiJ9.eyJzdWIiOiIxIn0.sig",
        "scope": "openid profile",
    }


@pytest.fixture
def recording_handler() -> Callable[..., Any]:
    """Factory for an ``httpx.MockTransport`` handler that records requests.

    Usage::

        handler, seen = recording_handler(httpx.Response(200, json=body))
    """

    def _factory(response: httpx.Response):  # noqa: ANN202
        seen: list[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return response

        return _handler, seen

    return _factory


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Forces XDG path resolution, points XDG_CONFIG_HOME and XDG_DATA_HOME
    at subdirectories of tmp_path, and clears RPAUTH_PROFILE.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("rpauth.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("RPAUTH_PROFILE", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
