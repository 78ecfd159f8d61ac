"""CLI tests for the profile, negotiate and exchange commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from rpauth.app import app
from rpauth.config import load_profile, profile_exists, save_profile
from rpauth.exchange.transport import HttpxTransport
from rpauth.models import ClientConfig


def _run(runner: CliRunner, args: list[str], **kwargs: Any):  # noqa: ANN202
    return runner.invoke(app, ["--no-color", *args], **kwargs)


def _json_payload(text: str) -> Any:
    """Decode the JSON document in *text*, skipping any diagnostics before it."""
    start = min(i for i in (text.find("{"), text.find("[")) if i >= 0)
    return json.loads(text[start:])


def _route_token_requests(monkeypatch: pytest.MonkeyPatch, response: httpx.Response) -> list[httpx.Request]:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response

    def from_config(cls, config, transport=None):  # noqa: ANN001, ANN202
        return cls(transport=httpx.MockTransport(handler))

    monkeypatch.setattr(HttpxTransport, "from_config", classmethod(from_config))
    return seen


@pytest.fixture
def staging(isolated_config: Path, metadata_file: Path) -> ClientConfig:
    profile = ClientConfig(
        name="staging",
        client_id="rp-client",
        client_secret_source="literal:s3cret",
        callback_url="https://app/cb",
        metadata_source=str(metadata_file),
    )
    save_profile(profile)
    return profile


class TestRoot:
    def test_version(self, cli_runner: CliRunner) -> None:
        result = _run(cli_runner, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("rpauth ")


class TestProfileCommands:
    def test_add_list_show_remove(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _run(
            cli_runner,
            [
                "profile", "add", "staging",
                "--client-id", "rp-client",
                "--secret-source", "env:RP_SECRET",
                "--method", "client_secret_post",
                "--callback-url", "https://app/cb",
                "--metadata", "/tmp/op.json",
                "--read-timeout", "10",
            ],
        )
        assert result.exit_code == 0, result.output
        assert 'Profile "staging" created.' in result.output

        stored = load_profile("staging")
        assert stored.client_secret_source == "env:RP_SECRET"
        assert stored.client_authentication_method == "client_secret_post"
        assert stored.request.read_timeout == 10.0
        assert stored.request.connect_timeout == 0.5

        result = _run(cli_runner, ["--json", "--quiet", "profile", "list"])
        assert result.exit_code == 0, result.output
        assert _json_payload(result.stdout) == [
            {
                "Profile": "staging",
                "Client ID": "rp-client",
                "Method": "client_secret_post",
                "Metadata": "/tmp/op.json",
            }
        ]

        result = _run(cli_runner, ["--json", "profile", "show", "staging"])
        assert result.exit_code == 0, result.output
        shown = _json_payload(result.stdout)
        assert shown["client_id"] == "rp-client"
        assert shown["callback_url"] == "https://app/cb"

        result = _run(cli_runner, ["--force", "profile", "remove", "staging"])
        assert result.exit_code == 0, result.output
        assert not profile_exists("staging")

    def test_add_existing_reports_update(self, cli_runner: CliRunner, staging: ClientConfig) -> None:
        result = _run(
            cli_runner,
            ["profile", "add", "staging", "--client-id", "other", "--metadata", "x.json"],
        )
        assert result.exit_code == 0, result.output
        assert 'Profile "staging" updated.' in result.output
        assert load_profile("staging").client_id == "other"

    def test_list_empty(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _run(cli_runner, ["profile", "list"])
        assert result.exit_code == 0
        assert "No profiles configured." in result.output

    def test_show_missing(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _run(cli_runner, ["profile", "show", "ghost"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_remove_missing(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _run(cli_runner, ["profile", "remove", "ghost"])
        assert result.exit_code == 2

    def test_remove_cancelled(self, cli_runner: CliRunner, staging: ClientConfig) -> None:
        result = _run(cli_runner, ["profile", "remove", "staging"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled." in result.output
        assert profile_exists("staging")


class TestNegotiateCommand:
    def test_clean_choice(self, cli_runner: CliRunner, staging: ClientConfig) -> None:
        result = _run(cli_runner, ["--json", "negotiate", "--method", "client_secret_basic"])
        assert result.exit_code == 0, result.output
        payload = _json_payload(result.stdout)
        assert payload["chosen"] == "client_secret_basic"
        assert payload["fallbacks"] == []
        assert "Warning" not in result.output

    def test_unsupported_method_downgraded(self, cli_runner: CliRunner, staging: ClientConfig) -> None:
        result = _run(cli_runner, ["--json", "negotiate", "--method", "X"])
        assert result.exit_code == 0, result.output
        assert "Configured authentication method (X) is not supported." in result.output
        payload = _json_payload(result.stdout)
        assert payload["chosen"] == "client_secret_post"
        assert payload["fallbacks"] == ["configured_unsupported"]

    def test_strict_profile_rejects(
        self, cli_runner: CliRunner, staging: ClientConfig
    ) -> None:
        save_profile(staging.model_copy(update={"strict_method": True}))
        result = _run(cli_runner, ["negotiate", "--method", "private_key_jwt"])
        assert result.exit_code == 1
        assert "not supported" in result.output

    def test_metadata_override(
        self, cli_runner: CliRunner, staging: ClientConfig, tmp_path: Path
    ) -> None:
        other = tmp_path / "other.json"
        other.write_text(
            json.dumps({"token_endpoint": "https://op.example.com/token"}), encoding="utf-8"
        )
        result = _run(cli_runner, ["--json", "negotiate", "--metadata", str(other)])
        assert result.exit_code == 0, result.output
        payload = _json_payload(result.stdout)
        assert payload["chosen"] == "client_secret_basic"
        assert payload["fallbacks"] == ["no_advertised_methods"]

    def test_no_profiles(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _run(cli_runner, ["negotiate"])
        assert result.exit_code == 1
        assert "No profiles configured" in result.output

    def test_profile_without_metadata(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        save_profile(ClientConfig(name="bare", client_id="rp-client"))
        result = _run(cli_runner, ["--profile", "bare", "negotiate"])
        assert result.exit_code == 1
        assert "--metadata" in result.output


class TestExchangeCommand:
    def test_success_redacts_tokens(
        self,
        cli_runner: CliRunner,
        staging: ClientConfig,
        monkeypatch: pytest.MonkeyPatch,
        token_body: dict[str, Any],
    ) -> None:
        seen = _route_token_requests(monkeypatch, httpx.Response(200, json=token_body))

        result = _run(cli_runner, ["--json", "--quiet", "exchange", "--code", "abc123"])

        assert result.exit_code == 0, result.output
        payload = _json_payload(result.stdout)
        assert payload["method"] == "client_secret_post"
        assert payload["access_token"] == "***"
        assert payload["id_token"] == "eyJhbG....sig"
        assert payload["expires_in"] == 3600
        assert payload["scope"] == ["openid", "profile"]
        assert len(seen) == 1
        assert b"code=abc123" in seen[0].content

    def test_unsupported_profile_method_warns(
        self,
        cli_runner: CliRunner,
        staging: ClientConfig,
        monkeypatch: pytest.MonkeyPatch,
        token_body: dict[str, Any],
    ) -> None:
        save_profile(staging.model_copy(update={"client_authentication_method": "private_key_jwt"}))
        seen = _route_token_requests(monkeypatch, httpx.Response(200, json=token_body))

        result = _run(cli_runner, ["--json", "--quiet", "exchange", "--code", "abc123"])

        assert result.exit_code == 0, result.output
        assert (
            "Warning: Configured authentication method (private_key_jwt) is not supported."
            in result.output
        )
        assert _json_payload(result.stdout)["method"] == "client_secret_post"
        assert b"client_secret=s3cret" in seen[0].content

    def test_show_tokens(
        self,
        cli_runner: CliRunner,
        staging: ClientConfig,
        monkeypatch: pytest.MonkeyPatch,
        token_body: dict[str, Any],
    ) -> None:
        _route_token_requests(monkeypatch, httpx.Response(200, json=token_body))
        result = _run(cli_runner, ["--json", "--quiet", "exchange", "--code", "abc123", "--show-tokens"])
        assert result.exit_code == 0, result.output
        payload = _json_payload(result.stdout)
        assert payload["access_token"] == "at-123"
        assert payload["refresh_token"] == "rt-123"
        assert payload["id_token"] == token_body["id_token"]

    def test_provider_error_exit_code(
        self, cli_runner: CliRunner, staging: ClientConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _route_token_requests(
            monkeypatch, httpx.Response(400, json={"error": "invalid_grant"})
        )
        result = _run(cli_runner, ["exchange", "--code", "used-code"])
        assert result.exit_code == 3
        assert "invalid_grant" in result.output
        assert "single-use" in result.output

    def test_transport_error_exit_code(
        self, cli_runner: CliRunner, staging: ClientConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        def from_config(cls, config, transport=None):  # noqa: ANN001, ANN202
            return cls(transport=httpx.MockTransport(handler))

        monkeypatch.setattr(HttpxTransport, "from_config", classmethod(from_config))
        result = _run(cli_runner, ["exchange", "--code", "abc123"])
        assert result.exit_code == 6

    def test_bad_callback_url_exit_code(
        self, cli_runner: CliRunner, staging: ClientConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        seen = _route_token_requests(monkeypatch, httpx.Response(200))
        result = _run(cli_runner, ["exchange", "--code", "abc123", "--callback-url", "not a url"])
        assert result.exit_code == 8
        assert seen == []

    def test_missing_callback_url(
        self, cli_runner: CliRunner, staging: ClientConfig
    ) -> None:
        save_profile(staging.model_copy(update={"callback_url": None}))
        result = _run(cli_runner, ["exchange", "--code", "abc123"])
        assert result.exit_code == 2
        assert "--callback-url" in result.output
