"""Tests for the CLI entry point."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from pydantic import SecretStr

from gh_dashboard import cli
from gh_dashboard.config import ConfigError, Settings
from gh_dashboard.models.workflow import Repository
from gh_dashboard.providers.fake import FakeConfig, FakeWorkflowService, fake_manifest
from gh_dashboard.providers.github import GitHubConfig, github_manifest


class TestBuildProviderConfig:
    """Tests for build_provider_config."""

    async def test_github_config_gets_token_and_host(self) -> None:
        """The GitHub provider receives the host and the resolved token."""
        settings = Settings(
            host="ghe.example.com",
            auth_token=SecretStr("secret"),
            provider_config={"request_timeout": 5},
        )

        config = await cli.build_provider_config(github_manifest, settings)

        assert isinstance(config, GitHubConfig)
        assert config.host == "ghe.example.com"
        assert config.token.get_secret_value() == "secret"
        assert config.request_timeout == 5

    async def test_fake_config_needs_no_token(self) -> None:
        """Providers without token requirement skip token resolution."""
        settings = Settings(provider_config={"latency": 0, "seed": 7})

        config = await cli.build_provider_config(fake_manifest, settings)

        assert config == FakeConfig(latency=0, seed=7)

    async def test_invalid_provider_config(self) -> None:
        """Invalid provider settings are a configuration error."""
        settings = Settings(provider_config={"max_jobs": 0})

        with pytest.raises(ConfigError, match="Invalid provider configuration"):
            await cli.build_provider_config(fake_manifest, settings)


class TestRun:
    """Tests for run."""

    async def test_no_repositories_exits_cleanly(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without repositories the dashboard does not start."""
        run_dashboard = AsyncMock()
        monkeypatch.setattr(cli, "run_dashboard", run_dashboard)

        assert await cli.run(Settings()) == 0

        run_dashboard.assert_not_awaited()

    async def test_runs_dashboard_with_provider(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The dashboard runs against the configured provider."""
        run_dashboard = AsyncMock()
        monkeypatch.setattr(cli, "run_dashboard", run_dashboard)
        monkeypatch.setattr(cli, "load_provider_manifest", lambda key: fake_manifest)
        settings = Settings(
            provider="fake",
            provider_config={"latency": 0},
            repos=[Repository(owner="org", name="app")],
        )

        assert await cli.run(settings) == 0

        run_dashboard.assert_awaited_once()
        service, passed_settings, _ = run_dashboard.await_args.args
        assert isinstance(service, FakeWorkflowService)
        assert passed_settings is settings


class TestMain:
    """Tests for main."""

    def test_missing_config_file_exits_with_error(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """A missing config file is reported on stderr."""
        monkeypatch.setattr(
            sys,
            "argv",
            [
                "gh-dashboard",
                "--config",
                str(tmp_path / "missing.toml"),
                "--log-file",
                str(tmp_path / "dashboard.log"),
            ],
        )

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 1
        assert "Configuration file not found" in capsys.readouterr().err

    def test_no_repositories_exits_with_zero(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """A configuration without repositories exits successfully."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('provider = "fake"\n')
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        monkeypatch.setattr(cli, "run_dashboard", AsyncMock())
        monkeypatch.setattr(
            sys,
            "argv",
            ["gh-dashboard", "--config", str(config_file), "--log-file", "x.log"],
        )

        with pytest.raises(SystemExit) as exc_info:
            cli.main()

        assert exc_info.value.code == 0
        assert "No repositories configured" in capsys.readouterr().err
