"""Dashboard settings loaded from TOML files and the environment."""

import asyncio
import logging
import os
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, ValidationError

from gh_dashboard.models.base import Model
from gh_dashboard.models.workflow import Repository

log = logging.getLogger(__name__)

ENV_PREFIX = "GH_DASHBOARD_"
ENV_FIELDS = ("host", "auth_token", "provider", "poll_interval")
SYSTEM_CONFIG = Path("/etc/gh-dashboard.toml")


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded."""


class AuthError(Exception):
    """Raised when no GitHub token can be found."""


class Settings(Model):
    """Dashboard settings."""

    host: str = Field(default="github.com", description="GitHub host name")
    auth_token: SecretStr | None = Field(default=None, description="GitHub token")
    repos: Sequence[Repository] = Field(
        default_factory=list, description="Repositories to poll"
    )
    provider: str = Field(default="github", description="Workflow provider key")
    provider_config: Mapping[str, Any] = Field(
        default_factory=dict, description="Extra provider configuration"
    )
    poll_interval: float = Field(
        default=60, gt=0, description="Seconds between background refreshes"
    )


def config_paths(
    config_file: Path | None = None, environ: Mapping[str, str] = os.environ
) -> Sequence[Path]:
    """Candidate configuration files, highest precedence first."""
    config_home = environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    paths = [
        Path("config.toml"),
        Path(config_home) / "gh-dashboard" / "config.toml",
        SYSTEM_CONFIG,
    ]
    if config_file is not None:
        paths.insert(0, config_file)
    return paths


def load_settings(
    config_file: Path | None = None, environ: Mapping[str, str] = os.environ
) -> Settings:
    """Load settings from configuration files and environment variables.

    Top-level keys are merged across files, the first file defining a key
    wins. ``GH_DASHBOARD_*`` environment variables override every file.

    Raises:
        ConfigError: If the explicit file is missing or any source is invalid

    """
    if config_file is not None and not config_file.is_file():
        raise ConfigError(f"Configuration file not found: {config_file}")

    data: dict[str, Any] = {}
    for path in reversed(config_paths(config_file, environ)):
        if path.is_file():
            log.debug("Reading configuration from %s", path)
            data.update(read_toml(path))

    for name in ENV_FIELDS:
        if (value := environ.get(f"{ENV_PREFIX}{name.upper()}")) is not None:
            data[name] = value

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def read_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file."""
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e


async def resolve_token(
    settings: Settings, environ: Mapping[str, str] = os.environ
) -> SecretStr:
    """Find a GitHub token.

    Tries the configured token, then ``GITHUB_TOKEN``, then the GitHub CLI
    (``gh auth token``; ``GH_PATH`` overrides the executable).

    Raises:
        AuthError: If no source provides a token

    """
    if settings.auth_token is not None:
        log.debug("Using github token from config")
        return settings.auth_token

    if token := environ.get("GITHUB_TOKEN"):
        log.debug("Using github token from GITHUB_TOKEN environment variable")
        return SecretStr(token)

    if (token := await gh_cli_token(settings.host, environ)) is not None:
        log.debug("Using github token from GH cli")
        return SecretStr(token)

    raise AuthError("Unable to find GitHub token")


async def gh_cli_token(
    host: str, environ: Mapping[str, str] = os.environ
) -> str | None:
    """Ask the GitHub CLI for its token, or return None if it has none."""
    gh_cli = environ.get("GH_PATH", "gh")
    try:
        process = await asyncio.create_subprocess_exec(
            gh_cli,
            "auth",
            "token",
            "--hostname",
            host,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        log.debug("Error getting auth token from GH cli: %s", e)
        return None

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        log.debug("No valid token from GH cli: %s", stderr.decode().strip())
        return None

    return stdout.decode().strip() or None
