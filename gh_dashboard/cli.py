"""CLI entry point for the GitHub workflow dashboard."""

import argparse
import asyncio
import logging
import sys
from functools import partial
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.live import Live

from gh_dashboard.app import Dashboard
from gh_dashboard.config import (
    AuthError,
    ConfigError,
    Settings,
    load_settings,
    resolve_token,
)
from gh_dashboard.errors import FetchError
from gh_dashboard.panels.job_details import JobDetailsPanel
from gh_dashboard.panels.run_list import RunListPanel
from gh_dashboard.providers.base import WorkflowService
from gh_dashboard.providers.loading import (
    ProviderNotFoundError,
    available_providers,
    load_provider_manifest,
)
from gh_dashboard.providers.manifest import ProviderManifest
from gh_dashboard.terminal import keyboard_input

log = logging.getLogger("gh_dashboard")


async def build_provider_config(
    manifest: ProviderManifest[Any], settings: Settings
) -> BaseModel:
    """Build the provider configuration from the settings."""
    config_dict: dict[str, Any] = {"host": settings.host, **settings.provider_config}
    if manifest.requires_token:
        config_dict["token"] = await resolve_token(settings)

    try:
        return manifest.config_cls.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid provider configuration: {e}") from e


async def run_dashboard(
    service: WorkflowService, settings: Settings, console: Console
) -> None:
    """Run the dashboard until the user quits."""
    details = JobDetailsPanel(service, interval=settings.poll_interval)
    runs = RunListPanel(
        service, settings.repos, details=details, interval=settings.poll_interval
    )

    with (
        keyboard_input() as events,
        Live(console=console, screen=True, auto_refresh=False) as live,
    ):
        dashboard = Dashboard(
            runs=runs,
            events=events,
            draw=partial(live.update, refresh=True),
            height=lambda: console.height,
        )
        await dashboard.run()


async def run(settings: Settings) -> int:
    """Run the dashboard and return exit code."""
    if not settings.repos:
        log.error("No repositories configured, exiting")
        print("No repositories configured, exiting", file=sys.stderr)
        return 0

    log.info("Loading provider: %s", settings.provider)
    manifest = load_provider_manifest(settings.provider)
    config = await build_provider_config(manifest, settings)

    async with manifest.provider_factory(config) as service:
        await service.check_credentials()
        log.info(
            "Watching %d repositories: %s",
            len(settings.repos),
            ", ".join(repo.full_name for repo in settings.repos),
        )
        await run_dashboard(service, settings, Console())

    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Live terminal dashboard of GitHub Actions workflow runs"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file, read before the default locations",
    )
    providers = ", ".join(available_providers())
    parser.add_argument(
        "--provider",
        default=None,
        help=f"Provider key overriding the configuration ({providers})",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=Path("gh-dashboard.log"),
        help="File to write logs to (default: gh-dashboard.log)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        filename=args.log_file,
    )

    try:
        settings = load_settings(args.config)
        if args.provider is not None:
            settings = settings.model_copy(update={"provider": args.provider})
        exit_code = asyncio.run(run(settings))
    except (ConfigError, AuthError, ProviderNotFoundError, FetchError) as e:
        log.error("Failed to start dashboard: %s", e)
        print(f"Failed to start dashboard: {e}", file=sys.stderr)
        exit_code = 1
    except KeyboardInterrupt:
        exit_code = 130

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
