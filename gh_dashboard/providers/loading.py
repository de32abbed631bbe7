"""Discovery of workflow service providers registered as entry points."""

import logging
from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from gh_dashboard.providers.manifest import ProviderManifest

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "gh_dashboard.providers"


class ProviderNotFoundError(Exception):
    """Raised when no provider is registered under the requested key."""


def available_providers() -> Sequence[str]:
    """Keys of the installed providers, sorted."""
    return sorted(entry.name for entry in entry_points(group=ENTRY_POINT_GROUP))


def load_provider_manifest(key: str) -> ProviderManifest[Any]:
    """Load the manifest of the provider registered under ``key``.

    Raises:
        ProviderNotFoundError: If no provider with the given key is installed

    """
    for entry in entry_points(group=ENTRY_POINT_GROUP, name=key):
        log.debug("Loading provider %s from %s", key, entry.value)
        manifest: ProviderManifest[Any] = entry.load()
        return manifest

    raise ProviderNotFoundError(
        f"Provider '{key}' not found. Available providers: {available_providers()}"
    )
