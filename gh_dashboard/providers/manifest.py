"""Provider manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from gh_dashboard.providers.base import WorkflowService

ConfigT = TypeVar("ConfigT", bound=BaseModel)


@dataclass(frozen=True, kw_only=True)
class ProviderManifest(Generic[ConfigT]):
    """Manifest describing a provider plugin.

    The manifest contains references to the configuration class and the
    provider factory function for lazy loading of providers based on their key.
    ``requires_token`` tells the CLI whether credentials must be resolved
    before the configuration is built.
    """

    config_cls: type[ConfigT]
    provider_factory: Callable[[ConfigT], AbstractAsyncContextManager[WorkflowService]]
    requires_token: bool = True
