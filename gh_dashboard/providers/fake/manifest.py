"""Fake provider manifest."""

from gh_dashboard.providers.fake.config import FakeConfig
from gh_dashboard.providers.fake.provider import FakeWorkflowService
from gh_dashboard.providers.manifest import ProviderManifest

fake_manifest = ProviderManifest(
    config_cls=FakeConfig,
    provider_factory=FakeWorkflowService.from_config,
    requires_token=False,
)
