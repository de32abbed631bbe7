"""GitHub Actions provider manifest."""

from gh_dashboard.providers.github.config import GitHubConfig
from gh_dashboard.providers.github.provider import GitHubWorkflowService
from gh_dashboard.providers.manifest import ProviderManifest

github_manifest = ProviderManifest(
    config_cls=GitHubConfig,
    provider_factory=GitHubWorkflowService.from_config,
)
