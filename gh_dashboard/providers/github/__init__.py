"""GitHub Actions provider module."""

from gh_dashboard.providers.github.config import GitHubConfig
from gh_dashboard.providers.github.manifest import github_manifest
from gh_dashboard.providers.github.provider import GitHubWorkflowService

__all__ = ["GitHubConfig", "GitHubWorkflowService", "github_manifest"]
