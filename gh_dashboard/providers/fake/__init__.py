"""Fake provider module."""

from gh_dashboard.providers.fake.config import FakeConfig
from gh_dashboard.providers.fake.manifest import fake_manifest
from gh_dashboard.providers.fake.provider import FakeWorkflowService

__all__ = ["FakeConfig", "FakeWorkflowService", "fake_manifest"]
