"""Fake provider returning randomized workflow data."""

import asyncio
import logging
import random
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from gh_dashboard.models.workflow import Repository, WorkflowJob, WorkflowRun
from gh_dashboard.providers.base import WorkflowService
from gh_dashboard.providers.fake.config import FakeConfig
from gh_dashboard.testing.factories import WorkflowJobFactory, WorkflowRunFactory

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class FakeWorkflowService(WorkflowService):
    """Workflow service producing random runs and jobs without network access."""

    config: FakeConfig
    rng: random.Random = field(default_factory=random.Random, repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: FakeConfig
    ) -> AsyncGenerator["FakeWorkflowService", None]:
        """Create the fake service, seeding the factories when configured."""
        if config.seed is not None:
            WorkflowRunFactory.seed_random(config.seed)
            WorkflowJobFactory.seed_random(config.seed)
        log.info("Using fake workflow service (seed=%s)", config.seed)
        yield cls(config=config, rng=random.Random(config.seed))

    async def list_repository_runs(self, repo: Repository) -> Sequence[WorkflowRun]:
        """Return between one and ``repo.page_size`` random runs."""
        await self._simulate_latency()
        count = self.rng.randint(1, repo.page_size)
        return WorkflowRunFactory.batch(
            count, owner=repo.owner, repo=repo.name, branch=repo.branch
        )

    async def list_run_jobs(self, run: WorkflowRun) -> Sequence[WorkflowJob]:
        """Return between one and ``max_jobs`` random jobs."""
        await self._simulate_latency()
        return WorkflowJobFactory.batch(self.rng.randint(1, self.config.max_jobs))

    async def _simulate_latency(self) -> None:
        if self.config.latency:
            await asyncio.sleep(self.rng.uniform(0, self.config.latency))
