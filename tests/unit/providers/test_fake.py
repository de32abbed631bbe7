"""Tests for the fake workflow service."""

from gh_dashboard.providers.fake import FakeConfig, FakeWorkflowService
from gh_dashboard.testing.factories import RepositoryFactory, WorkflowRunFactory


async def test_runs_belong_to_requested_repository() -> None:
    """Generated runs carry the repository's owner, name and branch."""
    repo = RepositoryFactory.build(branch="develop", page_size=5)

    async with FakeWorkflowService.from_config(
        FakeConfig(latency=0, seed=1)
    ) as service:
        runs = await service.list_repository_runs(repo)

    assert 1 <= len(runs) <= 5
    for run in runs:
        assert (run.owner, run.repo, run.branch) == (
            repo.owner,
            repo.name,
            "develop",
        )


async def test_job_count_is_bounded() -> None:
    """Generated job lists are never empty and never exceed max_jobs."""
    async with FakeWorkflowService.from_config(
        FakeConfig(latency=0, max_jobs=3)
    ) as service:
        for _ in range(10):
            jobs = await service.list_jobs(WorkflowRunFactory.build())
            assert 1 <= len(jobs) <= 3


async def test_fan_out_sorts_generated_runs() -> None:
    """The fake service goes through the shared fan-out."""
    repos = RepositoryFactory.batch(3, page_size=3)

    async with FakeWorkflowService.from_config(FakeConfig(latency=0)) as service:
        runs = await service.list_runs(repos)

    start_times = [run.start_time for run in runs]
    assert start_times == sorted(start_times, reverse=True)
