"""Tests for WorkflowService base class."""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from gh_dashboard.errors import FetchError, ServiceError
from gh_dashboard.models.workflow import Repository, WorkflowJob, WorkflowRun
from gh_dashboard.providers.base import WorkflowService
from gh_dashboard.testing.factories import (
    RepositoryFactory,
    WorkflowJobFactory,
    WorkflowRunFactory,
)

NOW = datetime(2099, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@dataclass(frozen=True, kw_only=True)
class MockService(WorkflowService):
    """Test service returning configured results per repository."""

    runs: Mapping[str, Sequence[WorkflowRun] | BaseException] = field(
        default_factory=dict
    )
    jobs: Sequence[WorkflowJob] | BaseException = ()
    gate: asyncio.Event | None = None
    started: list[str] = field(default_factory=list)

    async def list_repository_runs(self, repo: Repository) -> Sequence[WorkflowRun]:
        """Return or raise the configured result for the repository."""
        self.started.append(repo.full_name)
        if self.gate is not None:
            await self.gate.wait()
        result = self.runs[repo.full_name]
        if isinstance(result, BaseException):
            raise result
        return result

    async def list_run_jobs(self, run: WorkflowRun) -> Sequence[WorkflowJob]:
        """Return or raise the configured jobs."""
        if isinstance(self.jobs, BaseException):
            raise self.jobs
        return self.jobs


def run_at(repo: Repository, minutes_ago: int) -> WorkflowRun:
    """Build a run of ``repo`` started ``minutes_ago`` before NOW."""
    return WorkflowRunFactory.build(
        owner=repo.owner,
        repo=repo.name,
        start_time=NOW - timedelta(minutes=minutes_ago),
    )


class TestListRuns:
    """Tests for list_runs."""

    async def test_merges_and_sorts_most_recent_first(self) -> None:
        """Runs of all repositories are merged, newest first."""
        repos = RepositoryFactory.batch(3)
        first, second, third = (
            run_at(repos[0], 20),
            run_at(repos[1], 5),
            run_at(repos[2], 10),
        )
        service = MockService(
            runs={
                repos[0].full_name: [first],
                repos[1].full_name: [second],
                repos[2].full_name: [third],
            }
        )

        runs = await service.list_runs(repos)

        assert runs == [second, third, first]

    async def test_skips_repositories_that_fail(self) -> None:
        """A failing repository is logged and contributes no rows."""
        repos = RepositoryFactory.batch(5)
        good = {repo.full_name: [run_at(repo, i)] for i, repo in enumerate(repos)}
        runs_by_repo: dict[str, Sequence[WorkflowRun] | BaseException] = {
            **good,
            repos[1].full_name: FetchError("boom"),
            repos[3].full_name: FetchError("gone"),
        }
        service = MockService(runs=runs_by_repo)

        runs = await service.list_runs(repos)

        assert [run.repo for run in runs] == [
            repos[0].name,
            repos[2].name,
            repos[4].name,
        ]

    async def test_all_repositories_failing_returns_empty(self) -> None:
        """When every repository fails the result is empty, not an error."""
        repos = RepositoryFactory.batch(2)
        service = MockService(
            runs={repo.full_name: FetchError("down") for repo in repos}
        )

        assert await service.list_runs(repos) == []

    async def test_no_repositories_returns_empty(self) -> None:
        """No repositories means no requests and no runs."""
        service = MockService()

        assert await service.list_runs([]) == []
        assert service.started == []

    async def test_unexpected_error_raises_service_error(self) -> None:
        """Errors other than FetchError fail the whole call."""
        repos = RepositoryFactory.batch(2)
        service = MockService(
            runs={
                repos[0].full_name: [run_at(repos[0], 1)],
                repos[1].full_name: ValueError("bad data"),
            }
        )

        with pytest.raises(ServiceError, match="Error getting workflow runs"):
            await service.list_runs(repos)

    async def test_requests_run_concurrently(self) -> None:
        """All repository requests are in flight before any completes."""
        repos = RepositoryFactory.batch(4)
        gate = asyncio.Event()
        service = MockService(
            runs={repo.full_name: [run_at(repo, 1)] for repo in repos},
            gate=gate,
        )

        task = asyncio.create_task(service.list_runs(repos))
        async with asyncio.timeout(1):
            while len(service.started) < len(repos):
                await asyncio.sleep(0)
        assert not task.done()

        gate.set()
        runs = await task

        assert len(runs) == len(repos)


class TestListJobs:
    """Tests for list_jobs."""

    async def test_returns_jobs_in_provider_order(self) -> None:
        """Jobs are returned unchanged."""
        jobs = WorkflowJobFactory.batch(3)
        service = MockService(jobs=jobs)

        assert await service.list_jobs(WorkflowRunFactory.build()) == jobs

    async def test_wraps_unexpected_error(self) -> None:
        """Any other provider fault also surfaces as ServiceError."""
        service = MockService(jobs=ValueError("Expecting value"))

        with pytest.raises(ServiceError, match="Expecting value") as exc_info:
            await service.list_jobs(WorkflowRunFactory.build())

        assert isinstance(exc_info.value.__cause__, ValueError)

    async def test_wraps_fetch_error(self) -> None:
        """A failed fetch surfaces as ServiceError."""
        service = MockService(jobs=FetchError("Failed to list workflow jobs: 404"))

        with pytest.raises(ServiceError, match="Error getting workflow jobs: .*404"):
            await service.list_jobs(WorkflowRunFactory.build())


async def test_check_credentials_defaults_to_none() -> None:
    """Services without credentials have nothing to check."""
    assert await MockService().check_credentials() is None
