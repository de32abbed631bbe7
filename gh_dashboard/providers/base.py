"""Abstract base class for CI workflow providers."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from gh_dashboard.errors import FetchError, ServiceError
from gh_dashboard.models.workflow import Repository, WorkflowJob, WorkflowRun

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class WorkflowService(ABC):
    """Abstract base for services that fetch workflow runs and jobs.

    Implementations provide the two per-request operations; the fan-out over
    repositories and the error policy around them live here so every provider
    behaves the same way.
    """

    @abstractmethod
    async def list_repository_runs(self, repo: Repository) -> Sequence[WorkflowRun]:
        """List the most recent workflow runs of a single repository.

        Args:
            repo: Repository target, including branch, page size and actor

        Returns:
            Up to ``repo.page_size`` runs, in provider order

        Raises:
            FetchError: If the provider call fails

        """

    @abstractmethod
    async def list_run_jobs(self, run: WorkflowRun) -> Sequence[WorkflowJob]:
        """List the jobs of a workflow run.

        Args:
            run: The workflow run to list jobs for

        Returns:
            Jobs in provider order

        Raises:
            FetchError: If the provider call fails

        """

    async def check_credentials(self) -> str | None:
        """Validate provider credentials before the dashboard starts.

        Returns:
            The authenticated identity, if the provider has one

        """
        return None

    async def list_runs(self, repos: Sequence[Repository]) -> Sequence[WorkflowRun]:
        """List recent runs across repositories, most recent first.

        One request per repository is issued concurrently. A repository whose
        request fails is logged and contributes no rows.

        Raises:
            ServiceError: If a per-repository task fails with anything other
                than a FetchError

        """
        log.debug("Listing workflow runs for %d repositories", len(repos))
        results = await asyncio.gather(
            *(self.list_repository_runs(repo) for repo in repos),
            return_exceptions=True,
        )

        runs: list[WorkflowRun] = []
        for repo, result in zip(repos, results, strict=True):
            if isinstance(result, FetchError):
                log.error(
                    "Failed to get workflow runs for %s: %s",
                    repo.full_name,
                    result,
                    exc_info=result,
                )
                continue
            if isinstance(result, BaseException):
                raise ServiceError(
                    f"Error getting workflow runs: {result}"
                ) from result
            runs.extend(result)

        runs.sort(key=lambda run: run.start_time, reverse=True)
        return runs

    async def list_jobs(self, run: WorkflowRun) -> Sequence[WorkflowJob]:
        """List the jobs of a run.

        Raises:
            ServiceError: If the jobs could not be fetched, or the provider
                failed in any other way

        """
        try:
            return await self.list_run_jobs(run)
        except FetchError as e:
            raise ServiceError(f"Error getting workflow jobs: {e}") from e
        except Exception as e:
            log.error("Unexpected error getting jobs of run %s", run.id, exc_info=e)
            raise ServiceError(f"Error getting workflow jobs: {e}") from e
