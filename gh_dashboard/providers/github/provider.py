"""GitHub Actions provider implementation."""

import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import ValidationError

from gh_dashboard.errors import FetchError
from gh_dashboard.models.workflow import (
    Repository,
    WorkflowJob,
    WorkflowJobConclusion,
    WorkflowJobStatus,
    WorkflowRun,
    WorkflowRunConclusion,
    WorkflowRunStatus,
)
from gh_dashboard.providers.base import WorkflowService
from gh_dashboard.providers.github import models
from gh_dashboard.providers.github.config import GitHubConfig

log = logging.getLogger(__name__)

API_VERSION = "2022-11-28"


@dataclass(frozen=True, kw_only=True)
class GitHubWorkflowService(WorkflowService):
    """Workflow service backed by the GitHub REST API."""

    config: GitHubConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: GitHubConfig
    ) -> AsyncGenerator["GitHubWorkflowService", None]:
        """Create service with managed session lifecycle."""
        headers = {
            "Authorization": f"Bearer {config.token.get_secret_value()}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        async with aiohttp.ClientSession(
            base_url=config.base_url,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=config.request_timeout),
        ) as session:
            yield cls(config=config, session=session)

    async def check_credentials(self) -> str:
        """Validate the token and return the authenticated user's login."""
        data = await self._get_json("/user", action="get authenticated user")
        try:
            user = models.User.model_validate(data)
        except ValidationError as e:
            raise FetchError(f"Invalid user response: {e}") from e
        log.info("Authenticated to %s as %s", self.config.host, user.login)
        return user.login

    async def list_repository_runs(self, repo: Repository) -> Sequence[WorkflowRun]:
        """List the most recent runs of a repository on its branch."""
        url = f"/repos/{repo.owner}/{repo.name}/actions/runs"
        params = {"branch": repo.branch, "per_page": str(repo.page_size)}
        if repo.actor is not None:
            params["actor"] = repo.actor

        log.debug("Listing workflow runs: url=%s, params=%s", url, params)
        data = await self._get_json(url, params, action="list workflow runs")

        try:
            runs_response = models.WorkflowRunsResponse.model_validate(data)
        except ValidationError as e:
            raise FetchError(
                f"Invalid workflow runs response for {repo.full_name}: {e}"
            ) from e

        return [
            to_workflow_run(run, repo)
            for run in runs_response.workflow_runs[: repo.page_size]
        ]

    async def list_run_jobs(self, run: WorkflowRun) -> Sequence[WorkflowJob]:
        """List the jobs of a workflow run in provider order."""
        url = f"/repos/{run.owner}/{run.repo}/actions/runs/{run.id}/jobs"

        log.debug("Listing workflow jobs: url=%s", url)
        data = await self._get_json(url, action="list workflow jobs")

        try:
            jobs_response = models.WorkflowJobsResponse.model_validate(data)
        except ValidationError as e:
            raise FetchError(
                f"Invalid workflow jobs response for run {run.id}: {e}"
            ) from e

        return [to_workflow_job(job) for job in jobs_response.jobs]

    async def _get_json(
        self,
        url: str,
        params: Mapping[str, str] | None = None,
        *,
        action: str,
    ) -> Any:
        try:
            async with self.session.get(url, params=params) as response:
                if response.status != 200:
                    text = await response.text()
                    raise FetchError(f"Failed to {action}: {response.status} {text}")
                return await response.json()
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            raise FetchError(f"Failed to {action}: {e!r}") from e


def to_workflow_run(run: models.WorkflowRun, repo: Repository) -> WorkflowRun:
    """Map an API workflow run onto the domain model."""
    owner = run.repository.owner.login if run.repository.owner else repo.owner
    return WorkflowRun(
        id=run.id,
        owner=owner,
        repo=run.repository.name,
        branch=run.head_branch or repo.branch,
        name=run.name or "",
        commit_message=run.head_commit.message if run.head_commit else "",
        start_time=run.created_at,
        status=WorkflowRunStatus.from_provider(run.status),
        conclusion=WorkflowRunConclusion.from_provider(run.conclusion),
        html_url=run.html_url,
    )


def to_workflow_job(job: models.WorkflowJob) -> WorkflowJob:
    """Map an API workflow job onto the domain model."""
    return WorkflowJob(
        id=job.id,
        name=job.name,
        started_at=job.started_at,
        completed_at=job.completed_at,
        status=WorkflowJobStatus.from_provider(job.status),
        conclusion=WorkflowJobConclusion.from_provider(job.conclusion),
        html_url=job.html_url or "",
    )
