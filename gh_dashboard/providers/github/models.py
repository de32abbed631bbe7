"""Pydantic models for GitHub Actions API responses."""

from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel


class Owner(BaseModel):
    """Owner of a repository."""

    login: str


class RunRepository(BaseModel):
    """Repository a workflow run belongs to."""

    name: str
    owner: Owner | None = None


class HeadCommit(BaseModel):
    """Head commit of a workflow run."""

    message: str


class WorkflowRun(BaseModel):
    """A workflow run from GitHub Actions API."""

    id: int
    name: str | None = None
    head_branch: str | None = None
    status: str | None = None
    conclusion: str | None = None
    created_at: datetime
    html_url: str
    repository: RunRepository
    head_commit: HeadCommit | None = None


class WorkflowRunsResponse(BaseModel):
    """Response from list workflow runs API."""

    workflow_runs: Sequence[WorkflowRun]


class WorkflowJob(BaseModel):
    """A job of a workflow run from GitHub Actions API."""

    id: int
    name: str
    status: str | None = None
    conclusion: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    html_url: str | None = None


class WorkflowJobsResponse(BaseModel):
    """Response from list jobs for a workflow run API."""

    jobs: Sequence[WorkflowJob]


class User(BaseModel):
    """The authenticated user."""

    login: str
