"""Domain models for repositories, workflow runs and workflow jobs."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Self

from pydantic import AliasChoices, Field

from gh_dashboard.models.base import Model

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ProviderEnum(StrEnum):
    """String enumeration that keeps unrecognized provider values.

    Members are declared as ``(value, label)`` pairs. Looking up a value that
    is not declared returns an ``OTHER`` pseudo-member carrying the upstream
    string verbatim, so new provider values never break decoding.
    """

    label: str

    def __new__(cls, value: str, label: str | None = None) -> Self:
        member = str.__new__(cls, value)
        member._value_ = value
        member.label = label or value
        return member

    @classmethod
    def _missing_(cls, value: object) -> Self | None:
        if not isinstance(value, str):
            return None
        member = str.__new__(cls, value)
        member._name_ = "OTHER"
        member._value_ = value
        member.label = value
        return member

    @property
    def is_other(self) -> bool:
        """Whether this value is not one of the declared members."""
        return self._name_ == "OTHER"


class WorkflowRunStatus(ProviderEnum):
    """Lifecycle phase of a workflow run."""

    REQUESTED = "requested", "Requested"
    QUEUED = "queued", "Queued"
    PENDING = "pending", "Pending"
    WAITING = "waiting", "Waiting"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"

    @classmethod
    def from_provider(cls, value: str | None) -> "WorkflowRunStatus":
        """Normalize a provider status, treating a missing one as queued."""
        return cls.QUEUED if value is None else cls(value)


class WorkflowRunConclusion(ProviderEnum):
    """Terminal outcome of a workflow run."""

    PENDING = "pending", "⌛ Pending"
    SUCCESS = "success", "✅ Success"
    FAILURE = "failure", "❌ Failure"

    @classmethod
    def from_provider(cls, value: str | None) -> "WorkflowRunConclusion":
        """Normalize a provider conclusion; runs without one are pending."""
        return cls.PENDING if value is None else cls(value)


class WorkflowJobStatus(ProviderEnum):
    """Lifecycle phase of a workflow job."""

    PENDING = "pending", "Pending"
    QUEUED = "queued", "Queued"
    WAITING = "waiting", "Waiting"
    REQUESTED = "requested", "Requested"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"

    @classmethod
    def from_provider(cls, value: str | None) -> "WorkflowJobStatus":
        """Normalize a provider status, treating a missing one as pending."""
        return cls.PENDING if value is None else cls(value)


class WorkflowJobConclusion(ProviderEnum):
    """Terminal outcome of a workflow job."""

    ACTION_REQUIRED = "action_required", "Action Required"
    CANCELLED = "cancelled", "🛑 Cancelled"
    FAILURE = "failure", "❌ Failure"
    NEUTRAL = "neutral", "Neutral"
    SKIPPED = "skipped", "⏩ Skipped"
    SUCCESS = "success", "✅ Success"
    TIMED_OUT = "timed_out", "⏱️ Timed Out"

    @classmethod
    def from_provider(cls, value: str | None) -> "WorkflowJobConclusion":
        """Normalize a provider conclusion; jobs without one are neutral."""
        return cls.NEUTRAL if value is None else cls(value)


class Repository(Model):
    """A repository to poll for workflow runs."""

    owner: str = Field(..., description="Repository owner (user or organization)")
    name: str = Field(..., description="Repository name")
    branch: str = Field(default="main", description="Branch to list runs for")
    page_size: int = Field(
        default=1,
        ge=1,
        le=100,
        validation_alias=AliasChoices("page_size", "count"),
        description="Number of most recent runs to request",
    )
    actor: str | None = Field(
        default=None, description="Only list runs triggered by this user"
    )

    @property
    def full_name(self) -> str:
        """Repository identifier in owner/name format."""
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, kw_only=True)
class WorkflowRun:
    """One execution of a workflow, shown as one row of the run list."""

    id: int
    owner: str
    repo: str
    branch: str
    name: str
    commit_message: str
    start_time: datetime
    status: WorkflowRunStatus
    conclusion: WorkflowRunConclusion
    html_url: str

    @property
    def commit_title(self) -> str:
        """First line of the head commit message."""
        return self.commit_message.split("\n", 1)[0]

    def __str__(self) -> str:
        return (
            f"WorkflowRun<id={self.id}, repo={self.owner}/{self.repo}, "
            f"name={self.name}, status={self.status.label}, "
            f"conclusion={self.conclusion.label}, url={self.html_url}>"
        )


@dataclass(frozen=True, kw_only=True)
class WorkflowJob:
    """One job of the workflow run shown in the detail panel."""

    id: int
    name: str
    started_at: datetime
    completed_at: datetime | None
    status: WorkflowJobStatus
    conclusion: WorkflowJobConclusion
    html_url: str

    def __str__(self) -> str:
        return (
            f"WorkflowJob<id={self.id}, name={self.name}, "
            f"status={self.status.label}, conclusion={self.conclusion.label}, "
            f"url={self.html_url}>"
        )


def format_local_time(value: datetime) -> str:
    """Format a timestamp in the local timezone."""
    return value.astimezone().strftime(TIME_FORMAT)
