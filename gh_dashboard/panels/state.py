"""Loading state machine shared by the dashboard panels."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeAlias

from gh_dashboard.models.workflow import TIME_FORMAT


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class FetchStarted:
    """A fetch is about to be issued."""


@dataclass(frozen=True)
class FetchSucceeded:
    """A fetch completed successfully."""

    completed_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class FetchFailed:
    """A fetch failed with an error message."""

    message: str


LoadingEvent: TypeAlias = FetchStarted | FetchSucceeded | FetchFailed


class _State:
    def transition(self, event: LoadingEvent) -> "LoadingState":
        """Return the state that follows this one after ``event``.

        Any state moves to Loading when a fetch starts, so overlapping fetches
        are not guarded against here.
        """
        if isinstance(event, FetchStarted):
            return Loading()
        if isinstance(event, FetchSucceeded):
            return Loaded(completed_at=event.completed_at)
        return LoadError(message=event.message)


@dataclass(frozen=True)
class Idle(_State):
    """Nothing has been fetched yet."""

    def __str__(self) -> str:
        return "Idle"


@dataclass(frozen=True)
class Loading(_State):
    """A fetch is in flight."""

    def __str__(self) -> str:
        return "Loading"


@dataclass(frozen=True)
class Loaded(_State):
    """The last fetch succeeded."""

    completed_at: datetime

    def __str__(self) -> str:
        local = self.completed_at.astimezone()
        return f"Last refreshed at {local.strftime(TIME_FORMAT)}"


@dataclass(frozen=True)
class LoadError(_State):
    """The last fetch failed."""

    message: str

    def __str__(self) -> str:
        return self.message


LoadingState: TypeAlias = Idle | Loading | Loaded | LoadError
