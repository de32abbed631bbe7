"""Configuration for the fake provider."""

from pydantic import BaseModel, Field


class FakeConfig(BaseModel):
    """Configuration for the randomized fake provider."""

    max_jobs: int = Field(default=16, ge=1)
    latency: float = Field(default=0.2, ge=0)
    seed: int | None = None
