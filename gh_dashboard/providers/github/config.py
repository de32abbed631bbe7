"""Configuration for the GitHub Actions provider."""

from pydantic import BaseModel, SecretStr


class GitHubConfig(BaseModel):
    """Configuration for the GitHub Actions provider."""

    token: SecretStr
    host: str = "github.com"
    # Overrides the API endpoint derived from host, e.g. for tests
    api_base_url: str | None = None
    request_timeout: float = 30

    @property
    def base_url(self) -> str:
        """Root URL of the REST API."""
        if self.api_base_url is not None:
            return self.api_base_url
        return f"https://api.{self.host}"
