"""Application settings and configuration"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings

from portfolio.utils.helpers import normalize_base_url


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Portfolio"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Profile-data service
    BACKEND_URL: str = "http://localhost:8000"
    GITHUB_USERNAME: str = "djacoo"
    REPO_LIMIT: int = 6
    REQUEST_TIMEOUT_SECONDS: Optional[float] = None  # None = wait indefinitely
    USER_AGENT: str = "PortfolioPage/1.0"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Explicit service location handed to the client and orchestrator."""

    base_url: str = "http://localhost:8000"
    repo_limit: int = 6
    timeout_seconds: Optional[float] = None
    user_agent: str = "PortfolioPage/1.0"

    def __post_init__(self) -> None:
        normalized = normalize_base_url(self.base_url)
        if not normalized:
            raise ValueError("base_url must not be empty")
        if self.repo_limit < 1:
            raise ValueError(f"repo_limit must be >= 1, got {self.repo_limit}")
        object.__setattr__(self, "base_url", normalized)

    @classmethod
    def from_settings(cls, source: Settings) -> "ServiceConfig":
        return cls(
            base_url=source.BACKEND_URL,
            repo_limit=source.REPO_LIMIT,
            timeout_seconds=source.REQUEST_TIMEOUT_SECONDS,
            user_agent=source.USER_AGENT,
        )


settings = Settings()
