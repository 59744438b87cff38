"""Async HTTP client for the profile-data service."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from portfolio.config.settings import ServiceConfig
from portfolio.github.contracts import Profile, Repository
from portfolio.github.errors import NetworkFailure, ParseFailure, Resource, ResponseFailure
from portfolio.utils.logger import sanitize_log_extra

logger = logging.getLogger(__name__)

PROFILE_PATH = "/api/github/profile"
REPOSITORIES_PATH = "/api/github/repos"


class ProfileServiceClient:
    """Thin typed wrapper over the ``/api/github/*`` endpoints.

    Failures are raised as ``NetworkFailure``, ``ResponseFailure`` or
    ``ParseFailure`` tagged with the resource that failed. No retries.
    """

    def __init__(
        self,
        config: ServiceConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "Accept": "application/json",
                "User-Agent": config.user_agent,
            },
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "ProfileServiceClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_profile(self, username: str) -> Profile:
        payload = await self._get_json(PROFILE_PATH, params={"username": username}, resource="profile")
        return Profile.from_payload(username, payload)

    async def list_repositories(self, username: str, limit: Optional[int] = None) -> tuple[Repository, ...]:
        params = {"username": username, "limit": limit or self._config.repo_limit}
        payload = await self._get_json(REPOSITORIES_PATH, params=params, resource="repositories")
        return Repository.list_from_payload(payload)

    async def _get_json(self, path: str, *, params: dict[str, Any], resource: Resource) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning(
                "Profile service request failed",
                extra=sanitize_log_extra(resource=resource, path=path, error=str(exc) or type(exc).__name__),
            )
            raise NetworkFailure(f"{resource} request failed: {exc}", resource=resource) from exc

        if not response.is_success:
            logger.warning(
                "Profile service request failed",
                extra=sanitize_log_extra(resource=resource, path=path, status_code=response.status_code),
            )
            raise ResponseFailure(
                f"{resource} request returned HTTP {response.status_code}",
                status_code=response.status_code,
                resource=resource,
            )

        try:
            return response.json()
        except ValueError as exc:
            logger.warning(
                "Profile service returned malformed JSON",
                extra=sanitize_log_extra(resource=resource, path=path, status_code=response.status_code),
            )
            raise ParseFailure(f"{resource} body is not valid JSON", resource=resource) from exc
