"""Fetch orchestrator for the portfolio page data."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Optional

from portfolio.config.settings import ServiceConfig
from portfolio.core.cancellation import CancellationToken
from portfolio.core.join import join_all_or_nothing
from portfolio.github.client import ProfileServiceClient
from portfolio.github.contracts import FetchState
from portfolio.github.errors import GENERIC_FAILURE_MESSAGE, ProfileServiceError
from portfolio.utils.logger import sanitize_log_extra

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[FetchState], None]


def _require_subject(subject: str) -> None:
    if not isinstance(subject, str) or not subject.strip():
        raise ValueError("subject must be a non-empty string")


class PortfolioFetchOrchestrator:
    """Fetches profile and repositories for one subject as a single unit.

    Both requests run concurrently and must both succeed; any failure turns
    the whole activation into an error state. Errors never escape.
    """

    def __init__(
        self,
        config: ServiceConfig,
        *,
        client_factory: Callable[[ServiceConfig], Any] = ProfileServiceClient,
    ) -> None:
        self._config = config
        self._client_factory = client_factory

    @property
    def config(self) -> ServiceConfig:
        return self._config

    async def fetch(self, subject: str) -> FetchState:
        """Resolve one activation to its terminal snapshot.

        Raises ValueError for an empty subject before any request is sent;
        every other failure becomes an error state.
        """
        _require_subject(subject)
        logger.info(
            "Portfolio fetch started",
            extra=sanitize_log_extra(subject=subject, repo_limit=self._config.repo_limit),
        )
        try:
            async with self._client_factory(self._config) as client:
                profile, repositories = await join_all_or_nothing(
                    client.get_profile(subject),
                    client.list_repositories(subject, self._config.repo_limit),
                )
        except ProfileServiceError as exc:
            logger.warning(
                "Portfolio fetch failed",
                extra=sanitize_log_extra(
                    subject=subject,
                    resource=exc.resource,
                    failure=type(exc).__name__,
                    error=exc.detail,
                ),
            )
            return FetchState.failed(subject, exc.user_message)
        except Exception as exc:
            logger.exception(
                "Portfolio fetch raised unexpected exception",
                extra=sanitize_log_extra(subject=subject, error=str(exc)),
            )
            return FetchState.failed(subject, GENERIC_FAILURE_MESSAGE)

        logger.info(
            "Portfolio fetch completed",
            extra=sanitize_log_extra(subject=subject, repositories=len(repositories)),
        )
        return FetchState.succeeded(subject, profile, repositories)

    async def observe(
        self,
        subject: str,
        token: Optional[CancellationToken] = None,
    ) -> AsyncIterator[FetchState]:
        """Yield ``loading`` then at most one terminal snapshot.

        The terminal snapshot is dropped when ``token`` is cancelled before
        the requests settle.
        """
        _require_subject(subject)
        token = token or CancellationToken()
        if token.cancelled:
            return

        yield FetchState.loading(subject)
        terminal = await self.fetch(subject)
        if token.cancelled:
            logger.debug(
                "Discarding superseded portfolio result",
                extra=sanitize_log_extra(subject=subject, reason=token.reason, status=terminal.status.value),
            )
            return
        yield terminal


class SubjectBinding:
    """Long-lived consumer context driving activations for a subject.

    Holds the current snapshot. Each activation captures its own token;
    a newer activation or ``close()`` cancels it, after which its late
    results never touch ``state`` or reach the listener.
    """

    def __init__(
        self,
        orchestrator: PortfolioFetchOrchestrator,
        *,
        on_snapshot: Optional[SnapshotListener] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._on_snapshot = on_snapshot
        self._state = FetchState.idle()
        self._subject: Optional[str] = None
        self._token: Optional[CancellationToken] = None
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    async def __aenter__(self) -> "SubjectBinding":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        self.close()

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def subject(self) -> Optional[str]:
        return self._subject

    @property
    def closed(self) -> bool:
        return self._closed

    def set_subject(self, subject: str) -> bool:
        """Activate for ``subject`` unless it is already the active one.

        Returns True when a new activation started. Must be called from a
        running event loop.
        """
        if subject == self._subject and self._token is not None and not self._token.cancelled:
            return False
        self._activate(subject)
        return True

    def reload(self) -> None:
        """Re-run the current subject from scratch."""
        if self._subject is None:
            raise RuntimeError("No subject to reload")
        self._activate(self._subject)

    def close(self) -> None:
        """Tear down: late results of any in-flight activation are ignored."""
        self._closed = True
        if self._token is not None:
            self._token.cancel("binding closed")

    async def wait_idle(self) -> None:
        """Wait until every started activation has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _activate(self, subject: str) -> None:
        if self._closed:
            raise RuntimeError("SubjectBinding is closed")
        _require_subject(subject)

        loop = asyncio.get_running_loop()
        if self._token is not None:
            self._token.cancel(f"superseded by {subject}")

        token = CancellationToken()
        self._token = token
        self._subject = subject

        task = loop.create_task(self._resolve(subject, token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._apply(FetchState.loading(subject), token)

    async def _resolve(self, subject: str, token: CancellationToken) -> None:
        terminal = await self._orchestrator.fetch(subject)
        if token.cancelled:
            logger.debug(
                "Discarding superseded portfolio result",
                extra=sanitize_log_extra(subject=subject, reason=token.reason, status=terminal.status.value),
            )
            return
        self._apply(terminal, token)

    def _apply(self, snapshot: FetchState, token: CancellationToken) -> None:
        if token.cancelled:
            return
        self._state = snapshot
        if self._on_snapshot is None:
            return
        try:
            self._on_snapshot(snapshot)
        except Exception as exc:
            logger.exception(
                "Snapshot listener raised exception",
                extra=sanitize_log_extra(subject=snapshot.subject, status=snapshot.status.value, error=str(exc)),
            )
