from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
import pytest

from portfolio.config.settings import ServiceConfig
from portfolio.core.cancellation import CancellationToken
from portfolio.github.client import ProfileServiceClient
from portfolio.github.contracts import FetchState, FetchStatus
from portfolio.orchestrator import PortfolioFetchOrchestrator, SubjectBinding
from portfolio.services.presentation import PLACEHOLDER, project


CONFIG = ServiceConfig(base_url="http://profile.test", repo_limit=6)


def _orchestrator(handler) -> PortfolioFetchOrchestrator:
    transport = httpx.MockTransport(handler)
    return PortfolioFetchOrchestrator(
        CONFIG,
        client_factory=lambda config: ProfileServiceClient(config, transport=transport),
    )


def _ok_handler(profile: dict[str, Any], repos: list[dict[str, Any]]):
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/profile"):
            return httpx.Response(200, json=profile)
        return httpx.Response(200, json=repos)

    return handler


def _gated_handler(gates: dict[str, asyncio.Event], *, fail_for: set[str] = frozenset()):
    async def handler(request: httpx.Request) -> httpx.Response:
        username = request.url.params["username"]
        await gates[username].wait()
        if username in fail_for:
            return httpx.Response(500)
        if request.url.path.endswith("/profile"):
            return httpx.Response(200, json={"name": username.upper()})
        return httpx.Response(200, json=[{"full_name": f"{username}/repo", "name": "repo"}])

    return handler


async def _until_terminal(binding: SubjectBinding) -> None:
    async def _poll() -> None:
        while not binding.state.is_terminal:
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout=2)


@pytest.mark.asyncio
async def test_observe_emits_loading_then_success() -> None:
    orchestrator = _orchestrator(_ok_handler({"name": "Alice"}, [{"full_name": "alice/x", "name": "x"}]))

    snapshots = [snapshot async for snapshot in orchestrator.observe("alice")]

    assert [s.status for s in snapshots] == [FetchStatus.LOADING, FetchStatus.SUCCESS]
    assert snapshots[-1].profile is not None
    assert snapshots[-1].profile.display_name == "Alice"
    assert len(snapshots[-1].repositories) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failing_path,failing_response,expected_message",
    [
        ("/api/github/profile", httpx.Response(503), "Failed to load profile"),
        ("/api/github/repos", httpx.Response(503), "Failed to load repos"),
        ("/api/github/profile", httpx.Response(200, json=["not", "an", "object"]), "Failed to load profile"),
        ("/api/github/repos", httpx.Response(200, json={"not": "a list"}), "Failed to load repos"),
        ("/api/github/repos", httpx.Response(200, content=b"<html>oops</html>"), "Failed to load repos"),
    ],
)
async def test_any_failed_request_yields_error_without_partial_data(
    failing_path: str, failing_response: httpx.Response, expected_message: str
) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == failing_path:
            return failing_response
        if request.url.path.endswith("/profile"):
            return httpx.Response(200, json={"name": "Alice"})
        return httpx.Response(200, json=[{"full_name": "alice/x", "name": "x"}])

    state = await _orchestrator(handler).fetch("alice")

    assert state.status == FetchStatus.ERROR
    assert state.error_message == expected_message
    assert state.profile is None
    assert state.repositories == ()


@pytest.mark.asyncio
async def test_profile_failure_message_wins_when_both_requests_fail() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/profile"):
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(500)

    state = await _orchestrator(handler).fetch("alice")

    assert state.error_message == "Failed to load profile"


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_generic_error_state() -> None:
    def broken_factory(config: ServiceConfig) -> Any:
        raise RuntimeError("client construction failed")

    orchestrator = PortfolioFetchOrchestrator(CONFIG, client_factory=broken_factory)

    state = await orchestrator.fetch("alice")

    assert state.status == FetchStatus.ERROR
    assert state.error_message == "Failed to load portfolio data"


@pytest.mark.asyncio
async def test_observe_drops_terminal_snapshot_after_token_cancelled() -> None:
    orchestrator = _orchestrator(_ok_handler({"name": "Alice"}, []))
    token = CancellationToken()

    stream = orchestrator.observe("alice", token)
    first = await stream.__anext__()
    token.cancel("navigated away")
    rest = [snapshot async for snapshot in stream]

    assert first.status == FetchStatus.LOADING
    assert rest == []


@pytest.mark.asyncio
async def test_observe_with_already_cancelled_token_emits_nothing() -> None:
    orchestrator = _orchestrator(_ok_handler({}, []))
    token = CancellationToken()
    token.cancel()

    assert [snapshot async for snapshot in orchestrator.observe("alice", token)] == []


@pytest.mark.asyncio
@pytest.mark.parametrize("a_outcome", ["success", "failure"])
@pytest.mark.parametrize("a_settles_first", [True, False])
async def test_superseded_activation_never_reaches_state(a_outcome: str, a_settles_first: bool) -> None:
    gates = {"a": asyncio.Event(), "b": asyncio.Event()}
    fail_for = {"a"} if a_outcome == "failure" else set()
    seen: list[FetchState] = []
    binding = SubjectBinding(_orchestrator(_gated_handler(gates, fail_for=fail_for)), on_snapshot=seen.append)

    binding.set_subject("a")
    await asyncio.sleep(0.01)
    binding.set_subject("b")

    if a_settles_first:
        gates["a"].set()
        await asyncio.sleep(0.01)
        gates["b"].set()
    else:
        gates["b"].set()
        await _until_terminal(binding)
        gates["a"].set()
    await binding.wait_idle()

    assert [(s.subject, s.status) for s in seen] == [
        ("a", FetchStatus.LOADING),
        ("b", FetchStatus.LOADING),
        ("b", FetchStatus.SUCCESS),
    ]
    assert binding.state.subject == "b"
    assert binding.state.profile is not None and binding.state.profile.display_name == "B"


@pytest.mark.asyncio
async def test_close_suppresses_late_results() -> None:
    gates = {"a": asyncio.Event()}
    seen: list[FetchState] = []
    binding = SubjectBinding(_orchestrator(_gated_handler(gates)), on_snapshot=seen.append)

    binding.set_subject("a")
    binding.close()
    gates["a"].set()
    await binding.wait_idle()

    assert [s.status for s in seen] == [FetchStatus.LOADING]
    assert binding.state.is_loading
    with pytest.raises(RuntimeError):
        binding.set_subject("b")


@pytest.mark.asyncio
async def test_same_subject_is_not_refetched_but_reload_reruns_activation() -> None:
    profile_calls: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/profile"):
            profile_calls.append(request.url.params["username"])
            return httpx.Response(200, json={"name": "Alice"})
        return httpx.Response(200, json=[])

    seen: list[FetchState] = []
    binding = SubjectBinding(_orchestrator(handler), on_snapshot=seen.append)

    assert binding.state.status == FetchStatus.IDLE
    assert binding.set_subject("alice") is True
    assert binding.set_subject("alice") is False
    await binding.wait_idle()
    binding.reload()
    await binding.wait_idle()

    assert profile_calls == ["alice", "alice"]
    assert [s.status for s in seen] == [
        FetchStatus.LOADING,
        FetchStatus.SUCCESS,
        FetchStatus.LOADING,
        FetchStatus.SUCCESS,
    ]


def test_reload_without_subject_is_rejected() -> None:
    binding = SubjectBinding(_orchestrator(_ok_handler({}, [])))

    with pytest.raises(RuntimeError):
        binding.reload()


@pytest.mark.asyncio
async def test_alice_end_to_end_display_model() -> None:
    orchestrator = _orchestrator(
        _ok_handler(
            {"name": "Alice", "followers": 10},
            [{"full_name": "alice/x", "name": "x", "stargazers_count": 2, "topics": ["a", "b", "c", "d"]}],
        )
    )

    async with SubjectBinding(orchestrator) as binding:
        binding.set_subject("alice")
        assert project(binding.state).is_loading is True
        await binding.wait_idle()
        model = project(binding.state)

    assert model.headline == "Alice"
    assert model.followers == "10"
    assert model.following == PLACEHOLDER
    assert len(model.repositories) == 1
    assert model.repositories[0].topics == ("a", "b", "c")
    assert model.is_loading is False
    assert model.error_message is None


@pytest.mark.asyncio
async def test_failures_and_discards_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    orchestrator = _orchestrator(handler)
    token = CancellationToken()

    with caplog.at_level(logging.DEBUG):
        stream = orchestrator.observe("alice", token)
        await stream.__anext__()
        token.cancel("superseded by bob")
        assert [snapshot async for snapshot in stream] == []

    failures = [r for r in caplog.records if r.msg == "Profile service request failed"]
    assert failures and all(r.status_code == 500 for r in failures)
    assert any(r.msg == "Portfolio fetch failed" for r in caplog.records)
    assert any(r.msg == "Discarding superseded portfolio result" for r in caplog.records)


@pytest.mark.asyncio
@pytest.mark.parametrize("subject", ["", "   "])
async def test_empty_subject_is_rejected_before_any_request(subject: str) -> None:
    requests: list[httpx.Request] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={} if request.url.path.endswith("/profile") else [])

    orchestrator = _orchestrator(handler)

    with pytest.raises(ValueError):
        await orchestrator.fetch(subject)
    with pytest.raises(ValueError):
        [snapshot async for snapshot in orchestrator.observe(subject)]

    assert requests == []


@pytest.mark.asyncio
async def test_raising_listener_does_not_stall_the_activation(caplog: pytest.LogCaptureFixture) -> None:
    seen: list[FetchState] = []

    def listener(snapshot: FetchState) -> None:
        seen.append(snapshot)
        if snapshot.is_loading:
            raise RuntimeError("render failed")

    binding = SubjectBinding(_orchestrator(_ok_handler({"name": "Alice"}, [])), on_snapshot=listener)

    with caplog.at_level(logging.ERROR, logger="portfolio.orchestrator"):
        assert binding.set_subject("alice") is True
        await binding.wait_idle()

    assert binding.state.status == FetchStatus.SUCCESS
    assert [s.status for s in seen] == [FetchStatus.LOADING, FetchStatus.SUCCESS]
    assert any(record.msg == "Snapshot listener raised exception" for record in caplog.records)


@pytest.mark.asyncio
async def test_non_finite_counter_is_treated_as_absent() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/profile"):
            return httpx.Response(200, content=b'{"name": "Alice", "followers": Infinity}')
        return httpx.Response(200, content=b'[{"full_name": "alice/x", "stargazers_count": -Infinity}]')

    state = await _orchestrator(handler).fetch("alice")

    assert state.status == FetchStatus.SUCCESS
    assert state.profile is not None and state.profile.follower_count is None
    assert state.repositories[0].star_count == 0
