"""Tests for the request pipeline of ``SessionClient``.

The client runs against ``FakeTransport``.  Protected routes accept only
the renewed token ``T2``; the renewal route is held back on an event so
that several calls can expire while one renewal is in flight.
"""

from __future__ import annotations

import asyncio

import pytest  # type: ignore
from prometheus_client import REGISTRY

from authsession.errors import (
    ApiError,
    DoubleExpiryError,
    RenewalFailedError,
    TransientApiError,
    TransportError,
)
from authsession.models import ApiResponse

from tests.helpers.fake_transport import bearer_only
from tests.helpers.harness import REFRESH_PATH, build_harness, wait_until

SESSION_EXPIRED = "Session expired. Please login again."


def gated_renewal(gate: asyncio.Event, response: ApiResponse):
    async def handler(call):
        await gate.wait()
        return response

    return handler


def route_items(harness, count: int = 3, token: str = "T2") -> None:
    for i in range(count):
        harness.transport.route("GET", f"/items/{i}", bearer_only(token, {"id": i}))


@pytest.mark.asyncio  # type: ignore
async def test_attaches_bearer_token_and_returns_payload() -> None:
    h = build_harness()
    h.transport.route("GET", "/profile", bearer_only("T1", {"user": {"id": "u1"}}))

    assert await h.client.get("/profile") == {"user": {"id": "u1"}}
    call = h.transport.calls[0]
    assert call.authorization == "Bearer T1"
    assert call.headers["Content-Type"] == "application/json"
    assert h.renewal_calls == []


@pytest.mark.asyncio  # type: ignore
async def test_concurrent_expiry_renews_once_and_replays_all() -> None:
    h = build_harness()
    gate = asyncio.Event()
    h.transport.route("POST", REFRESH_PATH, gated_renewal(gate, ApiResponse(200, {"accessToken": "T2"})))
    route_items(h)
    replays_before = REGISTRY.get_sample_value("authsession_replays_total") or 0.0

    tasks = [asyncio.create_task(h.client.get(f"/items/{i}")) for i in range(3)]
    await wait_until(lambda: h.client.coordinator.pending_waiters == 2)
    gate.set()
    results = await asyncio.gather(*tasks)

    assert results == [{"id": 0}, {"id": 1}, {"id": 2}]
    assert len(h.renewal_calls) == 1
    renewal = h.renewal_calls[0]
    assert renewal.payload == {"refreshToken": "R1"}
    assert renewal.authorization is None
    replayed = [c for c in h.transport.calls if c.path.startswith("/items/") and c.authorization == "Bearer T2"]
    assert sorted(c.path for c in replayed) == ["/items/0", "/items/1", "/items/2"]
    assert h.store.get().access_token == "T2"
    assert h.store.get().refresh_token == "R1"
    assert h.notifier.messages == []
    assert h.navigator.redirects == 0
    assert REGISTRY.get_sample_value("authsession_replays_total") == replays_before + 3


@pytest.mark.asyncio  # type: ignore
async def test_renewal_failure_rejects_all_and_tears_down_once() -> None:
    h = build_harness()
    gate = asyncio.Event()
    h.transport.route(
        "POST", REFRESH_PATH, gated_renewal(gate, ApiResponse(401, {"message": "Invalid refresh token"}))
    )
    route_items(h)

    tasks = [asyncio.create_task(h.client.get(f"/items/{i}")) for i in range(3)]
    await wait_until(lambda: h.client.coordinator.pending_waiters == 2)
    gate.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert all(isinstance(r, RenewalFailedError) for r in results)
    assert results[0] is results[1] is results[2]
    assert results[0].message == "Invalid refresh token"
    assert len(h.renewal_calls) == 1
    # no replays happened
    assert len([c for c in h.transport.calls if c.path.startswith("/items/")]) == 3
    assert h.store.get() is None
    assert h.notifier.messages == [SESSION_EXPIRED]
    assert h.navigator.redirects == 0
    h.scheduler.fire_all()
    assert h.navigator.redirects == 1
    assert h.scheduler.timers[0].delay == 1.0


@pytest.mark.asyncio  # type: ignore
async def test_call_after_teardown_does_not_repeat_notification() -> None:
    h = build_harness()
    h.transport.route("POST", REFRESH_PATH, lambda call: ApiResponse(401, {"message": "Invalid refresh token"}))
    route_items(h)

    with pytest.raises(RenewalFailedError):
        await h.client.get("/items/0")
    with pytest.raises(RenewalFailedError, match="No refresh token"):
        await h.client.get("/items/1")

    assert len(h.renewal_calls) == 1
    assert h.notifier.messages == [SESSION_EXPIRED]
    h.scheduler.fire_all()
    assert h.navigator.redirects == 1


@pytest.mark.asyncio  # type: ignore
async def test_double_expiry_fails_without_second_renewal() -> None:
    h = build_harness()
    h.transport.route("POST", REFRESH_PATH, lambda call: ApiResponse(200, {"accessToken": "T2"}))
    h.transport.route("GET", "/items/0", bearer_only("never-valid"))

    with pytest.raises(DoubleExpiryError) as excinfo:
        await h.client.get("/items/0")

    assert excinfo.value.status == 401
    assert len(h.renewal_calls) == 1
    item_calls = h.transport.calls_to("/items/0")
    assert [c.authorization for c in item_calls] == ["Bearer T1", "Bearer T2"]
    # the session itself survives
    assert h.store.get().access_token == "T2"
    assert h.notifier.messages == []
    assert h.scheduler.timers == []


@pytest.mark.asyncio  # type: ignore
async def test_other_error_notifies_message_from_body() -> None:
    h = build_harness()
    h.transport.route("POST", "/jobs", lambda call: ApiResponse(422, {"message": "Title is required"}))

    with pytest.raises(ApiError) as excinfo:
        await h.client.post("/jobs", {"title": ""})

    assert not isinstance(excinfo.value, TransientApiError)
    assert excinfo.value.status == 422
    assert excinfo.value.payload == {"message": "Title is required"}
    assert h.notifier.messages == ["Title is required"]
    assert h.transport.calls[0].payload == {"title": ""}


@pytest.mark.asyncio  # type: ignore
async def test_server_error_without_body_uses_generic_message() -> None:
    h = build_harness()
    h.transport.route("DELETE", "/jobs/1", lambda call: ApiResponse(503, None))

    with pytest.raises(TransientApiError) as excinfo:
        await h.client.delete("/jobs/1")

    assert excinfo.value.status == 503
    assert h.notifier.messages == ["An error occurred"]


@pytest.mark.asyncio  # type: ignore
async def test_network_failure_is_transient() -> None:
    h = build_harness()

    def unreachable(call):
        raise TransportError("connection refused")

    h.transport.route("GET", "/jobs", unreachable)

    with pytest.raises(TransientApiError) as excinfo:
        await h.client.get("/jobs")

    assert excinfo.value.status is None
    assert isinstance(excinfo.value.__cause__, TransportError)
    assert h.notifier.messages == ["Network error. Please check your connection."]


@pytest.mark.asyncio  # type: ignore
async def test_replay_outcome_is_returned_to_caller() -> None:
    h = build_harness()
    h.transport.route("POST", REFRESH_PATH, lambda call: ApiResponse(200, {"accessToken": "T2"}))

    def flaky(call):
        if call.authorization == "Bearer T2":
            return ApiResponse(500, {"message": "Database unavailable"})
        return ApiResponse(401, None)

    h.transport.route("PUT", "/jobs/1", flaky)

    with pytest.raises(TransientApiError, match="Database unavailable"):
        await h.client.put("/jobs/1", {"title": "x"})
    # only the replay's failure is reported; the expiry stays silent
    assert h.notifier.messages == ["Database unavailable"]
    assert [c.payload for c in h.transport.calls_to("/jobs/1")] == [{"title": "x"}, {"title": "x"}]


@pytest.mark.asyncio  # type: ignore
async def test_unauthenticated_401_is_a_plain_rejection() -> None:
    h = build_harness(credential=None)
    h.transport.route("POST", "/auth/login", lambda call: ApiResponse(401, {"message": "Invalid credentials"}))

    with pytest.raises(ApiError, match="Invalid credentials") as excinfo:
        await h.client.request("POST", "/auth/login", {"email": "a@b.c"}, authenticated=False)

    assert not isinstance(excinfo.value, RenewalFailedError)
    assert h.renewal_calls == []
    assert h.transport.calls[0].authorization is None
    assert h.notifier.messages == ["Invalid credentials"]


@pytest.mark.asyncio  # type: ignore
async def test_missing_session_triggers_teardown() -> None:
    h = build_harness(credential=None)
    h.transport.route("GET", "/items/0", bearer_only("T2"))

    with pytest.raises(RenewalFailedError, match="No refresh token"):
        await h.client.get("/items/0")

    assert h.transport.calls[0].authorization is None
    assert h.renewal_calls == []
    assert h.notifier.messages == [SESSION_EXPIRED]


@pytest.mark.asyncio  # type: ignore
async def test_query_params_are_forwarded() -> None:
    h = build_harness()
    h.transport.route("GET", "/jobs", bearer_only("T1", []))

    assert await h.client.get("/jobs", params={"page": 2}) == []
    assert h.transport.calls[0].params == {"page": 2}


@pytest.mark.asyncio  # type: ignore
async def test_context_manager_closes_transport() -> None:
    h = build_harness()
    async with h.client as client:
        assert client is h.client
    assert h.transport.closed is True
