"""Tests for the status poller."""

from __future__ import annotations

import asyncio

from proxyctl.errors import BackendError, ErrorType
from proxyctl.models import RuntimeStatus
from proxyctl.poller import StatusPoller

from conftest import FakeBackend

RUNNING = RuntimeStatus(running=True, port=8045, base_url="http://127.0.0.1:8045", active_account_count=4)


def test_poll_updates_status_and_notifies(backend: FakeBackend, settings) -> None:
    backend.status = RUNNING

    async def scenario():
        poller = StatusPoller(backend, settings)
        seen = []
        poller.subscribe(seen.append)
        result = await poller.poll()
        return poller, result, seen

    poller, result, seen = asyncio.run(scenario())

    assert result == RUNNING
    assert poller.status == RUNNING
    assert poller.has_status
    assert seen == [RUNNING]


def test_failed_polls_keep_last_known_status(backend: FakeBackend, settings) -> None:
    backend.status = RUNNING

    async def scenario():
        poller = StatusPoller(backend, settings)
        seen = []
        poller.subscribe(seen.append)
        await poller.poll()
        backend.failures["get_proxy_status"] = BackendError("get_proxy_status", "service unreachable")
        results = [await poller.poll() for _ in range(3)]
        return poller, results, seen

    poller, results, seen = asyncio.run(scenario())

    assert results == [RUNNING, RUNNING, RUNNING]
    assert poller.status == RUNNING
    assert poller.consecutive_failures == 3
    assert seen == [RUNNING]


def test_failure_counter_resets_after_success(backend: FakeBackend, settings) -> None:
    async def scenario():
        poller = StatusPoller(backend, settings)
        backend.failures["get_proxy_status"] = RuntimeError("boom")
        await poller.poll()
        await poller.poll()
        del backend.failures["get_proxy_status"]
        await poller.poll()
        return poller

    poller = asyncio.run(scenario())

    assert poller.consecutive_failures == 0


def test_polls_never_overlap(backend: FakeBackend, settings) -> None:
    async def scenario():
        poller = StatusPoller(backend, settings)
        gate = asyncio.Event()
        backend.gates["get_proxy_status"] = gate
        tasks = [asyncio.create_task(poller.poll_now()) for _ in range(3)]
        await asyncio.sleep(0)
        gate.set()
        await asyncio.gather(*tasks)

    asyncio.run(scenario())

    assert backend.calls.count("get_proxy_status") == 3
    assert backend.max_polls_in_flight == 1


def test_result_resolving_after_stop_is_discarded(backend: FakeBackend, settings) -> None:
    backend.status = RUNNING

    async def scenario():
        poller = StatusPoller(backend, settings)
        seen = []
        poller.subscribe(seen.append)
        gate = asyncio.Event()
        backend.gates["get_proxy_status"] = gate
        pending = asyncio.create_task(poller.poll())
        await asyncio.sleep(0)
        poller.stop()
        gate.set()
        result = await pending
        return poller, result, seen

    poller, result, seen = asyncio.run(scenario())

    assert result == RuntimeStatus()
    assert poller.status == RuntimeStatus()
    assert not poller.has_status
    assert seen == []


def test_no_queries_after_stop(backend: FakeBackend, settings) -> None:
    async def scenario():
        poller = StatusPoller(backend, settings)
        poller.stop()
        await poller.poll()
        await poller.poll_now()

    asyncio.run(scenario())

    assert backend.calls == []


def test_periodic_polling_runs_until_stopped(backend: FakeBackend, settings) -> None:
    async def scenario():
        poller = StatusPoller(backend, settings)
        poller.start()
        assert poller.running
        await asyncio.sleep(settings.poll_interval * 6)
        poller.stop()
        polled = backend.calls.count("get_proxy_status")
        await asyncio.sleep(settings.poll_interval * 4)
        return poller, polled

    poller, polled = asyncio.run(scenario())

    assert polled >= 2
    assert backend.calls.count("get_proxy_status") == polled
    assert not poller.running


def test_failed_poll_is_logged_with_the_backend_error_type(backend: FakeBackend, settings, capsys) -> None:
    backend.failures["get_proxy_status"] = BackendError("get_proxy_status", "not JSON", ErrorType.PARSE_ERROR)

    asyncio.run(StatusPoller(backend, settings).poll())

    out = capsys.readouterr().out
    assert "Type: parse_error" in out
    assert "network_error" not in out


def test_unexpected_poll_failure_is_logged_as_unknown(backend: FakeBackend, settings, capsys) -> None:
    backend.failures["get_proxy_status"] = RuntimeError("boom")

    asyncio.run(StatusPoller(backend, settings).poll())

    assert "Type: unknown_error" in capsys.readouterr().out


def test_aclose_waits_for_the_polling_task(backend: FakeBackend, settings) -> None:
    async def scenario():
        poller = StatusPoller(backend, settings)
        poller.start()
        await asyncio.sleep(settings.poll_interval * 2)
        await poller.aclose()
        others = [task for task in asyncio.all_tasks() if task is not asyncio.current_task()]
        polled = backend.calls.count("get_proxy_status")
        await poller.poll_now()
        return poller, others, polled

    poller, others, polled = asyncio.run(scenario())

    assert poller.stopped
    assert not poller.running
    assert others == []
    assert backend.calls.count("get_proxy_status") == polled
