"""Tests for API key regeneration."""

from __future__ import annotations

import asyncio

import pytest

from proxyctl.errors import BackendError, ConfigUnavailable, ConfirmationRejected, KeyGenerationFailed, PersistFailed
from proxyctl.keys import ApiKeyManager
from proxyctl.synchronizer import ConfigSynchronizer

from conftest import FakeBackend


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


async def _loaded(backend: FakeBackend, settings, clock=None):
    sync = ConfigSynchronizer(backend, settings)
    await sync.load()
    keys = ApiKeyManager(backend, sync, settings, clock=clock or FakeClock())
    return sync, keys


def test_confirmed_regeneration_replaces_key(backend: FakeBackend, settings) -> None:
    async def scenario():
        sync, keys = await _loaded(backend, settings)
        token = keys.request_regeneration()
        new_key = await keys.confirm(token.token)
        return sync, keys, new_key

    sync, keys, new_key = asyncio.run(scenario())

    assert new_key == "sk-regenerated"
    assert sync.current.proxy.api_key == "sk-regenerated"
    assert backend.stored.proxy.api_key == "sk-regenerated"
    assert keys.pending is None


def test_declined_regeneration_changes_nothing(backend: FakeBackend, settings) -> None:
    async def scenario():
        sync, keys = await _loaded(backend, settings)
        token = keys.request_regeneration()
        keys.decline(token.token)
        with pytest.raises(ConfirmationRejected):
            await keys.confirm(token.token)
        return sync

    sync = asyncio.run(scenario())

    assert sync.current.proxy.api_key == "K"
    assert "generate_api_key" not in backend.calls
    assert "save_config" not in backend.calls


def test_regenerate_with_declining_callback(backend: FakeBackend, settings) -> None:
    async def scenario():
        sync, keys = await _loaded(backend, settings)
        result = await keys.regenerate(lambda: False)
        return sync, keys, result

    sync, keys, result = asyncio.run(scenario())

    assert result is None
    assert keys.pending is None
    assert sync.current.proxy.api_key == "K"
    assert "generate_api_key" not in backend.calls


def test_regenerate_with_async_confirming_callback(backend: FakeBackend, settings) -> None:
    async def approve() -> bool:
        return True

    async def scenario():
        sync, keys = await _loaded(backend, settings)
        return sync, await keys.regenerate(approve)

    sync, result = asyncio.run(scenario())

    assert result == "sk-regenerated"
    assert sync.current.proxy.api_key == "sk-regenerated"


def test_generation_failure_keeps_prior_key(backend: FakeBackend, settings) -> None:
    backend.failures["generate_api_key"] = BackendError("generate_api_key", "generation failure")

    async def scenario():
        sync, keys = await _loaded(backend, settings)
        token = keys.request_regeneration()
        with pytest.raises(KeyGenerationFailed):
            await keys.confirm(token.token)
        return sync

    sync = asyncio.run(scenario())

    assert sync.current.proxy.api_key == "K"
    assert "save_config" not in backend.calls


def test_persist_failure_keeps_prior_key(backend: FakeBackend, settings) -> None:
    backend.failures["save_config"] = BackendError("save_config", "store unwritable")

    async def scenario():
        sync, keys = await _loaded(backend, settings)
        token = keys.request_regeneration()
        with pytest.raises(PersistFailed):
            await keys.confirm(token.token)
        return sync

    sync = asyncio.run(scenario())

    assert sync.current.proxy.api_key == "K"
    assert backend.stored.proxy.api_key == "K"


def test_new_request_supersedes_old_token(backend: FakeBackend, settings) -> None:
    async def scenario():
        _, keys = await _loaded(backend, settings)
        first = keys.request_regeneration()
        second = keys.request_regeneration()
        with pytest.raises(ConfirmationRejected):
            await keys.confirm(first.token)
        return await keys.confirm(second.token)

    assert asyncio.run(scenario()) == "sk-regenerated"
    assert backend.calls.count("generate_api_key") == 1


def test_expired_token_is_rejected(backend: FakeBackend, settings) -> None:
    clock = FakeClock()

    async def scenario():
        _, keys = await _loaded(backend, settings, clock)
        token = keys.request_regeneration()
        clock.now += settings.confirmation_ttl + 1
        with pytest.raises(ConfirmationRejected):
            await keys.confirm(token.token)

    asyncio.run(scenario())

    assert "generate_api_key" not in backend.calls


def test_regeneration_requires_loaded_config(backend: FakeBackend, settings) -> None:
    keys = ApiKeyManager(backend, ConfigSynchronizer(backend, settings), settings)

    with pytest.raises(ConfigUnavailable):
        keys.request_regeneration()
