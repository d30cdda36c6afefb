"""Shared fixtures: an in-memory proxy service backend."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import pytest

from proxyctl.backend import ProxyBackend
from proxyctl.config import Settings
from proxyctl.models import ApplicationConfig, ProxyDesiredConfig, RuntimeStatus


def sample_config(**proxy_overrides) -> ApplicationConfig:
    proxy = {"enabled": False, "port": 8045, "api_key": "K", "auto_start": False}
    proxy.update(proxy_overrides)
    return ApplicationConfig.model_validate(
        {
            "language": "en",
            "theme": "dark",
            "auto_refresh": True,
            "refresh_interval": 15,
            "auto_sync": False,
            "sync_interval": 5,
            "default_export_path": None,
            "proxy": proxy,
        }
    )


class FakeBackend(ProxyBackend):
    """Records every command; commands can be made to fail or block."""

    def __init__(self, config: Optional[ApplicationConfig] = None, status: Optional[RuntimeStatus] = None):
        self.stored = config if config is not None else sample_config()
        self.status = status if status is not None else RuntimeStatus()
        self.calls: List[str] = []
        self.saved: List[ApplicationConfig] = []
        self.started_with: List[ProxyDesiredConfig] = []
        self.failures: Dict[str, Exception] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.next_key = "sk-regenerated"
        self.polls_in_flight = 0
        self.max_polls_in_flight = 0
        self.closed = False

    async def _enter(self, command: str) -> None:
        self.calls.append(command)
        gate = self.gates.get(command)
        if gate is not None:
            await gate.wait()
        failure = self.failures.get(command)
        if failure is not None:
            raise failure

    async def load_config(self) -> ApplicationConfig:
        await self._enter("load_config")
        return self.stored.model_copy(deep=True)

    async def save_config(self, config: ApplicationConfig) -> None:
        await self._enter("save_config")
        self.saved.append(config)
        self.stored = config.model_copy(deep=True)

    async def get_proxy_status(self) -> RuntimeStatus:
        self.polls_in_flight += 1
        self.max_polls_in_flight = max(self.max_polls_in_flight, self.polls_in_flight)
        status = self.status
        try:
            await self._enter("get_proxy_status")
            return status
        finally:
            self.polls_in_flight -= 1

    async def start_proxy_service(self, config: ProxyDesiredConfig) -> None:
        await self._enter("start_proxy_service")
        self.started_with.append(config)
        self.status = RuntimeStatus(
            running=True,
            port=config.port,
            base_url=f"http://127.0.0.1:{config.port}",
            active_account_count=2,
        )

    async def stop_proxy_service(self) -> None:
        await self._enter("stop_proxy_service")
        self.status = RuntimeStatus(running=False, port=self.status.port)

    async def generate_api_key(self) -> str:
        await self._enter("generate_api_key")
        return self.next_key

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def settings() -> Settings:
    return Settings(poll_interval=0.01, confirmation_ttl=30)


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()
