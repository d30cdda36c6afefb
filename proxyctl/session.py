"""Wiring of the control-plane components for one session."""

from __future__ import annotations

from .backend import ProxyBackend
from .config import Settings
from .errors import ConfigUnavailable, ControlPlaneError
from .examples import generate
from .keys import ApiKeyManager
from .lifecycle import LifecycleController, LifecycleState
from .models import ApplicationConfig, ClientExamples, ProxyStatusResponse
from .poller import StatusPoller
from .synchronizer import ConfigSynchronizer
from .utils import log_debug


class ControlPlane:
    """
    Owns the synchronizer, poller, lifecycle controller and key manager.

    ``open()`` loads the desired config (a failure is tolerated and can be
    retried with ``reload_config()``), takes a first status sample, starts
    the periodic poller and honours ``proxy.auto_start``. ``close()`` stops
    polling and waits for it to unwind; commands still in flight may finish
    but their results are ignored. A closed session is not reopened.
    """

    def __init__(self, backend: ProxyBackend, settings: Settings):
        self.backend = backend
        self.settings = settings
        self.synchronizer = ConfigSynchronizer(backend, settings)
        self.poller = StatusPoller(backend, settings)
        self.lifecycle = LifecycleController(backend, self.synchronizer, self.poller, settings)
        self.keys = ApiKeyManager(backend, self.synchronizer, settings)
        self.synchronizer.port_guard = self.port_locked
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def port_locked(self) -> bool:
        """The port may only change while the service is fully stopped."""
        return self.poller.status.running or self.lifecycle.state is not LifecycleState.STOPPED

    async def open(self) -> None:
        try:
            await self.synchronizer.load()
        except ConfigUnavailable as exc:
            print(f"Warning: {exc.message} Config-dependent operations are disabled until reload.")

        await self.poller.poll_now()
        self.poller.start()
        await self._auto_start()

    async def _auto_start(self) -> None:
        config = self.synchronizer.current
        if config is None or not config.proxy.auto_start:
            return
        if self.poller.status.running:
            log_debug(self.settings, "auto_start set but proxy service is already running")
            return
        print("auto_start is enabled, starting proxy service...")
        try:
            await self.lifecycle.toggle()
        except ControlPlaneError as exc:
            print(f"Auto start failed: {exc.message}")

    async def reload_config(self) -> ApplicationConfig:
        return await self.synchronizer.load()

    def snapshot(self) -> ProxyStatusResponse:
        return ProxyStatusResponse(
            status=self.poller.status,
            lifecycle_state=self.lifecycle.state.value,
            busy=self.lifecycle.busy,
            config_available=self.synchronizer.available,
            consecutive_poll_failures=self.poller.consecutive_failures,
        )

    def examples_for(self, model_id: str) -> ClientExamples:
        return generate(
            model_id,
            self.poller.status,
            self.synchronizer.current,
            default_port=self.settings.default_proxy_port,
        )

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.synchronizer.close()
        self.lifecycle.close()
        await self.poller.aclose()
        self.backend.close()
        print("Control plane session closed.")

