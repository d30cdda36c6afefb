"""Start/stop state machine for the proxy service."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Awaitable

from .backend import ProxyBackend
from .config import Settings
from .errors import Busy, ConfigUnavailable, ErrorType, OperationFailed, failure_reason
from .models import ProxyDesiredConfig, RuntimeStatus
from .poller import StatusPoller
from .synchronizer import ConfigSynchronizer
from .utils import log_debug, log_error


class LifecycleState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


BUSY_STATES = frozenset({LifecycleState.STARTING, LifecycleState.STOPPING})


class LifecycleController:
    """
    Issues start/stop commands, one transition at a time.

    ``toggle()`` is the only entry point. It is rejected with ``Busy`` while a
    transition (or a config write) is in flight, so two commands can never
    race each other. A failed command puts the controller back in the state
    it started from. Every finished transition triggers an immediate poll.

    While idle the controller follows the observed status, ignoring polls
    that were already in flight when the last transition finished.
    """

    def __init__(
        self,
        backend: ProxyBackend,
        synchronizer: ConfigSynchronizer,
        poller: StatusPoller,
        settings: Settings,
    ):
        self._backend = backend
        self._synchronizer = synchronizer
        self._poller = poller
        self._settings = settings
        self._state = LifecycleState.STOPPED
        self._settled_after = 0
        self._closed = False
        poller.subscribe(self._on_status)

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state in BUSY_STATES

    def close(self) -> None:
        """Drop the outcome of a command that finishes after the session closed."""
        self._closed = True

    def _on_status(self, status: RuntimeStatus) -> None:
        if self.busy or self._poller.poll_sequence <= self._settled_after:
            return
        observed = LifecycleState.RUNNING if status.running else LifecycleState.STOPPED
        if observed is not self._state:
            log_debug(self._settings, f"Lifecycle state {self._state.value} -> {observed.value} (observed)")
            self._state = observed

    async def toggle(self) -> LifecycleState:
        """Start the service when stopped, stop it when running."""
        if self.busy:
            raise Busy()
        if self._synchronizer.update_in_progress:
            raise Busy("A configuration update is still being saved.")
        config = self._synchronizer.current
        if config is None:
            raise ConfigUnavailable("Proxy configuration has not been loaded.")

        if self._state is LifecycleState.RUNNING:
            await self._stop()
        else:
            await self._start(config.proxy.model_copy(deep=True))
        return self._state

    async def _start(self, proxy: ProxyDesiredConfig) -> None:
        print(f"Starting proxy service on port {proxy.port}...")
        await self._transition(
            LifecycleState.STARTING,
            LifecycleState.RUNNING,
            LifecycleState.STOPPED,
            "start_proxy_service",
            self._backend.start_proxy_service(proxy),
        )

    async def _stop(self) -> None:
        print("Stopping proxy service...")
        await self._transition(
            LifecycleState.STOPPING,
            LifecycleState.STOPPED,
            LifecycleState.RUNNING,
            "stop_proxy_service",
            self._backend.stop_proxy_service(),
        )

    async def _transition(
        self,
        pending: LifecycleState,
        target: LifecycleState,
        fallback: LifecycleState,
        command: str,
        call: Awaitable[None],
    ) -> None:
        self._state = pending
        try:
            await call
        except asyncio.CancelledError:
            self._settle(fallback)
            raise
        except Exception as exc:  # pylint: disable=broad-except
            if self._closed:
                log_debug(self._settings, f"Ignoring {command} failure reported after the session closed")
                raise OperationFailed(failure_reason(exc)) from exc
            self._settle(fallback)
            log_error(ErrorType.OPERATION_FAILED, f"{command} was rejected", endpoint=command, exception=exc)
            await self._poller.poll_now()
            raise OperationFailed(failure_reason(exc)) from exc

        if self._closed:
            log_debug(self._settings, f"Ignoring {command} result reported after the session closed")
            return
        self._settle(target)
        print(f"Proxy service {target.value}.")
        await self._poller.poll_now()

    def _settle(self, state: LifecycleState) -> None:
        self._state = state
        self._settled_after = self._poller.poll_sequence
