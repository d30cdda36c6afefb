"""Periodic polling of the proxy service's actual runtime status."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from .backend import ProxyBackend
from .config import Settings
from .errors import ErrorType
from .models import RuntimeStatus
from .observers import Observers
from .scheduling import PeriodicTask
from .utils import log_debug, log_error


class StatusPoller:
    """
    Keeps the last known RuntimeStatus up to date.

    A failed poll keeps the previous status (stale but available) and is only
    logged. Polls are serialized: an out-of-band ``poll_now()`` waits for a
    poll already in flight instead of overlapping it. After ``stop()`` no new
    query is issued and results that resolve late are dropped.
    """

    def __init__(self, backend: ProxyBackend, settings: Settings):
        self._backend = backend
        self._settings = settings
        self._status = RuntimeStatus()
        self._has_status = False
        self._lock = asyncio.Lock()
        self._observers: Observers[RuntimeStatus] = Observers("status")
        self._timer: Optional[PeriodicTask] = None
        self._stopped = False
        self._sequence = 0
        self.consecutive_failures = 0

    @property
    def status(self) -> RuntimeStatus:
        return self._status

    @property
    def has_status(self) -> bool:
        return self._has_status

    @property
    def poll_sequence(self) -> int:
        """Number of polls issued so far; the current poll's number while one runs."""
        return self._sequence

    @property
    def running(self) -> bool:
        return self._timer is not None and self._timer.active

    @property
    def stopped(self) -> bool:
        return self._stopped

    def subscribe(self, callback: Callable[[RuntimeStatus], None]) -> Callable[[], None]:
        return self._observers.subscribe(callback)

    def start(self) -> None:
        """Begin polling on the configured cadence."""
        if self._stopped:
            raise RuntimeError("Status poller was stopped and cannot be restarted")
        if self._timer is None:
            self._timer = PeriodicTask(self._settings.poll_interval, self._tick, name="status-poller").start()
            log_debug(self._settings, f"Status poller started ({self._settings.poll_interval}s cadence)")

    async def _tick(self) -> None:
        await self.poll()

    async def poll(self) -> RuntimeStatus:
        """Query the service once and return the (possibly stale) status."""
        if self._stopped:
            return self._status

        async with self._lock:
            if self._stopped:
                return self._status
            self._sequence += 1
            try:
                status = await self._backend.get_proxy_status()
            except Exception as exc:  # pylint: disable=broad-except
                if not self._stopped:
                    self.consecutive_failures += 1
                    log_error(
                        getattr(exc, "error_type", ErrorType.UNKNOWN_ERROR),
                        f"Status poll failed ({self.consecutive_failures} in a row), keeping last known status",
                        endpoint="get_proxy_status",
                        exception=exc,
                    )
                return self._status

            if self._stopped:
                log_debug(self._settings, "Discarding status that resolved after the poller stopped")
                return self._status

            self.consecutive_failures = 0
            self._status = status
            self._has_status = True
            self._observers.publish(status)
            return status

    async def poll_now(self) -> RuntimeStatus:
        """Poll immediately, outside the regular cadence."""
        return await self.poll()

    def stop(self) -> None:
        """Cancel the timer and release its handle. Safe to call twice."""
        self._stopped = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            log_debug(self._settings, "Status poller stopped")

    async def aclose(self) -> None:
        """Stop polling and wait for a tick already in flight to unwind."""
        self._stopped = True
        timer, self._timer = self._timer, None
        if timer is not None:
            await timer.aclose()
            log_debug(self._settings, "Status poller stopped")
