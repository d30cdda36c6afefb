"""Cancellable recurring tasks on the running event loop."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from .errors import ErrorType
from .utils import log_error


class PeriodicTask:
    """
    Runs an async callback, then sleeps ``interval`` seconds, until cancelled.

    The next run is scheduled only after the previous one finished, so runs
    never overlap. ``cancel()`` releases the underlying task handle; once
    released the task cannot be restarted.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Awaitable[None]],
        *,
        name: str = "periodic-task",
        run_immediately: bool = False,
    ):
        self._interval = interval
        self._callback = callback
        self._name = name
        self._run_immediately = run_immediately
        self._task: Optional[asyncio.Task] = None
        self._released = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def released(self) -> bool:
        return self._released

    def start(self) -> "PeriodicTask":
        if self._released:
            raise RuntimeError(f"{self._name} was cancelled and cannot be restarted")
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run(), name=self._name)
        return self

    async def _run(self) -> None:
        if not self._run_immediately:
            await asyncio.sleep(self._interval)
        while True:
            try:
                await self._callback()
            except Exception as exc:  # pylint: disable=broad-except
                log_error(ErrorType.UNKNOWN_ERROR, f"{self._name} run failed", exception=exc)
            await asyncio.sleep(self._interval)

    def cancel(self) -> None:
        """Stop scheduling further runs and release the task handle."""
        if self._task is not None:
            self._task.cancel()
        self._task = None
        self._released = True

    async def aclose(self) -> None:
        """Cancel and wait until the task has actually finished."""
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
