"""Minimal subscription list for publishing state snapshots."""

from __future__ import annotations

from typing import Callable, Generic, List, TypeVar

from .errors import ErrorType
from .utils import log_error

T = TypeVar("T")


class Observers(Generic[T]):
    """Synchronous observer list. A failing observer never blocks the others."""

    def __init__(self, name: str):
        self._name = name
        self._callbacks: List[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it again."""
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    def publish(self, value: T) -> None:
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception as exc:  # pylint: disable=broad-except
                log_error(ErrorType.UNKNOWN_ERROR, f"{self._name} observer failed", exception=exc)

    def __len__(self) -> int:
        return len(self._callbacks)
