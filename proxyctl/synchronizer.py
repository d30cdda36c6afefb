"""Owner of the in-memory mirror of the persisted application config."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from .backend import ProxyBackend
from .config import Settings
from .errors import (
    ConfigUnavailable,
    ErrorType,
    InvalidConfig,
    PersistFailed,
    PortLocked,
    failure_reason,
)
from .models import ApplicationConfig, ProxyConfigPatch, ProxyDesiredConfig
from .observers import Observers
from .utils import log_debug, log_error


def _describe_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'value'}: {error['msg']}"
        for error in exc.errors()
    )


class ConfigSynchronizer:
    """
    Single writer of the desired configuration.

    Updates are merged into the ``proxy`` field, persisted as a whole
    envelope and only then applied to memory, so a failed save leaves the
    last known good config in place. Updates run one at a time in the
    order they were issued.
    """

    def __init__(self, backend: ProxyBackend, settings: Settings):
        self._backend = backend
        self._settings = settings
        self._current: Optional[ApplicationConfig] = None
        self._lock = asyncio.Lock()
        self._observers: Observers[ApplicationConfig] = Observers("config")
        self.port_guard: Callable[[], bool] = lambda: False
        self._closed = False

    @property
    def current(self) -> Optional[ApplicationConfig]:
        return self._current

    @property
    def available(self) -> bool:
        return self._current is not None

    def close(self) -> None:
        """Ignore results of backend calls that are still in flight."""
        self._closed = True

    @property
    def update_in_progress(self) -> bool:
        return self._lock.locked()

    def subscribe(self, callback: Callable[[ApplicationConfig], None]) -> Callable[[], None]:
        return self._observers.subscribe(callback)

    async def load(self) -> ApplicationConfig:
        """Fetch the persisted config and replace the in-memory mirror."""
        async with self._lock:
            try:
                config = await self._backend.load_config()
            except Exception as exc:  # pylint: disable=broad-except
                log_error(ErrorType.CONFIG_UNAVAILABLE, "Failed to load configuration", endpoint="load_config", exception=exc)
                raise ConfigUnavailable(f"Failed to load configuration: {failure_reason(exc)}") from exc
            if self._closed:
                log_debug(self._settings, "Discarding config loaded after the session closed")
                return config
            self._current = config
        print(f"Loaded proxy configuration (port {config.proxy.port}, auto_start={config.proxy.auto_start}).")
        self._observers.publish(config)
        return config

    async def apply_partial_update(
        self, patch: Union[ProxyConfigPatch, Mapping[str, Any]]
    ) -> ApplicationConfig:
        """Merge ``patch`` into the proxy settings, persist, then publish."""
        if not isinstance(patch, ProxyConfigPatch):
            try:
                patch = ProxyConfigPatch.model_validate(dict(patch))
            except ValidationError as exc:
                raise InvalidConfig(f"Invalid proxy settings: {_describe_validation_error(exc)}") from exc
        changes = patch.changes()

        async with self._lock:
            current = self._current
            if current is None:
                raise ConfigUnavailable("Proxy configuration has not been loaded.")

            if "port" in changes and changes["port"] != current.proxy.port and self.port_guard():
                raise PortLocked()

            merged = {**current.proxy.model_dump(), **changes}
            try:
                proxy = ProxyDesiredConfig.model_validate(merged)
            except ValidationError as exc:
                raise InvalidConfig(f"Invalid proxy settings: {_describe_validation_error(exc)}") from exc

            updated = current.with_proxy(proxy)
            try:
                await self._backend.save_config(updated)
            except Exception as exc:  # pylint: disable=broad-except
                log_error(ErrorType.PERSIST_FAILED, "Failed to save configuration", endpoint="save_config", exception=exc)
                raise PersistFailed(f"Failed to save configuration: {failure_reason(exc)}") from exc
            if self._closed:
                log_debug(self._settings, "Discarding config save that finished after the session closed")
                return updated
            self._current = updated

        log_debug(self._settings, f"Applied proxy config update: {sorted(changes)}")
        self._observers.publish(updated)
        return updated
