"""Command client for the proxy service."""

from __future__ import annotations

import abc
import asyncio
from typing import Any, Optional

import requests
from pydantic import ValidationError

from .config import Settings
from .errors import BackendError, ErrorType
from .models import ApplicationConfig, ProxyDesiredConfig, RuntimeStatus
from .utils import classify_error, create_requests_session, log_debug


class ProxyBackend(abc.ABC):
    """The command surface exposed by the proxy service."""

    @abc.abstractmethod
    async def load_config(self) -> ApplicationConfig:
        ...

    @abc.abstractmethod
    async def save_config(self, config: ApplicationConfig) -> None:
        ...

    @abc.abstractmethod
    async def get_proxy_status(self) -> RuntimeStatus:
        ...

    @abc.abstractmethod
    async def start_proxy_service(self, config: ProxyDesiredConfig) -> None:
        ...

    @abc.abstractmethod
    async def stop_proxy_service(self) -> None:
        ...

    @abc.abstractmethod
    async def generate_api_key(self) -> str:
        ...

    def close(self) -> None:  # pragma: no cover - default no-op
        """Release any resources held by the backend."""


def _error_reason(response: Optional[requests.Response]) -> str:
    if response is None:
        return "no response"
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            error = error.get("message")
        if error:
            return str(error)
    text = response.text.strip()
    return text or f"status={response.status_code}"


class HttpProxyBackend(ProxyBackend):
    """
    Talks to the proxy service over HTTP.

    Every command is ``POST {base_url}/commands/{name}`` with a JSON body and
    a JSON response. Calls are blocking ``requests`` calls pushed to a worker
    thread so they can be awaited from the event loop.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._session = create_requests_session()

    def _command_url(self, command: str) -> str:
        return f"{self._settings.proxy_backend_url}/commands/{command}"

    def _call(self, command: str, payload: Optional[dict] = None) -> Any:
        url = self._command_url(command)
        log_debug(self._settings, f"Sending command {command} to {url}")
        try:
            response = self._session.post(
                url,
                json=payload if payload is not None else {},
                timeout=self._settings.backend_timeout,
            )
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except requests.exceptions.HTTPError as exc:
            raise BackendError(command, _error_reason(exc.response), classify_error(exc)) from exc
        except (requests.exceptions.RequestException, ValueError) as exc:
            raise BackendError(command, str(exc) or exc.__class__.__name__, classify_error(exc)) from exc

    async def _invoke(self, command: str, payload: Optional[dict] = None) -> Any:
        return await asyncio.to_thread(self._call, command, payload)

    async def load_config(self) -> ApplicationConfig:
        data = await self._invoke("load_config")
        try:
            return ApplicationConfig.model_validate(data)
        except ValidationError as exc:
            raise BackendError("load_config", f"invalid config payload: {exc}", ErrorType.PARSE_ERROR) from exc

    async def save_config(self, config: ApplicationConfig) -> None:
        await self._invoke("save_config", {"config": config.model_dump(mode="json")})

    async def get_proxy_status(self) -> RuntimeStatus:
        data = await self._invoke("get_proxy_status")
        try:
            return RuntimeStatus.model_validate(data)
        except ValidationError as exc:
            raise BackendError("get_proxy_status", f"invalid status payload: {exc}", ErrorType.PARSE_ERROR) from exc

    async def start_proxy_service(self, config: ProxyDesiredConfig) -> None:
        await self._invoke("start_proxy_service", {"config": config.model_dump(mode="json")})

    async def stop_proxy_service(self) -> None:
        await self._invoke("stop_proxy_service")

    async def generate_api_key(self) -> str:
        data = await self._invoke("generate_api_key")
        key = data.get("api_key") if isinstance(data, dict) else data
        if not isinstance(key, str) or not key:
            raise BackendError("generate_api_key", "empty key returned", ErrorType.PARSE_ERROR)
        return key

    def close(self) -> None:
        self._session.close()
