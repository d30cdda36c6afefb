"""API key regeneration behind an explicit confirmation step."""

from __future__ import annotations

import inspect
import secrets
import time
from typing import Awaitable, Callable, Optional, Union

from .backend import ProxyBackend
from .config import Settings
from .errors import ConfigUnavailable, ConfirmationRejected, ErrorType, KeyGenerationFailed, failure_reason
from .models import ConfirmationToken
from .synchronizer import ConfigSynchronizer
from .utils import log_error, mask_token

ConfirmCallback = Callable[[], Union[bool, Awaitable[bool]]]


def _same_token(expected: str, given: str) -> bool:
    return secrets.compare_digest(expected.encode("utf-8"), given.encode("utf-8"))


class ApiKeyManager:
    """
    Issues a new proxy API key.

    Regeneration is destructive (the old key stops working), so it is a two
    step protocol: ``request_regeneration()`` hands out a single-use token
    and only ``confirm(token)`` talks to the backend. Requesting again
    supersedes any earlier token. If key generation or the config save
    fails, the previous key stays in place.
    """

    def __init__(
        self,
        backend: ProxyBackend,
        synchronizer: ConfigSynchronizer,
        settings: Settings,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._backend = backend
        self._synchronizer = synchronizer
        self._settings = settings
        self._clock = clock
        self._pending: Optional[ConfirmationToken] = None

    @property
    def pending(self) -> Optional[ConfirmationToken]:
        return self._pending

    def request_regeneration(self) -> ConfirmationToken:
        if not self._synchronizer.available:
            raise ConfigUnavailable("Proxy configuration has not been loaded.")
        self._pending = ConfirmationToken(
            token=secrets.token_urlsafe(16),
            expires_at=self._clock() + self._settings.confirmation_ttl,
        )
        return self._pending

    def decline(self, token: str) -> None:
        """Discard a pending confirmation; nothing else happens."""
        if self._pending is not None and _same_token(self._pending.token, token):
            self._pending = None

    def _consume(self, token: str) -> None:
        pending = self._pending
        if pending is None or not _same_token(pending.token, token):
            raise ConfirmationRejected("Unknown or superseded confirmation token.")
        self._pending = None
        if self._clock() > pending.expires_at:
            raise ConfirmationRejected("Confirmation token has expired.")

    async def confirm(self, token: str) -> str:
        """Generate a new key and persist it as the only valid proxy key."""
        self._consume(token)
        try:
            new_key = await self._backend.generate_api_key()
        except Exception as exc:  # pylint: disable=broad-except
            log_error(ErrorType.KEY_GENERATION_FAILED, "API key generation failed", endpoint="generate_api_key", exception=exc)
            raise KeyGenerationFailed(f"Failed to generate API key: {failure_reason(exc)}") from exc

        await self._synchronizer.apply_partial_update({"api_key": new_key})
        print(f"Proxy API key regenerated ({mask_token(new_key)}).")
        return new_key

    async def regenerate(self, confirm: ConfirmCallback) -> Optional[str]:
        """Ask ``confirm`` for a yes/no answer; return the new key, or None if declined."""
        token = self.request_regeneration()
        answer = confirm()
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            self.decline(token.token)
            return None
        return await self.confirm(token.token)
