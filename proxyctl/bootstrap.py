"""Helpers for building runtime state from configuration."""

from __future__ import annotations

from typing import Optional

from .backend import HttpProxyBackend, ProxyBackend
from .config import Settings
from .session import ControlPlane
from .state import RuntimeState


def load_control_api_keys(state: RuntimeState, settings: Settings) -> None:
    """Populate the runtime state's valid control keys set."""
    state.valid_control_keys = set(settings.control_api_keys)
    if state.valid_control_keys:
        print(f"Successfully loaded {len(state.valid_control_keys)} control API keys from configuration.")
    else:
        print("No CONTROL_API_KEYS configured; the control API is open to local callers.")


async def open_control_plane(
    state: RuntimeState, settings: Settings, backend: Optional[ProxyBackend] = None
) -> ControlPlane:
    """Create the control-plane session and open it."""
    backend = backend or HttpProxyBackend(settings)
    print(f"Using proxy service command interface at {settings.proxy_backend_url}")
    plane = ControlPlane(backend, settings)
    state.control_plane = plane
    await plane.open()
    return plane


async def bootstrap_state(
    state: RuntimeState, settings: Settings, backend: Optional[ProxyBackend] = None
) -> None:
    """Load all runtime resources from configuration."""
    load_control_api_keys(state, settings)
    await open_control_plane(state, settings, backend)


async def shutdown_state(state: RuntimeState) -> None:
    if state.control_plane is not None:
        await state.control_plane.close()
