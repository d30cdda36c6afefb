"""Common FastAPI dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request

from .session import ControlPlane
from .state import RuntimeState


def get_runtime_state(request: Request) -> RuntimeState:  # pragma: no cover - trivial accessor
    return request.app.state.runtime_state  # type: ignore[attr-defined]


def get_control_plane(request: Request) -> ControlPlane:
    plane = get_runtime_state(request).control_plane
    if plane is None or plane.closed:
        raise HTTPException(status_code=503, detail="Control plane session is not open.")
    return plane
