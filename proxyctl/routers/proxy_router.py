"""Router exposing proxy configuration, lifecycle and API key endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from ..auth import authenticate_client
from ..dependencies import get_control_plane
from ..errors import ConfigUnavailable
from ..models import ConfirmationToken, ProxySettingsUpdate, ProxyStatusResponse, RegeneratedKey
from ..session import ControlPlane

router = APIRouter(prefix="/api", dependencies=[Depends(authenticate_client)])


@router.get("/proxy/status", response_model=ProxyStatusResponse)
async def proxy_status(plane: ControlPlane = Depends(get_control_plane)) -> ProxyStatusResponse:
    """Last observed status together with the lifecycle state."""
    return plane.snapshot()


@router.get("/config")
async def read_config(plane: ControlPlane = Depends(get_control_plane)) -> Dict[str, Any]:
    config = plane.synchronizer.current
    if config is None:
        raise ConfigUnavailable("Proxy configuration has not been loaded.")
    return config.model_dump(mode="json")


@router.post("/config/reload")
async def reload_config(plane: ControlPlane = Depends(get_control_plane)) -> Dict[str, Any]:
    """Retry loading the persisted configuration."""
    config = await plane.reload_config()
    return config.model_dump(mode="json")


@router.patch("/proxy/config")
async def update_proxy_config(
    update: ProxySettingsUpdate,
    plane: ControlPlane = Depends(get_control_plane),
) -> Dict[str, Any]:
    config = await plane.synchronizer.apply_partial_update(update.to_patch())
    return config.model_dump(mode="json")


@router.post("/proxy/toggle", response_model=ProxyStatusResponse)
async def toggle_proxy(plane: ControlPlane = Depends(get_control_plane)) -> ProxyStatusResponse:
    """Start the proxy service if stopped, stop it if running."""
    await plane.lifecycle.toggle()
    return plane.snapshot()


@router.post("/proxy/api-key/regeneration", response_model=ConfirmationToken)
async def request_key_regeneration(plane: ControlPlane = Depends(get_control_plane)) -> ConfirmationToken:
    return plane.keys.request_regeneration()


@router.post("/proxy/api-key/regeneration/{token}/confirm", response_model=RegeneratedKey)
async def confirm_key_regeneration(
    token: str,
    plane: ControlPlane = Depends(get_control_plane),
) -> RegeneratedKey:
    return RegeneratedKey(api_key=await plane.keys.confirm(token))


@router.delete("/proxy/api-key/regeneration/{token}", status_code=204)
async def decline_key_regeneration(
    token: str,
    plane: ControlPlane = Depends(get_control_plane),
) -> Response:
    plane.keys.decline(token)
    return Response(status_code=204)
