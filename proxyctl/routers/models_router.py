"""Routers exposing the model catalog and client examples."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..auth import authenticate_client
from ..catalog import MODEL_CATALOG, get_model
from ..dependencies import get_control_plane
from ..models import ClientExamples, ModelList
from ..session import ControlPlane

router = APIRouter(prefix="/api", dependencies=[Depends(authenticate_client)])


@router.get("/models", response_model=ModelList)
async def list_models() -> ModelList:
    return ModelList(data=list(MODEL_CATALOG))


@router.get("/models/{model_id}/examples", response_model=ClientExamples)
async def model_examples(
    model_id: str,
    plane: ControlPlane = Depends(get_control_plane),
) -> ClientExamples:
    """curl and Python snippets for calling ``model_id`` through the proxy."""
    if get_model(model_id) is None:
        raise HTTPException(status_code=404, detail=f"Model '{model_id}' not found.")
    return plane.examples_for(model_id)
