"""Models reachable through the proxy, with display metadata."""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Tuple

from .models import ModelDescriptor

MODEL_CATALOG: Tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        id="gemini-2.5-flash",
        display_name="Gemini 2.5 Flash",
        description="Fast general purpose model",
        icon="zap",
    ),
    ModelDescriptor(
        id="gemini-2.5-flash-thinking",
        display_name="Gemini 2.5 Flash Thinking",
        description="Flash with extended reasoning",
        icon="brain-circuit",
    ),
    ModelDescriptor(
        id="gemini-3-pro-low",
        display_name="Gemini 3 Pro (Low)",
        description="Pro model, low thinking budget",
        icon="sparkles",
    ),
    ModelDescriptor(
        id="gemini-3-pro-high",
        display_name="Gemini 3 Pro (High)",
        description="Pro model, high thinking budget",
        icon="cpu",
    ),
    ModelDescriptor(
        id="gemini-3-pro-image",
        display_name="Gemini 3 Pro Vision",
        description="Image generation and understanding",
        icon="image",
    ),
    ModelDescriptor(
        id="claude-sonnet-4-5",
        display_name="Claude 4.5 Sonnet",
        description="Balanced Claude model",
        icon="sparkles",
    ),
    ModelDescriptor(
        id="claude-sonnet-4-5-thinking",
        display_name="Claude 4.5 Sonnet Thinking",
        description="Sonnet with extended thinking",
        icon="brain-circuit",
    ),
    ModelDescriptor(
        id="claude-opus-4-5-thinking",
        display_name="Claude 4.5 Opus Thinking",
        description="Most capable Claude model with extended thinking",
        icon="brain-circuit",
    ),
)

# Models whose message content must be a list of typed parts.
IMAGE_CAPABLE_MODELS: FrozenSet[str] = frozenset({"gemini-3-pro-image"})

_BY_ID: Dict[str, ModelDescriptor] = {model.id: model for model in MODEL_CATALOG}


def get_model(model_id: str) -> Optional[ModelDescriptor]:
    return _BY_ID.get(model_id)


def is_image_capable(model_id: str) -> bool:
    return model_id in IMAGE_CAPABLE_MODELS
