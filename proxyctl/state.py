"""Runtime state container for the FastAPI application."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Set

from .session import ControlPlane


@dataclass
class RuntimeState:
    """Holds mutable runtime data that changes while the app is running."""

    valid_control_keys: Set[str] = field(default_factory=set)
    control_plane: Optional[ControlPlane] = None
