"""UI-related data models."""

from dataclasses import dataclass


@dataclass
class PressState:
    """Transient press state; discarded after release, never persisted."""
    pressed: bool = False
    elapsed: float = 0.0
