"""Visual signal sources."""

from .visual import (
    VisualSignalSource,
    StaticVisualSignalSource,
    RandomVisualSignalSource,
)

__all__ = [
    "VisualSignalSource",
    "StaticVisualSignalSource",
    "RandomVisualSignalSource",
]
