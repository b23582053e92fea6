"""Dream store models."""

from .dream import Dream, DreamCollection, Tone
from .events import StoreEvent, StoreEventType

__all__ = [
    "Dream",
    "DreamCollection",
    "Tone",
    "StoreEvent",
    "StoreEventType",
]
