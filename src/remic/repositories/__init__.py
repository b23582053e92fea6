"""Repository implementations for dream persistence."""

from .base import DreamRepository
from .json_repository import JsonFileRepository
from .memory_repository import MemoryDreamRepository

__all__ = [
    "DreamRepository",
    "JsonFileRepository",
    "MemoryDreamRepository",
]
