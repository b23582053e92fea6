"""REMic dream store

Local-first dream journal core: records dreams, rewrites them in a chosen
tone through an AI provider, and keeps every view in sync with one store.
"""

__version__ = "0.1.0"

from .exceptions import (
    AlreadyRewrittenError,
    DreamStoreError,
    InvariantViolation,
    NotFoundError,
    PersistenceWarning,
    RewriteFailed,
    RewriteInProgressError,
    RewriteServiceError,
    ValidationError,
)
from .models import Dream, StoreEvent, StoreEventType, Tone
from .repositories import JsonFileRepository, MemoryDreamRepository
from .services import DreamStore, RewriteService, build_rewrite_service

__all__ = [
    # Store
    "DreamStore",
    "RewriteService",
    "build_rewrite_service",
    "JsonFileRepository",
    "MemoryDreamRepository",
    # Models
    "Dream",
    "Tone",
    "StoreEvent",
    "StoreEventType",
    # Errors
    "DreamStoreError",
    "ValidationError",
    "NotFoundError",
    "InvariantViolation",
    "AlreadyRewrittenError",
    "RewriteInProgressError",
    "RewriteFailed",
    "PersistenceWarning",
    "RewriteServiceError",
]
