"""Events delivered to store observers."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import DreamStoreError
from .dream import Dream


class StoreEventType(str, Enum):
    """What happened to the store."""
    LOADED = "loaded"
    CREATED = "created"
    REWRITTEN = "rewritten"
    DELETED = "deleted"
    REWRITE_FAILED = "rewrite_failed"
    PERSISTENCE_WARNING = "persistence_warning"


class StoreEvent(BaseModel):
    """Notification carrying the full collection snapshot after a change."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: StoreEventType
    dreams: tuple[Dream, ...] = Field(default_factory=tuple, description="Snapshot, most recent first")
    dream_id: UUID | None = Field(None, description="Dream the event is about, if any")
    error: DreamStoreError | None = Field(None, description="RewriteFailed or PersistenceWarning")
