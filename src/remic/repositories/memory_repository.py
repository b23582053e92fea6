"""In-memory dream repository for tests and throwaway sessions."""

from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import DreamStoreError, PersistenceWarning
from ..models.dream import Dream, DreamCollection
from .base import DreamRepository


class MemoryDreamRepository(DreamRepository):
    """Keeps a serialized copy of the collection, as a file would."""

    def __init__(self, dreams: Iterable[Dream] | None = None):
        self.save_count = 0
        self.document: dict[str, Any] = DreamCollection(
            dreams=list(dreams or [])
        ).model_dump(mode="json")

    def load(self) -> list[Dream]:
        try:
            return DreamCollection.model_validate(self.document).dreams
        except (PydanticValidationError, DreamStoreError) as e:
            raise PersistenceWarning(None, f"invalid dream data: {e}") from e

    def save(self, dreams: Iterable[Dream]) -> None:
        self.document = DreamCollection(dreams=list(dreams)).model_dump(mode="json")
        self.save_count += 1
