"""JSON file storage for the dream collection.

The collection is written whole to a temporary file beside the target and
moved into place with ``os.replace``, so a crash mid-write leaves the previous
file intact.
"""

import json
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import DreamStoreError, PersistenceWarning
from ..logging import get_logger
from ..models.dream import Dream, DreamCollection
from .base import DreamRepository

logger = get_logger(__name__)


class JsonFileRepository(DreamRepository):
    """Persist dreams to a single JSON document."""

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    @property
    def location(self) -> str:
        return str(self.path)

    def load(self) -> list[Dream]:
        if not self.path.exists():
            raise PersistenceWarning(self.path, "no saved dreams found")

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceWarning(self.path, f"could not read file: {e}") from e
        except json.JSONDecodeError as e:
            raise PersistenceWarning(self.path, f"corrupt JSON: {e}") from e

        try:
            collection = DreamCollection.model_validate(data)
        except (PydanticValidationError, DreamStoreError) as e:
            raise PersistenceWarning(self.path, f"invalid dream data: {e}") from e

        ids = [dream.id for dream in collection.dreams]
        if len(ids) != len(set(ids)):
            raise PersistenceWarning(self.path, "duplicate dream ids")

        logger.debug(f"Loaded {len(ids)} dreams from {self.path}")
        return collection.dreams

    def save(self, dreams: Iterable[Dream]) -> None:
        collection = DreamCollection(dreams=list(dreams))
        payload = collection.model_dump(mode="json")

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise PersistenceWarning(self.path, f"could not write file: {e}") from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug(f"Saved {len(collection.dreams)} dreams to {self.path}")
