"""Abstract repository interface for dream persistence."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ..models.dream import Dream


class DreamRepository(ABC):
    """Durable storage for the whole dream collection.

    Implementations load and save the collection as a unit and raise
    ``PersistenceWarning`` for any storage failure.
    """

    @abstractmethod
    def load(self) -> list[Dream]:
        """Load every stored dream, in the order they were saved."""
        pass

    @abstractmethod
    def save(self, dreams: Iterable[Dream]) -> None:
        """Replace the stored collection."""
        pass

    @property
    def location(self) -> str:
        """Human readable location used in log messages and warnings."""
        return self.__class__.__name__
