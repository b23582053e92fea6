"""Dream store: the single owner of all dream records.

The store runs on one asyncio event loop, which plays the role of the UI
thread. Every read and write happens on that loop. Rewrite service calls
are the only suspending work; they run as tasks and their results are
applied back on the loop in a single assignment, so observers never see a
half-applied rewrite.

Each mutation is persisted through the repository and then published to
observers as a ``StoreEvent`` carrying the full snapshot. Rewrite failures
and storage problems are published the same way instead of being raised.
"""

import asyncio
from collections.abc import Callable, Iterable
from uuid import UUID, uuid4

from ..exceptions import (
    AlreadyRewrittenError,
    EmptyRewriteError,
    NotFoundError,
    PersistenceWarning,
    RewriteFailed,
    RewriteInProgressError,
    RewriteServiceError,
    ValidationError,
)
from ..logging import get_logger
from ..models.dream import Dream, Tone, utc_now
from ..models.events import StoreEvent, StoreEventType
from ..repositories.base import DreamRepository
from .rewrite import RewriteService

logger = get_logger(__name__)

Observer = Callable[[StoreEvent], None]

DEFAULT_REWRITE_TIMEOUT = 60.0


class DreamStore:
    """Owns the mapping from dream id to dream and notifies observers of changes."""

    def __init__(
        self,
        repository: DreamRepository,
        rewrite_service: RewriteService | None = None,
        rewrite_timeout: float | None = DEFAULT_REWRITE_TIMEOUT,
        observers: Iterable[Observer] = (),
    ):
        """Create the store and load the persisted collection.

        Args:
            repository: Durable storage for the collection
            rewrite_service: Collaborator producing toned rewrites; without one
                the store is read/write but cannot rewrite
            rewrite_timeout: Seconds allowed per rewrite; None disables the limit
            observers: Callbacks registered before loading, so they also
                receive the initial LOADED event
        """
        self.repository = repository
        self.rewrite_service = rewrite_service
        self.rewrite_timeout = rewrite_timeout

        self._dreams: dict[UUID, Dream] = {}
        self._observers: list[Observer] = list(observers)
        self._in_flight: dict[UUID, asyncio.Task] = {}
        self.last_warning: PersistenceWarning | None = None

        self._load()

    # Observers

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer. Returns a callable that unsubscribes it."""
        if observer not in self._observers:
            self._observers.append(observer)
        return lambda: self.unsubscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _publish(
        self,
        event_type: StoreEventType,
        dream_id: UUID | None = None,
        error: RewriteFailed | PersistenceWarning | None = None,
    ) -> None:
        event = StoreEvent(
            type=event_type,
            dreams=tuple(self.list_dreams()),
            dream_id=dream_id,
            error=error,
        )
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception(f"Store observer {observer!r} failed handling {event_type.value}")

    # Persistence

    def _load(self) -> None:
        try:
            dreams = self.repository.load()
        except PersistenceWarning as warning:
            logger.warning(f"Starting with an empty dream journal: {warning}")
            self.last_warning = warning
            self._dreams = {}
            self._publish(StoreEventType.LOADED, error=warning)
            return

        self._dreams = {dream.id: dream for dream in dreams}
        logger.info(f"Loaded {len(self._dreams)} dreams from {self.repository.location}")
        self._publish(StoreEventType.LOADED)

    def _save(self, dream_id: UUID | None) -> None:
        """Persist the collection. Failures are published, never raised."""
        try:
            self.repository.save(self._dreams.values())
        except PersistenceWarning as warning:
            logger.warning(f"Could not save dream journal, keeping changes in memory: {warning}")
            self.last_warning = warning
            self._publish(StoreEventType.PERSISTENCE_WARNING, dream_id=dream_id, error=warning)

    # Reads

    def get(self, dream_id: UUID | str) -> Dream:
        """Look up a dream by id.

        Raises:
            NotFoundError: If no dream has this id
        """
        key = self._coerce_id(dream_id)
        dream = self._dreams.get(key)
        if dream is None:
            raise NotFoundError(key)
        return dream

    def __contains__(self, dream_id: object) -> bool:
        return dream_id in self._dreams

    def __len__(self) -> int:
        return len(self._dreams)

    def list_dreams(self) -> list[Dream]:
        """Snapshot of all dreams, most recent first.

        Dreams with equal timestamps are ordered most recently inserted first.
        """
        newest_inserted_first = reversed(list(self._dreams.values()))
        return sorted(newest_inserted_first, key=lambda dream: dream.date, reverse=True)

    @property
    def pending_rewrites(self) -> frozenset[UUID]:
        """Ids of dreams with a rewrite in flight."""
        return frozenset(self._in_flight)

    # Mutations

    def create(self, original_text: str) -> Dream:
        """Record a new dream.

        Raises:
            ValidationError: If the text is empty after trimming
        """
        if not isinstance(original_text, str):
            raise ValidationError("Dream text must be a string")
        text = original_text.strip()
        if not text:
            raise ValidationError("Dream text cannot be empty")

        dream = Dream(id=self._fresh_id(), original_text=text, date=utc_now())
        self._dreams[dream.id] = dream
        logger.info(f"Created dream {dream.id}")

        self._save(dream.id)
        self._publish(StoreEventType.CREATED, dream_id=dream.id)
        return dream

    def delete(self, dream_id: UUID | str) -> None:
        """Remove a dream. An in-flight rewrite for it will be discarded on completion.

        Raises:
            NotFoundError: If no dream has this id
        """
        key = self._coerce_id(dream_id)
        if key not in self._dreams:
            raise NotFoundError(key)

        del self._dreams[key]
        if key in self._in_flight:
            logger.info(f"Deleted dream {key}; its pending rewrite will be discarded")
        else:
            logger.info(f"Deleted dream {key}")

        self._save(key)
        self._publish(StoreEventType.DELETED, dream_id=key)

    def request_rewrite(self, dream_id: UUID | str, tone: Tone | str) -> "asyncio.Task[Dream | None]":
        """Start rewriting a dream in the given tone.

        Must be called from the running event loop. Input errors are raised
        here; service failures are published to observers as RewriteFailed.

        Returns:
            Task resolving to the rewritten dream, or None when the rewrite
            failed or the dream was deleted before it finished

        Raises:
            NotFoundError: If no dream has this id
            ValidationError: If the tone is not one of the known tones
            AlreadyRewrittenError: If the dream already has a rewrite
            RewriteInProgressError: If a rewrite for this dream is in flight
            RewriteServiceError: If the store has no rewrite service
        """
        key = self._coerce_id(dream_id)
        dream = self.get(key)
        parsed_tone = Tone.parse(tone)

        if dream.is_rewritten:
            raise AlreadyRewrittenError(key)
        if key in self._in_flight:
            raise RewriteInProgressError(key)
        if self.rewrite_service is None:
            raise RewriteServiceError("No rewrite service configured")

        loop = asyncio.get_running_loop()
        task = loop.create_task(
            self._run_rewrite(key, dream.original_text, parsed_tone),
            name=f"rewrite-{key}",
        )
        self._in_flight[key] = task
        task.add_done_callback(lambda t: self._forget(key, t))
        logger.info(f"Requested {parsed_tone.value} rewrite of dream {key}")
        return task

    def cancel_rewrite(self, dream_id: UUID | str) -> bool:
        """Cancel the in-flight rewrite for a dream, if any.

        A cancelled rewrite leaves the dream untouched and is not reported
        as a failure.
        """
        task = self._in_flight.get(self._coerce_id(dream_id))
        if task is None or task.done():
            return False
        return task.cancel()

    async def drain(self) -> None:
        """Wait for every in-flight rewrite to finish."""
        while self._in_flight:
            tasks = dict(self._in_flight)
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            for dream_id, task in tasks.items():
                self._forget(dream_id, task)

    async def _run_rewrite(self, dream_id: UUID, original_text: str, tone: Tone) -> Dream | None:
        try:
            rewritten = await asyncio.wait_for(
                self.rewrite_service.rewrite(original_text, tone),
                timeout=self.rewrite_timeout,
            )
            if not isinstance(rewritten, str) or not rewritten.strip():
                raise EmptyRewriteError("Rewrite service returned no text")
        except asyncio.CancelledError:
            logger.info(f"Rewrite of dream {dream_id} cancelled")
            raise
        except asyncio.TimeoutError:
            self._forget(dream_id, asyncio.current_task())
            self._fail(dream_id, tone, f"timed out after {self.rewrite_timeout:g}s")
            return None
        except Exception as e:
            logger.opt(exception=e).warning(f"Rewrite service failed for dream {dream_id}")
            self._forget(dream_id, asyncio.current_task())
            self._fail(dream_id, tone, str(e) or e.__class__.__name__)
            return None

        self._forget(dream_id, asyncio.current_task())
        return self._apply_rewrite(dream_id, rewritten.strip(), tone)

    def _apply_rewrite(self, dream_id: UUID, rewritten_text: str, tone: Tone) -> Dream | None:
        current = self._dreams.get(dream_id)
        if current is None:
            logger.info(f"Discarding rewrite for deleted dream {dream_id}")
            return None

        updated = current.with_rewrite(rewritten_text, tone)
        self._dreams[dream_id] = updated
        logger.info(f"Applied {tone.value} rewrite to dream {dream_id}")

        self._save(dream_id)
        self._publish(StoreEventType.REWRITTEN, dream_id=dream_id)
        return updated

    def _fail(self, dream_id: UUID, tone: Tone, reason: str) -> None:
        failure = RewriteFailed(dream_id, tone.value, reason)
        logger.warning(str(failure))
        if dream_id not in self._dreams:
            logger.debug(f"Dream {dream_id} was deleted; not reporting failure")
            return
        self._publish(StoreEventType.REWRITE_FAILED, dream_id=dream_id, error=failure)

    def _forget(self, dream_id: UUID, task: asyncio.Task | None) -> None:
        if self._in_flight.get(dream_id) is task:
            del self._in_flight[dream_id]

    def _fresh_id(self) -> UUID:
        dream_id = uuid4()
        while dream_id in self._dreams:
            dream_id = uuid4()
        return dream_id

    @staticmethod
    def _coerce_id(dream_id: UUID | str) -> UUID:
        if isinstance(dream_id, UUID):
            return dream_id
        try:
            return UUID(str(dream_id))
        except ValueError as e:
            raise ValidationError(f"Invalid dream id {dream_id!r}") from e
