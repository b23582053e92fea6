"""Pytest configuration and shared fixtures.

Provides fake rewrite services, repositories and a store wired to them.
"""

import asyncio

import pytest

from remic.exceptions import RewriteServiceError
from remic.models.dream import Tone
from remic.models.events import StoreEvent
from remic.repositories.memory_repository import MemoryDreamRepository
from remic.services.rewrite import RewriteService
from remic.services.store import DreamStore


class FakeRewriteService(RewriteService):
    """Rewrite service returning canned text, optionally held until released."""

    name = "fake"

    def __init__(self, result: str = "A gentle retelling.", error: Exception | None = None, hold: bool = False):
        self.result = result
        self.error = error
        self.calls: list[tuple[str, Tone]] = []
        self.started = asyncio.Event()
        self._gate = asyncio.Event()
        if not hold:
            self._gate.set()

    def release(self):
        self._gate.set()

    async def rewrite(self, original_text: str, tone: Tone) -> str:
        self.calls.append((original_text, tone))
        self.started.set()
        await self._gate.wait()
        if self.error:
            raise self.error
        return self.result


class EventRecorder:
    """Observer that keeps every event it receives."""

    def __init__(self):
        self.events: list[StoreEvent] = []

    def __call__(self, event: StoreEvent):
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.type.value for event in self.events]

    def clear(self):
        self.events.clear()


@pytest.fixture
def rewrite_service():
    return FakeRewriteService()


@pytest.fixture
def failing_service():
    return FakeRewriteService(error=RewriteServiceError("service unavailable"))


@pytest.fixture
def repository():
    return MemoryDreamRepository()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def store(repository, rewrite_service, recorder):
    return DreamStore(repository, rewrite_service, rewrite_timeout=5.0, observers=[recorder])


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep real credentials and data directories out of tests."""
    for name in ("OPENAI_API_KEY", "REMIC_LLM_API_KEY", "REMIC_BACKEND_TOKEN", "REMIC_REWRITE_PROVIDER", "REMIC_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("REMIC_DATA_DIR", str(tmp_path / "remic"))
    monkeypatch.chdir(tmp_path)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests with mocked dependencies"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take longer to run"
    )
