"""Unit tests for dream repositories."""

import json
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from remic.exceptions import PersistenceWarning
from remic.models.dream import Dream, Tone
from remic.repositories.json_repository import JsonFileRepository
from remic.repositories.memory_repository import MemoryDreamRepository


@pytest.fixture
def dreams():
    return [
        Dream(original_text="Flying over a city").with_rewrite("Soaring gently", Tone.CALM),
        Dream(original_text="Late for an exam"),
    ]


class TestJsonFileRepository:
    """Test JSON file persistence."""

    def test_round_trip(self, tmp_path, dreams):
        repository = JsonFileRepository(tmp_path / "dreams.json")

        repository.save(dreams)

        assert repository.load() == dreams

    def test_document_layout(self, tmp_path, dreams):
        path = tmp_path / "dreams.json"
        JsonFileRepository(path).save(dreams)

        document = json.loads(path.read_text())

        assert document["version"] == 1
        first = document["dreams"][0]
        assert set(first) == {"id", "original_text", "rewritten_text", "tone", "date"}
        assert first["tone"] == "calm"
        assert document["dreams"][1]["rewritten_text"] is None

    def test_creates_parent_directories(self, tmp_path, dreams):
        path = tmp_path / "nested" / "journal" / "dreams.json"

        JsonFileRepository(path).save(dreams)

        assert path.exists()

    def test_no_temporary_files_left_behind(self, tmp_path, dreams):
        repository = JsonFileRepository(tmp_path / "dreams.json")
        repository.save(dreams)
        repository.save(dreams[:1])

        assert [p.name for p in tmp_path.iterdir()] == ["dreams.json"]
        assert len(repository.load()) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(PersistenceWarning) as exc_info:
            JsonFileRepository(tmp_path / "absent.json").load()
        assert exc_info.value.path == tmp_path / "absent.json"

    def test_corrupt_json(self, tmp_path):
        path = tmp_path / "dreams.json"
        path.write_text("[1, 2,")

        with pytest.raises(PersistenceWarning, match="corrupt JSON"):
            JsonFileRepository(path).load()

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "dreams.json"
        path.write_text(json.dumps({"dreams": [{"text": "no original_text"}]}))

        with pytest.raises(PersistenceWarning, match="invalid dream data"):
            JsonFileRepository(path).load()

    def test_broken_invariant(self, tmp_path):
        path = tmp_path / "dreams.json"
        path.write_text(json.dumps({"dreams": [{
            "id": str(uuid4()),
            "original_text": "Tone but no rewrite",
            "tone": "happy",
            "date": "2026-03-01T08:00:00+00:00",
        }]}))

        with pytest.raises(PersistenceWarning, match="invalid dream data"):
            JsonFileRepository(path).load()

    def test_naive_timestamps_load_as_utc(self, tmp_path):
        path = tmp_path / "dreams.json"
        path.write_text(json.dumps({"dreams": [{
            "id": str(uuid4()),
            "original_text": "Written before timestamps carried an offset",
            "date": "2026-01-01T00:00:00",
        }]}))

        dream = JsonFileRepository(path).load()[0]

        assert dream.date == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_blank_original_text(self, tmp_path):
        path = tmp_path / "dreams.json"
        path.write_text(json.dumps({"dreams": [{
            "id": str(uuid4()),
            "original_text": "   ",
            "date": "2026-03-01T08:00:00+00:00",
        }]}))

        with pytest.raises(PersistenceWarning, match="invalid dream data"):
            JsonFileRepository(path).load()

    def test_duplicate_ids(self, tmp_path):
        dream = Dream(original_text="Twice")
        path = tmp_path / "dreams.json"
        payload = dream.model_dump(mode="json")
        path.write_text(json.dumps({"dreams": [payload, payload]}))

        with pytest.raises(PersistenceWarning, match="duplicate"):
            JsonFileRepository(path).load()

    def test_unwritable_target(self, tmp_path, dreams):
        target = tmp_path / "dreams.json"
        target.mkdir()

        with pytest.raises(PersistenceWarning, match="could not write"):
            JsonFileRepository(target).save(dreams)

        assert [p.name for p in tmp_path.iterdir()] == ["dreams.json"]

    def test_location(self, tmp_path):
        assert JsonFileRepository(tmp_path / "d.json").location == str(tmp_path / "d.json")


class TestMemoryDreamRepository:
    """Test the in-memory repository."""

    def test_starts_empty(self):
        assert MemoryDreamRepository().load() == []

    def test_seeded(self, dreams):
        assert MemoryDreamRepository(dreams).load() == dreams

    def test_save_replaces_collection(self, dreams):
        repository = MemoryDreamRepository(dreams)

        repository.save(dreams[1:])

        assert repository.load() == dreams[1:]
        assert repository.save_count == 1

    def test_loaded_copies_are_independent(self, dreams):
        repository = MemoryDreamRepository(dreams)
        assert repository.load() is not repository.load()

    def test_corrupt_document(self):
        repository = MemoryDreamRepository()
        repository.document = {"dreams": [{"original_text": ""}]}

        with pytest.raises(PersistenceWarning):
            repository.load()
