"""
Registry Store Tests
--------------------
Persistence format, tolerant loading and atomic writes.
"""

import asyncio
import json

import pytest

from commands.registry import CommandEntry, CommandRegistry, EntryType
from commands.store import RegistryDocument, RegistryStore
from core.errors import PersistenceError
from conftest import FIXED_NOW


@pytest.fixture
def store():
    return RegistryStore()


@pytest.fixture
def registry_path(tmp_path):
    return tmp_path / ".reasoning" / "commands.json"


class TestDocumentFormat:
    """On-disk shape."""

    def test_written_document_shape(self, store, registry_path):
        registry = CommandRegistry.create(
            [
                CommandEntry(
                    function="TaskManager.createTask",
                    description="Create a task",
                    file="TaskManager.ts",
                    type=EntryType.METHOD,
                    is_async=True,
                    class_name="TaskManager",
                ),
                CommandEntry(function="plain"),
            ],
            now=FIXED_NOW,
        )
        store.write(registry, registry_path)

        data = json.loads(registry_path.read_text(encoding="utf-8"))
        assert data == {
            "generatedAt": "2025-06-01T12:00:00.000Z",
            "totalCommands": 2,
            "commands": [
                {
                    "function": "TaskManager.createTask",
                    "file": "TaskManager.ts",
                    "type": "method",
                    "async": True,
                    "className": "TaskManager",
                    "description": "Create a task",
                },
                {"function": "plain", "async": False},
            ],
        }

    def test_round_trip(self, store, registry_path, sample_entries):
        registry = CommandRegistry.create(sample_entries, now=FIXED_NOW)
        store.write(registry, registry_path)
        assert store.load(registry_path) == registry

    def test_total_commands_kept_as_recorded(self, store, registry_path):
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text(json.dumps({
            "generatedAt": "2025-06-01T12:00:00.000Z",
            "totalCommands": 7,
            "commands": [{"function": "only"}],
        }), encoding="utf-8")

        loaded = store.load(registry_path)
        assert loaded.total_commands == 7
        assert len(loaded) == 1

    def test_unknown_fields_ignored(self, store, registry_path):
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text(json.dumps({
            "generatedAt": "2025-06-01T12:00:00.000Z",
            "totalCommands": 1,
            "version": 3,
            "commands": [{"function": "x", "extra": True}],
        }), encoding="utf-8")

        assert store.load(registry_path).commands[0].function == "x"

    def test_document_accepts_field_names(self):
        document = RegistryDocument(generated_at="2025-06-01T12:00:00Z", total_commands=0)
        assert document.to_registry().is_empty


class TestLoad:
    """Missing or unusable documents load as None."""

    def test_missing_file(self, store, registry_path):
        assert store.load(registry_path) is None

    def test_corrupt_json(self, store, registry_path):
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text("{not json", encoding="utf-8")
        assert store.load(registry_path) is None

    def test_not_utf8(self, store, registry_path):
        registry_path.parent.mkdir(parents=True)
        registry_path.write_bytes(b"\xff\xfe\xfa")
        assert store.load(registry_path) is None

    @pytest.mark.parametrize("document", [
        [],
        {"totalCommands": 1, "commands": []},
        {"generatedAt": "", "totalCommands": 0, "commands": []},
        {"generatedAt": "2025-06-01T12:00:00Z", "totalCommands": -1, "commands": []},
        {"generatedAt": "2025-06-01T12:00:00Z", "totalCommands": 1, "commands": [{"file": "a.ts"}]},
        {"generatedAt": "2025-06-01T12:00:00Z", "totalCommands": 1, "commands": [{"function": ""}]},
        {"generatedAt": "2025-06-01T12:00:00Z", "totalCommands": 1,
         "commands": [{"function": "f", "type": "lambda"}]},
    ])
    def test_schema_violations(self, store, registry_path, document):
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text(json.dumps(document), encoding="utf-8")
        assert store.load(registry_path) is None

    def test_directory_in_place_of_file(self, store, registry_path):
        registry_path.mkdir(parents=True)
        assert store.load(registry_path) is None


class TestSave:
    """Atomic persistence."""

    def test_save_creates_parent_dirs(self, store, registry_path, sample_entries):
        registry = asyncio.run(store.save(sample_entries, registry_path))

        assert registry_path.exists()
        assert registry.total_commands == 4
        assert store.load(registry_path) == registry

    def test_save_stamps_current_time(self, store, registry_path):
        registry = asyncio.run(store.save([CommandEntry(function="x")], registry_path))
        assert registry.generated_at.endswith("Z")
        assert registry.generated_at > "2025-06-01"

    def test_no_temp_files_left(self, store, registry_path, sample_entries):
        asyncio.run(store.save(sample_entries, registry_path))
        asyncio.run(store.save(sample_entries[:1], registry_path))

        assert [p.name for p in registry_path.parent.iterdir()] == ["commands.json"]

    def test_overwrite_replaces_whole_document(self, store, registry_path, sample_entries):
        asyncio.run(store.save(sample_entries, registry_path))
        asyncio.run(store.save(sample_entries[:1], registry_path))

        loaded = store.load(registry_path)
        assert loaded.total_commands == 1
        assert [e.function for e in loaded] == ["analyzeCodebase"]

    def test_unwritable_parent_raises(self, store, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        target = blocker / "commands.json"

        with pytest.raises(PersistenceError) as exc_info:
            store.write(CommandRegistry.create([], now=FIXED_NOW), target)

        assert exc_info.value.path == str(target)

    def test_failed_replace_keeps_old_document(self, store, registry_path, sample_entries, monkeypatch):
        previous = CommandRegistry.create(sample_entries, now=FIXED_NOW)
        store.write(previous, registry_path)

        def broken_replace(src, dst):
            raise OSError("replace failed")

        monkeypatch.setattr("commands.store.os.replace", broken_replace)

        with pytest.raises(PersistenceError):
            store.write(CommandRegistry.create([], now=FIXED_NOW), registry_path)

        assert store.load(registry_path) == previous
        assert [p.name for p in registry_path.parent.iterdir()] == ["commands.json"]

    def test_empty_registry_is_written(self, store, registry_path):
        registry = asyncio.run(store.save([], registry_path))
        assert registry.is_empty
        assert json.loads(registry_path.read_text(encoding="utf-8"))["commands"] == []
