"""Smoke tests for the key-value store and progress repository."""

import json

import pytest

from cyber_sensei.models.progress import ProgressState
from cyber_sensei.storage.kv_store import JsonFileStore
from cyber_sensei.storage.progress import ProgressRepository


class TestJsonFileStore:
    def test_missing_key_returns_none(self, tmp_path):
        assert JsonFileStore(tmp_path).get("nothing") is None

    def test_set_and_get(self, tmp_path):
        store = JsonFileStore(tmp_path / "kv")
        store.set("alpha", {"value": 1, "name": "ß"})
        assert store.get("alpha") == {"value": 1, "name": "ß"}
        assert (tmp_path / "kv" / "alpha.json").exists()

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("alpha", [1])
        store.set("alpha", [2])
        assert store.get("alpha") == [2]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["alpha.json"]

    def test_delete(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("alpha", 1)
        store.delete("alpha")
        store.delete("alpha")
        assert store.get("alpha") is None

    def test_rejects_path_like_keys(self, tmp_path):
        with pytest.raises(ValueError):
            JsonFileStore(tmp_path).path_for("../escape")

    def test_corrupt_document_raises(self, tmp_path):
        (tmp_path / "broken.json").write_text("{")
        with pytest.raises(json.JSONDecodeError):
            JsonFileStore(tmp_path).get("broken")

    def test_unserializable_value_leaves_no_temp_files(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("alpha", [1])
        with pytest.raises(TypeError):
            store.set("alpha", object())
        assert sorted(p.name for p in tmp_path.iterdir()) == ["alpha.json"]
        assert store.get("alpha") == [1]


class TestProgressRepository:
    def test_load_absent(self, repository):
        assert repository.load() is None

    def test_save_and_load(self, repository):
        repository.save(ProgressState(xp=600, achievements_earned=["first_steps"]))
        loaded = repository.load()
        assert loaded.xp == 600
        assert loaded.level == 2
        assert loaded.achievements_earned == ["first_steps"]

    def test_saved_layout_is_camel_case(self, repository, kv_store):
        repository.save(ProgressState(total_quizzes_passed=3))
        data = kv_store.get(repository.key)
        assert data["totalQuizzesPassed"] == 3
        assert data["level"] == 1

    def test_malformed_json_loads_as_absent(self, repository, kv_store):
        kv_store.root.mkdir(parents=True, exist_ok=True)
        kv_store.path_for(repository.key).write_text("not json at all")
        assert repository.load() is None

    def test_oversized_integer_loads_as_absent(self, repository, kv_store):
        kv_store.root.mkdir(parents=True, exist_ok=True)
        kv_store.path_for(repository.key).write_text('{"xp": ' + "9" * 5000 + "}")
        assert repository.load() is None

    def test_deeply_nested_json_loads_as_absent(self, repository, kv_store):
        kv_store.root.mkdir(parents=True, exist_ok=True)
        kv_store.path_for(repository.key).write_text("[" * 200000)
        assert repository.load() is None

    def test_wrong_shape_loads_as_absent(self, repository, kv_store):
        kv_store.set(repository.key, ["a", "list"])
        assert repository.load() is None

    def test_invalid_values_load_as_absent(self, repository, kv_store):
        kv_store.set(repository.key, {"xp": "lots"})
        assert repository.load() is None

    def test_save_failure_is_swallowed(self, repository, monkeypatch):
        def fail(key, value):
            raise OSError("disk full")

        monkeypatch.setattr(repository.store, "set", fail)
        repository.save(ProgressState(xp=1))
        assert repository.load() is None

    def test_clear(self, repository):
        repository.save(ProgressState(xp=10))
        repository.clear()
        assert repository.load() is None

    def test_custom_key(self, kv_store):
        first = ProgressRepository(kv_store, "learner_a")
        second = ProgressRepository(kv_store, "learner_b")
        first.save(ProgressState(xp=1))
        assert second.load() is None
        assert first.load().xp == 1
