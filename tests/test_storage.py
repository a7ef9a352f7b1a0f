import json
from pathlib import Path

import pytest

from loginservers.core import storage


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "prefs" / "store.json"


@pytest.fixture(params=["memory", "json"])
def store(request, store_path):
    if request.param == "memory":
        return storage.MemoryStore()
    return storage.JsonFileStore(store_path)


def write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def test_missing_keys_read_as_empty(store) -> None:
    assert store.get("missing") is None
    assert store.get_pairs("missing") == []


def test_put_get_delete(store) -> None:
    store.put("selected", "https://login.salesforce.com")
    assert store.get("selected") == "https://login.salesforce.com"

    store.delete("selected")
    assert store.get("selected") is None

    # deleting again is a no-op
    store.delete("selected")


def test_pairs_keep_order(store) -> None:
    store.put_pairs("custom", [("New", "https://new.com"), ("New2", "https://new2.com")])
    assert store.get_pairs("custom") == [
        ("New", "https://new.com"),
        ("New2", "https://new2.com"),
    ]

    store.put_pairs("custom", [("Only", "https://only.com")])
    assert store.get_pairs("custom") == [("Only", "https://only.com")]

    store.delete_pairs("custom")
    assert store.get_pairs("custom") == []


def test_json_store_creates_parent_dirs_and_layout(store_path) -> None:
    s = storage.JsonFileStore(store_path)
    s.put("selected", "https://test.salesforce.com")
    s.put_pairs("custom", [("New", "https://new.com")])

    data = json.loads(store_path.read_text(encoding="utf-8"))
    assert data == {
        "values": {"selected": "https://test.salesforce.com"},
        "pairs": {"custom": [["New", "https://new.com"]]},
    }


def test_json_store_survives_reopen(store_path) -> None:
    storage.JsonFileStore(store_path).put_pairs("custom", [("New", "https://new.com")])
    assert storage.JsonFileStore(store_path).get_pairs("custom") == [
        ("New", "https://new.com")
    ]


def test_json_store_leaves_no_temp_files(store_path) -> None:
    s = storage.JsonFileStore(store_path)
    s.put("a", "1")
    s.put("b", "2")
    assert [p.name for p in store_path.parent.iterdir()] == ["store.json"]


def test_json_store_fills_in_missing_sections(store_path) -> None:
    write_json(store_path, {})
    s = storage.JsonFileStore(store_path)
    assert s.get("x") is None
    assert s.get_pairs("x") == []


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"values": []},
        {"values": {"k": 1}},
        {"pairs": {"custom": "nope"}},
        {"pairs": {"custom": [["only-one"]]}},
        {"pairs": {"custom": [["a", 2]]}},
    ],
)
def test_json_store_rejects_bad_shape(store_path, data) -> None:
    write_json(store_path, data)
    with pytest.raises(storage.StorageError):
        storage.JsonFileStore(store_path).get("k")


def test_json_store_rejects_invalid_json(store_path) -> None:
    store_path.parent.mkdir(parents=True)
    store_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(storage.StorageError, match="corrupt store"):
        storage.JsonFileStore(store_path).get_pairs("custom")


def test_json_store_write_failure_raises_storage_error(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")

    s = storage.JsonFileStore(blocker / "store.json")
    with pytest.raises(storage.StorageError, match="cannot write store"):
        s.put("k", "v")


def test_json_store_unreachable_path_raises_storage_error(tmp_path) -> None:
    s = storage.JsonFileStore(tmp_path / ("a" * 300) / "store.json")

    with pytest.raises(storage.StorageError, match="cannot read store"):
        s.get("k")


def test_json_store_failed_write_removes_temp_file(store_path, monkeypatch) -> None:
    s = storage.JsonFileStore(store_path)
    s.put("a", "1")

    def fail_dump(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(storage.json, "dump", fail_dump)

    with pytest.raises(storage.StorageError, match="cannot write store"):
        s.put("b", "2")

    assert [p.name for p in store_path.parent.iterdir()] == ["store.json"]
    monkeypatch.undo()
    assert s.get("a") == "1"
    assert s.get("b") is None
