"""Durable key-value stores used to persist login server state."""

from __future__ import annotations

import json
import shutil
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

VALUES_KEY = "values"
PAIRS_KEY = "pairs"


class StorageError(Exception):
    """Raised when the backing store cannot be read or written."""


class KeyValueStore(Protocol):
    """String key-value store with ordered lists of string pairs under namespaces."""

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def get_pairs(self, namespace: str) -> list[tuple[str, str]]: ...

    def put_pairs(self, namespace: str, pairs: Iterable[tuple[str, str]]) -> None: ...

    def delete_pairs(self, namespace: str) -> None: ...


class MemoryStore:
    """Store that lives only as long as the process."""

    def __init__(self):
        self.values: dict[str, str] = {}
        self.pairs: dict[str, list[tuple[str, str]]] = {}

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def put(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)

    def get_pairs(self, namespace: str) -> list[tuple[str, str]]:
        return list(self.pairs.get(namespace, []))

    def put_pairs(self, namespace: str, pairs: Iterable[tuple[str, str]]) -> None:
        self.pairs[namespace] = [(a, b) for a, b in pairs]

    def delete_pairs(self, namespace: str) -> None:
        self.pairs.pop(namespace, None)


class JsonFileStore:
    """
    Store backed by a single JSON document:
      {"values": {key: value}, "pairs": {namespace: [[first, second], ...]}}

    Every write rewrites the whole document atomically.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def get(self, key: str) -> str | None:
        return self._load_all()[VALUES_KEY].get(key)

    def put(self, key: str, value: str) -> None:
        data = self._load_all()
        data[VALUES_KEY][key] = value
        self._atomic_write(data)

    def delete(self, key: str) -> None:
        data = self._load_all()
        if data[VALUES_KEY].pop(key, None) is not None:
            self._atomic_write(data)

    def get_pairs(self, namespace: str) -> list[tuple[str, str]]:
        return [(a, b) for a, b in self._load_all()[PAIRS_KEY].get(namespace, [])]

    def put_pairs(self, namespace: str, pairs: Iterable[tuple[str, str]]) -> None:
        data = self._load_all()
        data[PAIRS_KEY][namespace] = [[a, b] for a, b in pairs]
        self._atomic_write(data)

    def delete_pairs(self, namespace: str) -> None:
        data = self._load_all()
        if data[PAIRS_KEY].pop(namespace, None) is not None:
            self._atomic_write(data)

    def _load_all(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (FileNotFoundError, NotADirectoryError):
            return {VALUES_KEY: {}, PAIRS_KEY: {}}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(f"{self.path}: corrupt store: {e}") from e
        except OSError as e:
            raise StorageError(f"{self.path}: cannot read store: {e}") from e

        _validate(self.path, data)
        return data

    def _atomic_write(self, data: dict[str, Any]) -> None:
        stamp = int(time.time() * 1000)
        tmp = self.path.with_suffix(self.path.suffix + f".tmp.{stamp}")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            shutil.move(str(tmp), str(self.path))
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StorageError(f"{self.path}: cannot write store: {e}") from e


def _validate(path: Path, data: Any) -> None:
    if not isinstance(data, dict):
        raise StorageError(f"{path}: expected a JSON object")

    values = data.setdefault(VALUES_KEY, {})
    if not isinstance(values, dict) or not all(
        isinstance(v, str) for v in values.values()
    ):
        raise StorageError(f"{path}: '{VALUES_KEY}' must map keys to strings")

    pairs = data.setdefault(PAIRS_KEY, {})
    if not isinstance(pairs, dict):
        raise StorageError(f"{path}: '{PAIRS_KEY}' must be an object")
    for namespace, items in pairs.items():
        if not isinstance(items, list) or not all(_is_pair(i) for i in items):
            raise StorageError(
                f"{path}: {namespace!r} must be a list of [string, string] pairs"
            )


def _is_pair(item: Any) -> bool:
    return (
        isinstance(item, list)
        and len(item) == 2
        and all(isinstance(x, str) for x in item)
    )
