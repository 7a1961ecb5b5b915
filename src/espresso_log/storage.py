"""Key-value backing stores and the record persistence adapter."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaError

from espresso_log.exceptions import PersistenceError

log = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class KeyValueStore(ABC):
    """Abstract durable string store addressed by key."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileKeyValueStore(KeyValueStore):
    """All keys kept in a single JSON object on disk.

    Every write rewrites the whole file through a temporary file and
    ``os.replace`` so a crash never leaves a half-written document.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise PersistenceError(str(self.path), "data file must contain a JSON object")
        return data

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError, PersistenceError) as exc:
            log.warning("Discarding unreadable data file %s: %s", self.path, exc)
            data = {}
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(data, fp, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class RecordStore:
    """Saves and loads whole sequences of records under a key.

    Failures never reach the caller: ``load`` falls back to an empty list
    and ``save`` reports False. Both log a warning and, when given, pass a
    PersistenceError to ``on_error`` so a host can show a non-fatal notice.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        on_error: Callable[[PersistenceError], None] | None = None,
    ):
        self.backend = backend
        self.on_error = on_error
        self._adapters: dict[type, TypeAdapter] = {}

    def _adapter(self, model: type[RecordT]) -> TypeAdapter[list[RecordT]]:
        if model not in self._adapters:
            self._adapters[model] = TypeAdapter(list[model])
        return self._adapters[model]

    def _report(self, error: PersistenceError) -> None:
        log.warning("Persistence failure for %s: %s", error.key, error.message)
        if self.on_error is not None:
            self.on_error(error)

    def save(self, key: str, records: Sequence[RecordT]) -> bool:
        """Serialize ``records`` and write them under ``key``."""
        if not records:
            payload = "[]"
        else:
            adapter = self._adapter(type(records[0]))
            try:
                payload = adapter.dump_json(list(records), by_alias=True).decode("utf-8")
            except (ValueError, TypeError) as exc:
                self._report(PersistenceError(key, f"serialization failed: {exc}"))
                return False

        try:
            self.backend.set(key, payload)
        except (OSError, PersistenceError) as exc:
            self._report(PersistenceError(key, f"write failed: {exc}"))
            return False

        log.debug("Saved %d records under %s", len(records), key)
        return True

    def load(self, key: str, model: type[RecordT]) -> list[RecordT]:
        """Read the records stored under ``key``; empty on any failure."""
        try:
            payload = self.backend.get(key)
        except (OSError, ValueError, PersistenceError) as exc:
            self._report(PersistenceError(key, f"read failed: {exc}"))
            return []

        if payload is None:
            return []

        try:
            return self._adapter(model).validate_json(payload)
        except SchemaError as exc:
            self._report(PersistenceError(key, f"malformed data: {exc.error_count()} errors"))
            return []
