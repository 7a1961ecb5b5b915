"""In-memory bean and shot collections backed by a RecordStore."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Generic, TypeVar

from espresso_log.schema import Bean, Shot
from espresso_log.storage import RecordStore

log = logging.getLogger(__name__)

BEANS_KEY = "coffeeBeans"
SHOTS_KEY = "espressoShots"
RECENT_SHOTS = 3

T = TypeVar("T")
Listener = Callable[[tuple], None]


def _to_uuid(value: uuid.UUID | str) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class _ObservableStore(Generic[T]):
    """Shared list handling, persistence and change notification."""

    key: str
    model: type

    def __init__(self, records: RecordStore):
        self.records = records
        self._items: list[T] = records.load(self.key, self.model)
        self._listeners: list[Listener] = []
        log.info("Loaded %d records from %s", len(self._items), self.key)

    def __len__(self) -> int:
        return len(self._items)

    def all(self) -> tuple[T, ...]:
        """Snapshot of the current ordered collection."""
        return tuple(self._items)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every change.

        Returns a function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        self.records.save(self.key, self._items)
        snapshot = self.all()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                log.exception("Listener failed for %s", self.key)


class BeanStore(_ObservableStore[Bean]):
    """Beans in the order they were added."""

    key = BEANS_KEY
    model = Bean

    def add(self, bean: Bean) -> None:
        self._items.append(bean)
        log.info("Added bean %s (%s)", bean.id, bean.name)
        self._changed()

    def delete(self, bean_id: uuid.UUID | str) -> bool:
        """Remove the bean with ``bean_id``. Returns False if there was none."""
        target = _to_uuid(bean_id)
        for index, bean in enumerate(self._items):
            if bean.id == target:
                del self._items[index]
                log.info("Deleted bean %s (%s)", bean.id, bean.name)
                self._changed()
                return True
        return False

    def get(self, bean_id: uuid.UUID | str) -> Bean | None:
        target = _to_uuid(bean_id)
        return next((bean for bean in self._items if bean.id == target), None)


class ShotStore(_ObservableStore[Shot]):
    """Shots ordered most recent first."""

    key = SHOTS_KEY
    model = Shot

    def record(self, shot: Shot) -> None:
        self._items.insert(0, shot)
        log.info("Recorded shot %s with %s", shot.id, shot.coffee_bean.name)
        self._changed()

    def recent(self, n: int = RECENT_SHOTS) -> tuple[Shot, ...]:
        return tuple(self._items[: max(n, 0)])
