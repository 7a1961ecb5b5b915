"""espresso-log: Record coffee beans and espresso shots, and track freshness and ratios."""

from espresso_log.drafts import BeanDraft, BeanStep, ShotDraft, ShotStep
from espresso_log.exceptions import EspressoLogError, PersistenceError, ValidationError
from espresso_log.schema import Bean, Freshness, RoastLevel, Shot, create_bean, create_shot
from espresso_log.storage import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore, RecordStore
from espresso_log.stores import BeanStore, ShotStore

__version__ = "0.1.0"

__all__ = [
    "Bean",
    "BeanDraft",
    "BeanStep",
    "BeanStore",
    "EspressoLogError",
    "Freshness",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "PersistenceError",
    "RecordStore",
    "RoastLevel",
    "Shot",
    "ShotDraft",
    "ShotStep",
    "ShotStore",
    "ValidationError",
    "create_bean",
    "create_shot",
    "__version__",
]
