from datetime import date

import pytest

from espresso_log import Bean, BeanStore, MemoryKeyValueStore, RecordStore, RoastLevel, ShotStore


@pytest.fixture
def backend():
    return MemoryKeyValueStore()


@pytest.fixture
def records(backend):
    return RecordStore(backend)


@pytest.fixture
def bean_store(records):
    return BeanStore(records)


@pytest.fixture
def shot_store(records):
    return ShotStore(records)


@pytest.fixture
def bean():
    return Bean(name="Yirgacheffe", roast_level=RoastLevel.LIGHT, origin="Ethiopia", roast_date=date(2025, 8, 1))
