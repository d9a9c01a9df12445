# tests/conftest.py
import os

# must be set before pricecheck.main builds its store
os.environ.setdefault("PRICECHECK_STORAGE_BACKEND", "memory")
os.environ.setdefault("PRICECHECK_PERSIST_IN_BACKGROUND", "false")

import pytest

from pricecheck.catalog import CatalogStore
from pricecheck.database import MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return CatalogStore(storage=storage)


@pytest.fixture
def coffee(store):
    return store.add_category("Coffee")
