# tests/conftest.py
from __future__ import annotations

import pytest

from core.metadata import MetadataCache
from helpers.fake_database import FakeDatabase
from services.entity_services.entity_manager import EntityManager
from utils.cache import SimpleCache


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def cache() -> SimpleCache:
    return SimpleCache(ttl=60)


@pytest.fixture
def entity_manager(db) -> EntityManager:
    return EntityManager(db, tables_prefix="tb_", metadata_cache=MetadataCache())


@pytest.fixture
def caching_entity_manager(db, cache) -> EntityManager:
    return EntityManager(db, tables_prefix="tb_", cache=cache, cache_objects=True)
