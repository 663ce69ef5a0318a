# tests/core/test_dependency_injection.py
from __future__ import annotations

import sys
from unittest.mock import MagicMock

import pytest
from loguru import logger

import core.database as database_module
from config.settings import Config
from core.dependency_injection import DependencyContainer
from services.entity_services.entity_manager import EntityManager


@pytest.fixture
def container(monkeypatch, tmp_path):
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("DB_PREFIX", "ps_")
    connection = MagicMock()
    connection.closed = False
    monkeypatch.setattr(database_module.psycopg2, "connect", MagicMock(return_value=connection))

    container = DependencyContainer()
    container.configure(Config())
    yield container
    container.cleanup()
    logger.remove()
    logger.add(sys.stderr)


class TestDependencyContainer:
    def test_singleton(self):
        assert DependencyContainer() is DependencyContainer()

    def test_builds_entity_manager_from_config(self, container, tmp_path):
        manager = container.get_entity_manager()

        assert isinstance(manager, EntityManager)
        assert manager is container.get_entity_manager()
        assert manager.tables_prefix == "ps_"
        assert manager.cache_objects is True
        assert manager.get_database() is container.get_database_manager()
        assert (tmp_path / "logs").is_dir()

    def test_cleanup_closes_connection(self, container):
        db_manager = container.get_database_manager()
        connection = db_manager.connection

        container.cleanup()

        connection.close.assert_called_once()
        assert container.get_entity_manager() is not None
