"""
MODULE: core.dependency_injection
RESPONSIBILITY: Central Dependency Injection Container (Singleton).
ALLOWED: Importing the database manager, cache and entity manager.
FORBIDDEN: Business logic.
ERRORS: DatabaseConnectionError.

Контейнер зависимостей

Создает по требованию подключение к БД, кэш строк и менеджер
сущностей по конфигурации приложения.
"""

from typing import Optional

from loguru import logger

from config.settings import Config, config as default_config
from core.database import DatabaseManager
from logger import setup_logging
from services.entity_services.entity_manager import EntityManager
from utils.cache import SimpleCache


class DependencyContainer:
    """
    Контейнер зависимостей для управления жизненным циклом сервисов

    Реализует паттерн Singleton для обеспечения единой точки доступа
    к зависимостям во всем приложении.
    """

    _instance: Optional['DependencyContainer'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self._config: Config = default_config
        self._logging_configured = False
        self._db_manager: Optional[DatabaseManager] = None
        self._cache: Optional[SimpleCache] = None
        self._entity_manager: Optional[EntityManager] = None

    def configure(self, app_config: Config) -> None:
        """Замена конфигурации; уже созданные зависимости сбрасываются"""
        self.cleanup()
        self._config = app_config
        self._logging_configured = False

    def get_config(self) -> Config:
        return self._config

    def _ensure_logging(self) -> None:
        if not self._logging_configured:
            log_dir = setup_logging(self._config.app)
            self._logging_configured = True
            logger.info(f"Логирование настроено: {log_dir}")

    def get_database_manager(self) -> DatabaseManager:
        """Получение подключенного менеджера базы данных"""
        if self._db_manager is None:
            self._ensure_logging()
            logger.info("Создание DatabaseManager")
            self._db_manager = DatabaseManager(self._config.database)
            self._db_manager.connect()
        return self._db_manager

    def get_cache(self) -> SimpleCache:
        """Получение кэша строк сущностей"""
        if self._cache is None:
            self._cache = SimpleCache(ttl=self._config.orm.cache_ttl)
        return self._cache

    def get_entity_manager(self) -> EntityManager:
        """Получение менеджера сущностей"""
        if self._entity_manager is None:
            logger.info("Создание EntityManager")
            self._entity_manager = EntityManager(
                self.get_database_manager(),
                tables_prefix=self._config.orm.table_prefix,
                cache=self.get_cache(),
                cache_objects=self._config.orm.cache_objects,
            )
        return self._entity_manager

    def cleanup(self):
        """Очистка ресурсов при завершении работы приложения"""
        logger.info("Очистка зависимостей")

        if self._db_manager:
            self._db_manager.close()
            self._db_manager = None
            DatabaseManager._instance = None

        if self._cache:
            self._cache.clear()
            self._cache = None

        self._entity_manager = None


# Глобальный экземпляр контейнера
container = DependencyContainer()
