"""
MODULE: services.entity_services.entity_manager
RESPONSIBILITY: Top-level facade: metadata, repositories, loading, save/delete delegation.
ALLOWED: typing, importlib, loguru, core.*, services.entity_services.*.
FORBIDDEN: SQL construction (use QueryBuilder / EntityLoader / EntityRepository).
ERRORS: ConfigurationError, DataAccessError.

Менеджер сущностей.

Держит дескриптор БД и кэш метаданных, общий для всех созданных
репозиториев. Сохранение и удаление делегируются самим сущностям.
"""

from importlib import import_module
from typing import Any, Optional, Type

from loguru import logger

from core.exceptions import ConfigurationError
from core.interfaces import ICacheService, IDatabaseHandle, IPersistableEntity
from core.metadata import EntityMetadata, EntityType, MetadataCache
from services.entity_services.entity_loader import EntityLoader
from services.entity_services.entity_repository import EntityRepository


class EntityManager:
    """
    Фасад слоя отображения сущностей

    Attributes:
        db: Дескриптор базы данных
        tables_prefix: Префикс таблиц
        metadata_cache: Кэш метаданных, живет вместе с менеджером
        loader: Загрузчик сущностей по первичному ключу
        cache_objects: Использовать кэш строк при загрузке
    """

    def __init__(
        self,
        db: IDatabaseHandle,
        tables_prefix: str = '',
        cache: Optional[ICacheService] = None,
        cache_objects: bool = False,
        metadata_cache: Optional[MetadataCache] = None,
    ):
        self.db = db
        self.tables_prefix = tables_prefix
        self.metadata_cache = metadata_cache or MetadataCache()
        self.loader = EntityLoader(db, cache, tables_prefix)
        self.cache_objects = cache_objects and cache is not None

    def get_database(self) -> IDatabaseHandle:
        return self.db

    def get_entity_metadata(self, entity_type: EntityType) -> EntityMetadata:
        """
        Метаданные сущности (вычисляются один раз на тип)

        Raises:
            ConfigurationError: Сущность не описана
        """
        return self.metadata_cache.get(entity_type)

    def get_repository(self, entity_type: EntityType) -> EntityRepository:
        """
        Репозиторий для типа сущности

        Если сущность объявляет собственный класс репозитория, создается
        он, иначе общий EntityRepository.

        Raises:
            ConfigurationError: Сущность не описана или класс репозитория некорректен
        """
        metadata = self.get_entity_metadata(entity_type)
        repository_class = self._resolve_repository_class(metadata)
        logger.debug(f"Репозиторий {repository_class.__name__} для {metadata.entity_class_name}")
        return repository_class(self, self.tables_prefix, metadata)

    def _resolve_repository_class(self, metadata: EntityMetadata) -> Type[EntityRepository]:
        hook = getattr(metadata.entity_class, 'get_repository_class', None)
        repository_class = hook() if callable(hook) else None

        if not repository_class:
            return EntityRepository

        if isinstance(repository_class, str):
            repository_class = self._import_class(repository_class)

        if not (isinstance(repository_class, type) and issubclass(repository_class, EntityRepository)):
            raise ConfigurationError(
                f"Репозиторий {repository_class!r} сущности `{metadata.entity_class_name}` "
                f"должен наследовать EntityRepository"
            )
        return repository_class

    @staticmethod
    def _import_class(class_path: str) -> Any:
        """Загрузка класса по пути вида package.module.ClassName"""
        module_path, _, class_name = class_path.rpartition('.')
        if not module_path:
            raise ConfigurationError(f"Некорректный путь к классу репозитория: {class_path}")
        try:
            return getattr(import_module(module_path), class_name)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(f"Не удалось загрузить класс репозитория {class_path}: {e}") from e

    def load(
        self,
        entity_type: EntityType,
        entity_id: Any,
        id_lang: Optional[int] = None,
        id_shop: Optional[int] = None,
    ) -> Optional[IPersistableEntity]:
        """
        Загрузка сущности по первичному ключу с переводами и данными магазина

        Returns:
            Сущность или None, если строка не найдена
        """
        metadata = self.get_entity_metadata(entity_type)
        entity = metadata.entity_class()
        self.loader.load(entity_id, id_lang, entity, metadata, id_shop, self.cache_objects)
        if entity.id is None:
            return None
        entity.id_lang = id_lang
        entity.id_shop = id_shop
        return entity

    def save(self, entity: IPersistableEntity) -> 'EntityManager':
        """Сохранение сущности ее собственным методом save()"""
        entity.save()
        return self

    def delete(self, entity: IPersistableEntity) -> 'EntityManager':
        """Удаление сущности ее собственным методом delete()"""
        entity.delete()
        return self

    def clear_metadata(self) -> None:
        self.metadata_cache.clear()
