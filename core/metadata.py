"""
MODULE: core.metadata
RESPONSIBILITY: Resolve and memoize entity metadata from declarative descriptors.
ALLOWED: Dataclasses, Typing, threading, loguru, core.entity, core.exceptions.
FORBIDDEN: SQL, database access.
ERRORS: ConfigurationError, CompositePrimaryKeyError.

Метаданные сущностей

Модуль предоставляет:
- EntityMetadata: неизменяемое описание отображения сущности
- MetadataResolver: построение метаданных из EntityDefinition
- MetadataCache: кэш метаданных, принадлежащий EntityManager
"""

import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple, Type, Union

from loguru import logger

from core.entity import Entity, EntityDefinition, EntityRegistry, entity_registry
from core.exceptions import CompositePrimaryKeyError, ConfigurationError


EntityType = Union[Type[Entity], str]


@dataclass(frozen=True)
class EntityMetadata:
    """
    Метаданные сущности

    Attributes:
        table_name: Основная таблица без префикса
        primary_key_fields: Столбцы первичного ключа по порядку
        multilang: Есть таблица переводов
        multilang_shop: Переводы разделены по магазинам
        multishop: Основная таблица связана с таблицей магазинов
        entity_class_name: Имя класса сущности
        entity_class: Класс сущности
        properties: Имена отображаемых свойств
        lang_properties: Имена переводимых свойств
    """
    table_name: str
    primary_key_fields: Tuple[str, ...]
    multilang: bool
    multilang_shop: bool
    multishop: bool
    entity_class_name: str
    entity_class: Type[Entity]
    properties: FrozenSet[str]
    lang_properties: FrozenSet[str]

    def get_table_name(self) -> str:
        return self.table_name

    def get_primary_key_fieldnames(self) -> Tuple[str, ...]:
        return self.primary_key_fields

    def get_entity_class_name(self) -> str:
        return self.entity_class_name

    def get_single_primary_key(self) -> str:
        """
        Единственный столбец первичного ключа

        Raises:
            ConfigurationError: Первичный ключ не объявлен
            CompositePrimaryKeyError: Первичный ключ составной
        """
        if not self.primary_key_fields:
            raise ConfigurationError(
                f"В сущности `{self.entity_class_name}` не объявлен первичный ключ"
            )
        if len(self.primary_key_fields) > 1:
            raise CompositePrimaryKeyError(
                f"Сущность `{self.entity_class_name}` имеет составной первичный ключ, "
                f"который не поддерживается репозиториями"
            )
        return self.primary_key_fields[0]


class MetadataResolver:
    """Построение EntityMetadata по декларативному описанию класса"""

    def resolve(self, entity_type: EntityType) -> EntityMetadata:
        """
        Построение метаданных сущности

        Детерминировано и без побочных эффектов: повторный вызов
        возвращает равное значение.

        Args:
            entity_type: Класс сущности или имя зарегистрированного класса

        Raises:
            ConfigurationError: Сущность не найдена или не описана
        """
        entity_class = self._resolve_class(entity_type)
        definition = getattr(entity_class, 'definition', None)

        if not isinstance(definition, EntityDefinition):
            raise ConfigurationError(
                f"Класс `{entity_class.__name__}` не содержит описания таблицы (definition)"
            )
        if not definition.table:
            raise ConfigurationError(
                f"Для класса `{entity_class.__name__}` не указано имя таблицы"
            )

        lang_properties = frozenset(
            name for name, declared in definition.fields.items() if declared.lang
        )
        if lang_properties and not definition.multilang:
            raise ConfigurationError(
                f"Класс `{entity_class.__name__}` объявляет переводимые поля "
                f"{sorted(lang_properties)}, но не помечен как multilang"
            )

        return EntityMetadata(
            table_name=definition.table,
            primary_key_fields=definition.primary_key_fields(),
            multilang=definition.multilang,
            multilang_shop=definition.multilang_shop,
            multishop=definition.multishop,
            entity_class_name=entity_class.__name__,
            entity_class=entity_class,
            properties=frozenset(definition.fields),
            lang_properties=lang_properties,
        )

    @staticmethod
    def _resolve_class(entity_type: EntityType) -> Type[Entity]:
        if isinstance(entity_type, str):
            entity_class = entity_registry.get(entity_type)
            if entity_class is None:
                raise ConfigurationError(f"Сущность `{entity_type}` не зарегистрирована")
            return entity_class
        if isinstance(entity_type, type):
            return entity_type
        raise ConfigurationError(f"Ожидался класс сущности, получено: {entity_type!r}")


class MetadataCache:
    """
    Кэш метаданных сущностей

    Создается вместе с EntityManager и живет столько же. После
    заполнения безопасен для чтения из нескольких потоков.
    """

    def __init__(self, resolver: Optional[MetadataResolver] = None):
        self.resolver = resolver or MetadataResolver()
        self._metadata: Dict[str, EntityMetadata] = {}
        self._lock = threading.RLock()

    @staticmethod
    def _cache_key(entity_type: EntityType) -> str:
        """Ключ по полному пути класса; имя сначала ищется в реестре"""
        if isinstance(entity_type, str):
            entity_class = entity_registry.get(entity_type)
            if entity_class is None:
                return entity_type
            entity_type = entity_class
        if isinstance(entity_type, type):
            return EntityRegistry.qualified_name(entity_type)
        return repr(entity_type)

    def get(self, entity_type: EntityType) -> EntityMetadata:
        key = self._cache_key(entity_type)
        metadata = self._metadata.get(key)
        if metadata is not None:
            return metadata

        with self._lock:
            metadata = self._metadata.get(key)
            if metadata is None:
                metadata = self.resolver.resolve(entity_type)
                self._metadata[key] = metadata
                logger.debug(
                    f"Метаданные {key}: таблица={metadata.table_name}, "
                    f"ключ={metadata.primary_key_fields}, multilang={metadata.multilang}"
                )
        return metadata

    def clear(self) -> None:
        with self._lock:
            self._metadata.clear()

    def __contains__(self, entity_type: EntityType) -> bool:
        return self._cache_key(entity_type) in self._metadata

    def __len__(self) -> int:
        return len(self._metadata)
