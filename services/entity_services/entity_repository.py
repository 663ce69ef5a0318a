"""
MODULE: services.entity_services.entity_repository
RESPONSIBILITY: Generic typed data access for one entity type.
ALLOWED: typing, re, dataclasses, loguru, core.*, services.entity_services.query_builder.
FORBIDDEN: Saving or deleting entities (delegated to the entities themselves).
ERRORS: ConfigurationError, InvalidArgumentError, UnsupportedOperationError, DataAccessError.

Репозиторий сущностей.

Предоставляет find_one, find_all и поиск по полю. Методы вида
findByIdCms / findOneByName / find_by_id_cms разбираются по имени
в момент обращения и сводятся к одному примитиву _do_find.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

from loguru import logger

from core.entity import Entity
from core.exceptions import (
    DataAccessError,
    EntityMapperError,
    InvalidArgumentError,
    UnsupportedOperationError,
)
from core.metadata import EntityMetadata
from services.entity_services.query_builder import QueryBuilder

if TYPE_CHECKING:
    from services.entity_services.entity_manager import EntityManager


T = TypeVar('T', bound=Entity)

CAMEL_FINDER_PATTERN = re.compile(r'^find(?P<one>One)?By(?P<field>[A-Z][A-Za-z0-9]*)?$')
SNAKE_FINDER_PATTERN = re.compile(r'^find(?P<one>_one)?_by_(?P<field>[a-z][a-z0-9_]*)$')


def convert_to_db_field_name(camel_case_field_name: str) -> str:
    """
    Преобразование имени из camelCase в snake_case

    Например: findByIdCMS -> id_cms
    """
    return re.sub(r'([a-z])([A-Z])', r'\1_\2', camel_case_field_name).lower()


@dataclass(frozen=True)
class FinderCall:
    """
    Разобранное имя метода поиска

    Attributes:
        one: Требуется ровно одна запись (findOneBy*)
        column: Столбец условия; None для findBy(условия)
    """
    one: bool
    column: Optional[str]


def parse_finder_name(method_name: str) -> FinderCall:
    """
    Разбор имени метода поиска

    Raises:
        UnsupportedOperationError: Имя не соответствует шаблонам
    """
    match = CAMEL_FINDER_PATTERN.match(method_name)
    if match:
        field_name = match.group('field')
        return FinderCall(
            one=match.group('one') is not None,
            column=convert_to_db_field_name(field_name) if field_name else None,
        )

    match = SNAKE_FINDER_PATTERN.match(method_name)
    if match:
        return FinderCall(one=match.group('one') is not None, column=match.group('field'))

    raise UnsupportedOperationError(f"Неизвестный метод {method_name}")


class EntityRepository(Generic[T]):
    """
    Репозиторий для одного типа сущностей

    Attributes:
        entity_manager: Владелец репозитория
        db: Дескриптор базы данных
        tables_prefix: Префикс таблиц
        entity_metadata: Метаданные сущности
    """

    def __init__(
        self,
        entity_manager: 'EntityManager',
        tables_prefix: str,
        entity_metadata: EntityMetadata,
    ):
        self.entity_manager = entity_manager
        self.db = entity_manager.get_database()
        self.tables_prefix = tables_prefix
        self.entity_metadata = entity_metadata
        self.query_builder = QueryBuilder(self.db)

    def __getattr__(self, method_name: str) -> Callable[..., Any]:
        if method_name.startswith('__'):
            raise AttributeError(method_name)

        finder = parse_finder_name(method_name)

        def finder_method(*arguments: Any) -> Any:
            return self._dispatch(method_name, finder, arguments)

        finder_method.__name__ = method_name
        return finder_method

    def find_by_field(self, method_name: str, *arguments: Any) -> Any:
        """
        Общая точка входа для поиска по имени метода

        Args:
            method_name: findBy<Field>, findOneBy<Field>, find_by_<column>, ...
            arguments: Ровно одно значение условия

        Raises:
            UnsupportedOperationError: Имя не соответствует шаблонам
            InvalidArgumentError: Число аргументов не равно одному
        """
        return self._dispatch(method_name, parse_finder_name(method_name), arguments)

    def _dispatch(self, method_name: str, finder: FinderCall, arguments: tuple) -> Any:
        if len(arguments) != 1:
            logger.warning(f"{method_name} вызван с {len(arguments)} аргументами")
            raise InvalidArgumentError(f"Метод {method_name} принимает ровно один аргумент")

        if finder.column is None:
            conditions = arguments[0]
            if not isinstance(conditions, Mapping):
                raise InvalidArgumentError(
                    f"Метод {method_name} ожидает словарь условий, получено: {type(conditions).__name__}"
                )
        else:
            conditions = {finder.column: arguments[0]}

        return self._do_find(finder.one, conditions)

    def find_by(self, conditions: Mapping[str, Any]) -> List[T]:
        """Все сущности, удовлетворяющие условиям (AND)"""
        return self._do_find(False, conditions)

    def find_one_by(self, conditions: Mapping[str, Any]) -> Optional[T]:
        """Единственная сущность, удовлетворяющая условиям (AND)"""
        return self._do_find(True, conditions)

    def find_one(self, entity_id: Any) -> Optional[T]:
        """
        Поиск сущности по первичному ключу

        Raises:
            ConfigurationError: Первичный ключ отсутствует или составной
        """
        return self._do_find(True, {self.get_id_field_name(): entity_id})

    def find_all(self) -> List[T]:
        """Все сущности таблицы"""
        sql = f"SELECT * FROM {self.get_table_name_with_prefix()}"
        return self.hydrate_many(self._select(sql))

    def load(
        self,
        entity_id: Any,
        id_lang: Optional[int] = None,
        id_shop: Optional[int] = None,
    ) -> Optional[T]:
        """Загрузка через EntityLoader с переводами и данными магазина"""
        return self.entity_manager.load(
            self.entity_metadata.entity_class, entity_id, id_lang=id_lang, id_shop=id_shop
        )

    def get_new_entity(self) -> T:
        """Новая пустая сущность текущего типа"""
        return self.entity_metadata.entity_class()

    def get_id_field_name(self) -> str:
        return self.entity_metadata.get_single_primary_key()

    def get_table_name_with_prefix(self) -> str:
        """Экранированное имя таблицы с префиксом"""
        return self.db.quote_identifier(f"{self.tables_prefix}{self.entity_metadata.table_name}")

    def _do_find(self, one: bool, conditions: Mapping[str, Any]) -> Any:
        where_clause = self.query_builder.build_where_conditions('AND', conditions)
        sql = f"SELECT * FROM {self.get_table_name_with_prefix()} WHERE {where_clause}"
        rows = self._select(sql)

        if one:
            return self.hydrate_one(rows)
        return self.hydrate_many(rows)

    def _select(self, sql: str) -> List[Dict[str, Any]]:
        logger.debug(f"{self.entity_metadata.entity_class_name}: {sql}")
        try:
            return list(self.db.select(sql) or [])
        except EntityMapperError:
            raise
        except Exception as e:
            error_msg = f"Ошибка выборки {self.entity_metadata.entity_class_name}: {e}"
            logger.error(f"{error_msg}\nЗапрос: {sql}")
            raise DataAccessError(error_msg, original_error=e, query=sql) from e

    def hydrate_one(self, rows: List[Dict[str, Any]]) -> Optional[T]:
        """
        Сущность из единственной строки

        Returns:
            None, если строк нет

        Raises:
            DataAccessError: Вернулось больше одной строки
        """
        if not rows:
            return None
        if len(rows) > 1:
            raise DataAccessError(
                f"Слишком много строк ({len(rows)}) для {self.entity_metadata.entity_class_name}"
            )
        return self.get_new_entity().hydrate(dict(rows[0]))

    def hydrate_many(self, rows: List[Dict[str, Any]]) -> List[T]:
        return [self.get_new_entity().hydrate(dict(row)) for row in rows]
