"""
MODULE: services.entity_services.query_builder
RESPONSIBILITY: Build SQL fragments and SELECT statements for entity queries.
ALLOWED: typing, decimal, loguru, core.exceptions, core.interfaces.
FORBIDDEN: Executing queries (only building).
ERRORS: InvalidArgumentError.

Построение условий WHERE и SELECT запросов для сущностей.

Все идентификаторы и значения проходят через экранирование
дескриптора БД, сырые значения в SQL не попадают.
"""

from decimal import Decimal
from typing import Any, List, Mapping, Optional, Tuple

from loguru import logger

from core.exceptions import InvalidArgumentError
from core.interfaces import IDatabaseHandle


class QueryBuilder:
    """Построитель условий WHERE"""

    COMBINATORS = ('AND', 'OR')
    SEQUENCE_TYPES = (list, tuple, set, frozenset)

    def __init__(self, db: IDatabaseHandle):
        self.db = db

    def quote_identifier(self, name: str) -> str:
        """Экранирование идентификатора, `a.id_cms` -> `"a"."id_cms"`"""
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError(f"Некорректное имя столбца: {name!r}")
        return '.'.join(self.db.quote_identifier(part) for part in name.split('.'))

    def quote(self, value: Any) -> str:
        """
        Представление скалярного значения в виде SQL литерала

        Raises:
            InvalidArgumentError: Тип значения не поддерживается
        """
        if isinstance(value, bool):
            return 'TRUE' if value else 'FALSE'
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if isinstance(value, str):
            return f"'{self.db.escape(value)}'"
        raise InvalidArgumentError(
            f"Неподдерживаемый тип значения в условии: {type(value).__name__}"
        )

    def build_condition(self, column: str, value: Any) -> str:
        """Одно условие: равенство, IS NULL или IN для последовательности"""
        identifier = self.quote_identifier(column)

        if value is None:
            return f"{identifier} IS NULL"

        if isinstance(value, self.SEQUENCE_TYPES):
            if not value:
                raise InvalidArgumentError(f"Пустой список значений для столбца {column}")
            items = sorted(value, key=repr) if isinstance(value, (set, frozenset)) else value
            return f"{identifier} IN ({', '.join(self.quote(item) for item in items)})"

        return f"{identifier} = {self.quote(value)}"

    def build_where_conditions(self, combinator: str, conditions: Mapping[str, Any]) -> str:
        """
        Построение выражения для WHERE

        Args:
            combinator: 'AND' или 'OR'
            conditions: Столбец -> требуемое значение

        Returns:
            Булево SQL выражение, готовое для подстановки в запрос

        Raises:
            InvalidArgumentError: Пустые условия или неизвестный комбинатор
        """
        operator = (combinator or '').strip().upper()
        if operator not in self.COMBINATORS:
            raise InvalidArgumentError(f"Неизвестный логический оператор: {combinator!r}")

        if not conditions:
            logger.warning("Попытка построить WHERE без условий")
            raise InvalidArgumentError("Набор условий не может быть пустым")

        parts = [self.build_condition(column, value) for column, value in conditions.items()]
        return f" {operator} ".join(parts)


class SelectQuery:
    """
    Построитель SELECT запроса

    Повторные вызовы where() объединяются через AND, каждое условие
    заключается в скобки.
    """

    def __init__(self):
        self._select: List[str] = []
        self._from: Optional[Tuple[str, Optional[str]]] = None
        self._joins: List[str] = []
        self._where: List[str] = []
        self._limit: Optional[int] = None

    def select(self, fields: str) -> 'SelectQuery':
        self._select.append(fields)
        return self

    def from_table(self, table: str, alias: Optional[str] = None) -> 'SelectQuery':
        self._from = (table, alias)
        return self

    def left_join(self, table: str, alias: Optional[str] = None, on: Optional[str] = None) -> 'SelectQuery':
        join = f"LEFT JOIN {table}"
        if alias:
            join += f" {alias}"
        if on:
            join += f" ON {on}"
        self._joins.append(join)
        return self

    def where(self, condition: str) -> 'SelectQuery':
        self._where.append(condition)
        return self

    def limit(self, limit: int) -> 'SelectQuery':
        self._limit = int(limit)
        return self

    def build(self) -> str:
        if self._from is None:
            raise InvalidArgumentError("Не указана таблица для SELECT")

        table, alias = self._from
        sql = f"SELECT {', '.join(self._select) or '*'} FROM {table}"
        if alias:
            sql += f" {alias}"
        for join in self._joins:
            sql += f" {join}"
        if self._where:
            sql += " WHERE " + " AND ".join(f"({condition})" for condition in self._where)
        if self._limit is not None:
            sql += f" LIMIT {self._limit}"
        return sql

    def __str__(self) -> str:
        return self.build()
