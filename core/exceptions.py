"""
MODULE: core.exceptions
RESPONSIBILITY: Define entity mapper exception classes.
ALLOWED: Inheriting from EntityMapperError.
FORBIDDEN: Business logic.
ERRORS: None.

Исключения слоя отображения сущностей
"""

from typing import Optional


class EntityMapperError(Exception):
    """Базовое исключение слоя отображения сущностей"""
    pass


class ConfigurationError(EntityMapperError):
    """Метаданные сущности отсутствуют или не поддерживаются операцией"""
    pass


class InvalidArgumentError(EntityMapperError):
    """Нарушение контракта вызова (число аргументов, пустые условия)"""
    pass


class UnsupportedOperationError(EntityMapperError, AttributeError):
    """Имя метода не соответствует ни одному шаблону поиска"""
    pass


class CompositePrimaryKeyError(ConfigurationError, UnsupportedOperationError):
    """Составной первичный ключ там, где требуется одиночный"""
    pass


class DataAccessError(EntityMapperError):
    """Ошибка выполнения запроса или лишние строки в выборке одной записи"""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        query: Optional[str] = None,
    ):
        super().__init__(message)
        self.original_error = original_error
        self.query = query


class DatabaseConnectionError(DataAccessError):
    """Ошибка подключения к базе данных"""
    pass
