"""
MODULE: core.database
RESPONSIBILITY: Low-level PostgreSQL connection management (Singleton).
ALLOWED: psycopg2, loguru, escaping helpers.
FORBIDDEN: Entity mapping logic (use services.entity_services).
ERRORS: DatabaseConnectionError, DataAccessError.

Менеджер базы данных для слоя отображения сущностей

Модуль предоставляет DatabaseManager: единое подключение к PostgreSQL
с методами выборки, выполнения и экранирования, которые используют
загрузчик сущностей и репозитории.
"""

from typing import List, Dict, Any, Optional, Tuple, Union

import psycopg2
from psycopg2.extensions import quote_ident
from psycopg2.extras import RealDictCursor
from loguru import logger

from config.settings import DatabaseConfig
from core.exceptions import DatabaseConnectionError, DataAccessError


class DatabaseManager:
    """
    Менеджер для работы с PostgreSQL базой данных

    Реализует паттерн Singleton для единого подключения к базе данных
    во всем приложении. Строки возвращаются словарями (RealDictCursor).

    Attributes:
        db_config: Конфигурация подключения к БД
        connection: Активное подключение к PostgreSQL
    """

    _instance = None

    def __new__(cls, db_config: DatabaseConfig):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, db_config: DatabaseConfig):
        if not hasattr(self, '_initialized'):
            self.db_config = db_config
            self.connection: Optional[psycopg2.extensions.connection] = None
            self._initialized = True

    def connect(self) -> None:
        """
        Установка соединения с базой данных

        Raises:
            DatabaseConnectionError: При ошибке подключения
        """
        if self.connection is not None and not self.connection.closed:
            logger.debug("Подключение к БД уже установлено")
            return

        try:
            self.connection = psycopg2.connect(
                host=self.db_config.host,
                database=self.db_config.database,
                user=self.db_config.user,
                password=self.db_config.password,
                port=self.db_config.port,
                cursor_factory=RealDictCursor
            )
            logger.info(f"Успешное подключение к БД: {self.db_config.database}")

        except psycopg2.Error as e:
            error_msg = f"Ошибка подключения к БД {self.db_config.database}: {e}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg, original_error=e) from e

    def _require_connection(self) -> psycopg2.extensions.connection:
        if self.connection is None or self.connection.closed:
            raise DatabaseConnectionError("Нет активного подключения к БД")
        return self.connection

    def execute_s(self, sql: str, params: Optional[Tuple] = None) -> List[Dict[str, Any]]:
        """
        Выполнение запроса с возвратом строк

        Args:
            sql: SQL запрос
            params: Параметры запроса

        Returns:
            Список строк (столбец -> значение); пустой, если запрос
            ничего не возвращает

        Raises:
            DataAccessError: При ошибке выполнения запроса
        """
        connection = self._require_connection()

        try:
            with connection.cursor() as cursor:
                cursor.execute(sql, params)
                if cursor.description is None:
                    connection.commit()
                    logger.debug(f"Выполнен запрос без результатов: {sql[:80]}")
                    return []
                rows = [dict(row) for row in cursor.fetchall()]
                logger.debug(f"Выполнен запрос, возвращено {len(rows)} строк: {sql[:80]}")
                return rows

        except psycopg2.Error as e:
            connection.rollback()
            error_msg = f"Ошибка выполнения запроса: {e}\nЗапрос: {sql}"
            logger.error(error_msg)
            raise DataAccessError(error_msg, original_error=e, query=sql) from e

    def select(self, sql: str) -> List[Dict[str, Any]]:
        """Выполнение SELECT запроса"""
        return self.execute_s(sql)

    def get_row(self, query: Union[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Первая строка результата запроса

        Args:
            query: SQL строка или построитель запроса с методом build()

        Returns:
            Строка или None, если запрос ничего не вернул
        """
        if hasattr(query, 'build'):
            query = query.limit(1).build()
        else:
            query = str(query).rstrip(" \t\n\r;") + " LIMIT 1"

        rows = self.execute_s(query)
        return rows[0] if rows else None

    def escape(self, value: str) -> str:
        """Экранирование строкового значения для литерала в одинарных кавычках"""
        return str(value).replace('\x00', '').replace("'", "''")

    def quote_identifier(self, name: str) -> str:
        """Экранирование идентификатора средствами psycopg2"""
        return quote_ident(str(name), self._require_connection())

    def check_connection(self) -> bool:
        """
        Проверка активности соединения

        Returns:
            True если соединение активно
        """
        try:
            if self.connection and not self.connection.closed:
                self.execute_s("SELECT 1")
                return True
            return False
        except DataAccessError:
            return False

    def close(self) -> None:
        """Закрытие соединения с БД"""
        try:
            if self.connection and not self.connection.closed:
                self.connection.close()
                logger.info("Соединение с БД закрыто")
        except psycopg2.Error as e:
            logger.warning(f"Ошибка при закрытии соединения с БД: {e}")
        finally:
            self.connection = None

    def __enter__(self):
        """Поддержка контекстного менеджера"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Автоматическое закрытие соединения"""
        self.close()
