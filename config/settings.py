"""
MODULE: config.settings
RESPONSIBILITY: Application configuration loading and validation.
ALLOWED: os, dotenv, dataclasses.
FORBIDDEN: Complex business logic, database connections (only config).
ERRORS: ValueError (validation).
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
import os
from dotenv import load_dotenv
from loguru import logger

from config import ENV_FILE_PATH


@dataclass(frozen=True)
class DatabaseConfig:
    """Конфигурация базы данных"""
    host: str
    database: str
    user: str
    password: str
    port: int

    def get_connection_string(self) -> str:
        """Получить строку подключения для psycopg2"""
        return f"host={self.host} dbname={self.database} user={self.user} password={self.password} port={self.port}"


@dataclass(frozen=True)
class OrmConfig:
    """Конфигурация слоя отображения сущностей"""
    table_prefix: str
    cache_objects: bool
    cache_ttl: int


@dataclass(frozen=True)
class AppConfig:
    """Основная конфигурация приложения"""
    app_name: str
    log_level: str
    log_dir: str
    log_rotation: str
    log_retention: str


class Config:
    """
    Главный класс конфигурации, загружающий все настройки из .env файла
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Инициализация конфигурации

        Args:
            env_file: Путь к .env файлу (опционально)
        """
        self._load_environment(env_file)
        self.database = self._load_database_config()
        self.orm = self._load_orm_config()
        self.app = self._load_app_config()

    def _load_environment(self, env_file: Optional[str]) -> None:
        """Загрузка переменных окружения"""
        try:
            if env_file and os.path.exists(env_file):
                load_dotenv(env_file)
            else:
                load_dotenv()
        except Exception as e:
            logger.warning(f"Не удалось загрузить .env файл: {e}")

    def _get_env_var(self, key: str, default: Any = None, required: bool = False) -> str:
        """
        Получение переменной окружения с валидацией

        Args:
            key: Ключ переменной
            default: Значение по умолчанию
            required: Обязательная ли переменная

        Returns:
            Значение переменной

        Raises:
            ValueError: Если обязательная переменная не найдена
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ValueError(f"Обязательная переменная окружения {key} не найдена")
            return default

        return value

    def _get_env_int(self, key: str, default: int = 0) -> int:
        """Получение int переменной из окружения"""
        try:
            return int(self._get_env_var(key, default))
        except (TypeError, ValueError) as e:
            logger.warning(f"Неверный формат int для {key}: {e}, используется значение по умолчанию: {default}")
            return default

    def _get_env_bool(self, key: str, default: bool = False) -> bool:
        """Получение bool переменной из окружения"""
        value = self._get_env_var(key, default)
        if isinstance(value, bool):
            return value
        return value.lower() in ('true', '1', 'yes', 'y')

    def _load_database_config(self) -> DatabaseConfig:
        """Загрузка конфигурации базы данных"""
        return DatabaseConfig(
            host=self._get_env_var("DB_HOST", "localhost"),
            database=self._get_env_var("DB_DATABASE", "shop"),
            user=self._get_env_var("DB_USER", "postgres"),
            password=self._get_env_var("DB_PASSWORD", ""),
            port=self._get_env_int("DB_PORT", 5432)
        )

    def _load_orm_config(self) -> OrmConfig:
        """Загрузка конфигурации отображения сущностей"""
        return OrmConfig(
            table_prefix=self._get_env_var("DB_PREFIX", "tb_"),
            cache_objects=self._get_env_bool("ORM_CACHE_OBJECTS", True),
            cache_ttl=self._get_env_int("ORM_CACHE_TTL", 3600)
        )

    def _load_app_config(self) -> AppConfig:
        """Загрузка основной конфигурации приложения"""
        return AppConfig(
            app_name=self._get_env_var("APP_NAME", "entity-mapper"),
            log_level=self._get_env_var("LOG_LEVEL", "INFO"),
            log_dir=self._get_env_var("LOG_DIR", "logs"),
            log_rotation=self._get_env_var("LOG_ROTATION", "10 MB"),
            log_retention=self._get_env_var("LOG_RETENTION", "30 days")
        )

    def validate(self) -> bool:
        """
        Валидация конфигурации

        Returns:
            True если конфигурация валидна
        """
        try:
            if not all([self.database.host, self.database.database, self.database.user]):
                raise ValueError("Не все обязательные параметры БД заполнены")

            if self.database.port <= 0:
                raise ValueError(f"Некорректный порт БД: {self.database.port}")

            if self.orm.cache_ttl <= 0:
                raise ValueError("Время жизни кэша должно быть положительным")

            logger.info("Конфигурация прошла валидацию")
            return True

        except Exception as e:
            logger.error(f"Ошибка валидации конфигурации: {e}")
            return False

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование конфигурации в словарь (без паролей)"""
        return {
            "database": {
                "host": self.database.host,
                "database": self.database.database,
                "user": self.database.user,
                "port": self.database.port
            },
            "orm": {
                "table_prefix": self.orm.table_prefix,
                "cache_objects": self.orm.cache_objects,
                "cache_ttl": self.orm.cache_ttl
            },
            "app": {
                "app_name": self.app.app_name,
                "log_level": self.app.log_level,
                "log_dir": self.app.log_dir
            },
        }


# Создание глобального экземпляра конфигурации
config = Config(str(ENV_FILE_PATH))
