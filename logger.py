"""
MODULE: logger
RESPONSIBILITY: Centralized Loguru configuration.
ALLOWED: Configuring loguru, exporting `logger` object.
FORBIDDEN: Business logic, re-configuring logger in other modules.
ERRORS: OSError (if log directory creation fails).

Централизованная настройка логирования через Loguru.
Модули пишут в `from loguru import logger`, обработчики настраиваются
только здесь, один раз при сборке зависимостей.
"""
import sys
from pathlib import Path
from loguru import logger

from config.settings import AppConfig

CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(app_config: AppConfig) -> Path:
    """
    Настройка обработчиков loguru

    Args:
        app_config: Конфигурация приложения (уровень, каталог, ротация)

    Returns:
        Каталог с файлами логов
    """
    # Удаляем стандартный handler
    logger.remove()

    log_dir = Path(app_config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Консольный вывод
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=app_config.log_level,
        colorize=True,
    )

    # Файл приложения (DEBUG и выше)
    logger.add(
        log_dir / "app.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation=app_config.log_rotation,
        retention=app_config.log_retention,
        compression="zip",
    )

    # Файл ошибок (ERROR и выше)
    logger.add(
        log_dir / "errors.log",
        format=FILE_FORMAT,
        level="ERROR",
        rotation=app_config.log_rotation,
        retention=app_config.log_retention,
        compression="zip",
        backtrace=True,
    )

    return log_dir


__all__ = ["logger", "setup_logging"]
