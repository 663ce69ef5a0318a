"""
Простой кэш сырых строк сущностей с TTL.
"""
import copy
import time
from typing import Optional, Dict, Any


class SimpleCache:
    """Простой кэш с TTL (Time To Live)."""

    def __init__(self, ttl: int = 3600):
        """
        Инициализация кэша.

        :param ttl: Время жизни записи в секундах (по умолчанию 1 час)
        """
        self.cache: Dict[str, tuple[Dict[str, Any], float]] = {}
        self.ttl = ttl

    def is_stored(self, key: str) -> bool:
        """
        Проверить наличие ключа в кэше (и что он не устарел).

        :param key: Ключ кэша
        :return: True, если ключ существует и не устарел
        """
        if key in self.cache:
            _, timestamp = self.cache[key]
            if time.time() - timestamp < self.ttl:
                return True
            del self.cache[key]
        return False

    def retrieve(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Получить копию строки из кэша.

        :param key: Ключ кэша
        :return: Строка (столбец -> значение) или None
        """
        if not self.is_stored(key):
            return None
        value, _ = self.cache[key]
        return copy.deepcopy(value)

    def store(self, key: str, value: Dict[str, Any]) -> None:
        """
        Сохранить копию строки в кэш.

        :param key: Ключ кэша
        :param value: Строка (столбец -> значение)
        """
        self.cache[key] = (copy.deepcopy(value), time.time())

    def clear(self):
        """Очистить кэш."""
        self.cache.clear()

    def invalidate(self, key: str):
        """
        Удалить значение из кэша.

        :param key: Ключ кэша
        """
        if key in self.cache:
            del self.cache[key]

    def __len__(self) -> int:
        return len(self.cache)
