"""
MODULE: core.interfaces
RESPONSIBILITY: Define Protocols for the external collaborators of the mapper.
ALLOWED: Typing imports, Protocol.
FORBIDDEN: Implementation details, concrete classes.
ERRORS: None.

Интерфейсы (Protocol) внешних зависимостей

Описывают контракты базы данных, кэша и сохраняемой сущности,
чтобы загрузчик и репозитории не зависели от конкретных реализаций.
"""

from typing import Protocol, Optional, Dict, Any, List, Union


class IDatabaseHandle(Protocol):
    """Интерфейс дескриптора базы данных"""

    def select(self, sql: str) -> List[Dict[str, Any]]:
        """Выполнение SELECT, возвращает все строки"""
        ...

    def get_row(self, query: Union[str, Any]) -> Optional[Dict[str, Any]]:
        """Выполнение запроса, возвращает первую строку или None"""
        ...

    def execute_s(self, sql: str) -> List[Dict[str, Any]]:
        """Выполнение запроса с возвратом строк"""
        ...

    def escape(self, value: str) -> str:
        """Экранирование строкового значения (без кавычек)"""
        ...

    def quote_identifier(self, name: str) -> str:
        """Экранирование идентификатора (таблица, столбец)"""
        ...


class ICacheService(Protocol):
    """Интерфейс кэша сырых строк"""

    def is_stored(self, key: str) -> bool:
        ...

    def retrieve(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def store(self, key: str, value: Dict[str, Any]) -> None:
        ...


class IPersistableEntity(Protocol):
    """Интерфейс сохраняемой сущности"""

    id: Optional[int]

    def has_property(self, name: str) -> bool:
        ...

    def hydrate(self, data: Dict[str, Any], id_lang: Optional[int] = None) -> Any:
        ...

    def is_lang_multishop(self) -> bool:
        ...

    def save(self) -> Any:
        ...

    def delete(self) -> Any:
        ...
