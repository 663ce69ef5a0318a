"""
MODULE: core.entity
RESPONSIBILITY: Declarative entity descriptors and the persistable entity base class.
ALLOWED: Dataclasses, Typing, copy, loguru.
FORBIDDEN: SQL, database access, repository logic.
ERRORS: None (metadata validation lives in core.metadata).

Базовые классы сущностей

Модуль содержит:
- Field: описание одного отображаемого свойства
- EntityDefinition: декларативное описание таблицы сущности
- Entity: базовый класс сохраняемой сущности
- EntityRegistry: реестр классов сущностей по имени
"""

import copy
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, Optional, Sequence, Tuple, Type, Union

from loguru import logger


@dataclass(frozen=True)
class Field:
    """
    Описание отображаемого свойства сущности

    Attributes:
        lang: Свойство переводимое, хранится в таблице <table>_lang
        default: Значение для новой (пустой) сущности
        primary_key: Свойство является первичным ключом
    """
    lang: bool = False
    default: Any = None
    primary_key: bool = False


@dataclass(frozen=True)
class EntityDefinition:
    """
    Декларативное описание отображения сущности на таблицы

    Attributes:
        table: Имя основной таблицы без префикса
        primary: Имя столбца первичного ключа (или последовательность имен)
        multilang: Есть таблица переводов <table>_lang
        multilang_shop: Переводы дополнительно разделены по магазинам
        multishop: Есть таблица <table>_shop со значениями магазина
        fields: Отображаемые свойства (имя столбца -> Field)
    """
    table: str
    primary: Union[str, Sequence[str], None] = None
    multilang: bool = False
    multilang_shop: bool = False
    multishop: bool = False
    fields: Dict[str, Field] = field(default_factory=dict)

    def primary_key_fields(self) -> Tuple[str, ...]:
        """Столбцы первичного ключа: из primary или из полей с primary_key=True"""
        if isinstance(self.primary, str):
            return (self.primary,)
        if self.primary:
            return tuple(self.primary)
        return tuple(name for name, declared in self.fields.items() if declared.primary_key)


class EntityRegistry:
    """
    Реестр классов сущностей

    Класс доступен по короткому имени и по полному пути
    `module.QualName`. При совпадении коротких имен короткое имя
    указывает на последний зарегистрированный класс.
    """

    def __init__(self):
        self._entities: Dict[str, Type['Entity']] = {}
        self._qualified: Dict[str, Type['Entity']] = {}

    @staticmethod
    def qualified_name(entity_class: Type['Entity']) -> str:
        return f"{entity_class.__module__}.{entity_class.__qualname__}"

    def register(self, entity_class: Type['Entity']) -> None:
        name = entity_class.__name__
        previous = self._entities.get(name)
        if previous is not None and previous is not entity_class:
            logger.warning(
                f"Имя сущности `{name}` переопределено: {self.qualified_name(previous)} "
                f"-> {self.qualified_name(entity_class)}"
            )
        self._entities[name] = entity_class
        self._qualified[self.qualified_name(entity_class)] = entity_class

    def get(self, class_name: str) -> Optional[Type['Entity']]:
        return self._qualified.get(class_name) or self._entities.get(class_name)

    def unregister(self, class_name: str) -> None:
        entity_class = self._entities.pop(class_name, None)
        if entity_class is not None:
            self._qualified.pop(self.qualified_name(entity_class), None)

    def __contains__(self, class_name: str) -> bool:
        return class_name in self._entities or class_name in self._qualified

    def __iter__(self) -> Iterator[str]:
        return iter(self._entities)


entity_registry = EntityRegistry()


class Entity:
    """
    Базовая сохраняемая сущность

    Наследник объявляет атрибут класса `definition`. Новый экземпляр
    всегда пустой: id не задан, свойства равны значениям по умолчанию.
    Сохранение и удаление реализуются конкретными сущностями.
    """

    definition: ClassVar[Optional[EntityDefinition]] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.__dict__.get('definition') is not None:
            entity_registry.register(cls)

    def __init__(self):
        self.id: Optional[int] = None
        self.id_lang: Optional[int] = None
        self.id_shop: Optional[int] = None
        for name, declared in self._declared_fields().items():
            setattr(self, name, copy.deepcopy(declared.default))

    @classmethod
    def _declared_fields(cls) -> Dict[str, Field]:
        if cls.definition is None:
            return {}
        return cls.definition.fields

    @classmethod
    def get_repository_class(cls) -> Union[Type, str, None]:
        """Хук для собственного класса репозитория (класс или путь импорта)"""
        return None

    def has_property(self, name: str) -> bool:
        return name == 'id' or name in self._declared_fields()

    def is_lang_multishop(self) -> bool:
        """Переводы сущности разделены по магазинам"""
        definition = self.definition
        return bool(definition and definition.multilang and definition.multilang_shop)

    def hydrate(self, data: Dict[str, Any], id_lang: Optional[int] = None) -> 'Entity':
        """
        Заполнение сущности из строки БД

        Неизвестные столбцы отбрасываются без ошибки.

        Args:
            data: Строка БД (столбец -> значение)
            id_lang: Язык, для которого получена строка
        """
        self.id_lang = id_lang
        primary = self.definition.primary_key_fields() if self.definition else ()
        if len(primary) == 1 and data.get(primary[0]) is not None:
            self.id = data[primary[0]]

        for key, value in data.items():
            if self.has_property(key):
                setattr(self, key, value)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Значения отображаемых свойств вместе с id"""
        result = {'id': self.id}
        for name in self._declared_fields():
            result[name] = getattr(self, name)
        return result

    def save(self) -> Any:
        raise NotImplementedError(f"{type(self).__name__} не реализует save()")

    def delete(self) -> Any:
        raise NotImplementedError(f"{type(self).__name__} не реализует delete()")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"
