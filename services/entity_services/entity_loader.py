"""
MODULE: services.entity_services.entity_loader
RESPONSIBILITY: Load one entity by primary key, merging translated and shop columns.
ALLOWED: typing, loguru, core.*, services.entity_services.query_builder.
FORBIDDEN: Saving or deleting entities.
ERRORS: DataAccessError.

Загрузчик сущностей.

Строит запрос к основной таблице с присоединением таблиц _lang и _shop,
раскладывает переводы по языкам и заполняет переданную сущность.
Кэширует сырую строку, а не объект сущности.
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from core.exceptions import DataAccessError, EntityMapperError
from core.interfaces import ICacheService, IDatabaseHandle, IPersistableEntity
from core.metadata import EntityMetadata
from services.entity_services.query_builder import QueryBuilder, SelectQuery


class EntityLoader:
    """Загрузка сущности по первичному ключу"""

    def __init__(
        self,
        db: IDatabaseHandle,
        cache: Optional[ICacheService] = None,
        table_prefix: str = '',
    ):
        self.db = db
        self.cache = cache
        self.table_prefix = table_prefix
        self.query_builder = QueryBuilder(db)

    @staticmethod
    def build_cache_key(
        metadata: EntityMetadata,
        entity_id: Any,
        id_shop: Optional[int],
        id_lang: Optional[int],
    ) -> str:
        return f"objectmodel_{metadata.entity_class_name}_{int(entity_id)}_{int(id_shop or 0)}_{int(id_lang or 0)}"

    def load(
        self,
        entity_id: Any,
        id_lang: Optional[int],
        entity: IPersistableEntity,
        metadata: EntityMetadata,
        id_shop: Optional[int] = None,
        should_cache_objects: bool = False,
    ) -> None:
        """
        Заполнение сущности строкой из БД или кэша

        Если строка не найдена, сущность остается нетронутой (id не задан).

        Args:
            entity_id: Значение первичного ключа
            id_lang: Язык; 0/None означает "все языки"
            entity: Заполняемая сущность
            metadata: Метаданные сущности
            id_shop: Магазин
            should_cache_objects: Использовать кэш строк

        Raises:
            DataAccessError: Ошибка выполнения запроса
        """
        cache_key = self.build_cache_key(metadata, entity_id, id_shop, id_lang)
        use_cache = should_cache_objects and self.cache is not None

        if use_cache and self.cache.is_stored(cache_key):
            object_data = self.cache.retrieve(cache_key)
            if object_data:
                logger.debug(f"Сущность {metadata.entity_class_name}#{entity_id} загружена из кэша")
                entity.id = int(entity_id)
                for key, value in object_data.items():
                    setattr(entity, key, value)
            return

        object_data = self._fetch_row(entity_id, id_lang, metadata, id_shop)
        if not object_data:
            logger.debug(f"Сущность {metadata.entity_class_name}#{entity_id} не найдена")
            return

        if not id_lang and metadata.multilang:
            self._merge_translations(object_data, entity_id, entity, metadata, id_shop)

        entity.id = int(entity_id)
        for key in list(object_data):
            if entity.has_property(key):
                setattr(entity, key, object_data[key])
            else:
                del object_data[key]

        if use_cache:
            self.cache.store(cache_key, object_data)

    def _table(self, suffix: str, metadata: EntityMetadata) -> str:
        return self.query_builder.quote_identifier(f"{self.table_prefix}{metadata.table_name}{suffix}")

    def _fetch_row(
        self,
        entity_id: Any,
        id_lang: Optional[int],
        metadata: EntityMetadata,
        id_shop: Optional[int],
    ) -> Optional[Dict[str, Any]]:
        primary = self.query_builder.quote_identifier(metadata.get_single_primary_key())
        query = SelectQuery().from_table(self._table('', metadata), 'a')
        query.where(f"a.{primary} = {int(entity_id)}")

        if id_lang and metadata.multilang:
            query.left_join(
                self._table('_lang', metadata),
                'b',
                f"a.{primary} = b.{primary} AND b.id_lang = {int(id_lang)}",
            )
            if id_shop and metadata.multilang_shop:
                query.where(f"b.id_shop = {int(id_shop)}")

        if metadata.multishop:
            query.left_join(
                self._table('_shop', metadata),
                'c',
                f"a.{primary} = c.{primary} AND c.id_shop = {int(id_shop or 0)}",
            )

        row = self._execute(lambda: self.db.get_row(query), query)
        return dict(row) if row else None

    def _merge_translations(
        self,
        object_data: Dict[str, Any],
        entity_id: Any,
        entity: IPersistableEntity,
        metadata: EntityMetadata,
        id_shop: Optional[int],
    ) -> None:
        """Складывает переводимые столбцы в словари {id_lang: значение}"""
        primary_name = metadata.get_single_primary_key()
        primary = self.query_builder.quote_identifier(primary_name)
        sql = f"SELECT * FROM {self._table('_lang', metadata)} WHERE {primary} = {int(entity_id)}"
        if id_shop and entity.is_lang_multishop():
            sql += f" AND id_shop = {int(id_shop)}"

        lang_rows: List[Dict[str, Any]] = self._execute(lambda: self.db.execute_s(sql), sql)
        for row in lang_rows or []:
            for key, value in row.items():
                if key == primary_name or not entity.has_property(key):
                    continue
                if not isinstance(object_data.get(key), dict):
                    object_data[key] = {}
                object_data[key][row['id_lang']] = value

    @staticmethod
    def _execute(operation, query) -> Any:
        try:
            return operation()
        except EntityMapperError:
            raise
        except Exception as e:
            error_msg = f"Ошибка загрузки сущности: {e}"
            logger.error(f"{error_msg}\nЗапрос: {query}")
            raise DataAccessError(error_msg, original_error=e, query=str(query)) from e
