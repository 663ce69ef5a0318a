"""
MODULE: services.entity_services
RESPONSIBILITY: Expose entity mapping services.
ALLOWED: Internal modules.
FORBIDDEN: None.
ERRORS: None.

Сервисы отображения сущностей на таблицы.
"""

from services.entity_services.query_builder import QueryBuilder, SelectQuery
from services.entity_services.entity_loader import EntityLoader
from services.entity_services.entity_repository import (
    EntityRepository,
    FinderCall,
    convert_to_db_field_name,
    parse_finder_name,
)
from services.entity_services.entity_manager import EntityManager

__all__ = [
    'QueryBuilder',
    'SelectQuery',
    'EntityLoader',
    'EntityRepository',
    'FinderCall',
    'convert_to_db_field_name',
    'parse_finder_name',
    'EntityManager',
]
