"""
Утилиты слоя отображения сущностей.
"""
from .cache import SimpleCache

__all__ = [
    'SimpleCache',
]
