"""
Query layer for the mood journal

Composes owner-scoped, parameterized SQL from FilterCriteria and
computes pagination metadata.
"""

from .builder import QueryBuilder, Predicate
from .pagination import calculate_metadata, is_out_of_range, last_page_for
from .validators import validate_mood, validate_user

__all__ = [
    'QueryBuilder',
    'Predicate',
    'calculate_metadata',
    'is_out_of_range',
    'last_page_for',
    'validate_mood',
    'validate_user',
]
