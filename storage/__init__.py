"""
Storage: persisted property records behind an explicitly constructed repository.
"""

from .records import PropertyDocument, PropertyRecord
from .settings import StorageSettings
from .repository import (
    DealRepository,
    LocalDealRepository,
    StorageError,
    SupabaseDealRepository,
    create_repository,
)

__all__ = [
    "PropertyDocument",
    "PropertyRecord",
    "StorageSettings",
    "DealRepository",
    "LocalDealRepository",
    "StorageError",
    "SupabaseDealRepository",
    "create_repository",
]
