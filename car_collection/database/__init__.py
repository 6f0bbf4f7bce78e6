"""Database package for the car collection"""

from .models import Base, StorageSlot, DatabaseHelper
from .manager import DatabaseManager
from .snapshot import CollectionStore

__all__ = [
    'Base', 'StorageSlot', 'DatabaseHelper', 'DatabaseManager', 'CollectionStore'
]
