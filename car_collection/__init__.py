"""Car Collection Package - personal inventory of scale-model cars"""

from .config import Settings
from .core.models import Car, CarDraft, Condition, condition_display, SUGGESTED_SETS
from .core.errors import (
    CollectionError,
    PersistenceReadError,
    PersistenceWriteError,
    CarValidationError,
    ImportFileTypeError,
    ImportEmptyResultError,
    ExportEmptyCollectionError,
    ImageEmbedError,
)
from .core.collection import CollectionManager
from .database.snapshot import CollectionStore

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "Car",
    "CarDraft",
    "Condition",
    "condition_display",
    "SUGGESTED_SETS",
    "CollectionManager",
    "CollectionStore",
    "CollectionError",
    "PersistenceReadError",
    "PersistenceWriteError",
    "CarValidationError",
    "ImportFileTypeError",
    "ImportEmptyResultError",
    "ExportEmptyCollectionError",
    "ImageEmbedError",
]
