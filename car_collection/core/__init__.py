"""
Core modules for the car collection
"""

# Only export models and errors here; collection imports the database layer
from .models import Car, CarDraft, Condition, condition_display
from .errors import (
    CollectionError, PersistenceReadError, PersistenceWriteError,
    CarValidationError, ImportFileTypeError, ImportEmptyResultError,
    ExportEmptyCollectionError, ImageEmbedError
)

__all__ = [
    'Car',
    'CarDraft',
    'Condition',
    'condition_display',
    'CollectionError',
    'PersistenceReadError',
    'PersistenceWriteError',
    'CarValidationError',
    'ImportFileTypeError',
    'ImportEmptyResultError',
    'ExportEmptyCollectionError',
    'ImageEmbedError',
]
