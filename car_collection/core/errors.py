"""Error kinds raised or recorded by the collection core."""

from __future__ import annotations

from typing import Optional


class CollectionError(Exception):
    """Base class for errors that carry a user-facing message."""

    default_message = "Collection operation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PersistenceReadError(CollectionError):
    """Stored snapshot could not be read; the collection is treated as empty."""

    default_message = "Stored collection could not be read"

    def __init__(self, message: Optional[str] = None, storage_key: Optional[str] = None,
                 backup_key: Optional[str] = None):
        self.storage_key = storage_key
        self.backup_key = backup_key
        super().__init__(message)


class PersistenceWriteError(CollectionError):
    default_message = "No se pudo guardar la colección"

    def __init__(self, message: Optional[str] = None, storage_key: Optional[str] = None):
        self.storage_key = storage_key
        super().__init__(message)


class CarValidationError(CollectionError):
    default_message = "El modelo es obligatorio"


class ImportFileTypeError(CollectionError):
    default_message = "Por favor selecciona un archivo CSV"


class ImportEmptyResultError(CollectionError):
    default_message = "No se encontraron registros válidos en el archivo"


class ExportEmptyCollectionError(CollectionError):
    default_message = "No hay carritos para exportar"


class ImageEmbedError(CollectionError):
    """A single photo could not be placed in the spreadsheet."""

    default_message = "Photo could not be embedded"

    def __init__(self, message: Optional[str] = None, car_id: Optional[str] = None):
        self.car_id = car_id
        super().__init__(message)
