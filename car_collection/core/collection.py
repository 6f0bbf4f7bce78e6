"""Collection manager: owns the in-memory record set and writes it through.

Every mutation rebuilds the record list and immediately saves the whole
list through the :class:`CollectionStore`. Callers only ever see tuples,
never the list the manager mutates.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from car_collection.config import Settings
from car_collection.core.errors import CarValidationError, ImportEmptyResultError, PersistenceReadError
from car_collection.core.models import Car, CarDraft, new_car_id, utc_now
from car_collection.database.manager import DatabaseManager
from car_collection.database.snapshot import CollectionStore
from car_collection.utils.export_xlsx import export_collection
from car_collection.utils.ingest_csv import read_csv_file

logger = logging.getLogger(__name__)


def _validated(draft: CarDraft) -> CarDraft:
    draft = draft.normalized()
    if not draft.model:
        raise CarValidationError()
    return draft


class CollectionManager:
    """Single owner of the car collection"""

    def __init__(self, store: CollectionStore, export_dir: Path | str = "."):
        self.store = store
        self.export_dir = Path(export_dir)
        self._cars: List[Car] = store.load()
        logger.info("Loaded %d cars from %s", len(self._cars), store.storage_key)

    @classmethod
    def open(cls, settings: Optional[Settings] = None) -> "CollectionManager":
        settings = settings or Settings.from_env()
        try:
            db_manager = DatabaseManager(settings.db_path)
        except SQLAlchemyError as exc:
            logger.error("Could not open database %s: %s", settings.db_path, exc)
            raise PersistenceReadError(
                f"No se pudo abrir la base de datos {settings.db_path}: {exc}",
                storage_key=settings.storage_key,
            ) from exc
        store = CollectionStore(db_manager, settings.storage_key)
        return cls(store, export_dir=settings.export_dir)

    # =============== read access ===============

    @property
    def cars(self) -> Tuple[Car, ...]:
        return tuple(self._cars)

    @property
    def load_error(self) -> Optional[PersistenceReadError]:
        return self.store.last_read_error

    def __len__(self) -> int:
        return len(self._cars)

    def find(self, car_id: str) -> Optional[Car]:
        return next((car for car in self._cars if car.id == car_id), None)

    def reload(self) -> Tuple[Car, ...]:
        self._cars = self.store.load()
        return self.cars

    def stats(self) -> Dict[str, Any]:
        """Collection totals for headers and summaries"""
        return {
            'total_records': len(self._cars),
            'total_units': sum(car.quantity for car in self._cars),
            'total_value': sum(car.total or 0 for car in self._cars),
            'exhibited': sum(1 for car in self._cars if car.exhibited),
            'by_condition': dict(Counter(car.condition for car in self._cars)),
            'by_set': dict(Counter(car.set for car in self._cars)),
        }

    # =============== mutations ===============

    def _commit(self, cars: List[Car]) -> None:
        # the in-memory set keeps the change even when the save fails
        self._cars = cars
        self.store.save(self._cars)

    def add(self, draft: CarDraft) -> Car:
        car = Car.from_draft(_validated(draft), car_id=new_car_id(), created_at=utc_now())
        self._commit([car] + self._cars)
        logger.info("Added car %s (%s)", car.id, car.model)
        return car

    def edit(self, updated: Car) -> bool:
        """Replace the stored car with the same id; False when there is none."""
        position = next((i for i, car in enumerate(self._cars) if car.id == updated.id), None)
        if position is None:
            logger.warning("Edit ignored: no car with id %s", updated.id)
            return False
        current = self._cars[position]
        replacement = current.with_changes(_validated(updated.to_draft()))
        cars = list(self._cars)
        cars[position] = replacement
        self._commit(cars)
        logger.info("Edited car %s", updated.id)
        return True

    def remove(self, car_id: str) -> bool:
        cars = [car for car in self._cars if car.id != car_id]
        removed = len(cars) != len(self._cars)
        self._commit(cars)
        if removed:
            logger.info("Removed car %s", car_id)
        else:
            logger.info("Remove ignored: no car with id %s", car_id)
        return removed

    def import_batch(self, drafts: Iterable[CarDraft]) -> List[Car]:
        """Create one car per draft, placed ahead of existing cars, saved once."""
        now = utc_now()
        batch = [
            Car.from_draft(draft, car_id=new_car_id(), created_at=now)
            for draft in drafts
            if (draft.model or "").strip()
        ]
        if not batch:
            raise ImportEmptyResultError()
        self._commit(batch + self._cars)
        logger.info("Imported %d cars", len(batch))
        return batch

    def import_csv(self, path: Path | str) -> List[Car]:
        result = read_csv_file(path)
        if not result.drafts:
            raise ImportEmptyResultError()
        return self.import_batch(result.drafts)

    def export_all(self, directory: Optional[Path | str] = None, *,
                   include_photos: bool = True, today: Optional[date] = None) -> Path:
        return export_collection(
            self.cars,
            directory if directory is not None else self.export_dir,
            today=today,
            include_photos=include_photos,
        )

    # =============== async wrappers ===============

    async def import_csv_async(self, path: Path | str) -> List[Car]:
        result = await asyncio.to_thread(read_csv_file, path)
        if not result.drafts:
            raise ImportEmptyResultError()
        return self.import_batch(result.drafts)

    async def export_all_async(self, directory: Optional[Path | str] = None, *,
                               include_photos: bool = True, today: Optional[date] = None) -> Path:
        snapshot = self.cars
        return await asyncio.to_thread(
            export_collection,
            snapshot,
            directory if directory is not None else self.export_dir,
            today=today,
            include_photos=include_photos,
        )
