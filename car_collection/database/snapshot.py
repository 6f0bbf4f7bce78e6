"""Whole-collection snapshot persistence on top of a single durable slot.

The collection is stored as one JSON array under one key. Every save
rewrites that array; there are no partial writes. Loading never fails the
caller: an absent slot is an empty collection, and an unreadable one is
treated the same way after its payload is copied aside to a backup slot.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from car_collection.core.errors import PersistenceReadError, PersistenceWriteError
from car_collection.core.models import Car, new_car_id
from car_collection.database.manager import DatabaseManager

logger = logging.getLogger(__name__)


class CollectionStore:
    """Load/save the full record set to one named slot."""

    def __init__(self, db_manager: DatabaseManager, storage_key: str = "carCollection"):
        self.db_manager = db_manager
        self.storage_key = storage_key
        self.last_read_error: Optional[PersistenceReadError] = None

    @staticmethod
    def dumps(records: Iterable[Car]) -> str:
        return json.dumps([car.to_dict() for car in records], ensure_ascii=False)

    def load(self) -> List[Car]:
        self.last_read_error = None
        try:
            raw = self.db_manager.read_slot(self.storage_key)
        except SQLAlchemyError as exc:
            self._record_read_error(f"Could not read stored collection: {exc}")
            return []

        if raw is None:
            return []

        try:
            payload = json.loads(raw)
        except ValueError as exc:
            backup_key = self._backup_corrupt(raw)
            self._record_read_error(f"Stored collection is not valid JSON: {exc}", backup_key)
            return []

        if not isinstance(payload, list):
            backup_key = self._backup_corrupt(raw)
            self._record_read_error("Stored collection is not a JSON array", backup_key)
            return []

        return self._decode_records(payload)

    def save(self, records: Iterable[Car]) -> None:
        payload = self.dumps(records)
        try:
            self.db_manager.write_slot(self.storage_key, payload)
        except SQLAlchemyError as exc:
            raise PersistenceWriteError(
                f"No se pudo guardar la colección: {exc}", storage_key=self.storage_key
            ) from exc

    # =============== internals ===============

    def _decode_records(self, payload: List[Any]) -> List[Car]:
        cars: List[Car] = []
        seen: Set[str] = set()
        for index, entry in enumerate(payload):
            if not isinstance(entry, dict):
                logger.warning("Skipping stored entry %d: not an object", index)
                continue
            car = Car.from_dict(entry)
            if not car.model:
                logger.warning("Skipping stored entry %d: missing model", index)
                continue
            if car.id in seen:
                fresh = replace(car, id=new_car_id())
                logger.warning("Stored entry %d repeats id %s; reassigned to %s", index, car.id, fresh.id)
                car = fresh
            seen.add(car.id)
            cars.append(car)
        return cars

    def _backup_corrupt(self, raw: str) -> Optional[str]:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        backup_key = f"{self.storage_key}.corrupt-{stamp}"
        try:
            self.db_manager.write_slot(backup_key, raw)
        except SQLAlchemyError as exc:
            logger.error("Could not back up unreadable collection: %s", exc)
            return None
        return backup_key

    def _record_read_error(self, message: str, backup_key: Optional[str] = None) -> None:
        self.last_read_error = PersistenceReadError(
            message, storage_key=self.storage_key, backup_key=backup_key
        )
        if backup_key:
            logger.warning("%s; treating as empty (original kept in %s)", message, backup_key)
        else:
            logger.warning("%s; treating as empty", message)
