"""Database manager for the car collection's durable slots"""

import logging
import os
from typing import List, Dict, Any, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

from .models import Base, StorageSlot, DatabaseHelper

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Key/value access to the local SQLite store"""

    def __init__(self, db_path: str = "database/car_collection.db"):
        """Initialize the database manager

        Args:
            db_path: database file path
        """
        # 确保数据库目录存在
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self.db_path = db_path
        self.engine = create_engine(f"sqlite:///{db_path}", echo=False)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError:
            self.engine.dispose()
            raise

        logger.debug("Database initialized: %s", db_path)

    def get_session(self) -> Session:
        """Get a database session"""
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()

    # =============== slot operations ===============

    def read_slot(self, key: str) -> Optional[str]:
        """Return the value stored under ``key``, or None when absent."""
        with self.get_session() as session:
            slot = session.get(StorageSlot, key)
            return slot.value if slot else None

    def write_slot(self, key: str, value: str) -> None:
        """Create or overwrite the slot in a single transaction

        Args:
            key: slot name
            value: full payload; replaces whatever was there
        """
        with self.get_session() as session:
            try:
                slot = session.get(StorageSlot, key)
                if slot is None:
                    session.add(StorageSlot(key=key, value=value))
                else:
                    slot.value = value
                session.commit()
                logger.debug("Wrote slot %s (%d chars)", key, len(value))

            except SQLAlchemyError as e:
                session.rollback()
                logger.error("Error writing slot %s: %s", key, e)
                raise

    def delete_slot(self, key: str) -> bool:
        with self.get_session() as session:
            try:
                slot = session.get(StorageSlot, key)
                if slot is None:
                    return False
                session.delete(slot)
                session.commit()
                return True

            except SQLAlchemyError as e:
                session.rollback()
                logger.error("Error deleting slot %s: %s", key, e)
                raise

    def list_slots(self) -> List[Dict[str, Any]]:
        """List stored slots (without payloads), sorted by key"""
        with self.get_session() as session:
            slots = session.query(StorageSlot).order_by(StorageSlot.key).all()
            return [DatabaseHelper.slot_to_dict(slot) for slot in slots]
