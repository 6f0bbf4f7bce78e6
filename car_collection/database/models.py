"""Database models for the car collection's durable storage"""

from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone
from typing import Dict, Any

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StorageSlot(Base):
    """Named key/value slot; the whole collection lives in one of these."""
    __tablename__ = 'storage_slots'

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)  # serialized snapshot

    # 时间戳
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


# 数据库操作助手类
class DatabaseHelper:
    """Database helpers"""

    @staticmethod
    def slot_to_dict(slot: StorageSlot) -> Dict[str, Any]:
        """Describe a slot without its payload"""
        return {
            'key': slot.key,
            'size': len(slot.value or ''),
            'created_at': slot.created_at.isoformat() if slot.created_at else None,
            'updated_at': slot.updated_at.isoformat() if slot.updated_at else None,
        }
