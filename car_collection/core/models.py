"""Data models for the car collection"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional


SUGGESTED_SETS: List[str] = ["Básico", "Premium", "Red Line"]


class ConditionDisplay(NamedTuple):
    value: str
    label: str
    tier: str


class Condition(str, Enum):
    """Closed set of conditions a car can be graded with."""

    MINT = "mint"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @property
    def label(self) -> str:
        return _CONDITION_META[self][0]

    @property
    def tier(self) -> str:
        return _CONDITION_META[self][1]

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["Condition"]:
        """Resolve a stored value or its display label, ignoring case."""
        key = (text or "").strip().lower()
        if not key:
            return None
        for condition in cls:
            if key == condition.value or key == condition.label.lower():
                return condition
        return None


_CONDITION_META: Dict[Condition, tuple] = {
    Condition.MINT: ("Mint", "green"),
    Condition.EXCELLENT: ("Excelente", "blue"),
    Condition.GOOD: ("Bueno", "yellow"),
    Condition.FAIR: ("Regular", "orange"),
    Condition.POOR: ("Pobre", "red"),
}

NEUTRAL_TIER = "neutral"

CONDITION_DISPLAY: Dict[str, ConditionDisplay] = {
    c.value: ConditionDisplay(c.value, c.label, c.tier) for c in Condition
}


def condition_display(value: Optional[str]) -> ConditionDisplay:
    """Label and tier for a condition; unknown values render raw on a neutral tier."""
    raw = value or ""
    return CONDITION_DISPLAY.get(raw, ConditionDisplay(raw, raw, NEUTRAL_TIER))


# =============== helpers ===============

def utc_now() -> datetime:
    """Current UTC time at the millisecond precision timestamps are stored with."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def new_car_id() -> str:
    return str(uuid.uuid4())


def format_timestamp(value: datetime) -> str:
    """Serialize as ``2024-01-15T10:30:00.000Z`` (millisecond precision, UTC)."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    if not text or not isinstance(text, str):
        return None
    cleaned = text.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def coerce_quantity(value: Any) -> int:
    """Quantities are whole numbers of at least one."""
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return quantity if quantity >= 1 else 1


def coerce_total(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        total = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return total if total >= 0 else None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "sí", "si", "yes")
    return bool(value)


@dataclass
class CarDraft:
    """Creation input: everything a car has except its id and timestamp."""
    model: str
    color: str = ""
    year: str = ""
    condition: str = ""
    set: str = ""
    quantity: int = 1
    number: Optional[str] = None
    total: Optional[int] = None
    photo: Optional[str] = None
    exhibited: bool = False

    def normalized(self) -> "CarDraft":
        return replace(
            self,
            model=(self.model or "").strip(),
            quantity=coerce_quantity(self.quantity),
            total=coerce_total(self.total),
            exhibited=bool(self.exhibited),
        )


# JSON key order used for the persisted snapshot
_JSON_KEYS = (
    ("id", "id"),
    ("number", "number"),
    ("model", "model"),
    ("color", "color"),
    ("year", "year"),
    ("condition", "condition"),
    ("set", "set"),
    ("quantity", "quantity"),
    ("total", "total"),
    ("photo", "photo"),
    ("exhibited", "exhibited"),
    ("created_at", "createdAt"),
)


@dataclass(frozen=True)
class Car:
    """One scale-model car in the collection"""
    id: str
    model: str
    created_at: datetime
    color: str = ""
    year: str = ""
    condition: str = ""
    set: str = ""
    quantity: int = 1
    number: Optional[str] = None
    total: Optional[int] = None
    photo: Optional[str] = None
    exhibited: bool = False

    @classmethod
    def from_draft(cls, draft: CarDraft, car_id: Optional[str] = None,
                   created_at: Optional[datetime] = None) -> "Car":
        draft = draft.normalized()
        return cls(
            id=car_id or new_car_id(),
            created_at=created_at or utc_now(),
            **{f.name: getattr(draft, f.name) for f in fields(CarDraft)},
        )

    def to_draft(self) -> CarDraft:
        return CarDraft(**{f.name: getattr(self, f.name) for f in fields(CarDraft)})

    def with_changes(self, draft: CarDraft) -> "Car":
        """Apply editable fields from ``draft``; id and created_at never change."""
        return Car.from_draft(draft, car_id=self.id, created_at=self.created_at)

    @property
    def condition_display(self) -> ConditionDisplay:
        return condition_display(self.condition)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for attr, key in _JSON_KEYS:
            value = getattr(self, attr)
            if value is None:
                continue
            if attr == "created_at":
                value = format_timestamp(value)
            out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Car":
        """Build a car from its JSON object, filling gaps left by older snapshots."""
        return cls(
            id=_optional_text(data.get("id")) or new_car_id(),
            model=str(data.get("model") or "").strip(),
            created_at=parse_timestamp(data.get("createdAt")) or utc_now(),
            color=str(data.get("color") or ""),
            year=str(data.get("year") or ""),
            condition=str(data.get("condition") or ""),
            set=str(data.get("set") or ""),
            quantity=coerce_quantity(data.get("quantity", 1)),
            number=_optional_text(data.get("number")),
            total=coerce_total(data.get("total")),
            photo=_optional_text(data.get("photo")),
            exhibited=_coerce_bool(data.get("exhibited", False)),
        )
