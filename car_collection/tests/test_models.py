"""Tests for the car record model and condition lookup."""

from datetime import datetime, timezone

from car_collection.core.models import (
    Car,
    CarDraft,
    Condition,
    condition_display,
    format_timestamp,
    parse_timestamp,
)


class TestConditionDisplay:

    def test_known_condition_has_label_and_tier(self):
        display = condition_display("excellent")
        assert display.label == "Excelente"
        assert display.tier == "blue"

    def test_unknown_condition_renders_raw_on_neutral_tier(self):
        display = condition_display("restaurado")
        assert display.value == "restaurado"
        assert display.label == "restaurado"
        assert display.tier == "neutral"

    def test_parse_accepts_value_or_label(self):
        assert Condition.parse("MINT") is Condition.MINT
        assert Condition.parse(" Bueno ") is Condition.GOOD
        assert Condition.parse("restaurado") is None
        assert Condition.parse("") is None


class TestCar:

    def test_from_draft_coerces_quantity_and_total(self):
        car = Car.from_draft(CarDraft(model=" Mini ", quantity=0, total=-5))
        assert car.model == "Mini"
        assert car.quantity == 1
        assert car.total is None
        assert car.id
        assert car.created_at.tzinfo is not None

    def test_with_changes_keeps_identity(self):
        car = Car.from_draft(CarDraft(model="Mini", color="Verde"))
        draft = car.to_draft()
        draft.color = "Blanco"
        changed = car.with_changes(draft)
        assert changed.id == car.id
        assert changed.created_at == car.created_at
        assert changed.color == "Blanco"

    def test_to_dict_uses_wire_names_and_omits_missing(self):
        created = datetime(2024, 1, 15, 10, 30, 0, 123000, tzinfo=timezone.utc)
        car = Car(id="abc", model="Mini", created_at=created, quantity=3)
        data = car.to_dict()
        assert data["createdAt"] == "2024-01-15T10:30:00.123Z"
        assert "total" not in data
        assert "photo" not in data
        assert list(data)[0] == "id"

    def test_from_dict_fills_older_snapshots(self):
        car = Car.from_dict({
            "id": "old-1",
            "model": "Beetle",
            "color": "Azul",
            "year": "1967",
            "condition": "good",
            "set": "",
            "quantity": "2",
            "createdAt": "2023-05-01T08:00:00.000Z",
        })
        assert car.quantity == 2
        assert car.exhibited is False
        assert car.number is None
        assert car.created_at == datetime(2023, 5, 1, 8, 0, tzinfo=timezone.utc)

    def test_timestamp_round_trip(self):
        text = "2024-02-29T23:59:59.999Z"
        assert format_timestamp(parse_timestamp(text)) == text
        assert parse_timestamp("not a date") is None
