"""Shared fixtures for the car collection tests.

Each test gets its own SQLite file under ``tmp_path`` so nothing leaks
between tests or into the working directory.
"""
from __future__ import annotations

import base64
import io

import pytest
from PIL import Image

from car_collection.core.collection import CollectionManager
from car_collection.core.models import CarDraft
from car_collection.database.manager import DatabaseManager
from car_collection.database.snapshot import CollectionStore


@pytest.fixture()
def db_manager(tmp_path) -> DatabaseManager:
    manager = DatabaseManager(str(tmp_path / "db" / "collection.db"))
    yield manager
    manager.dispose()


@pytest.fixture()
def store(db_manager) -> CollectionStore:
    return CollectionStore(db_manager, storage_key="carCollection")


@pytest.fixture()
def manager(store, tmp_path) -> CollectionManager:
    return CollectionManager(store, export_dir=tmp_path / "exports")


@pytest.fixture()
def ferrari() -> CarDraft:
    return CarDraft(
        model="Ferrari F40",
        color="Rojo",
        year="1990",
        condition="mint",
        set="Premium",
        quantity=2,
        number="HW-042",
        total=150,
        exhibited=True,
    )


@pytest.fixture()
def beetle() -> CarDraft:
    return CarDraft(model="VW Beetle", color="Azul", year="1967", condition="good", set="Básico")


@pytest.fixture()
def png_data_url() -> str:
    """A tiny valid PNG encoded as a data URL."""
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
