"""Smoke tests for the command line interface."""

import pytest

from car_collection.collection_cli import main, photo_to_data_url
from car_collection.core.collection import CollectionManager
from car_collection.database.manager import DatabaseManager
from car_collection.database.snapshot import CollectionStore


@pytest.fixture()
def db_path(tmp_path):
    return str(tmp_path / "cli.db")


def _stored(db_path):
    db = DatabaseManager(db_path)
    try:
        return CollectionManager(CollectionStore(db)).cars
    finally:
        db.dispose()


def test_add_list_and_remove(db_path, capsys):
    assert main(["--db", db_path, "add", "--model", "Ferrari F40", "--condition", "Excelente",
                 "--quantity", "2", "--exhibited", "sí"]) == 0
    cars = _stored(db_path)
    assert len(cars) == 1
    assert cars[0].condition == "excellent"
    assert cars[0].exhibited is True

    assert main(["--db", db_path, "list"]) == 0
    assert "Ferrari F40 x2" in capsys.readouterr().out

    assert main(["--db", db_path, "remove", cars[0].id]) == 0
    assert _stored(db_path) == ()


def test_edit_keeps_other_fields(db_path):
    main(["--db", db_path, "add", "--model", "Beetle", "--color", "Azul"])
    car = _stored(db_path)[0]

    assert main(["--db", db_path, "edit", car.id, "--color", "Verde"]) == 0

    edited = _stored(db_path)[0]
    assert edited.id == car.id
    assert edited.model == "Beetle"
    assert edited.color == "Verde"


def test_edit_unknown_id_fails(db_path, capsys):
    assert main(["--db", db_path, "edit", "missing", "--color", "Verde"]) == 1
    assert "No car with id" in capsys.readouterr().out


def test_import_errors_are_reported(db_path, tmp_path, capsys):
    wrong = tmp_path / "cars.txt"
    wrong.write_text("Modelo\nMini\n", encoding="utf-8")
    assert main(["--db", db_path, "import", str(wrong)]) == 1
    assert "CSV" in capsys.readouterr().out


def test_import_and_export(db_path, tmp_path):
    source = tmp_path / "cars.csv"
    source.write_text("Nombre,Cantidad\nMini,3\nPorsche 911,1\n", encoding="utf-8")
    assert main(["--db", db_path, "import", str(source)]) == 0
    assert [c.model for c in _stored(db_path)] == ["Mini", "Porsche 911"]

    out_dir = tmp_path / "exports"
    assert main(["--db", db_path, "export", "--dir", str(out_dir)]) == 0
    assert len(list(out_dir.glob("coleccion-carritos-*.xlsx"))) == 1


def test_export_empty_collection_fails(db_path, tmp_path, capsys):
    assert main(["--db", db_path, "export", "--dir", str(tmp_path / "none")]) == 1
    assert "No hay carritos" in capsys.readouterr().out


def test_photo_to_data_url(tmp_path):
    image = tmp_path / "car.png"
    image.write_bytes(b"\x89PNG")
    assert photo_to_data_url(image) == "data:image/png;base64,iVBORw=="


def test_unreadable_database_file_is_reported(tmp_path, capsys):
    garbage = tmp_path / "garbage.db"
    garbage.write_bytes(b"not a database" * 100)

    assert main(["--db", str(garbage), "list"]) == 1
    out = capsys.readouterr().out
    assert "❌" in out
    assert str(garbage) in out
