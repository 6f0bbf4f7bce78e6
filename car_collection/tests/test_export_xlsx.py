"""Tests for the spreadsheet exporter."""

import base64
import io
import logging
from datetime import date

import pytest
from openpyxl import load_workbook
from PIL import Image

from car_collection.core.errors import ExportEmptyCollectionError
from car_collection.core.models import Car, CarDraft
from car_collection.utils.export_xlsx import (
    COLUMNS,
    build_workbook,
    export_collection,
    export_filename,
    workbook_bytes,
)


@pytest.fixture()
def cars(ferrari, beetle):
    return [Car.from_draft(ferrari), Car.from_draft(beetle)]


def test_filename_embeds_export_date():
    assert export_filename(date(2025, 3, 9)) == "coleccion-carritos-2025-03-09.xlsx"


def test_header_plus_one_row_per_car(cars):
    ws = build_workbook(cars).active
    assert ws.max_row == len(cars) + 1
    assert [c.value for c in ws[1]] == [header for header, _ in COLUMNS]
    assert ws["A1"].font.bold is True
    assert ws["A1"].fill.fill_type == "solid"


def test_row_values_are_localized(cars):
    ws = build_workbook(cars).active
    row = [c.value for c in ws[2]]
    assert row[1] == "HW-042"
    assert row[2] == "Ferrari F40"
    assert row[5] == "Mint"
    assert row[7] == 2
    assert row[8] == 150
    assert row[9] == "Sí"
    assert row[10] == cars[0].created_at.astimezone().strftime("%d/%m/%Y")
    assert ws["J3"].value == "No"


def test_unknown_condition_is_exported_raw():
    car = Car.from_draft(CarDraft(model="Mini", condition="restaurado"))
    ws = build_workbook([car]).active
    assert ws["F2"].value == "restaurado"


def test_empty_collection_is_rejected(tmp_path):
    target = tmp_path / "out"
    with pytest.raises(ExportEmptyCollectionError):
        export_collection([], target)
    assert not target.exists()


def test_photo_is_embedded(png_data_url):
    car = Car.from_draft(CarDraft(model="Mini", photo=png_data_url))
    ws = build_workbook([car]).active
    assert len(ws._images) == 1


def test_photos_can_be_skipped(png_data_url):
    car = Car.from_draft(CarDraft(model="Mini", photo=png_data_url))
    ws = build_workbook([car], include_photos=False).active
    assert len(ws._images) == 0


def test_bad_photo_is_logged_and_export_continues(png_data_url, caplog):
    broken = Car.from_draft(CarDraft(model="Roto", photo="data:image/png;base64,AAAA"))
    good = Car.from_draft(CarDraft(model="Bueno", photo=png_data_url))

    with caplog.at_level(logging.WARNING, logger="car_collection.utils.export_xlsx"):
        ws = build_workbook([broken, good]).active

    assert ws.max_row == 3
    assert len(ws._images) == 1
    assert "Roto" in caplog.text


def test_export_collection_writes_file(cars, tmp_path, png_data_url):
    cars.append(Car.from_draft(CarDraft(model="Con foto", photo=png_data_url)))
    out = export_collection(cars, tmp_path, today=date(2025, 1, 2))
    assert out == tmp_path / "coleccion-carritos-2025-01-02.xlsx"
    ws = load_workbook(out).active
    assert ws.max_row == len(cars) + 1


def test_workbook_bytes_is_a_readable_xlsx(cars):
    data = workbook_bytes(cars, include_photos=False)
    ws = load_workbook(io.BytesIO(data)).active
    assert ws.title == "Colección"
    assert ws.max_row == 3


def _truncated_bmp_data_url() -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (40, 40), (10, 120, 200)).save(buffer, format="BMP")
    return "data:image/bmp;base64," + base64.b64encode(buffer.getvalue()[:200]).decode("ascii")


def test_truncated_photo_does_not_abort_saving(png_data_url, tmp_path, caplog):
    broken = Car.from_draft(CarDraft(model="Cortado", photo=_truncated_bmp_data_url()))
    good = Car.from_draft(CarDraft(model="Bueno", photo=png_data_url))

    with caplog.at_level(logging.WARNING, logger="car_collection.utils.export_xlsx"):
        out = export_collection([broken, good], tmp_path, today=date(2025, 1, 2))

    assert out.exists()
    ws = load_workbook(out).active
    assert ws.max_row == 3
    assert len(ws._images) == 1
    assert "Cortado" in caplog.text


def test_bmp_photo_is_converted_before_embedding(tmp_path):
    buffer = io.BytesIO()
    Image.new("RGB", (40, 40), (10, 120, 200)).save(buffer, format="BMP")
    photo = "data:image/bmp;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
    car = Car.from_draft(CarDraft(model="Mapa de bits", photo=photo))

    out = export_collection([car], tmp_path)

    assert len(load_workbook(out).active._images) == 1
