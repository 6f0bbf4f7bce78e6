"""Spreadsheet export of the collection (one sheet, one row per car)."""

from __future__ import annotations

import base64
import io
import logging
import os
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.drawing.image import Image as XLImage
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from PIL import Image as PILImage

from car_collection.core.errors import ExportEmptyCollectionError, ImageEmbedError
from car_collection.core.models import Car


logger = logging.getLogger(__name__)


SHEET_TITLE = "Colección"
FILENAME_PREFIX = "coleccion-carritos"

# (header, column width)
COLUMNS: List[tuple] = [
    ("Foto", 12),
    ("Número", 10),
    ("Modelo", 30),
    ("Color", 15),
    ("Año", 8),
    ("Estado", 12),
    ("Set", 15),
    ("Cantidad", 10),
    ("Total", 10),
    ("Exhibido", 10),
    ("Fecha de creación", 18),
]

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="FFD9D9D9", end_color="FFD9D9D9", fill_type="solid")

THUMBNAIL_PX = 60
PHOTO_ROW_HEIGHT = 48  # points, fits a 60px thumbnail

# Pillow modes the PNG encoder writes as-is; anything else (CMYK, YCbCr) is converted
_PNG_MODES = ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16")


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{FILENAME_PREFIX}-{day.isoformat()}.xlsx"


def format_created(car: Car) -> str:
    return car.created_at.astimezone().strftime("%d/%m/%Y")


def row_values(car: Car) -> list:
    return [
        "",
        car.number or "",
        car.model,
        car.color,
        car.year,
        car.condition_display.label,
        car.set,
        car.quantity,
        car.total if car.total is not None else "",
        "Sí" if car.exhibited else "No",
        format_created(car),
    ]


def _decode_photo(photo: str) -> bytes:
    """Return raw image bytes from a ``data:image/...;base64,...`` URL."""
    header, sep, payload = photo.partition(",")
    if not sep:
        payload = header
    elif ";base64" not in header:
        raise ValueError("photo data URL is not base64 encoded")
    return base64.b64decode(payload)


def _png_buffer(raw: bytes) -> io.BytesIO:
    """Fully decode ``raw`` and re-encode it as PNG.

    openpyxl defers reading non-PNG/JPEG/GIF images until the workbook is
    saved, so a truncated file would otherwise only fail inside ``save``.
    """
    with PILImage.open(io.BytesIO(raw)) as source:
        source.load()
        image = source if source.mode in _PNG_MODES else source.convert("RGBA")
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    buffer.seek(0)
    return buffer


def _embed_photo(ws, car: Car, row: int) -> None:
    try:
        image = XLImage(_png_buffer(_decode_photo(car.photo)))
    except (ValueError, OSError, PILImage.DecompressionBombError) as exc:
        raise ImageEmbedError(f"Photo for {car.model!r} could not be embedded: {exc}",
                              car_id=car.id) from exc

    scale = THUMBNAIL_PX / max(image.width, image.height, 1)
    image.width = max(int(image.width * scale), 1)
    image.height = max(int(image.height * scale), 1)
    ws.add_image(image, f"A{row}")
    ws.row_dimensions[row].height = PHOTO_ROW_HEIGHT


def build_workbook(cars: Sequence[Car], *, include_photos: bool = True) -> Workbook:
    """Lay out the collection in a new workbook

    Args:
        cars: records to export, in display order
        include_photos: place each car's photo as a floating image on its row

    Returns:
        the populated workbook (not yet saved)
    """
    if not cars:
        raise ExportEmptyCollectionError()

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    for col, (header, width) in enumerate(COLUMNS, start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")
        ws.column_dimensions[get_column_letter(col)].width = width
    ws.freeze_panes = "A2"

    embedded = 0
    for row, car in enumerate(cars, start=2):
        for col, value in enumerate(row_values(car), start=1):
            ws.cell(row=row, column=col, value=value)
        if include_photos and car.photo:
            try:
                _embed_photo(ws, car, row)
                embedded += 1
            except ImageEmbedError as exc:
                logger.warning("%s (car %s)", exc.message, exc.car_id)

    logger.info("Built workbook: %d rows, %d photos", len(cars), embedded)
    return wb


def workbook_bytes(cars: Sequence[Car], *, include_photos: bool = True) -> bytes:
    buffer = io.BytesIO()
    build_workbook(cars, include_photos=include_photos).save(buffer)
    return buffer.getvalue()


def export_collection(cars: Sequence[Car], directory: Path | str = ".", *,
                      today: Optional[date] = None, include_photos: bool = True) -> Path:
    """Write ``coleccion-carritos-<date>.xlsx`` into ``directory`` and return its path."""
    wb = build_workbook(cars, include_photos=include_photos)
    os.makedirs(directory, exist_ok=True)
    out_path = Path(directory) / export_filename(today)
    wb.save(out_path)
    logger.info("Exported %d cars to %s", len(cars), out_path)
    return out_path
