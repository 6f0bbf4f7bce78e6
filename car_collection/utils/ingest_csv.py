"""Lenient CSV import of car records authored outside the application.

Column names vary with whoever produced the file (Spanish or English
headers, different capitalisation, stray spaces), so each target field
declares an ordered list of accepted header aliases. The aliases are
resolved once per file against the header row; the first alias present
wins. Rows are salvaged rather than rejected: only a missing model drops a
row, every other field falls back to a default.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from car_collection.core.errors import ImportFileTypeError
from car_collection.core.models import CarDraft, Condition


logger = logging.getLogger(__name__)


FIELD_ALIASES: Dict[str, List[str]] = {
    "number": ["Número", "Numero", "Number", "No.", "#"],
    "model": ["Modelo", "Model", "Nombre", "Name"],
    "color": ["Color", "Colour"],
    "year": ["Año", "Ano", "Year"],
    "condition": ["Estado", "Condición", "Condicion", "Condition"],
    "set": ["Set", "Colección", "Coleccion", "Serie", "Collection"],
    "quantity": ["Cantidad", "Quantity", "Qty"],
    "total": ["Total", "Precio", "Price", "Valor", "Value"],
    "exhibited": ["Exhibido", "Exhibited", "Expuesto", "Displayed"],
}

TRUTHY_TOKENS = frozenset({"sí", "si", "1", "true", "yes", "x"})

DEFAULT_COLOR = "unspecified"
DEFAULT_CONDITION = "unknown"
DEFAULT_SET = "general"

_CANDIDATE_DELIMITERS = ",;\t|"


def register_alias(target: str, alias: str, *, prefer: bool = False) -> None:
    """Accept ``alias`` as a header for ``target``; ``prefer`` puts it first."""
    if target not in FIELD_ALIASES:
        raise KeyError(f"Unknown import field: {target}")
    aliases = FIELD_ALIASES[target]
    if alias in aliases:
        aliases.remove(alias)
    if prefer:
        aliases.insert(0, alias)
    else:
        aliases.append(alias)


@dataclass
class ImportResult:
    drafts: List[CarDraft] = field(default_factory=list)
    rows_read: int = 0
    blank_rows: int = 0
    dropped_rows: int = 0
    columns: Dict[str, str] = field(default_factory=dict)
    delimiter: str = ","

    def __len__(self) -> int:
        return len(self.drafts)


# =============== field parsing ===============

def _normalize_header(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def resolve_columns(headers: Sequence[Optional[str]]) -> Dict[str, str]:
    """Map each target field to the source header that supplies it."""
    present: Dict[str, str] = {}
    for header in headers:
        key = _normalize_header(header)
        if key and key not in present:
            present[key] = header
    columns: Dict[str, str] = {}
    for target, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            source = present.get(_normalize_header(alias))
            if source is not None:
                columns[target] = source
                break
    return columns


def _groups_of_thousands(text: str, mark: str) -> bool:
    head, *groups = text.lstrip("-+").split(mark)
    return bool(groups) and 1 <= len(head) <= 3 and head.isdigit() and all(
        len(group) == 3 and group.isdigit() for group in groups
    )


def _normalize_number(text: str, decimal_comma: bool) -> str:
    """Rewrite ``text`` with ``.`` as the only decimal mark and no grouping.

    When both marks appear the last one is the decimal mark. A lone comma is
    a decimal mark in semicolon-delimited files, or whenever it does not
    group thousands; a lone dot only groups thousands in those files.
    """
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            return text.replace(".", "").replace(",", ".")
        return text.replace(",", "")
    if "," in text:
        if not decimal_comma and _groups_of_thousands(text, ","):
            return text.replace(",", "")
        return text.replace(",", ".")
    if "." in text and decimal_comma and _groups_of_thousands(text, "."):
        return text.replace(".", "")
    return text


def _parse_float(value: Optional[str], decimal_comma: bool = False) -> Optional[float]:
    if value is None:
        return None
    cleaned = (
        value.replace("$", "")
        .replace("€", "")
        .replace(" ", "")
        .replace("\u00a0", "")
        .strip()
    )
    if not cleaned:
        return None
    try:
        return float(_normalize_number(cleaned, decimal_comma))
    except ValueError:
        return None


def _parse_int(value: Optional[str], decimal_comma: bool = False) -> Optional[int]:
    parsed = _parse_float(value, decimal_comma)
    if parsed is None or parsed != parsed or parsed in (float("inf"), float("-inf")):
        return None
    return int(parsed)


def parse_quantity(value: Optional[str], decimal_comma: bool = False) -> int:
    quantity = _parse_int(value, decimal_comma)
    return quantity if quantity is not None and quantity >= 1 else 1


def parse_total(value: Optional[str], decimal_comma: bool = False) -> Optional[int]:
    total = _parse_int(value, decimal_comma)
    return total if total is not None and total >= 0 else None


def parse_exhibited(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in TRUTHY_TOKENS


def parse_condition(value: Optional[str]) -> str:
    text = (value or "").strip()
    if not text:
        return DEFAULT_CONDITION
    condition = Condition.parse(text)
    return condition.value if condition else text


def _cell(row: Dict[str, Optional[str]], columns: Dict[str, str], target: str) -> str:
    source = columns.get(target)
    if source is None:
        return ""
    value = row.get(source)
    return value.strip() if isinstance(value, str) else ""


def _is_blank(row: Dict[str, object]) -> bool:
    for value in row.values():
        if isinstance(value, list):
            if any((v or "").strip() for v in value):
                return False
        elif isinstance(value, str) and value.strip():
            return False
    return True


def row_to_draft(row: Dict[str, Optional[str]], columns: Dict[str, str],
                 current_year: Optional[str] = None, delimiter: str = ",") -> Optional[CarDraft]:
    """Build a draft from one row, or None when the row has no model."""
    decimal_comma = delimiter == ";"
    model = _cell(row, columns, "model")
    if not model:
        return None
    number = _cell(row, columns, "number")
    return CarDraft(
        model=model,
        number=number or None,
        color=_cell(row, columns, "color") or DEFAULT_COLOR,
        year=_cell(row, columns, "year") or current_year or str(date.today().year),
        condition=parse_condition(_cell(row, columns, "condition")),
        set=_cell(row, columns, "set") or DEFAULT_SET,
        quantity=parse_quantity(_cell(row, columns, "quantity"), decimal_comma),
        total=parse_total(_cell(row, columns, "total"), decimal_comma),
        exhibited=parse_exhibited(_cell(row, columns, "exhibited")),
    )


# =============== text and file entry points ===============

def _sniff_delimiter(header_line: str) -> str:
    try:
        dialect = csv.Sniffer().sniff(header_line, delimiters=_CANDIDATE_DELIMITERS)
        return dialect.delimiter
    except csv.Error:
        counts = {d: header_line.count(d) for d in _CANDIDATE_DELIMITERS}
        best = max(counts, key=counts.get)
        return best if counts[best] else ","


def parse_csv_text(text: str) -> ImportResult:
    """Parse delimited text whose first row is the header."""
    if "\x00" in text:
        raise ImportFileTypeError("El archivo no es un CSV de texto")

    text = text.lstrip("\ufeff")
    header_line = next((line for line in text.splitlines() if line.strip()), "")
    if not header_line:
        raise ImportFileTypeError("El archivo CSV no tiene encabezados")
    text = text[text.index(header_line):]

    delimiter = _sniff_delimiter(header_line)
    reader = csv.DictReader(io.StringIO(text, newline=""), delimiter=delimiter)
    try:
        headers = reader.fieldnames or []
    except csv.Error as exc:
        raise ImportFileTypeError(f"El archivo no es un CSV válido: {exc}") from exc

    columns = resolve_columns(headers)
    result = ImportResult(columns=columns, delimiter=delimiter)
    if "model" not in columns:
        logger.warning("No model column among headers %s", headers)

    current_year = str(date.today().year)
    try:
        for idx, row in enumerate(reader):
            result.rows_read += 1
            if _is_blank(row):
                result.blank_rows += 1
                continue
            draft = row_to_draft(row, columns, current_year, delimiter)
            if draft is None:
                result.dropped_rows += 1
                logger.debug("Dropping row %s: empty model", idx + 2)
                continue
            result.drafts.append(draft)
    except csv.Error as exc:
        raise ImportFileTypeError(f"El archivo no es un CSV válido: {exc}") from exc

    logger.info(
        "Parsed %d rows: %d records, %d blank, %d dropped",
        result.rows_read, len(result.drafts), result.blank_rows, result.dropped_rows,
    )
    return result


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info("CSV is not UTF-8, falling back to cp1252")
        try:
            return data.decode("cp1252")
        except UnicodeDecodeError as exc:
            raise ImportFileTypeError("El archivo no es un CSV de texto") from exc


def read_csv_file(path: Path | str) -> ImportResult:
    path = Path(path)
    if path.suffix.lower() != ".csv":
        raise ImportFileTypeError()
    logger.info("Importing collection rows from %s", path)
    return parse_csv_text(_decode(path.read_bytes()))
