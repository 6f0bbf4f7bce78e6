"""Import/export helpers for the car collection"""

from .ingest_csv import ImportResult, parse_csv_text, read_csv_file, register_alias
from .export_xlsx import build_workbook, export_collection, export_filename, workbook_bytes

__all__ = [
    "ImportResult",
    "parse_csv_text",
    "read_csv_file",
    "register_alias",
    "build_workbook",
    "export_collection",
    "export_filename",
    "workbook_bytes",
]
