#!/usr/bin/env python3
"""Car collection manager - command line interface"""

from __future__ import annotations

import argparse
import base64
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from car_collection.config import Settings
from car_collection.core.collection import CollectionManager
from car_collection.core.errors import CollectionError
from car_collection.core.models import Car, CarDraft, SUGGESTED_SETS, Condition, condition_display


def photo_to_data_url(path: Path) -> str:
    """Encode an image file the way the collection stores photos."""
    mime = mimetypes.guess_type(path.name)[0] or "image/png"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def _parse_flag(value: str) -> bool:
    return value.strip().lower() in ("sí", "si", "1", "true", "yes")


class CollectionCLI:
    """Command line front end over a CollectionManager"""

    def __init__(self, manager: CollectionManager):
        self.manager = manager
        error = manager.load_error
        if error:
            print(f"⚠️ {error.message}")
            if error.backup_key:
                print(f"   The unreadable data was kept under '{error.backup_key}'")

    # =============== viewing ===============

    def list_cars(self, limit: int = 20):
        cars = self.manager.cars
        count = len(cars)
        print(f"\n🚗 {count} {'carrito' if count == 1 else 'carritos'} en tu colección")
        print("=" * 80)

        if not cars:
            print("   Tu colección está vacía")
            return

        for car in cars[:limit]:
            print("   " + self._format_line(car))

    def show_car(self, car_id: str) -> bool:
        car = self.manager.find(car_id)
        if car is None:
            print(f"❌ No car with id {car_id}")
            return False

        display = car.condition_display
        print(f"\n🚗 {car.model}")
        print("=" * 40)
        print(f"   id:        {car.id}")
        print(f"   número:    {car.number or '-'}")
        print(f"   color:     {car.color}")
        print(f"   año:       {car.year}")
        print(f"   estado:    {display.label} ({display.tier})")
        print(f"   set:       {car.set or '-'}")
        print(f"   cantidad:  {car.quantity}")
        print(f"   total:     {car.total if car.total is not None else '-'}")
        print(f"   exhibido:  {'Sí' if car.exhibited else 'No'}")
        print(f"   foto:      {'sí' if car.photo else 'no'}")
        print(f"   creado:    {car.created_at.isoformat()}")
        return True

    def show_stats(self):
        stats = self.manager.stats()
        print("\n📊 Collection Statistics")
        print("=" * 50)
        print(f"   records:   {stats['total_records']:,}")
        print(f"   units:     {stats['total_units']:,}")
        print(f"   value:     {stats['total_value']:,}")
        print(f"   exhibited: {stats['exhibited']:,}")
        if stats['by_condition']:
            print("\n   By condition:")
            for value, count in sorted(stats['by_condition'].items()):
                print(f"   • {condition_display(value).label or '-'}: {count}")
        if stats['by_set']:
            print("\n   By set:")
            for value, count in sorted(stats['by_set'].items()):
                print(f"   • {value or '-'}: {count}")

    @staticmethod
    def _format_line(car: Car) -> str:
        qty = f" x{car.quantity}" if car.quantity > 1 else ""
        number = f"#{car.number} " if car.number else ""
        return (f"[{car.id}] {number}{car.model}{qty} | {car.color} | {car.year} | "
                f"{car.condition_display.label}")

    # =============== mutations ===============

    def add_car(self, draft: CarDraft) -> Car:
        car = self.manager.add(draft)
        print(f"✅ Carrito agregado a tu colección: {car.model} (ID: {car.id})")
        return car

    def edit_car(self, car_id: str, changes: dict) -> bool:
        car = self.manager.find(car_id)
        if car is None:
            print(f"❌ No car with id {car_id}")
            return False
        draft = car.to_draft()
        for key, value in changes.items():
            setattr(draft, key, value)
        self.manager.edit(car.with_changes(draft))
        print("✅ Carrito actualizado")
        return True

    def remove_car(self, car_id: str) -> bool:
        if self.manager.remove(car_id):
            print("✅ Carrito eliminado de tu colección")
            return True
        print(f"⚠️ No car with id {car_id}; nothing removed")
        return False

    def import_file(self, path: Path) -> List[Car]:
        cars = self.manager.import_csv(path)
        print(f"✅ Se importaron {len(cars)} carritos")
        return cars

    def export_file(self, directory: Optional[Path], include_photos: bool) -> Path:
        out_path = self.manager.export_all(directory, include_photos=include_photos)
        print(f"✅ Colección exportada a {out_path}")
        return out_path


def _add_car_options(parser: argparse.ArgumentParser, require_model: bool) -> None:
    parser.add_argument("--model", required=require_model, help="Model name")
    parser.add_argument("--number", help="Collector number / code")
    parser.add_argument("--color")
    parser.add_argument("--year")
    parser.add_argument("--condition",
                        help=f"One of {', '.join(c.value for c in Condition)} (other text kept as-is)")
    parser.add_argument("--set", dest="set_name", help=f"e.g. {', '.join(SUGGESTED_SETS)}")
    parser.add_argument("--quantity", type=int)
    parser.add_argument("--total", type=int, help="Monetary value")
    parser.add_argument("--photo", type=Path, help="Image file to attach")
    parser.add_argument("--exhibited", type=_parse_flag, metavar="yes|no")


def _condition_value(text: Optional[str]) -> Optional[str]:
    condition = Condition.parse(text)
    return condition.value if condition else text


def _changes_from_args(args: argparse.Namespace) -> dict:
    changes = {
        "model": args.model,
        "number": args.number,
        "color": args.color,
        "year": args.year,
        "condition": _condition_value(args.condition),
        "set": args.set_name,
        "quantity": args.quantity,
        "total": args.total,
        "exhibited": args.exhibited,
    }
    if args.photo is not None:
        changes["photo"] = photo_to_data_url(args.photo)
    return {key: value for key, value in changes.items() if value is not None}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage a scale-model car collection")
    parser.add_argument("--db", help="SQLite database path")
    parser.add_argument("--key", help="Storage slot name")
    parser.add_argument("--log", help="Logging level (INFO/DEBUG)")

    sub = parser.add_subparsers(dest="command", required=True)

    list_p = sub.add_parser("list", help="List cars, newest first")
    list_p.add_argument("--limit", type=int, default=20)

    show_p = sub.add_parser("show", help="Show one car")
    show_p.add_argument("car_id")

    add_p = sub.add_parser("add", help="Add a car")
    _add_car_options(add_p, require_model=True)

    edit_p = sub.add_parser("edit", help="Edit a car")
    edit_p.add_argument("car_id")
    _add_car_options(edit_p, require_model=False)

    remove_p = sub.add_parser("remove", help="Remove a car")
    remove_p.add_argument("car_id")

    import_p = sub.add_parser("import", help="Import cars from a CSV file")
    import_p.add_argument("csv", type=Path)

    export_p = sub.add_parser("export", help="Export the collection to XLSX")
    export_p.add_argument("--dir", type=Path, help="Output directory")
    export_p.add_argument("--no-photos", action="store_true", help="Skip embedded photos")

    sub.add_parser("stats", help="Show collection statistics")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = Settings.from_env().override(db_path=args.db, storage_key=args.key,
                                            log_level=args.log and args.log.upper())
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO),
                        format="%(asctime)s %(levelname)s %(message)s")

    try:
        cli = CollectionCLI(CollectionManager.open(settings))

        if args.command == "list":
            cli.list_cars(limit=args.limit)
        elif args.command == "show":
            return 0 if cli.show_car(args.car_id) else 1
        elif args.command == "add":
            cli.add_car(CarDraft(**_changes_from_args(args)))
        elif args.command == "edit":
            return 0 if cli.edit_car(args.car_id, _changes_from_args(args)) else 1
        elif args.command == "remove":
            cli.remove_car(args.car_id)
        elif args.command == "import":
            cli.import_file(args.csv)
        elif args.command == "export":
            cli.export_file(args.dir, include_photos=not args.no_photos)
        elif args.command == "stats":
            cli.show_stats()
    except CollectionError as e:
        print(f"❌ {e.message}")
        return 1
    except OSError as e:
        print(f"❌ {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
