"""Runtime settings read from the environment (and a local .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import load_dotenv


DEFAULT_DB_PATH = "database/car_collection.db"
DEFAULT_STORAGE_KEY = "carCollection"


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    storage_key: str = DEFAULT_STORAGE_KEY
    export_dir: str = "."
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        load_dotenv(dotenv_path)
        return cls(
            db_path=os.getenv("CAR_COLLECTION_DB_PATH") or DEFAULT_DB_PATH,
            storage_key=os.getenv("CAR_COLLECTION_STORAGE_KEY") or DEFAULT_STORAGE_KEY,
            export_dir=os.getenv("CAR_COLLECTION_EXPORT_DIR") or ".",
            log_level=(os.getenv("CAR_COLLECTION_LOG_LEVEL") or "INFO").upper(),
        )

    def override(self, **changes) -> "Settings":
        """Return a copy with every non-None value in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
