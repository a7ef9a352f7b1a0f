"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

STORE_ENV = "LOGINSERVERS_STORE"
CATALOG_ENV = "LOGINSERVERS_CATALOG"

DEFAULT_STORE_PATH = Path.home() / ".loginservers" / "store.json"


@dataclass
class Settings:
    store_path: Path
    catalog_file: Optional[Path] = None


def get_settings() -> Settings:
    """Build settings from LOGINSERVERS_STORE and LOGINSERVERS_CATALOG."""
    store = os.getenv(STORE_ENV)
    catalog = os.getenv(CATALOG_ENV)
    return Settings(
        store_path=Path(store).expanduser() if store else DEFAULT_STORE_PATH,
        catalog_file=Path(catalog).expanduser() if catalog else None,
    )
