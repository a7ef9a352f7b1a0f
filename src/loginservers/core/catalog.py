from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from loginservers.core.models import LoginServer, ServerCatalog

DEFAULT_CATALOG_FILE = Path(__file__).resolve().parents[1] / "servers.yaml"


def load_catalog(path: str | Path | None = None) -> ServerCatalog:
    """
    Load the built-in login servers from a YAML file.
    Falls back to the catalog shipped with the package.
    Raises ValueError if the document does not describe a valid catalog.
    """
    p = Path(path) if path is not None else DEFAULT_CATALOG_FILE

    with p.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"{p}: invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"{p}: expected a mapping at the top level")

    return _build_catalog(p, data)


def _build_catalog(path: Path, data: dict[str, Any]) -> ServerCatalog:
    entries = data.get("login_servers")
    if not isinstance(entries, list):
        raise ValueError(f"{path}: 'login_servers' must be a list")

    try:
        servers = [
            LoginServer(name=e.get("name"), url=e.get("url"))
            for e in entries
            if isinstance(e, dict)
        ]
        if len(servers) != len(entries):
            raise ValueError("every login server must be a mapping with name and url")
        return ServerCatalog(servers=servers, sandbox_url=data.get("sandbox"))
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
