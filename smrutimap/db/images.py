"""
DuckDB access to the image catalogue.

The catalogue is read-only at runtime, so one long-lived connection per
database file is shared and guarded by a lock::

    conn, lock = get_persistent(db_path)
    with lock:
        rows = conn.execute("SELECT …").fetchall()
"""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock

import duckdb

log = logging.getLogger(__name__)

IMAGE_COLUMNS = (
    "id",
    "image_url",
    "year",
    "location_lat",
    "location_lng",
    "location_name",
    "description",
)

_PERSISTENT_CONNS: dict[str, duckdb.DuckDBPyConnection] = {}
_PERSISTENT_LOCK = Lock()


def get_persistent(db_path: str | Path) -> tuple[duckdb.DuckDBPyConnection, Lock]:
    """Return ``(connection, lock)`` for the shared read-only connection to ``db_path``."""
    key = str(db_path)
    with _PERSISTENT_LOCK:
        conn = _PERSISTENT_CONNS.get(key)
        if conn is None:
            if not Path(key).exists():
                raise FileNotFoundError(f"Image catalogue not found at {key}")
            log.debug("Opening DuckDB image catalogue at %s.", key)
            conn = duckdb.connect(key, read_only=True)
            _PERSISTENT_CONNS[key] = conn
    return conn, _PERSISTENT_LOCK


def close_persistent() -> None:
    with _PERSISTENT_LOCK:
        for key, conn in list(_PERSISTENT_CONNS.items()):
            conn.close()
            log.debug("Closed DuckDB image catalogue at %s.", key)
        _PERSISTENT_CONNS.clear()


def fetch_image_rows(db_path: str | Path) -> list[tuple]:
    conn, lock = get_persistent(db_path)
    query = f"""
    SELECT {", ".join(IMAGE_COLUMNS)}
    FROM images
    WHERE image_url IS NOT NULL
      AND year IS NOT NULL
      AND location_lat IS NOT NULL
      AND location_lng IS NOT NULL
    ORDER BY id;
    """
    with lock:
        return conn.execute(query).fetchall()
