from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import cast

from flask import current_app, g

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS daily_challenges (
    challenge_date TEXT PRIMARY KEY,
    image_ids TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS used_images (
    pool_key TEXT NOT NULL,
    image_id TEXT NOT NULL,
    used_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (pool_key, image_id)
);
"""


def ensure_schema(db_path: str | Path) -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.executescript(SCHEMA)
    log.debug("Local database schema ensured at %s.", db_path)


def get_local_db() -> sqlite3.Connection:
    if not hasattr(g, "db"):
        log.debug("Opening SQLite connection at %s.", current_app.config["LOCAL_DB_PATH"])
        conn = sqlite3.connect(current_app.config["LOCAL_DB_PATH"])
        conn.row_factory = sqlite3.Row
        g.db = conn

    return cast(sqlite3.Connection, g.db)


def close_local_db(_error: BaseException | None = None) -> None:
    db = cast(sqlite3.Connection | None, getattr(g, "db", None))
    if db is not None:
        db.close()
        log.debug("Closed SQLite connection.")
        del g.db
