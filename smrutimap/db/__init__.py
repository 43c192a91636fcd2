from __future__ import annotations

import logging

from flask import Flask

from .connections import close_local_db, ensure_schema
from .images import close_persistent

__all__ = ["init_db", "close_persistent"]

log = logging.getLogger(__name__)


def init_db(app: Flask) -> None:
    log.debug("Initializing local database at %s.", app.config["LOCAL_DB_PATH"])
    ensure_schema(app.config["LOCAL_DB_PATH"])
    app.teardown_appcontext(close_local_db)
