import logging
from pathlib import Path

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)
log = logging.getLogger(__name__)


@bp.get("/health")
def health():
    """Liveness check; also says whether the image catalogue file is in place."""
    catalogue_present = Path(current_app.config["IMAGES_DB_PATH"]).exists()
    if not catalogue_present:
        log.warning("Health check: image catalogue missing at %s", current_app.config["IMAGES_DB_PATH"])
    return jsonify(status="ok", catalogue=catalogue_present)
