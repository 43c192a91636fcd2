"""Catalogue access and error responses shared by the API handlers."""

from __future__ import annotations

import logging

from flask import current_app, jsonify

from smrutimap.services.catalogue import GameImage, find_image, load_image_pool
from smrutimap.services.timeouts import SafeCallResult, safe_call

log = logging.getLogger(__name__)


def load_catalogue() -> SafeCallResult[tuple[GameImage, ...]]:
    return safe_call(
        load_image_pool,
        current_app.config["IMAGES_DB_PATH"],
        timeout_seconds=current_app.config["CATALOGUE_QUERY_TIMEOUT"],
        operation="Image catalogue load",
    )


def lookup_image(image_id: str) -> SafeCallResult[GameImage | None]:
    return safe_call(
        find_image,
        current_app.config["IMAGES_DB_PATH"],
        image_id,
        timeout_seconds=current_app.config["CATALOGUE_QUERY_TIMEOUT"],
        operation="Image lookup",
    )


def catalogue_error(result: SafeCallResult):
    """504 when the catalogue timed out, 503 for any other failure."""
    if result.timed_out:
        return jsonify({"error": "Image catalogue timed out"}), 504
    log.error("Image catalogue unavailable: %s", result.error)
    return jsonify({"error": "Image catalogue unavailable"}), 503
