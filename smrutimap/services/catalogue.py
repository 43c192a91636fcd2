"""
Image catalogue service: the pool of photographs rounds are drawn from.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from smrutimap.db.images import fetch_image_rows
from smrutimap.services.image_urls import normalize_image_url

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GameImage:
    id: str
    image_url: str
    year: int
    lat: float
    lng: float
    location_name: str = ""
    description: str = ""

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["location"] = {
            "lat": data.pop("lat"),
            "lng": data.pop("lng"),
            "name": data.pop("location_name"),
        }
        return data


def _clean_str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def image_from_row(row: tuple) -> GameImage:
    """Build a ``GameImage`` from an ``images`` row (column order of ``IMAGE_COLUMNS``)."""
    return GameImage(
        id=_clean_str(row[0]),
        image_url=normalize_image_url(row[1]),
        year=int(row[2]),
        lat=float(row[3]),
        lng=float(row[4]),
        location_name=_clean_str(row[5]),
        description=_clean_str(row[6]),
    )


@lru_cache(maxsize=4)
def _load_image_pool_cached(db_path: str) -> tuple[GameImage, ...]:
    rows = fetch_image_rows(db_path)
    pool = tuple(image_from_row(row) for row in rows)
    log.info("Loaded %d images from catalogue %s.", len(pool), db_path)
    return pool


def load_image_pool(db_path: str | Path) -> tuple[GameImage, ...]:
    """All playable images ordered by id. Cached per database path."""
    return _load_image_pool_cached(str(db_path))


def clear_image_pool_cache() -> None:
    _load_image_pool_cached.cache_clear()


def find_image(db_path: str | Path, image_id: str) -> GameImage | None:
    for image in load_image_pool(db_path):
        if image.id == image_id:
            return image
    return None
