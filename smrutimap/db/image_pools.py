"""
Per-player record of the images already played in regular games.

A pool is identified by a free-form key (a user id, or a guest token chosen
by the client). Rows are the ids used in the current cycle; a reset deletes
them.
"""

from __future__ import annotations

import logging
import random
import sqlite3
from typing import Sequence

from smrutimap.db.connections import get_local_db
from smrutimap.services.catalogue import GameImage
from smrutimap.services.image_pool import PoolStats, draw_from_pool, pool_stats

log = logging.getLogger(__name__)


def get_used_ids(pool_key: str) -> list[str]:
    rows = get_local_db().execute(
        "SELECT image_id FROM used_images WHERE pool_key = ? ORDER BY rowid",
        [pool_key],
    ).fetchall()
    return [row["image_id"] for row in rows]


def reset_image_pool(pool_key: str) -> int:
    """Forget every image used by ``pool_key``; returns how many were cleared."""
    conn = get_local_db()
    with conn:
        cursor = conn.execute("DELETE FROM used_images WHERE pool_key = ?", [pool_key])
    log.info("Reset image pool %s (%d used image(s) cleared).", pool_key, cursor.rowcount)
    return cursor.rowcount


def get_game_images_from_pool(
    pool: Sequence[GameImage],
    pool_key: str,
    count: int,
    rng: random.Random | None = None,
) -> tuple[list[GameImage], bool]:
    """
    Draw ``count`` unplayed images for ``pool_key`` and record them as used.

    Returns ``(images, reset)`` where ``reset`` tells whether the pool started
    a new cycle. If the store fails the draw is still served, unrecorded.
    """
    try:
        used_ids = get_used_ids(pool_key)
    except sqlite3.Error:
        log.exception("Could not read image pool %s; drawing without history.", pool_key)
        return draw_from_pool(pool, [], count, rng).images, False

    draw = draw_from_pool(pool, used_ids, count, rng)
    if not draw.images:
        return draw.images, draw.reset

    conn = get_local_db()
    try:
        with conn:
            if draw.reset:
                conn.execute("DELETE FROM used_images WHERE pool_key = ?", [pool_key])
            conn.executemany(
                "INSERT OR IGNORE INTO used_images (pool_key, image_id) VALUES (?, ?)",
                [(pool_key, image.id) for image in draw.images],
            )
    except sqlite3.Error:
        log.exception("Could not record drawn images for pool %s.", pool_key)
    else:
        log.debug("Pool %s drew %s.", pool_key, [image.id for image in draw.images])
    return draw.images, draw.reset


def get_pool_stats(pool: Sequence[GameImage], pool_key: str) -> PoolStats:
    try:
        used_ids = get_used_ids(pool_key)
    except sqlite3.Error:
        log.exception("Could not read image pool %s; reporting it as fresh.", pool_key)
        used_ids = []
    return pool_stats(pool, used_ids)
