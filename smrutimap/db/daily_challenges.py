"""
Write-once storage of each day's challenge.

The first selection stored for a date wins; later writers read it back
instead of replacing it, so every player gets the same rounds even if the
image pool grows during the day.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Sequence

from smrutimap.db.connections import get_local_db
from smrutimap.services.catalogue import GameImage
from smrutimap.services.daily_challenge import select_daily_challenge, validate_date_key

log = logging.getLogger(__name__)


def get_stored_challenge(date_key: str) -> list[str] | None:
    row = get_local_db().execute(
        "SELECT image_ids FROM daily_challenges WHERE challenge_date = ?",
        [date_key],
    ).fetchone()
    if row is None:
        return None
    return [str(image_id) for image_id in json.loads(row["image_ids"])]


def store_challenge(date_key: str, image_ids: Sequence[str]) -> list[str]:
    """Store ``image_ids`` for ``date_key`` unless a selection exists; return the stored one."""
    conn = get_local_db()
    cursor = conn.execute(
        "INSERT OR IGNORE INTO daily_challenges (challenge_date, image_ids) VALUES (?, ?)",
        [date_key, json.dumps(list(image_ids))],
    )
    conn.commit()
    if cursor.rowcount:
        log.info("Stored daily challenge for %s (%d images).", date_key, len(image_ids))
    else:
        log.debug("Daily challenge for %s already stored; keeping it.", date_key)

    stored = get_stored_challenge(date_key)
    return stored if stored is not None else list(image_ids)


def get_or_create_daily_challenge(
    pool: Sequence[GameImage],
    date_key: str,
    count: int,
    persist: bool = True,
) -> list[GameImage]:
    """
    The challenge images for ``date_key``.

    A stored selection is used when it still resolves to a full set
    (``min(count, len(pool))`` images). Otherwise the deterministic selection
    is served, and stored first when ``persist`` is set and nothing is on
    record yet. Existing records are never replaced.

    Storage errors are logged and the deterministic selection is served anyway.
    """
    validate_date_key(date_key)
    expected = min(count, len(pool))

    try:
        stored_ids = get_stored_challenge(date_key)
    except sqlite3.Error:
        log.exception("Could not read daily challenge for %s; selecting without storage.", date_key)
        return select_daily_challenge(pool, date_key, count)

    if stored_ids is not None:
        images = select_daily_challenge(pool, date_key, count, already_selected=stored_ids)
        if len(images) >= expected:
            return images[:count]
        log.warning(
            "Stored daily challenge for %s resolves to %d of %d images; using a fresh selection.",
            date_key,
            len(images),
            expected,
        )
        return select_daily_challenge(pool, date_key, count)

    images = select_daily_challenge(pool, date_key, count)
    if not images or not persist:
        return images

    try:
        winning_ids = store_challenge(date_key, [image.id for image in images])
    except sqlite3.Error:
        log.exception("Could not store daily challenge for %s.", date_key)
        return images

    winners = select_daily_challenge(pool, date_key, count, already_selected=winning_ids)
    return winners if len(winners) >= expected else images
