"""
Daily challenge selection.

The same date key and the same image pool always produce the same ordered
subset, on every platform, without consulting any global random source.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from operator import attrgetter
from typing import Any, Callable, Hashable, Iterator, Sequence, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

DATE_KEY_FORMAT = "%Y-%m-%d"
DAILY_CHALLENGE_SIZE = 5

_MASK_32 = 0xFFFFFFFF
_MASK_64 = 0xFFFFFFFFFFFFFFFF
_GOLDEN_GAMMA = 0x9E3779B97F4A7C15


def seed_hash(seed: str) -> int:
    """32-bit polynomial rolling hash of ``seed`` (``h = h * 31 + code``)."""
    value = 0
    for char in seed:
        value = (value * 31 + ord(char)) & _MASK_32
    return value


def seeded_random_generator(seed: str) -> Iterator[float]:
    """
    Yield a reproducible stream of floats in ``[0, 1)`` for ``seed``.

    The stream is splitmix64 seeded with ``seed_hash(seed)``; each call returns
    an independent generator starting from the first value.
    """
    state = seed_hash(seed)
    while True:
        state = (state + _GOLDEN_GAMMA) & _MASK_64
        z = state
        z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
        z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
        z ^= z >> 31
        yield (z >> 11) / float(1 << 53)


def seeded_shuffle(items: Sequence[T], seed: str) -> list[T]:
    """Fisher-Yates shuffle of a copy of ``items`` driven by ``seed``."""
    shuffled = list(items)
    random = seeded_random_generator(seed)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(next(random) * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def validate_date_key(date_key: str) -> str:
    try:
        parsed = datetime.strptime(date_key, DATE_KEY_FORMAT)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid date key {date_key!r}; expected YYYY-MM-DD.") from exc
    if parsed.strftime(DATE_KEY_FORMAT) != date_key:
        raise ValueError(f"Invalid date key {date_key!r}; expected YYYY-MM-DD.")
    return date_key


def date_key_for(moment: datetime | None = None, utc_offset_hours: float = 0) -> str:
    """Calendar date key of ``moment`` (default: now) in a fixed UTC offset."""
    tz = timezone(timedelta(hours=utc_offset_hours))
    if moment is None:
        moment = datetime.now(tz)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).strftime(DATE_KEY_FORMAT)


def select_daily_challenge(
    pool: Sequence[T],
    date_key: str,
    count: int = DAILY_CHALLENGE_SIZE,
    already_selected: Sequence[Hashable] | None = None,
    id_getter: Callable[[T], Any] = attrgetter("id"),
) -> list[T]:
    """
    Ordered daily subset of ``pool`` for ``date_key``.

    When ``already_selected`` holds the ids persisted for this date, those
    items are returned in the stored order and nothing is recomputed. Ids no
    longer present in the pool are skipped.
    """
    validate_date_key(date_key)
    if count < 0:
        raise ValueError("count must be >= 0")

    if already_selected is not None:
        by_id = {id_getter(item): item for item in pool}
        selected = [by_id[image_id] for image_id in already_selected if image_id in by_id]
        if len(selected) != len(already_selected):
            log.warning(
                "Daily challenge %s references %d image(s) missing from the pool.",
                date_key,
                len(already_selected) - len(selected),
            )
        return selected

    if not pool or count == 0:
        return []

    shuffled = seeded_shuffle(pool, date_key)
    if len(pool) <= count:
        log.debug("Pool has %d image(s), fewer than %d; using all of them.", len(pool), count)
        return shuffled
    return shuffled[:count]
