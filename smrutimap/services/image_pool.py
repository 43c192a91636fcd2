"""
No-repeat image pool for regular games.

Each player works through the catalogue without seeing an image twice. Once
every image has been played the pool starts over. Drawing is a pure function
over the catalogue and the ids already used; ``smrutimap.db.image_pools``
keeps the used ids between games.
"""

from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Sequence

from smrutimap.services.catalogue import GameImage

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolDraw:
    images: list[GameImage]
    used_ids: list[str]
    reset: bool


@dataclass(frozen=True)
class PoolStats:
    available_images: int
    used_images: int
    total_images: int
    pool_progress: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _known_used_ids(pool: Sequence[GameImage], used_ids: Iterable[str]) -> list[str]:
    # Ids of images that left the catalogue no longer count as used.
    known = {image.id for image in pool}
    seen: set[str] = set()
    result = []
    for image_id in used_ids:
        if image_id in known and image_id not in seen:
            seen.add(image_id)
            result.append(image_id)
    return result


def draw_from_pool(
    pool: Sequence[GameImage],
    used_ids: Iterable[str],
    count: int,
    rng: random.Random | None = None,
) -> PoolDraw:
    """
    Draw ``count`` distinct images nobody in this pool has played yet.

    When fewer than ``count`` unused images remain, the leftovers are taken
    and the pool resets to fill the rest; ``used_ids`` of the result then
    describes the new cycle only. A catalogue smaller than ``count`` yields
    every image once.
    """
    if count < 0:
        raise ValueError("count must be >= 0")

    chooser = rng or random.Random()
    used = _known_used_ids(pool, used_ids)
    if count == 0 or not pool:
        return PoolDraw(images=[], used_ids=used, reset=False)

    used_set = set(used)
    available = [image for image in pool if image.id not in used_set]
    chooser.shuffle(available)
    picked = available[:count]

    if len(picked) == count or not used:
        return PoolDraw(images=picked, used_ids=used + [image.id for image in picked], reset=False)

    picked_ids = {image.id for image in picked}
    refill = [image for image in pool if image.id not in picked_ids]
    chooser.shuffle(refill)
    picked.extend(refill[: count - len(picked)])
    log.info("Image pool exhausted after %d image(s); starting a new cycle.", len(used) + len(picked_ids))
    return PoolDraw(images=picked, used_ids=[image.id for image in picked], reset=True)


def pool_stats(pool: Sequence[GameImage], used_ids: Iterable[str]) -> PoolStats:
    used = len(_known_used_ids(pool, used_ids))
    total = len(pool)
    return PoolStats(
        available_images=total - used,
        used_images=used,
        total_images=total,
        pool_progress=(used / total * 100) if total else 0.0,
    )
