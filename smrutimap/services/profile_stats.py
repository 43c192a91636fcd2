"""Player profile statistics recomputed from completed game sessions."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Literal, Mapping

log = logging.getLogger(__name__)

GameMode = Literal["random", "daily", "timed"]
DEFAULT_GAME_MODE: GameMode = "random"


@dataclass(frozen=True)
class ProfileStats:
    total_games_played: int
    total_score: int
    best_single_game_score: int
    average_score: int
    favorite_game_mode: str

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def summarize_sessions(sessions: Iterable[Mapping[str, Any]]) -> ProfileStats:
    """
    Aggregate completed sessions (``total_score``, ``game_mode``) into profile stats.

    Sessions without a ``completed_at`` value are still in progress and are skipped.
    """
    completed = [s for s in sessions if s.get("completed_at")]
    if not completed:
        return ProfileStats(0, 0, 0, 0, DEFAULT_GAME_MODE)

    scores = [int(s.get("total_score") or 0) for s in completed]
    total = sum(scores)
    # Counter preserves insertion order, so ties go to the mode seen first.
    modes = Counter(s.get("game_mode") or DEFAULT_GAME_MODE for s in completed)
    favorite = max(modes, key=lambda mode: modes[mode])

    stats = ProfileStats(
        total_games_played=len(completed),
        total_score=total,
        best_single_game_score=max(scores),
        average_score=round(total / len(completed)),
        favorite_game_mode=favorite,
    )
    log.debug("Recomputed profile stats: %s", stats)
    return stats
