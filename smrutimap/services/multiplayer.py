"""
Multiplayer room helpers: room codes, room scoring, leaderboards, lobby rules.

These are plain functions over room snapshots; keeping rooms in sync between
clients is the transport layer's job.
"""

from __future__ import annotations

import logging
import random
import re
import string
from dataclasses import asdict, dataclass
from datetime import datetime
from math import floor
from typing import Any, Iterable, Literal, Sequence

from smrutimap.services.scoring import haversine_distance_km

log = logging.getLogger(__name__)

ParticipantRole = Literal["host", "player", "spectator"]
ParticipantStatus = Literal["connected", "disconnected", "ready"]
ScoringSystem = Literal["standard", "competitive"]

ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
MIN_PLAYERS_TO_START = 2
MAX_PLAYERS_LIMIT = 8
MAX_CATEGORY_SCORE = 5000
YEAR_POINTS_PER_YEAR = 50
LOCATION_POINTS_PER_KM = 2
MAX_TIME_BONUS = {"standard": 1000, "competitive": 2000}
COMPETITIVE_ACCURACY_PERCENT = 120

AVATAR_COLORS = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4",
    "#FFEAA7", "#DDA0DD", "#98D8C8", "#F7DC6F",
)

DISPLAY_NAME_MIN_LENGTH = 2
DISPLAY_NAME_MAX_LENGTH = 20
_DISPLAY_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s._-]+$")
_ROOM_CODE_PATTERN = re.compile(rf"^[A-Z0-9]{{{ROOM_CODE_LENGTH}}}$")

_GUEST_ADJECTIVES = (
    "Quick", "Smart", "Clever", "Swift", "Sharp", "Bright", "Fast", "Wise",
    "Bold", "Cool", "Epic", "Super", "Mega", "Ultra", "Prime", "Elite",
)
_GUEST_NOUNS = (
    "Explorer", "Guesser", "Hunter", "Seeker", "Finder", "Detective", "Scholar",
    "Traveler", "Navigator", "Observer", "Historian", "Adventurer", "Sleuth",
)


@dataclass(frozen=True)
class Participant:
    id: str
    display_name: str
    role: ParticipantRole = "player"
    status: ParticipantStatus = "connected"
    avatar_color: str = AVATAR_COLORS[0]
    joined_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Participant":
        joined_at = data.get("joined_at")
        if isinstance(joined_at, str) and joined_at:
            joined_at = datetime.fromisoformat(joined_at.replace("Z", "+00:00"))
        return cls(
            id=str(data["id"]),
            display_name=str(data.get("display_name", "")),
            role=data.get("role", "player"),
            status=data.get("status", "connected"),
            avatar_color=data.get("avatar_color", AVATAR_COLORS[0]),
            joined_at=joined_at or None,
        )


@dataclass(frozen=True)
class RoundSubmission:
    participant_id: str
    round_number: int
    total_score: int


@dataclass(frozen=True)
class MultiplayerScore:
    year_score: int
    location_score: int
    time_bonus: int
    total_score: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class LeaderboardEntry:
    participant_id: str
    display_name: str
    avatar_color: str
    total_score: int
    rounds_completed: int
    average_score: float
    position: int
    is_ready: bool

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SubmissionProgress:
    submitted: int
    total: int
    percentage: float
    submitted_participants: list[str]

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def generate_room_code(rng: random.Random | None = None) -> str:
    chooser = rng or random
    return "".join(chooser.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def is_valid_room_code(code: str) -> bool:
    return bool(_ROOM_CODE_PATTERN.match((code or "").upper()))


def pick_avatar_color(exclude: Iterable[str] = (), rng: random.Random | None = None) -> str:
    """Random avatar colour, preferring ones no participant is using yet."""
    chooser = rng or random
    excluded = set(exclude)
    available = [color for color in AVATAR_COLORS if color not in excluded]
    return chooser.choice(available or AVATAR_COLORS)


def calculate_multiplayer_score(
    year_guess: int,
    guess_lat: float,
    guess_lng: float,
    actual_year: int,
    actual_lat: float,
    actual_lng: float,
    time_taken: float,
    max_time: float,
    scoring_system: ScoringSystem = "standard",
) -> MultiplayerScore:
    """
    Room scoring: up to 5000 points per category plus a speed bonus.

    Competitive rooms double the speed bonus ceiling and boost accuracy by 20%.
    """
    year_diff = abs(int(year_guess) - int(actual_year))
    year_score = max(0.0, MAX_CATEGORY_SCORE - year_diff * YEAR_POINTS_PER_YEAR)

    distance_km = haversine_distance_km(guess_lat, guess_lng, actual_lat, actual_lng)
    location_score = max(0.0, MAX_CATEGORY_SCORE - distance_km * LOCATION_POINTS_PER_KM)

    max_bonus = MAX_TIME_BONUS.get(scoring_system, MAX_TIME_BONUS["standard"])
    time_ratio = max(0.0, (max_time - time_taken) / max_time) if max_time > 0 else 0.0
    time_bonus = floor(min(1.0, time_ratio) * max_bonus)

    if scoring_system == "competitive":
        year_score = year_score * COMPETITIVE_ACCURACY_PERCENT / 100
        location_score = location_score * COMPETITIVE_ACCURACY_PERCENT / 100

    return MultiplayerScore(
        year_score=floor(year_score),
        location_score=floor(location_score),
        time_bonus=time_bonus,
        total_score=floor(year_score + location_score + time_bonus),
    )


def calculate_leaderboard(
    participants: Sequence[Participant],
    submissions: Iterable[RoundSubmission],
) -> list[LeaderboardEntry]:
    """Aggregate round submissions per participant, best total first."""
    entries: dict[str, LeaderboardEntry] = {
        participant.id: LeaderboardEntry(
            participant_id=participant.id,
            display_name=participant.display_name,
            avatar_color=participant.avatar_color,
            total_score=0,
            rounds_completed=0,
            average_score=0.0,
            position=0,
            is_ready=participant.status == "ready",
        )
        for participant in participants
    }

    for submission in submissions:
        entry = entries.get(submission.participant_id)
        if entry is None:
            log.debug("Ignoring submission from unknown participant %s", submission.participant_id)
            continue
        entry.total_score += submission.total_score
        entry.rounds_completed += 1

    leaderboard = sorted(entries.values(), key=lambda entry: entry.total_score, reverse=True)
    for position, entry in enumerate(leaderboard, start=1):
        entry.position = position
        if entry.rounds_completed:
            entry.average_score = entry.total_score / entry.rounds_completed
    return leaderboard


def are_all_players_ready(participants: Sequence[Participant]) -> bool:
    # Hosts play too; spectators never block the start.
    active = [p for p in participants if p.role in ("player", "host")]
    return len(active) >= MIN_PLAYERS_TO_START and all(p.status == "ready" for p in active)


def find_next_host(participants: Sequence[Participant], current_host_id: str) -> Participant | None:
    """Earliest-joined connected player other than the leaving host."""
    eligible = [
        p
        for p in participants
        if p.id != current_host_id and p.role == "player" and p.status == "connected"
    ]
    if not eligible:
        return None
    return min(
        eligible,
        key=lambda p: (p.joined_at is None, p.joined_at.timestamp() if p.joined_at else 0.0),
    )


def validate_display_name(name: str | None) -> str | None:
    """Return an error message for an unusable display name, ``None`` if it is fine."""
    trimmed = (name or "").strip()
    if not trimmed:
        return "Display name is required"
    if len(trimmed) < DISPLAY_NAME_MIN_LENGTH:
        return f"Display name must be at least {DISPLAY_NAME_MIN_LENGTH} characters"
    if len(trimmed) > DISPLAY_NAME_MAX_LENGTH:
        return f"Display name must be {DISPLAY_NAME_MAX_LENGTH} characters or less"
    if not _DISPLAY_NAME_PATTERN.match(trimmed):
        return "Display name contains invalid characters"
    return None


def submission_progress(
    participants: Sequence[Participant],
    submissions: Iterable[RoundSubmission],
    current_round: int,
) -> SubmissionProgress:
    """Share of connected players who have submitted ``current_round``, each counted once."""
    active_ids = {p.id for p in participants if p.role == "player" and p.status == "connected"}
    submitted_ids: list[str] = []
    for submission in submissions:
        if (
            submission.round_number == current_round
            and submission.participant_id in active_ids
            and submission.participant_id not in submitted_ids
        ):
            submitted_ids.append(submission.participant_id)
    total = len(active_ids)
    return SubmissionProgress(
        submitted=len(submitted_ids),
        total=total,
        percentage=(len(submitted_ids) / total * 100) if total else 0.0,
        submitted_participants=submitted_ids,
    )


def can_join_room(current_players: int, max_players: int) -> bool:
    return current_players < max_players and current_players < MAX_PLAYERS_LIMIT


def format_time_remaining(seconds: int) -> str:
    if seconds <= 0:
        return "0:00"
    minutes, remaining = divmod(int(seconds), 60)
    return f"{minutes}:{remaining:02d}"


def generate_guest_name(rng: random.Random | None = None) -> str:
    chooser = rng or random
    adjective = chooser.choice(_GUEST_ADJECTIVES)
    noun = chooser.choice(_GUEST_NOUNS)
    return f"{adjective}{noun}{chooser.randint(1, 999)}"


def channel_names(room_id: str, session_id: str | None = None) -> dict[str, str]:
    return {
        "room": f"room:{room_id}",
        "game": f"game:{session_id or room_id}",
        "chat": f"chat:{room_id}",
    }
