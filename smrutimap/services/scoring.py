"""
Scoring service: turns a year/location guess into bounded game points.

Every component score lives in the raw ``[0, 100]`` range; display scores are
the raw scores scaled to ``[0, 5000]`` per category, and the time bonus is
added on top of the display total.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import asdict, dataclass
from math import atan2, cos, radians, sin, sqrt
from typing import Any, Iterable, Literal, Sequence

log = logging.getLogger(__name__)

TimerType = Literal["per-round", "total-game"]

PER_ROUND_TIMER: TimerType = "per-round"
TOTAL_GAME_TIMER: TimerType = "total-game"

EARTH_RADIUS_KM = 6371.0
MAX_RAW_SCORE = 100.0
DISPLAY_MULTIPLIER = 50
MAX_DISPLAY_SCORE_PER_CATEGORY = int(MAX_RAW_SCORE) * DISPLAY_MULTIPLIER
MAX_TOTAL_DISPLAY_SCORE = 2 * MAX_DISPLAY_SCORE_PER_CATEGORY
TIME_BONUS_MULTIPLIER = 2.0
TIME_BONUS_CAP = 500

# (delta in years, raw score). Past the last knot the score is 0.
YEAR_SCORE_CURVE: tuple[tuple[float, float], ...] = (
    (0, 100.0),
    (3, 92.0),
    (10, 71.0),
    (25, 41.0),
    (50, 0.0),
)

# (distance in km, raw score). Guesses within 15 km count as perfect.
LOCATION_SCORE_CURVE: tuple[tuple[float, float], ...] = (
    (0, 100.0),
    (15, 100.0),
    (80, 80.0),
    (240, 50.0),
    (650, 20.0),
    (1600, 5.0),
    (2000, 0.0),
)

# Lower bounds on the total score normalized to [0, 100], highest first.
ROUND_FEEDBACK_TIERS: tuple[tuple[float, str], ...] = (
    (90, "Amazing!"),
    (75, "Great job!"),
    (60, "Good work!"),
    (45, "Not bad!"),
    (30, "Keep practicing!"),
)
ROUND_FEEDBACK_FLOOR = "Try again!"

FINAL_FEEDBACK_TIERS: tuple[tuple[float, str], ...] = (
    (80, "Outstanding performance!"),
    (65, "Excellent work!"),
    (50, "Great job overall!"),
    (35, "Good effort!"),
    (20, "Keep improving!"),
)
FINAL_FEEDBACK_FLOOR = "Practice makes perfect!"


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    """Fully populated result of one guess. Build it with ``calculate_complete_score``."""

    year_score_raw: float
    location_score_raw: float
    total_score_raw: float
    display_year_score: int
    display_location_score: int
    time_bonus: int
    display_total_score: int
    distance_km: float
    year_delta: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _clamp(value: float, low: float = 0.0, high: float = MAX_RAW_SCORE) -> float:
    return max(low, min(high, value))


def _interpolate(curve: Sequence[tuple[float, float]], x: float) -> float:
    """Piecewise-linear lookup on a curve of ``(x, y)`` knots sorted by ``x``."""
    if x <= curve[0][0]:
        return curve[0][1]
    if x >= curve[-1][0]:
        return curve[-1][1]

    index = bisect_right([knot[0] for knot in curve], x)
    x0, y0 = curve[index - 1]
    x1, y1 = curve[index]
    return y0 + (y1 - y0) * (x - x0) / (x1 - x0)


def haversine_distance_km(
    latitude_a: float,
    longitude_a: float,
    latitude_b: float,
    longitude_b: float,
) -> float:
    """Great-circle distance in kilometres between two (lat, lng) points."""
    delta_latitude = radians(latitude_b - latitude_a)
    delta_longitude = radians(longitude_b - longitude_a)
    latitude_a_rad = radians(latitude_a)
    latitude_b_rad = radians(latitude_b)

    h = (
        sin(delta_latitude / 2) ** 2
        + cos(latitude_a_rad) * cos(latitude_b_rad) * sin(delta_longitude / 2) ** 2
    )
    h = min(1.0, h)
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))


def score_year(actual_year: int, guess_year: int) -> float:
    """Raw year score: 100 for an exact guess, 0 once the guess is 50+ years off."""
    delta = abs(int(actual_year) - int(guess_year))
    return _clamp(_interpolate(YEAR_SCORE_CURVE, delta))


def score_location(
    actual_lat: float,
    actual_lng: float,
    guess_lat: float,
    guess_lng: float,
) -> float:
    """
    Raw location score from the haversine distance between truth and guess.

    Coordinates are expected in degrees within ``[-90, 90]`` / ``[-180, 180]``;
    out-of-range input is a caller error and is not checked here.
    """
    distance_km = haversine_distance_km(actual_lat, actual_lng, guess_lat, guess_lng)
    return _clamp(_interpolate(LOCATION_SCORE_CURVE, distance_km))


def combine_score(year_score_raw: float, location_score_raw: float) -> float:
    """Equal-weight average of the two raw component scores."""
    return _clamp((year_score_raw + location_score_raw) / 2)


def compute_time_bonus(
    time_remaining_seconds: float,
    is_timed_mode: bool,
    timer_type: TimerType = PER_ROUND_TIMER,
    multiplier: float = TIME_BONUS_MULTIPLIER,
    cap: int = TIME_BONUS_CAP,
) -> int:
    """
    Bonus points for time left on a per-round timer.

    Untimed games and the shared total-game timer never earn a bonus.
    """
    if not is_timed_mode or timer_type != PER_ROUND_TIMER:
        return 0
    bonus = round(max(0.0, float(time_remaining_seconds)) * multiplier)
    return int(max(0, min(cap, bonus)))


def _to_display(raw_score: float) -> int:
    return int(round(raw_score * DISPLAY_MULTIPLIER))


def calculate_complete_score(
    actual_year: int,
    actual_lat: float,
    actual_lng: float,
    guess_year: int,
    guess_lat: float,
    guess_lng: float,
    time_remaining_seconds: float = 0,
    is_timed_mode: bool = False,
    timer_type: TimerType = PER_ROUND_TIMER,
    *,
    time_bonus_multiplier: float = TIME_BONUS_MULTIPLIER,
    time_bonus_cap: int = TIME_BONUS_CAP,
) -> ScoreBreakdown:
    """Score one guess and return the complete, immutable breakdown."""
    year_score_raw = score_year(actual_year, guess_year)
    distance_km = haversine_distance_km(actual_lat, actual_lng, guess_lat, guess_lng)
    location_score_raw = _clamp(_interpolate(LOCATION_SCORE_CURVE, distance_km))
    total_score_raw = combine_score(year_score_raw, location_score_raw)
    time_bonus = compute_time_bonus(
        time_remaining_seconds,
        is_timed_mode,
        timer_type,
        multiplier=time_bonus_multiplier,
        cap=time_bonus_cap,
    )

    display_year_score = _to_display(year_score_raw)
    display_location_score = _to_display(location_score_raw)

    breakdown = ScoreBreakdown(
        year_score_raw=year_score_raw,
        location_score_raw=location_score_raw,
        total_score_raw=total_score_raw,
        display_year_score=display_year_score,
        display_location_score=display_location_score,
        time_bonus=time_bonus,
        display_total_score=display_year_score + display_location_score + time_bonus,
        distance_km=distance_km,
        year_delta=abs(int(actual_year) - int(guess_year)),
    )
    log.debug(
        "Score breakdown: %s + %s + %s = %s",
        breakdown.display_year_score,
        breakdown.display_location_score,
        breakdown.time_bonus,
        breakdown.display_total_score,
    )
    return breakdown


def _tier(normalized: float, tiers: Sequence[tuple[float, str]], floor: str) -> str:
    for threshold, label in tiers:
        if normalized >= threshold:
            return label
    return floor


def feedback_text(display_total_score: float) -> str:
    """Feedback label for a single round's display total."""
    normalized = display_total_score / MAX_TOTAL_DISPLAY_SCORE * 100
    return _tier(normalized, ROUND_FEEDBACK_TIERS, ROUND_FEEDBACK_FLOOR)


def calculate_final_score(rounds: Iterable[ScoreBreakdown | int]) -> int:
    """Game total from round breakdowns or plain per-round display totals."""
    return sum(
        round_score if isinstance(round_score, int) else round_score.display_total_score
        for round_score in rounds
    )


def final_score_feedback(total_score: float, rounds: int) -> str:
    """Feedback label for a finished game, based on the average round score."""
    if rounds <= 0:
        return FINAL_FEEDBACK_FLOOR
    normalized = total_score / rounds / MAX_TOTAL_DISPLAY_SCORE * 100
    return _tier(normalized, FINAL_FEEDBACK_TIERS, FINAL_FEEDBACK_FLOOR)


def format_year(year: int) -> str:
    if year < 0:
        return f"{abs(year)} BCE"
    return f"{year} CE"
