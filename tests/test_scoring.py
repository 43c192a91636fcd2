import dataclasses
import math

import pytest

from smrutimap.services.scoring import (
    FINAL_FEEDBACK_FLOOR,
    ROUND_FEEDBACK_FLOOR,
    ROUND_FEEDBACK_TIERS,
    ScoreBreakdown,
    calculate_complete_score,
    calculate_final_score,
    combine_score,
    compute_time_bonus,
    feedback_text,
    final_score_feedback,
    format_year,
    haversine_distance_km,
    score_location,
    score_year,
)

NEW_YORK = (40.7128, -74.0060)
PHILADELPHIA = (39.9526, -75.1652)
LONDON = (51.5074, -0.1278)


def test_haversine_known_distances():
    assert haversine_distance_km(0, 0, 0, 0) == 0
    assert haversine_distance_km(0, 0, 0, 90) == pytest.approx(math.pi / 2 * 6371, rel=1e-9)
    assert haversine_distance_km(0, 0, 0, 180) == pytest.approx(math.pi * 6371, rel=1e-9)
    assert haversine_distance_km(*NEW_YORK, *LONDON) == pytest.approx(5570, rel=0.01)


def test_haversine_is_symmetric():
    assert haversine_distance_km(*NEW_YORK, *LONDON) == pytest.approx(haversine_distance_km(*LONDON, *NEW_YORK))


@pytest.mark.parametrize("year", [-500, 0, 1850, 1990, 2025])
def test_exact_year_scores_100(year):
    assert score_year(year, year) == 100


@pytest.mark.parametrize(
    "delta, expected",
    [(3, 92), (10, 71), (25, 41), (50, 0), (51, 0), (400, 0)],
)
def test_year_curve_knots(delta, expected):
    assert score_year(1990, 1990 + delta) == pytest.approx(expected)


def test_year_score_is_monotonic_symmetric_and_bounded():
    previous = score_year(1900, 1900)
    for guess in range(1901, 2026):
        current = score_year(1900, guess)
        assert 0 <= current <= previous <= 100
        assert current == score_year(guess, 1900)
        previous = current


def test_same_point_scores_full_location():
    assert score_location(*NEW_YORK, *NEW_YORK) == 100
    assert score_location(-33.8568, 151.2153, -33.8568, 151.2153) == 100


def test_location_score_decays_with_distance():
    near = score_location(*NEW_YORK, *PHILADELPHIA)
    far = score_location(*NEW_YORK, *LONDON)
    assert 50 < near < 80
    assert far == 0


def test_location_score_is_monotonic_along_a_meridian():
    previous = 100.0
    for tenth in range(0, 400):
        current = score_location(0, 0, tenth / 10, 0)
        assert 0 <= current <= previous <= 100
        previous = current


def test_combine_score_is_the_average():
    assert combine_score(100, 0) == 50
    assert combine_score(92, 71) == pytest.approx(81.5)
    assert combine_score(100, 100) == 100


def test_time_bonus_rules():
    assert compute_time_bonus(30, False, "per-round") == 0
    assert compute_time_bonus(30, True, "total-game") == 0
    assert compute_time_bonus(30, True, "per-round") == 60
    assert compute_time_bonus(10.3, True, "per-round") == 21
    assert compute_time_bonus(-5, True, "per-round") == 0
    assert compute_time_bonus(10_000, True, "per-round") == 500
    assert compute_time_bonus(10, True, "per-round", multiplier=5, cap=20) == 20


def test_time_bonus_is_monotonic_and_integer():
    previous = 0
    for seconds in range(0, 400):
        bonus = compute_time_bonus(seconds / 2, True, "per-round")
        assert isinstance(bonus, int)
        assert bonus >= previous
        previous = bonus


def test_perfect_untimed_guess_scores_10000():
    breakdown = calculate_complete_score(1990, 40.0, -74.0, 1990, 40.0, -74.0, is_timed_mode=False)
    assert breakdown.display_total_score == 10000
    assert breakdown.time_bonus == 0
    assert breakdown.year_score_raw == breakdown.location_score_raw == breakdown.total_score_raw == 100


def test_fifty_year_miss_scores_no_year_points():
    breakdown = calculate_complete_score(1990, 40.0, -74.0, 2040, 40.0, -74.0)
    assert breakdown.year_score_raw == 0
    assert breakdown.display_year_score == 0
    assert breakdown.display_location_score == 5000
    assert breakdown.year_delta == 50


def test_time_bonus_is_added_after_display_scaling():
    breakdown = calculate_complete_score(1990, 40.0, -74.0, 1990, 40.0, -74.0, 30, True, "per-round")
    assert breakdown.time_bonus == 60
    assert breakdown.display_total_score == 10060


@pytest.mark.parametrize(
    "guess",
    [
        (1990, *NEW_YORK, 0, False, "per-round"),
        (1962, *PHILADELPHIA, 12.5, True, "per-round"),
        (1890, *LONDON, 44, True, "per-round"),
        (2001, 40.0, -73.0, 44, True, "total-game"),
    ],
)
def test_breakdown_totals_are_consistent(guess):
    year, lat, lng, remaining, timed, timer = guess
    breakdown = calculate_complete_score(1985, *NEW_YORK, year, lat, lng, remaining, timed, timer)
    assert breakdown.display_total_score == (
        breakdown.display_year_score + breakdown.display_location_score + breakdown.time_bonus
    )
    for raw in (breakdown.year_score_raw, breakdown.location_score_raw, breakdown.total_score_raw):
        assert 0 <= raw <= 100
    assert 0 <= breakdown.display_year_score <= 5000
    assert 0 <= breakdown.display_location_score <= 5000
    if not timed:
        assert breakdown.time_bonus == 0


def test_breakdown_is_immutable():
    breakdown = calculate_complete_score(1990, 40.0, -74.0, 1990, 40.0, -74.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        breakdown.time_bonus = 5  # type: ignore[misc]
    assert breakdown.as_dict()["display_total_score"] == 10000


@pytest.mark.parametrize(
    "score, expected",
    [
        (10000, "Amazing!"),
        (9000, "Amazing!"),
        (8999, "Great job!"),
        (6000, "Good work!"),
        (4500, "Not bad!"),
        (3000, "Keep practicing!"),
        (2999, "Try again!"),
        (0, "Try again!"),
        (-10, "Try again!"),
        (10500, "Amazing!"),
    ],
)
def test_round_feedback_tiers(score, expected):
    assert feedback_text(score) == expected


def test_round_feedback_covers_the_whole_range_without_gaps():
    labels = [label for _, label in ROUND_FEEDBACK_TIERS] + [ROUND_FEEDBACK_FLOOR]
    previous_rank = 0
    for score in range(10500, -1, -1):
        rank = labels.index(feedback_text(score))
        assert rank >= previous_rank
        assert rank - previous_rank <= 1
        previous_rank = rank
    assert previous_rank == len(labels) - 1


def test_final_score_and_feedback():
    rounds = [
        calculate_complete_score(1990, 40.0, -74.0, 1990, 40.0, -74.0),
        calculate_complete_score(1990, 40.0, -74.0, 2040, 40.0, -74.0),
    ]
    assert calculate_final_score(rounds) == 15000
    assert calculate_final_score([]) == 0
    assert final_score_feedback(40000, 5) == "Outstanding performance!"
    assert final_score_feedback(15000, 2) == "Excellent work!"
    assert final_score_feedback(5000, 5) == FINAL_FEEDBACK_FLOOR
    assert final_score_feedback(0, 0) == FINAL_FEEDBACK_FLOOR


def test_format_year():
    assert format_year(1990) == "1990 CE"
    assert format_year(-44) == "44 BCE"


def test_breakdown_type():
    assert isinstance(calculate_complete_score(1, 0, 0, 1, 0, 0), ScoreBreakdown)


def test_final_score_accepts_plain_round_totals():
    breakdown = calculate_complete_score(1990, 40.0, -74.0, 1990, 40.0, -74.0)
    assert calculate_final_score([10000, 4500]) == 14500
    assert calculate_final_score([breakdown, 500]) == 10500
