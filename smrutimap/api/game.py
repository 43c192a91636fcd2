"""Game API: round scoring, regular-game images and the daily challenge."""

from __future__ import annotations

import logging

from flask import current_app, jsonify, request

from smrutimap.api import api_bp
from smrutimap.api.responses import catalogue_error, load_catalogue, lookup_image
from smrutimap.api.validation import PayloadError, as_bool, field, json_body, latitude, longitude
from smrutimap.db.daily_challenges import get_or_create_daily_challenge
from smrutimap.db.image_pools import get_game_images_from_pool, get_pool_stats, reset_image_pool
from smrutimap.services.daily_challenge import date_key_for, validate_date_key
from smrutimap.services.scoring import (
    PER_ROUND_TIMER,
    TOTAL_GAME_TIMER,
    calculate_complete_score,
    calculate_final_score,
    feedback_text,
    final_score_feedback,
)

log = logging.getLogger(__name__)

MAX_GAME_IMAGES = 20
MAX_POOL_KEY_LENGTH = 64
GUEST_POOL_KEY = "guest"


def _pool_key(source) -> str:
    key = str(source.get("player") or GUEST_POOL_KEY).strip()
    if not key or len(key) > MAX_POOL_KEY_LENGTH:
        raise PayloadError(f"'player' must be 1 to {MAX_POOL_KEY_LENGTH} characters")
    return key


@api_bp.post("/score")
def score_guess():
    """Score one guess. Truth comes from the body or from the catalogue via ``image_id``."""
    data = json_body()
    cfg = current_app.config

    image_id = data.get("image_id")
    if image_id is not None:
        result = lookup_image(str(image_id))
        if not result.ok:
            return catalogue_error(result)
        if result.data is None:
            return jsonify({"error": f"Image {image_id} not found"}), 404
        actual_year, actual_lat, actual_lng = result.data.year, result.data.lat, result.data.lng
    else:
        actual_year = field(data, "actual_year", int)
        actual_lat = latitude(data, "actual_lat")
        actual_lng = longitude(data, "actual_lng")

    timer_type = data.get("timer_type") or PER_ROUND_TIMER
    if timer_type not in (PER_ROUND_TIMER, TOTAL_GAME_TIMER):
        raise PayloadError(f"'timer_type' must be '{PER_ROUND_TIMER}' or '{TOTAL_GAME_TIMER}'")

    breakdown = calculate_complete_score(
        actual_year=actual_year,
        actual_lat=actual_lat,
        actual_lng=actual_lng,
        guess_year=field(data, "guess_year", int),
        guess_lat=latitude(data, "guess_lat"),
        guess_lng=longitude(data, "guess_lng"),
        time_remaining_seconds=field(data, "time_remaining", float, 0.0),
        is_timed_mode=field(data, "is_timed_mode", as_bool, False),
        timer_type=timer_type,
        time_bonus_multiplier=cfg["TIME_BONUS_MULTIPLIER"],
        time_bonus_cap=cfg["TIME_BONUS_CAP"],
    )
    payload = breakdown.as_dict()
    payload["feedback"] = feedback_text(breakdown.display_total_score)
    return jsonify(payload)


@api_bp.post("/score/final")
def score_game():
    """Total a finished game from its per-round display totals."""
    data = json_body()
    rounds = data.get("rounds")
    if not isinstance(rounds, list):
        raise PayloadError("'rounds' must be a list")

    totals = []
    for index, round_result in enumerate(rounds):
        if not isinstance(round_result, dict):
            raise PayloadError(f"rounds[{index}] must be an object")
        totals.append(field(round_result, "display_total_score", int))

    total_score = calculate_final_score(totals)
    return jsonify(
        {
            "total_score": total_score,
            "rounds": len(totals),
            "feedback": final_score_feedback(total_score, len(totals)),
        }
    )


@api_bp.get("/game/images")
def game_images():
    """Images for a regular game, none of which ``?player=`` has played this cycle."""
    pool_key = _pool_key(request.args)
    count = field(request.args, "count", int, current_app.config["PLAY_ROUNDS"])
    if not 1 <= count <= MAX_GAME_IMAGES:
        raise PayloadError(f"'count' must be between 1 and {MAX_GAME_IMAGES}")

    result = load_catalogue()
    if not result.ok:
        return catalogue_error(result)

    pool = result.data or ()
    images, reset = get_game_images_from_pool(pool, pool_key, count)
    log.debug("Serving %d game image(s) to %s (pool reset: %s).", len(images), pool_key, reset)
    return jsonify(
        {
            "count": len(images),
            "images": [image.as_dict() for image in images],
            "pool_reset": reset,
            "pool": get_pool_stats(pool, pool_key).as_dict(),
        }
    )


@api_bp.get("/game/pool")
def game_pool_stats():
    pool_key = _pool_key(request.args)
    result = load_catalogue()
    if not result.ok:
        return catalogue_error(result)
    return jsonify(get_pool_stats(result.data or (), pool_key).as_dict())


@api_bp.post("/game/pool/reset")
def game_pool_reset():
    pool_key = _pool_key(json_body())
    return jsonify({"player": pool_key, "cleared": reset_image_pool(pool_key)})


@api_bp.get("/daily")
def daily_challenge():
    """
    Return the daily challenge for ``?date=YYYY-MM-DD`` (default: today).

    Only today and past dates are stored; a future date is a preview computed
    from the current catalogue.
    """
    cfg = current_app.config
    today = date_key_for(utc_offset_hours=cfg["DAILY_CHALLENGE_UTC_OFFSET_HOURS"])
    date_key = request.args.get("date") or today
    try:
        validate_date_key(date_key)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    result = load_catalogue()
    if not result.ok:
        return catalogue_error(result)

    # ISO date keys order lexically.
    is_future = date_key > today
    images = get_or_create_daily_challenge(
        result.data or (), date_key, cfg["DAILY_CHALLENGE_SIZE"], persist=not is_future
    )
    return jsonify(
        {
            "date": date_key,
            "count": len(images),
            "preview": is_future,
            "images": [image.as_dict() for image in images],
        }
    )
