"""Multiplayer API: room scoring and lobby/leaderboard snapshots."""

from __future__ import annotations

from flask import current_app, jsonify

from smrutimap.api import api_bp
from smrutimap.api.validation import PayloadError, field, json_body, latitude, longitude
from smrutimap.services.multiplayer import (
    MAX_TIME_BONUS,
    Participant,
    RoundSubmission,
    are_all_players_ready,
    calculate_leaderboard,
    calculate_multiplayer_score,
    generate_room_code,
    submission_progress,
    validate_display_name,
)


def _participants(data: dict) -> list[Participant]:
    raw = data.get("participants")
    if not isinstance(raw, list):
        raise PayloadError("'participants' must be a list")
    try:
        return [Participant.from_dict(item) for item in raw]
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise PayloadError(f"Invalid participant: {exc}") from exc


def _submissions(data: dict) -> list[RoundSubmission]:
    raw = data.get("round_results") or []
    if not isinstance(raw, list):
        raise PayloadError("'round_results' must be a list")
    submissions = []
    for item in raw:
        if not isinstance(item, dict):
            raise PayloadError("Each round result must be an object")
        submissions.append(
            RoundSubmission(
                participant_id=str(field(item, "participant_id", str)),
                round_number=field(item, "round_number", int),
                total_score=field(item, "total_score", int),
            )
        )
    return submissions


@api_bp.get("/multiplayer/room-code")
def new_room_code():
    return jsonify({"code": generate_room_code()})


@api_bp.post("/multiplayer/display-name")
def check_display_name():
    data = json_body()
    error = validate_display_name(data.get("display_name"))
    return jsonify({"valid": error is None, "error": error})


@api_bp.post("/multiplayer/score")
def score_multiplayer_round():
    data = json_body()
    scoring_system = data.get("scoring_system") or current_app.config["MULTIPLAYER_SCORING"]
    if scoring_system not in MAX_TIME_BONUS:
        raise PayloadError("'scoring_system' must be 'standard' or 'competitive'")

    score = calculate_multiplayer_score(
        year_guess=field(data, "year_guess", int),
        guess_lat=latitude(data, "guess_lat"),
        guess_lng=longitude(data, "guess_lng"),
        actual_year=field(data, "actual_year", int),
        actual_lat=latitude(data, "actual_lat"),
        actual_lng=longitude(data, "actual_lng"),
        time_taken=field(data, "time_taken", float, 0.0),
        max_time=field(data, "max_time", float, float(current_app.config["PLAY_PER_ROUND_SECONDS"])),
        scoring_system=scoring_system,
    )
    return jsonify(score.as_dict())


@api_bp.post("/multiplayer/leaderboard")
def room_leaderboard():
    data = json_body()
    participants = _participants(data)
    submissions = _submissions(data)
    current_round = field(data, "current_round", int, 1)

    return jsonify(
        {
            "leaderboard": [entry.as_dict() for entry in calculate_leaderboard(participants, submissions)],
            "all_ready": are_all_players_ready(participants),
            "progress": submission_progress(participants, submissions, current_round).as_dict(),
        }
    )
