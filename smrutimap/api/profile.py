"""Profile API: statistics recomputed from a player's game sessions."""

from flask import jsonify

from smrutimap.api import api_bp
from smrutimap.api.validation import PayloadError, json_body
from smrutimap.services.profile_stats import summarize_sessions


@api_bp.post("/profile/stats")
def profile_stats():
    sessions = json_body().get("sessions")
    if not isinstance(sessions, list) or not all(isinstance(s, dict) for s in sessions):
        raise PayloadError("'sessions' must be a list of objects")
    try:
        stats = summarize_sessions(sessions)
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"Invalid session: {exc}") from exc
    return jsonify(stats.as_dict())
