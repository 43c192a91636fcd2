"""API package: JSON endpoints under ``/api/``."""

from flask import Blueprint, jsonify

from smrutimap.api.validation import PayloadError

api_bp = Blueprint("api", __name__, url_prefix="/api")


@api_bp.errorhandler(PayloadError)
def _payload_error(exc: PayloadError):
    return jsonify({"error": str(exc)}), 400


# Import sub-modules so their routes are registered on api_bp.
from smrutimap.api import game as _game  # noqa: F401, E402
from smrutimap.api import images as _images  # noqa: F401, E402
from smrutimap.api import multiplayer as _multiplayer  # noqa: F401, E402
from smrutimap.api import profile as _profile  # noqa: F401, E402
