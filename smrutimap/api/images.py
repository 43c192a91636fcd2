"""Images API: catalogue lookup and responsive URL helpers."""

from flask import current_app, jsonify, request

from smrutimap.api import api_bp
from smrutimap.api.responses import catalogue_error, lookup_image
from smrutimap.services.image_urls import (
    generate_sizes,
    generate_srcset,
    is_imgbb_sharing_url,
    normalize_image_url,
    optimize_image_url,
    resolve_imgbb_url,
)


@api_bp.get("/images/optimize")
def optimize_image():
    url = normalize_image_url(request.args.get("url", default="", type=str))
    if not url:
        return jsonify({"error": "'url' is required"}), 400

    if is_imgbb_sharing_url(url):
        direct_url = resolve_imgbb_url(url, timeout=current_app.config["IMAGE_FETCH_TIMEOUT"])
        if direct_url is None:
            return jsonify({"error": f"Could not resolve image link {url}"}), 502
        url = direct_url

    width = request.args.get("width", default=None, type=int)
    height = request.args.get("height", default=None, type=int)
    quality = request.args.get("quality", default=85, type=int)
    return jsonify(
        {
            "url": optimize_image_url(url, width=width, height=height, quality=quality),
            "srcset": generate_srcset(url, quality=quality),
            "sizes": generate_sizes(),
        }
    )


@api_bp.get("/images/<string:image_id>")
def get_image(image_id: str):
    result = lookup_image(image_id)
    if not result.ok:
        return catalogue_error(result)
    if result.data is None:
        return jsonify({"error": f"Image {image_id} not found"}), 404
    return jsonify(result.data.as_dict())
