"""
Image URL helpers: turn the sharing links people paste into direct image URLs
and add resizing parameters for hosts that support them.

Usage::

    from smrutimap.services.image_urls import normalize_image_url, generate_srcset

    url = normalize_image_url("https://drive.google.com/file/d/abc123/view")
    srcset = generate_srcset(url)
"""

from __future__ import annotations

import logging
import re
from typing import Literal, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

log = logging.getLogger(__name__)

ImageFormat = Literal["webp", "jpeg", "png"]
ImageFit = Literal["cover", "contain", "fill", "inside", "outside"]

GOOGLE_DRIVE_THUMBNAIL_URL = "https://drive.google.com/thumbnail?id={file_id}&sz=s4000"
DEFAULT_QUALITY = 85
DEFAULT_SIZES: dict[str, int] = {"sm": 640, "md": 768, "lg": 1024, "xl": 1280}

_DRIVE_PATTERNS = (
    re.compile(r"drive\.google\.com/file/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"drive\.google\.com/open\?id=([a-zA-Z0-9_-]+)"),
    re.compile(r"drive\.google\.com/uc\?.*id=([a-zA-Z0-9_-]+)"),
)
_IMGBB_SHARING = re.compile(r"^https?://(?:www\.)?ibb\.co/", re.IGNORECASE)
_OG_IMAGE = re.compile(r'<meta property="og:image" content="([^"]+)"')
_IMGBB_DATA_SRC = re.compile(r'data-src="(https://i\.ibb\.co/[^"]+)"')

_RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


class ImageFetchError(Exception):
    """Transient failure while fetching an image sharing page."""


def extract_google_drive_file_id(url: str) -> str | None:
    for pattern in _DRIVE_PATTERNS:
        if match := pattern.search(url or ""):
            return match.group(1)
    return None


def convert_google_drive_url(url: str) -> str:
    """Rewrite a Google Drive sharing link to its thumbnail endpoint; other URLs pass through."""
    if not url:
        return url
    file_id = extract_google_drive_file_id(url)
    if file_id is None:
        return url
    converted = GOOGLE_DRIVE_THUMBNAIL_URL.format(file_id=file_id)
    log.debug("Converted Google Drive URL %s -> %s", url[:50], converted)
    return converted


def normalize_image_url(url: str | None) -> str:
    return convert_google_drive_url((url or "").strip())


def is_imgbb_sharing_url(url: str) -> bool:
    """True for ``ibb.co/<id>`` sharing pages, False for direct ``i.ibb.co`` images."""
    return bool(_IMGBB_SHARING.match(url or ""))


def extract_imgbb_direct_url(html: str) -> str | None:
    if match := _OG_IMAGE.search(html):
        return match.group(1)
    if match := _IMGBB_DATA_SRC.search(html):
        return match.group(1)
    return None


@retry(
    retry=retry_if_exception_type(ImageFetchError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    reraise=True,
)
def _fetch_page(url: str, session: requests.Session, timeout: float) -> str:
    try:
        response = session.get(url, timeout=timeout)
    except (requests.ConnectionError, requests.Timeout) as exc:
        raise ImageFetchError(f"Request to {url} failed: {exc}") from exc

    if response.status_code in _RETRYABLE_STATUSES:
        raise ImageFetchError(f"Transient HTTP {response.status_code} for {url}")
    response.raise_for_status()
    return response.text


def _resolve_with(url: str, session: requests.Session, timeout: float) -> str | None:
    try:
        html = _fetch_page(url, session, timeout)
    except (ImageFetchError, requests.RequestException) as exc:
        log.warning("Could not fetch ImgBB page %s: %s", url, exc)
        return None

    direct_url = extract_imgbb_direct_url(html)
    if direct_url is None:
        log.warning("No direct image URL found on ImgBB page %s", url)
    return direct_url


def resolve_imgbb_url(
    url: str,
    session: requests.Session | None = None,
    timeout: float = 10.0,
) -> str | None:
    """
    Fetch an ImgBB sharing page and return the direct image URL it points to.

    Returns ``None`` when the page cannot be fetched or holds no image link.
    Without a ``session`` a short-lived one is opened and closed here.
    """
    if not is_imgbb_sharing_url(url):
        return url
    if session is not None:
        return _resolve_with(url, session, timeout)
    with requests.Session() as owned:
        return _resolve_with(url, owned, timeout)


def _with_query(url: str, updates: Mapping[str, str]) -> str:
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query.update(updates)
    return urlunsplit(parts._replace(query=urlencode(query)))


def optimize_image_url(
    url: str,
    width: int | None = None,
    height: int | None = None,
    quality: int = DEFAULT_QUALITY,
    fmt: ImageFormat = "webp",
    fit: ImageFit = "cover",
) -> str:
    """Add resizing/compression parameters for Unsplash and ``images.*`` hosts."""
    host = urlsplit(url).netloc.lower()

    if "unsplash.com" in host:
        params: dict[str, str] = {}
        if width:
            params["w"] = str(width)
        if height:
            params["h"] = str(height)
        params.update({"q": str(quality), "fit": fit, "auto": "format", "fm": fmt})
        return _with_query(url, params)

    if host.startswith("images."):
        params = {}
        if width:
            params["width"] = str(width)
        if height:
            params["height"] = str(height)
        if quality:
            params["quality"] = str(quality)
        return _with_query(url, params)

    return url


def generate_srcset(
    url: str,
    sizes: Mapping[str, int] = DEFAULT_SIZES,
    quality: int = DEFAULT_QUALITY,
) -> str:
    return ", ".join(
        f"{optimize_image_url(url, width=width, quality=quality)} {width}w"
        for width in sizes.values()
    )


def generate_sizes(sizes: Mapping[str, int] = DEFAULT_SIZES) -> str:
    """``sizes`` attribute matching ``generate_srcset`` breakpoints."""
    widths = list(sizes.values())
    clauses = [f"(max-width: {width}px) {width}px" for width in widths[:-1]]
    clauses.append(f"{widths[-1]}px")
    return ", ".join(clauses)
