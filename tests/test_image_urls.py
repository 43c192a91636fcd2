from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from smrutimap.services import image_urls
from smrutimap.services.image_urls import (
    convert_google_drive_url,
    extract_google_drive_file_id,
    extract_imgbb_direct_url,
    generate_sizes,
    generate_srcset,
    is_imgbb_sharing_url,
    normalize_image_url,
    optimize_image_url,
    resolve_imgbb_url,
)


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda _seconds: None)


@pytest.mark.parametrize(
    "url",
    [
        "https://drive.google.com/file/d/1AbC-d_E/view?usp=sharing",
        "https://drive.google.com/open?id=1AbC-d_E",
        "https://drive.google.com/uc?export=view&id=1AbC-d_E",
    ],
)
def test_google_drive_links_become_thumbnails(url):
    assert extract_google_drive_file_id(url) == "1AbC-d_E"
    assert convert_google_drive_url(url) == "https://drive.google.com/thumbnail?id=1AbC-d_E&sz=s4000"


def test_other_urls_pass_through():
    assert convert_google_drive_url("https://example.com/a.jpg") == "https://example.com/a.jpg"
    assert convert_google_drive_url("") == ""
    assert normalize_image_url(None) == ""
    assert normalize_image_url("  https://example.com/a.jpg \n") == "https://example.com/a.jpg"


def test_imgbb_sharing_detection():
    assert is_imgbb_sharing_url("https://ibb.co/abc123")
    assert is_imgbb_sharing_url("http://www.ibb.co/abc123")
    assert not is_imgbb_sharing_url("https://i.ibb.co/abc123/photo.jpg")
    assert not is_imgbb_sharing_url("https://example.com/ibb.co/abc")


def test_extract_imgbb_direct_url():
    og = '<html><meta property="og:image" content="https://i.ibb.co/xyz/p.jpg"></html>'
    data_src = '<img data-src="https://i.ibb.co/qqq/p.png" alt="">'
    assert extract_imgbb_direct_url(og) == "https://i.ibb.co/xyz/p.jpg"
    assert extract_imgbb_direct_url(data_src) == "https://i.ibb.co/qqq/p.png"
    assert extract_imgbb_direct_url("<html></html>") is None


def _response(status, text=""):
    response = MagicMock()
    response.status_code = status
    response.text = text
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status}")
    return response


def test_resolve_imgbb_url_reads_og_image():
    session = MagicMock()
    session.get.return_value = _response(200, '<meta property="og:image" content="https://i.ibb.co/a/b.jpg">')
    assert resolve_imgbb_url("https://ibb.co/abc", session=session) == "https://i.ibb.co/a/b.jpg"
    session.get.assert_called_once_with("https://ibb.co/abc", timeout=10.0)


def test_resolve_imgbb_url_retries_transient_errors():
    session = MagicMock()
    session.get.side_effect = [
        _response(503),
        requests.ConnectionError("reset"),
        _response(200, '<img data-src="https://i.ibb.co/c/d.jpg">'),
    ]
    assert resolve_imgbb_url("https://ibb.co/abc", session=session) == "https://i.ibb.co/c/d.jpg"
    assert session.get.call_count == 3


def test_resolve_imgbb_url_gives_up():
    session = MagicMock()
    session.get.return_value = _response(500)
    assert resolve_imgbb_url("https://ibb.co/abc", session=session) is None
    assert session.get.call_count == 3


def test_resolve_imgbb_url_does_not_retry_client_errors():
    session = MagicMock()
    session.get.return_value = _response(404)
    assert resolve_imgbb_url("https://ibb.co/abc", session=session) is None
    assert session.get.call_count == 1


def test_resolve_leaves_direct_urls_alone():
    session = MagicMock()
    assert resolve_imgbb_url("https://i.ibb.co/a/b.jpg", session=session) == "https://i.ibb.co/a/b.jpg"
    session.get.assert_not_called()


def test_optimize_unsplash_url():
    url = optimize_image_url("https://images.unsplash.com/photo-1?ixid=abc", width=800, height=600)
    query = parse_qs(urlsplit(url).query)
    assert query["ixid"] == ["abc"]
    assert query["w"] == ["800"]
    assert query["h"] == ["600"]
    assert query["q"] == ["85"]
    assert query["fit"] == ["cover"]
    assert query["auto"] == ["format"]
    assert query["fm"] == ["webp"]


def test_optimize_generic_images_host():
    url = optimize_image_url("https://images.example.org/p.jpg", width=640, quality=70)
    query = parse_qs(urlsplit(url).query)
    assert query == {"width": ["640"], "quality": ["70"]}


def test_optimize_leaves_unknown_hosts():
    assert optimize_image_url("https://example.com/p.jpg", width=640) == "https://example.com/p.jpg"


def test_srcset_and_sizes():
    srcset = generate_srcset("https://images.example.org/p.jpg")
    entries = srcset.split(", ")
    assert [entry.rsplit(" ", 1)[1] for entry in entries] == ["640w", "768w", "1024w", "1280w"]
    assert "width=640" in entries[0]
    assert generate_sizes() == (
        "(max-width: 640px) 640px, (max-width: 768px) 768px, (max-width: 1024px) 1024px, 1280px"
    )


def test_module_exposes_default_sizes():
    assert list(image_urls.DEFAULT_SIZES) == ["sm", "md", "lg", "xl"]


def test_resolve_imgbb_url_closes_the_session_it_opens(monkeypatch):
    session = MagicMock()
    session.__enter__.return_value = session
    session.get.return_value = _response(200, '<meta property="og:image" content="https://i.ibb.co/a/b.jpg">')
    monkeypatch.setattr(image_urls.requests, "Session", lambda: session)

    assert resolve_imgbb_url("https://ibb.co/abc", timeout=3.0) == "https://i.ibb.co/a/b.jpg"
    session.get.assert_called_once_with("https://ibb.co/abc", timeout=3.0)
    session.__exit__.assert_called_once()
