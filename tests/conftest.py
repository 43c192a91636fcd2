import pytest
import duckdb

from smrutimap import create_app
from smrutimap.config import TestConfig
from smrutimap.db import close_persistent
from smrutimap.services.catalogue import clear_image_pool_cache


CATALOGUE_ROWS = [
    ("img-01", "https://example.com/taj.jpg", 1965, 27.1751, 78.0421, "Agra, India", "Taj Mahal at dawn"),
    ("img-02", "https://drive.google.com/file/d/driveAbc_123/view", 1990, 40.7128, -74.0060, "New York, USA", "Times Square"),
    ("img-03", "https://example.com/paris.jpg", 1925, 48.8584, 2.2945, "Paris, France", "Eiffel Tower"),
    ("img-04", "https://example.com/tokyo.jpg", 2004, 35.6762, 139.6503, "Tokyo, Japan", "Shibuya crossing"),
    ("img-05", "https://example.com/cairo.jpg", 1952, 30.0444, 31.2357, "Cairo, Egypt", "Nile bank"),
    ("img-06", "https://example.com/rio.jpg", 1978, -22.9068, -43.1729, "Rio de Janeiro, Brazil", "Carnival"),
    ("img-07", "https://example.com/sydney.jpg", 1973, -33.8568, 151.2153, "Sydney, Australia", "Opera House opening"),
    ("img-08", "https://example.com/mumbai.jpg", 1947, 19.0760, 72.8777, "Mumbai, India", "Independence day"),
    ("img-09", "https://example.com/london.jpg", 1953, 51.5007, -0.1246, "London, UK", "Coronation"),
    ("img-10", "https://example.com/berlin.jpg", 1989, 52.5163, 13.3777, "Berlin, Germany", "The wall comes down"),
]


def build_catalogue(path, rows):
    conn = duckdb.connect(str(path))
    try:
        conn.execute(
            """
            CREATE TABLE images (
                id VARCHAR PRIMARY KEY,
                image_url VARCHAR,
                year INTEGER,
                location_lat DOUBLE,
                location_lng DOUBLE,
                location_name VARCHAR,
                description VARCHAR
            );
            """
        )
        if rows:
            conn.executemany("INSERT INTO images VALUES (?, ?, ?, ?, ?, ?, ?)", [list(row) for row in rows])
    finally:
        conn.close()


@pytest.fixture()
def app_factory(tmp_path):
    """Build an app whose catalogue holds ``rows`` (default: the 10-image catalogue)."""

    def _make(rows=CATALOGUE_ROWS, name="images", create_catalogue=True, **overrides):
        images_db = tmp_path / f"{name}.duckdb"
        if create_catalogue:
            build_catalogue(images_db, rows)

        attrs = {
            "IMAGES_DB_PATH": images_db,
            "LOCAL_DB_PATH": tmp_path / f"{name}_local.db",
            "LOG_FILE": tmp_path / "logs" / "test.log",
            **overrides,
        }
        config_class = type("_TestConfig", (TestConfig,), attrs)
        return create_app(config_class)

    yield _make
    close_persistent()
    clear_image_pool_cache()


@pytest.fixture()
def flask_app(app_factory):
    return app_factory()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()
