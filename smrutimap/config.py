import os
from pathlib import Path
from typing import Callable, TypeVar

from dotenv import load_dotenv

DEVELOPMENT_ENV = ".env"
PRODUCTION_ENV = ".env.production"

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}

N = TypeVar("N", int, float)


def _env_raw(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _env_path(name: str, default: Path) -> Path:
    """Path from the environment; unset or blank means ``default``."""
    raw = _env_raw(name)
    return Path(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    raw = _env_raw(name).lower()
    if raw in _TRUE_WORDS:
        return True
    if raw in _FALSE_WORDS:
        return False
    return default


def _env_number(name: str, default: N, cast: Callable[[str], N]) -> N:
    """Number from the environment. Values ``cast`` cannot parse fall back to ``default``."""
    raw = _env_raw(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    return _env_number(name, default, int)


def _env_float(name: str, default: float) -> float:
    return _env_number(name, default, float)


def _env_choice(name: str, default: str, allowed: set[str]) -> str:
    """Lower-cased value if it is one of ``allowed``, else ``default``."""
    raw = _env_raw(name).lower()
    return raw if raw in allowed else default


class Config:
    BASE_DIR = Path(__file__).resolve().parents[1]

    ENV_NAME = _env_choice("APP_ENV", "development", {"development", "production"})
    load_dotenv(BASE_DIR / (PRODUCTION_ENV if ENV_NAME == "production" else DEVELOPMENT_ENV))

    # ================ Application Settings ================
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")
    PORT = _env_int("PORT", 5000)
    DEBUG = _env_bool("FLASK_DEBUG", False)
    TESTING = False

    # ================ Logging Settings ================
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
    LOG_DIR = _env_path("LOG_DIR", BASE_DIR / "logs")
    LOG_FILE = _env_path("LOG_FILE", LOG_DIR / "app.log")
    LOG_MAX_BYTES = _env_int("LOG_MAX_BYTES", 10 * 1024 * 1024)
    LOG_BACKUP_COUNT = _env_int("LOG_BACKUP_COUNT", 5)
    WERKZEUG_LOG_LEVEL = "INFO"

    # ================ Directory and File Paths ================
    DATA_DIR = _env_path("DATA_DIR", BASE_DIR / "data")
    IMAGES_DB_PATH = _env_path("IMAGES_DB_PATH", DATA_DIR / "game_images.duckdb")
    LOCAL_DB_PATH = _env_path("LOCAL_DB_PATH", BASE_DIR / "instance" / "smrutimap.db")

    # ================ Play Settings ================
    PLAY_ROUNDS = _env_int("PLAY_ROUNDS", 5)
    PLAY_PER_ROUND_SECONDS = _env_int("PLAY_PER_ROUND_SECONDS", 60)
    TIME_BONUS_MULTIPLIER = _env_float("TIME_BONUS_MULTIPLIER", 2.0)
    TIME_BONUS_CAP = _env_int("TIME_BONUS_CAP", 500)

    # ================ Daily Challenge Settings ================
    DAILY_CHALLENGE_SIZE = _env_int("DAILY_CHALLENGE_SIZE", 5)
    DAILY_CHALLENGE_UTC_OFFSET_HOURS = _env_float("DAILY_CHALLENGE_UTC_OFFSET_HOURS", 0.0)

    # ================ Timeouts (seconds) ================
    CATALOGUE_QUERY_TIMEOUT = _env_float("CATALOGUE_QUERY_TIMEOUT", 3.0)
    IMAGE_FETCH_TIMEOUT = _env_float("IMAGE_FETCH_TIMEOUT", 10.0)

    # ================ Multiplayer Settings ================
    MULTIPLAYER_SCORING = _env_choice("MULTIPLAYER_SCORING", "standard", {"standard", "competitive"})


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class TestConfig(Config):
    DEBUG = True
    TESTING = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = "INFO"

    WERKZEUG_LOG_LEVEL = "WARNING"  # Reduce noisy request logs
