"""Request payload parsing shared by the JSON endpoints."""

from __future__ import annotations

from math import isfinite
from typing import Any, Callable, Mapping, TypeVar

from flask import request

T = TypeVar("T")

_MISSING = object()


class PayloadError(ValueError):
    """The request body is missing a field or holds an unusable value."""


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise PayloadError("Request body must be a JSON object")
    return data


def field(
    data: Mapping[str, Any],
    key: str,
    cast: Callable[[Any], T],
    default: Any = _MISSING,
) -> T:
    """Read ``data[key]`` converted with ``cast``; a missing key falls back to ``default``."""
    raw = data.get(key)
    if raw is None:
        if default is _MISSING:
            raise PayloadError(f"'{key}' is required")
        return default
    if isinstance(raw, bool) and cast in (int, float):
        raise PayloadError(f"'{key}' must be a number")
    try:
        value = cast(raw)
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"'{key}' has an invalid value: {raw!r}") from exc
    if isinstance(value, float) and not isfinite(value):
        raise PayloadError(f"'{key}' must be finite")
    return value


def latitude(data: Mapping[str, Any], key: str) -> float:
    value = field(data, key, float)
    if not -90.0 <= value <= 90.0:
        raise PayloadError(f"'{key}' must be within [-90, 90]")
    return value


def longitude(data: Mapping[str, Any], key: str) -> float:
    value = field(data, key, float)
    if not -180.0 <= value <= 180.0:
        raise PayloadError(f"'{key}' must be within [-180, 180]")
    return value


def as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"1", "true", "yes", "on"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"0", "false", "no", "off", ""}:
        return False
    if isinstance(value, (int, float)):
        return bool(value)
    raise ValueError(f"not a boolean: {value!r}")
