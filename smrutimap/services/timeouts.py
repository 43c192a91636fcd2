"""Timeout protection for blocking calls (database reads, remote fetches)."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 5.0

# Shared pool; a timed-out call keeps its worker until the callee returns.
_EXECUTOR = ThreadPoolExecutor(max_workers=8, thread_name_prefix="timeout-call")


class OperationTimeoutError(TimeoutError):
    """Raised when a wrapped call does not finish in time."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(f"{operation} timed out after {timeout_seconds:g}s")
        self.operation = operation
        self.timeout_seconds = timeout_seconds


@dataclass(frozen=True)
class SafeCallResult(Generic[T]):
    data: T | None
    error: BaseException | None
    timed_out: bool

    @property
    def ok(self) -> bool:
        return self.error is None


def call_with_timeout(
    fn: Callable[..., T],
    *args: Any,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    operation: str = "Operation",
    **kwargs: Any,
) -> T:
    """
    Run ``fn(*args, **kwargs)`` and wait at most ``timeout_seconds`` for it.

    The callee's own exceptions propagate unchanged.
    """
    log.debug("Starting %s with %.2fs timeout", operation, timeout_seconds)
    future = _EXECUTOR.submit(fn, *args, **kwargs)
    try:
        result = future.result(timeout=timeout_seconds)
    except FutureTimeoutError:
        future.cancel()
        log.error("%s timed out after %.2fs", operation, timeout_seconds)
        raise OperationTimeoutError(operation, timeout_seconds) from None
    log.debug("%s completed", operation)
    return result


def safe_call(
    fn: Callable[..., T],
    *args: Any,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    operation: str = "Operation",
    **kwargs: Any,
) -> SafeCallResult[T]:
    """Like ``call_with_timeout`` but reports failures instead of raising them."""
    try:
        data = call_with_timeout(
            fn, *args, timeout_seconds=timeout_seconds, operation=operation, **kwargs
        )
    except OperationTimeoutError as exc:
        return SafeCallResult(data=None, error=exc, timed_out=True)
    except Exception as exc:
        log.warning("%s failed: %s", operation, exc)
        return SafeCallResult(data=None, error=exc, timed_out=False)
    return SafeCallResult(data=data, error=None, timed_out=False)
