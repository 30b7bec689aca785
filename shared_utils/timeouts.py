"""
Bounded execution of blocking calls to external collaborators.

A call that exceeds its budget raises ``ExternalServiceError`` so callers
handle a timeout exactly like the collaborator's ordinary failure.  The
worker thread of a timed-out call is abandoned, not killed.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional, TypeVar

from shared_utils.error_handler import ExternalServiceError

T = TypeVar("T")


def call_with_timeout(
    service: str,
    func: Callable[..., T],
    *args: Any,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> T:
    """Run ``func(*args, **kwargs)`` with at most *timeout* seconds.

    ``timeout=None`` runs the call inline.
    """
    if timeout is None:
        return func(*args, **kwargs)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"call-{service}")
    try:
        future = executor.submit(func, *args, **kwargs)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            future.cancel()
            raise ExternalServiceError(
                service, f"timed out after {timeout:g}s", context={"timeout_seconds": timeout}
            ) from exc
    finally:
        executor.shutdown(wait=False)
