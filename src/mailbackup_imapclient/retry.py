"""Bounded retry of an operation, scoped to a closed set of error types."""

import logging
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LIMIT = 10


def retry_on_error(
    func: Callable[[], T],
    *,
    errors: tuple[type[BaseException], ...],
    limit: int = DEFAULT_LIMIT,
) -> T:
    """Call ``func``, retrying while it raises one of ``errors``.

    No backoff is applied between attempts. Errors not listed in ``errors``
    propagate on the first occurrence.

    Args:
        func: Zero-argument callable to run
        errors: Error types that trigger a retry
        limit: Maximum number of attempts in total (default: 10)

    Returns:
        Whatever ``func`` returns on the first successful attempt

    Raises:
        ValueError: If ``limit`` is less than 1
        The last error raised by ``func`` once ``limit`` attempts have failed
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    attempt = 1
    while True:
        try:
            return func()
        except errors as e:
            if attempt >= limit:
                raise
            logger.debug("%s, attempt %d of %d", e, attempt, limit)
            attempt += 1
