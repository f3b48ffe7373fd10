"""Retry policy composed around every read issued to the node."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

import httpx

from ..errors import NodeUnavailableError
from ..metrics.node import record_node_retry

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_MAX_ATTEMPTS = 3
_RETRY_DELAY_S = 0.5


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Fixed-delay retry for transport failures.

    Only exceptions listed in ``retry_on`` trigger another attempt. A response
    that was received (whatever its status) is surfaced immediately.
    """

    max_attempts: int = _MAX_ATTEMPTS
    delay_s: float = _RETRY_DELAY_S
    retry_on: tuple[type[BaseException], ...] = (httpx.TransportError,)
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_s < 0:
            raise ValueError("delay_s must be >= 0")


NO_RETRY = RetryPolicy(max_attempts=1, delay_s=0.0)


def call_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    *,
    endpoint: str = "node",
) -> T:
    """Run ``operation`` under ``policy``.

    Raises :class:`NodeUnavailableError` chained to the last transport error
    once every attempt has failed.
    """

    last_error: BaseException | None = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return operation()
        except policy.retry_on as exc:
            last_error = exc
            if attempt >= policy.max_attempts:
                break
            LOGGER.warning(
                "node.retry",
                extra={"endpoint": endpoint, "attempt": attempt, "error": str(exc)},
            )
            record_node_retry(endpoint)
            policy.sleep(policy.delay_s)
    LOGGER.error(
        "node.unavailable",
        extra={"endpoint": endpoint, "attempts": policy.max_attempts, "error": str(last_error)},
    )
    raise NodeUnavailableError(
        f"node unreachable after {policy.max_attempts} attempts",
        endpoint=endpoint,
        attempts=policy.max_attempts,
    ) from last_error


__all__ = ["RetryPolicy", "NO_RETRY", "call_with_retry"]
