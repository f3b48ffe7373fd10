from __future__ import annotations

import httpx
import pytest

from wallet_core.errors import NodeResponseError, NodeUnavailableError
from wallet_core.node.retry import NO_RETRY, RetryPolicy, call_with_retry


class _Flaky:
    def __init__(self, failures: int, exc: BaseException | None = None) -> None:
        self.failures = failures
        self.exc = exc or httpx.ConnectError("connection refused")
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "ok"


def _policy(sleeps: list[float], **kwargs) -> RetryPolicy:
    return RetryPolicy(sleep=sleeps.append, **kwargs)


def test_transport_error_is_retried_until_success() -> None:
    sleeps: list[float] = []
    operation = _Flaky(failures=2)

    assert call_with_retry(operation, _policy(sleeps)) == "ok"
    assert operation.calls == 3
    assert sleeps == [0.5, 0.5]


def test_exhausted_retries_raise_node_unavailable() -> None:
    sleeps: list[float] = []
    operation = _Flaky(failures=10, exc=httpx.ReadTimeout("timed out"))

    with pytest.raises(NodeUnavailableError) as excinfo:
        call_with_retry(operation, _policy(sleeps, delay_s=0.1), endpoint="transfer_bulk")

    assert operation.calls == 3
    assert sleeps == [0.1, 0.1]
    assert excinfo.value.attempts == 3
    assert excinfo.value.endpoint == "transfer_bulk"
    assert isinstance(excinfo.value.__cause__, httpx.ReadTimeout)


def test_error_response_is_not_retried() -> None:
    sleeps: list[float] = []
    operation = _Flaky(
        failures=1,
        exc=NodeResponseError("node returned HTTP 500", node_status=500, endpoint="x"),
    )

    with pytest.raises(NodeResponseError):
        call_with_retry(operation, _policy(sleeps))

    assert operation.calls == 1
    assert sleeps == []


def test_no_retry_policy_makes_a_single_attempt() -> None:
    operation = _Flaky(failures=1)

    with pytest.raises(NodeUnavailableError):
        call_with_retry(operation, NO_RETRY)

    assert operation.calls == 1


@pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"delay_s": -1.0}])
def test_policy_validates_arguments(kwargs) -> None:
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)
