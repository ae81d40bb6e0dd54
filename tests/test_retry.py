from __future__ import annotations

import pytest

from rimsync.utils.retry import retry


class Flaky:
    def __init__(self, failures: int, error: type[Exception] = RuntimeError):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(f"failure {self.calls}")
        return "done"


async def test_returns_first_success() -> None:
    op = Flaky(failures=2)

    assert await retry(3, op) == "done"
    assert op.calls == 3


async def test_raises_last_error_when_attempts_run_out() -> None:
    op = Flaky(failures=5)

    with pytest.raises(RuntimeError, match="failure 3"):
        await retry(3, op)
    assert op.calls == 3


async def test_single_attempt_never_retries() -> None:
    op = Flaky(failures=1)

    with pytest.raises(RuntimeError):
        await retry(1, op)
    assert op.calls == 1


async def test_unlisted_errors_propagate_immediately() -> None:
    op = Flaky(failures=1, error=KeyError)

    with pytest.raises(KeyError):
        await retry(3, op, retry_on=(RuntimeError,))
    assert op.calls == 1


async def test_on_retry_sees_each_retried_failure() -> None:
    seen = []
    op = Flaky(failures=2)

    await retry(3, op, on_retry=lambda attempt, error: seen.append((attempt, str(error))))

    assert seen == [(1, "failure 1"), (2, "failure 2")]


async def test_rejects_non_positive_attempts() -> None:
    with pytest.raises(ValueError):
        await retry(0, Flaky(failures=0))
