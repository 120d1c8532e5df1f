from __future__ import annotations

import pytest

from web_search_mcp.retry import RetryPolicy, retry, retry_if


class _Recorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)


def test_retry_policy_delay_is_capped() -> None:
    policy = RetryPolicy(max_attempts=5, base_delay=1.0, backoff_multiplier=2, max_delay=3.0)

    assert [policy.delay_for(i) for i in range(4)] == [1.0, 2.0, 3.0, 3.0]


def test_retry_policy_rejects_zero_attempts() -> None:
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


@pytest.mark.anyio
async def test_retry_succeeds_on_third_attempt_with_backoff() -> None:
    calls = 0
    recorder = _Recorder()

    async def operation() -> str:
        nonlocal calls
        calls += 1
        if calls < 3:
            raise ConnectionError("transport down")
        return "ok"

    result = await retry(
        operation,
        RetryPolicy(max_attempts=3, base_delay=1.0, backoff_multiplier=2),
        sleep=recorder.sleep,
    )

    assert result == "ok"
    assert calls == 3
    assert recorder.delays == [1.0, 2.0]


@pytest.mark.anyio
async def test_retry_does_not_sleep_before_first_attempt() -> None:
    recorder = _Recorder()

    async def operation() -> int:
        return 42

    assert await retry(operation, sleep=recorder.sleep) == 42
    assert recorder.delays == []


@pytest.mark.anyio
async def test_retry_raises_last_error_after_exhaustion() -> None:
    calls = 0
    recorder = _Recorder()

    async def operation() -> None:
        nonlocal calls
        calls += 1
        raise RuntimeError(f"failure {calls}")

    with pytest.raises(RuntimeError) as exc:
        await retry(operation, RetryPolicy(max_attempts=3), sleep=recorder.sleep)

    assert str(exc.value) == "failure 3"
    assert calls == 3
    # no delay after the final attempt
    assert len(recorder.delays) == 2


@pytest.mark.anyio
async def test_retry_notifies_observer_with_attempt_and_error() -> None:
    seen: list[tuple[int, str]] = []
    recorder = _Recorder()

    async def operation() -> None:
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await retry(
            operation,
            RetryPolicy(max_attempts=3),
            on_retry=lambda attempt, error: seen.append((attempt, str(error))),
            sleep=recorder.sleep,
        )

    assert seen == [(1, "boom"), (2, "boom")]


@pytest.mark.anyio
async def test_retry_observer_failure_does_not_stop_retrying() -> None:
    calls = 0
    recorder = _Recorder()

    async def operation() -> str:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise ValueError("first")
        return "second"

    def observer(_attempt: int, _error: Exception) -> None:
        raise RuntimeError("observer broke")

    result = await retry(operation, on_retry=observer, sleep=recorder.sleep)

    assert result == "second"
    assert calls == 2


@pytest.mark.anyio
async def test_retry_if_aborts_when_predicate_rejects() -> None:
    calls = 0
    observed: list[int] = []
    recorder = _Recorder()

    async def operation() -> None:
        nonlocal calls
        calls += 1
        raise PermissionError("not retryable")

    with pytest.raises(PermissionError):
        await retry_if(
            operation,
            lambda error: not isinstance(error, PermissionError),
            RetryPolicy(max_attempts=3),
            on_retry=lambda attempt, _error: observed.append(attempt),
            sleep=recorder.sleep,
        )

    assert calls == 1
    assert observed == []
    assert recorder.delays == []


@pytest.mark.anyio
async def test_retry_if_retries_accepted_errors() -> None:
    calls = 0
    recorder = _Recorder()

    async def operation() -> str:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise TimeoutError("slow")
        if calls == 2:
            raise PermissionError("denied")
        return "unreachable"

    with pytest.raises(PermissionError):
        await retry_if(
            operation,
            lambda error: isinstance(error, TimeoutError),
            RetryPolicy(max_attempts=5, base_delay=0.5),
            sleep=recorder.sleep,
        )

    assert calls == 2
    assert recorder.delays == [0.5]


@pytest.mark.anyio
async def test_single_attempt_policy_raises_without_retrying() -> None:
    calls = 0
    observed: list[int] = []
    recorder = _Recorder()

    async def operation() -> None:
        nonlocal calls
        calls += 1
        raise ConnectionError("down")

    with pytest.raises(ConnectionError, match="down"):
        await retry(
            operation,
            RetryPolicy(max_attempts=1),
            on_retry=lambda attempt, _error: observed.append(attempt),
            sleep=recorder.sleep,
        )

    assert calls == 1
    assert observed == []
    assert recorder.delays == []
