import asyncio
import functools

import pytest

from services.errors import ExtractionError, ExtractorTimeoutError, LLMParseError
from services.resilience import backoff_delay, with_retry


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class Flaky:
    """Fails the first ``failures`` calls, then returns "ok"."""

    def __init__(self, failures: int, error: Exception | None = None):
        self.failures = failures
        self.error = error or RuntimeError("boom")
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class TestBackoffDelay:
    def test_exponential(self):
        assert [backoff_delay(i, 1.0, True) for i in range(3)] == [1.0, 2.0, 4.0]

    def test_constant(self):
        assert [backoff_delay(i, 0.5, False) for i in range(3)] == [0.5, 0.5, 0.5]


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        sleep = RecordingSleep()
        flaky = Flaky(failures=2)
        wrapped = with_retry(retries=3, base_delay=1.0, sleep=sleep)(flaky)

        assert await wrapped() == "ok"
        assert flaky.calls == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_raises_extraction_error(self):
        sleep = RecordingSleep()
        flaky = Flaky(failures=10)
        wrapped = with_retry(operation_name="skills", retries=2, sleep=sleep)(flaky)

        with pytest.raises(ExtractionError) as exc_info:
            await wrapped()

        assert flaky.calls == 3
        assert len(sleep.delays) == 2
        assert exc_info.value.operation == "skills"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "model" in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_no_retry_errors_propagate_immediately(self):
        sleep = RecordingSleep()
        flaky = Flaky(failures=5, error=LLMParseError("bad json"))
        wrapped = with_retry(retries=3, sleep=sleep)(flaky)

        with pytest.raises(LLMParseError):
            await wrapped()
        assert flaky.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_timeout(self):
        sleep = RecordingSleep()
        calls = 0

        async def slow():
            nonlocal calls
            calls += 1
            await asyncio.sleep(1)

        wrapped = with_retry(operation_name="level", retries=1, timeout=0.01, sleep=sleep)(slow)

        with pytest.raises(ExtractorTimeoutError) as exc_info:
            await wrapped()
        assert calls == 2
        assert "timeout" in str(exc_info.value)
        assert exc_info.value.operation == "level"

    @pytest.mark.asyncio
    async def test_zero_retries_single_attempt(self):
        flaky = Flaky(failures=1)
        wrapped = with_retry(retries=0, sleep=RecordingSleep())(flaky)
        with pytest.raises(ExtractionError):
            await wrapped()
        assert flaky.calls == 1

    @pytest.mark.asyncio
    async def test_preserves_function_metadata(self):
        async def fetch_domains():
            return []

        wrapped = with_retry(sleep=RecordingSleep())(fetch_domains)
        assert wrapped.__name__ == "fetch_domains"

    @pytest.mark.asyncio
    async def test_callable_without_name_uses_type_name(self):
        flaky = Flaky(failures=5)
        wrapped = with_retry(retries=1, sleep=RecordingSleep())(flaky)

        with pytest.raises(ExtractionError) as exc_info:
            await wrapped()
        assert exc_info.value.operation == "Flaky"

    @pytest.mark.asyncio
    async def test_wraps_partial(self):
        async def echo(value):
            return value

        wrapped = with_retry(sleep=RecordingSleep())(functools.partial(echo, "done"))
        assert await wrapped() == "done"
