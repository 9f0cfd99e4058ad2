"""Retry / timeout decorator for flaky async collaborator calls (LLM extractors)."""

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from services.errors import ExtractionError, ExtractorTimeoutError, InputValidationError, LLMParseError

logger = logging.getLogger(__name__)

# Deterministic failures: retrying cannot help
NO_RETRY_ERRORS: tuple[type[BaseException], ...] = (
    LLMParseError,
    InputValidationError,
    ValidationError,
)


def backoff_delay(attempt: int, base_delay: float, exponential: bool) -> float:
    """Delay before retry number attempt + 1 (attempt is 0-based)."""
    return base_delay * (2 ** attempt) if exponential else base_delay


def with_retry(
    operation_name: str | None = None,
    retries: int = 3,
    timeout: float | None = 30.0,
    base_delay: float = 1.0,
    exponential: bool = True,
    no_retry: tuple[type[BaseException], ...] = NO_RETRY_ERRORS,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
):
    """Wrap an async callable with per-attempt timeout and retries.

    The call is attempted once plus up to ``retries`` more times. Errors in
    ``no_retry`` propagate immediately. When all attempts fail, a timeout on
    the last attempt raises ExtractorTimeoutError, anything else raises
    ExtractionError chained to the last error.
    """

    def decorator(func: Callable[..., Awaitable[Any]]):
        name = operation_name or getattr(func, "__name__", type(func).__name__)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            last_err: Exception | None = None
            for attempt in range(retries + 1):
                try:
                    if timeout is None:
                        return await func(*args, **kwargs)
                    return await asyncio.wait_for(func(*args, **kwargs), timeout)
                except no_retry:
                    raise
                except asyncio.TimeoutError:
                    last_err = ExtractorTimeoutError(name, timeout or 0.0)
                except Exception as e:
                    last_err = e

                if attempt < retries:
                    delay = backoff_delay(attempt, base_delay, exponential)
                    logger.warning(
                        "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                        name, attempt + 1, retries + 1, last_err, delay,
                    )
                    await sleep(delay)

            logger.error("%s failed after %d attempts: %s", name, retries + 1, last_err)
            if isinstance(last_err, ExtractorTimeoutError):
                raise last_err
            raise ExtractionError(name, last_err) from last_err

        return wrapper

    return decorator
