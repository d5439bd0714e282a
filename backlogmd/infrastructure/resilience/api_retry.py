"""Service for executing API calls with automatic retries.

Retries calls rejected by Backlog's rate limiter ("Too Many Requests")
after a fixed delay. Any other error propagates on the first failure.
The delay does not grow between attempts.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Coroutine, Optional, TypeVar

from backlogmd.domain.events.api_events import ApiCallFailed, DomainEvent, RetryScheduled

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_SIGNATURE = "Too Many Requests"
DEFAULT_MAX_RETRIES = 3
DEFAULT_DELAY_SECONDS = 15.0


def is_rate_limit_error(error: BaseException) -> bool:
    """True if the error message carries the rate-limit signature."""
    return RATE_LIMIT_SIGNATURE in str(error)


@dataclass(frozen=True)
class RetryPolicy:
    """Value Object describing when and how long to wait before retrying.

    Attributes:
        max_retries: Retries after the first attempt (total attempts = max_retries + 1).
        delay_seconds: Constant wait before each retry.
        is_retryable: Predicate deciding whether an error may be retried.
    """
    max_retries: int = DEFAULT_MAX_RETRIES
    delay_seconds: float = DEFAULT_DELAY_SECONDS
    is_retryable: Callable[[BaseException], bool] = field(default=is_rate_limit_error)

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {self.delay_seconds}")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


# --- Retry Service ---

class ApiRetryService:
    """Executes API calls under a RetryPolicy."""

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        event_listener: Optional[Callable[[DomainEvent], None]] = None,
    ):
        """Initializes the ApiRetryService.

        Args:
            policy: Retry policy to apply. Defaults to 3 retries, 15s apart.
            sleep: Coroutine function used to wait between attempts.
            event_listener: Optional callable receiving retry/failure events.
        """
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._event_listener = event_listener
        logger.debug(
            f"ApiRetryService initialized: max_retries={self.policy.max_retries}, "
            f"delay={self.policy.delay_seconds}s"
        )

    def _dispatch_event(self, event: DomainEvent) -> None:
        if self._event_listener is not None:
            self._event_listener(event)
        else:
            logger.debug(f"EVENT: {event}")

    async def execute_with_retry(
        self,
        func: Callable[..., Coroutine[Any, Any, T]],
        *args: Any,
        operation_name: Optional[str] = None,
        **kwargs: Any
    ) -> T:
        """Executes an async function, retrying rate-limited failures.

        Args:
            func: The async function (API call) to execute.
            *args: Positional arguments for the function.
            operation_name: Label used in logs and events (defaults to the function name).
            **kwargs: Keyword arguments for the function.

        Returns:
            The result of the first successful call.

        Raises:
            Exception: The first non-retryable error, or the last rate-limit
                error once retries are exhausted.
        """
        operation = operation_name or getattr(func, "__name__", repr(func))
        max_attempts = self.policy.max_attempts
        last_exception: Optional[BaseException] = None

        for attempt in range(max_attempts):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                if not self.policy.is_retryable(e):
                    logger.error(f"{operation} failed on attempt {attempt + 1}: {e}")
                    self._dispatch_event(ApiCallFailed(
                        operation=operation, attempts=attempt + 1,
                        error_type=type(e).__name__, error_message=str(e),
                    ))
                    raise

                last_exception = e
                if attempt + 1 >= max_attempts:
                    break

                delay = self.policy.delay_seconds
                logger.warning(
                    f"{operation} rate limited, waiting {delay}s before retry "
                    f"{attempt + 1}/{max_attempts}"
                )
                self._dispatch_event(RetryScheduled(
                    operation=operation, attempt_number=attempt + 1,
                    max_attempts=max_attempts, delay_seconds=delay,
                ))
                await self._sleep(delay)

        logger.error(
            f"Max retries ({self.policy.max_retries}) reached for {operation}. "
            f"Last error: {last_exception}"
        )
        self._dispatch_event(ApiCallFailed(
            operation=operation, attempts=max_attempts,
            error_type=type(last_exception).__name__, error_message=str(last_exception),
        ))
        raise last_exception
