import asyncio
import logging

import pytest
from unittest.mock import AsyncMock, MagicMock

from backlogmd.domain.errors import BacklogApiError
from backlogmd.domain.events.api_events import ApiCallFailed, RetryScheduled
from backlogmd.infrastructure.resilience.api_retry import (
    ApiRetryService, RetryPolicy, is_rate_limit_error,
)


def rate_limited():
    return BacklogApiError(429, "Too Many Requests", '{"errors":[{"message":"rate limit"}]}')


@pytest.fixture
def retry_service(recording_sleep):
    return ApiRetryService(sleep=recording_sleep)


def test_default_policy_values():
    policy = RetryPolicy()
    assert policy.max_retries == 3
    assert policy.max_attempts == 4
    assert policy.delay_seconds == 15.0


@pytest.mark.parametrize("max_retries, delay", [(-1, 1.0), (1, -0.5)])
def test_policy_rejects_negative_values(max_retries, delay):
    with pytest.raises(ValueError):
        RetryPolicy(max_retries=max_retries, delay_seconds=delay)


@pytest.mark.parametrize(
    "error, expected",
    [
        (rate_limited(), True),
        (RuntimeError("Backlog said: Too Many Requests"), True),
        (BacklogApiError(500, "Internal Server Error"), False),
        (ValueError("too many requests"), False),
    ]
)
def test_is_rate_limit_error(error, expected):
    assert is_rate_limit_error(error) is expected


def test_success_first_attempt_does_not_sleep(retry_service, recording_sleep):
    call = AsyncMock(return_value="ok")

    result = asyncio.run(retry_service.execute_with_retry(call, operation_name="op"))

    assert result == "ok"
    call.assert_awaited_once()
    assert recording_sleep.delays == []


def test_two_rate_limits_then_success(retry_service, recording_sleep):
    call = AsyncMock(side_effect=[rate_limited(), rate_limited(), {"id": 1}])

    result = asyncio.run(retry_service.execute_with_retry(call, operation_name="get_issue(1)"))

    assert result == {"id": 1}
    assert call.await_count == 3
    assert recording_sleep.delays == [15.0, 15.0]


def test_non_rate_limit_error_propagates_immediately(retry_service, recording_sleep):
    error = BacklogApiError(404, "Not Found", "No issue")
    call = AsyncMock(side_effect=error)

    with pytest.raises(BacklogApiError) as exc_info:
        asyncio.run(retry_service.execute_with_retry(call, operation_name="get_issue(9)"))

    assert exc_info.value is error
    call.assert_awaited_once()
    assert recording_sleep.delays == []


def test_exhausted_retries_raise_last_error(retry_service, recording_sleep):
    errors = [rate_limited() for _ in range(4)]
    call = AsyncMock(side_effect=errors)

    with pytest.raises(BacklogApiError) as exc_info:
        asyncio.run(retry_service.execute_with_retry(call, operation_name="update_wiki(3)"))

    assert exc_info.value is errors[-1]
    assert call.await_count == 4
    # No wait after the final attempt
    assert recording_sleep.delays == [15.0, 15.0, 15.0]


def test_delay_is_constant_with_custom_policy(recording_sleep):
    service = ApiRetryService(RetryPolicy(max_retries=5, delay_seconds=2.5), sleep=recording_sleep)
    call = AsyncMock(side_effect=[rate_limited()] * 5 + ["done"])

    assert asyncio.run(service.execute_with_retry(call)) == "done"
    assert recording_sleep.delays == [2.5] * 5


def test_custom_retryable_predicate(recording_sleep):
    policy = RetryPolicy(max_retries=1, delay_seconds=0, is_retryable=lambda e: isinstance(e, TimeoutError))
    service = ApiRetryService(policy, sleep=recording_sleep)
    call = AsyncMock(side_effect=[TimeoutError("slow"), "ok"])

    assert asyncio.run(service.execute_with_retry(call)) == "ok"
    assert recording_sleep.delays == [0]


def test_arguments_are_forwarded(retry_service):
    call = AsyncMock(return_value="ok")

    asyncio.run(retry_service.execute_with_retry(call, 42, operation_name="x", fields={"a": 1}))

    call.assert_awaited_once_with(42, fields={"a": 1})


def test_events_dispatched_to_listener(recording_sleep):
    listener = MagicMock()
    service = ApiRetryService(RetryPolicy(max_retries=1), sleep=recording_sleep, event_listener=listener)
    call = AsyncMock(side_effect=[rate_limited(), rate_limited()])

    with pytest.raises(BacklogApiError):
        asyncio.run(service.execute_with_retry(call, operation_name="get_wiki(5)"))

    events = [c.args[0] for c in listener.call_args_list]
    assert isinstance(events[0], RetryScheduled)
    assert events[0].operation == "get_wiki(5)"
    assert events[0].attempt_number == 1
    assert events[0].max_attempts == 2
    assert events[0].delay_seconds == 15.0
    assert isinstance(events[1], ApiCallFailed)
    assert events[1].attempts == 2
    assert events[1].error_type == "BacklogApiError"


def test_non_retryable_failure_emits_failed_event(recording_sleep):
    listener = MagicMock()
    service = ApiRetryService(sleep=recording_sleep, event_listener=listener)
    call = AsyncMock(side_effect=ValueError("bad payload"))

    with pytest.raises(ValueError):
        asyncio.run(service.execute_with_retry(call, operation_name="get_issue(2)"))

    listener.assert_called_once()
    event = listener.call_args.args[0]
    assert isinstance(event, ApiCallFailed)
    assert event.attempts == 1
    assert event.error_message == "bad payload"


def test_rate_limit_warning_is_logged(retry_service, caplog):
    call = AsyncMock(side_effect=[rate_limited(), "ok"])

    with caplog.at_level(logging.WARNING, logger="backlogmd.infrastructure.resilience.api_retry"):
        asyncio.run(retry_service.execute_with_retry(call, operation_name="get_issue(1)"))

    assert "get_issue(1) rate limited, waiting 15.0s before retry 1/4" in caplog.text
