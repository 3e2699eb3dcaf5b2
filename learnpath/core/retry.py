"""
Retry policies for external service calls
"""
from typing import Callable, Optional

from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception,
    RetryCallState,
)

from learnpath.config import settings
from learnpath.core.logging import get_logger

logger = get_logger(__name__)

# HTTP statuses that will not change by trying again
NON_TRANSIENT_STATUS_CODES = frozenset({401, 403})


def error_status_code(error: BaseException) -> Optional[int]:
    """Best-effort HTTP status extraction from SDK exceptions"""
    for attr in ("status_code", "code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def is_transient_error(error: BaseException) -> bool:
    """Auth and permission failures are the only errors treated as permanent"""
    return error_status_code(error) not in NON_TRANSIENT_STATUS_CODES


def _log_before_sleep(retry_state: RetryCallState):
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying after error",
        function=getattr(retry_state.fn, "__name__", None),
        attempt=retry_state.attempt_number,
        delay=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(error)
    )


def get_async_retrying(
    max_attempts: int = 3,
    delay_seconds: float = 1.0,
    retry_predicate: Callable[[BaseException], bool] = lambda e: True,
) -> AsyncRetrying:
    """
    Fixed-delay retry loop.

    The loop re-raises the last error as-is once attempts are exhausted or
    the predicate rejects an error.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay_seconds),
        retry=retry_if_exception(retry_predicate),
        before_sleep=_log_before_sleep,
        reraise=True,
    )


def llm_retrying(
    max_attempts: Optional[int] = None,
    delay_seconds: Optional[float] = None,
    retry_auth_errors: Optional[bool] = None,
) -> AsyncRetrying:
    """Retry loop for LLM provider calls, configured from settings"""
    if retry_auth_errors is None:
        retry_auth_errors = settings.llm_retry_auth_errors
    return get_async_retrying(
        max_attempts=max_attempts if max_attempts is not None else settings.llm_max_retries,
        delay_seconds=delay_seconds if delay_seconds is not None else settings.llm_retry_delay_seconds,
        retry_predicate=(lambda e: True) if retry_auth_errors else is_transient_error,
    )
