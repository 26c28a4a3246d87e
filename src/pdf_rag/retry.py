"""Retry policy for transient OpenAI failures."""

from typing import Callable, TypeVar

import openai
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from .log import get_logger

logger = get_logger("retry")

T = TypeVar("T")

# Rate limits, timeouts, dropped connections and 5xx responses
TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)

# A 429 with this code means the account is out of credit, not throttled
QUOTA_EXHAUSTED = "insufficient_quota"


def is_transient(exc: BaseException) -> bool:
    if not isinstance(exc, TRANSIENT_ERRORS):
        return False
    if isinstance(exc, openai.RateLimitError):
        return getattr(exc, "code", None) != QUOTA_EXHAUSTED
    return True


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(f"Transient provider error, retrying (attempt {retry_state.attempt_number}): {exc}")


def with_retries(call: Callable[[], T], max_attempts: int = 3) -> T:
    """
    Run `call`, retrying transient errors with exponential backoff.
    Non-transient errors and the last transient one are re-raised unchanged.
    """
    retrying = Retrying(
        reraise=True,
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=1, max=20),
        retry=retry_if_exception(is_transient),
        before_sleep=_log_retry,
    )
    return retrying(call)
