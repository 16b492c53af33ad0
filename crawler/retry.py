"""
Retry policy for pipeline stages.

Stages return a result object with a `retryable` flag instead of raising.
`retrying(policy)` re-runs a stage with exponential backoff while its result
is retryable and hands back the last result once attempts run out, leaving
the requeue decision to the caller.
"""

import logging
from dataclasses import dataclass
from functools import wraps

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from crawler.config import STORE_RETRY_ATTEMPTS, STORE_RETRY_WAIT_MAX, STORE_RETRY_WAIT_MIN

logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    max_attempts: int = STORE_RETRY_ATTEMPTS
    wait_min: float = STORE_RETRY_WAIT_MIN
    wait_max: float = STORE_RETRY_WAIT_MAX

    @classmethod
    def no_wait(cls, max_attempts: int = 1) -> "RetryPolicy":
        return cls(max_attempts=max_attempts, wait_min=0, wait_max=0)


def _is_retryable(result) -> bool:
    return bool(getattr(result, "retryable", False))


def retrying(policy: RetryPolicy):
    """Decorator: retry a stage while it returns a retryable result."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            retryer = Retrying(
                stop=stop_after_attempt(max(1, policy.max_attempts)),
                wait=wait_exponential(min=policy.wait_min, max=policy.wait_max),
                retry=retry_if_result(_is_retryable),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                retry_error_callback=lambda state: state.outcome.result(),
            )
            result = retryer(func, *args, **kwargs)
            outcome = getattr(result, "outcome", None)
            if _is_retryable(result):
                logger.warning(
                    f"{func.__name__} still failing after {retryer.statistics.get('attempt_number')} attempts"
                )
            elif outcome is not None:
                logger.debug(f"{func.__name__} -> {getattr(outcome, 'value', outcome)}")
            return result

        return wrapper

    return decorator
