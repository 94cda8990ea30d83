"""
Exchange API - Retry Executor.

============================================================
PURPOSE
============================================================
Runs an asynchronous operation under a bounded exponential
backoff policy.

STATE MACHINE:
    Attempting(1) -> Ok            -> Succeeded
                  -> Acknowledged  -> Succeeded (returned as-is)
                  -> Fail          -> FailedFatal
                  -> Retryable, n >  max_retries -> FailedExhausted
                  -> Retryable, n <= max_retries -> wait -> Attempting(n+1)

SAFETY CONSTRAINTS:
- No blind retries (only Retryable outcomes)
- No infinite loops (bounded attempt count)
- Attempts within one execution are strictly sequential

============================================================
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .config import RetryPolicy
from .errors import MAX_RETRIES_EXCEEDED, RETRY_CANCELLED, outcome_from_exception
from .types import Acknowledged, Fail, Ok, OperationOutcome, Retryable


logger = logging.getLogger(__name__)


Operation = Callable[[], Awaitable[OperationOutcome]]
Sleep = Callable[[float], Awaitable[None]]


def compute_backoff_delay(attempt: int, policy: RetryPolicy) -> float:
    """
    Delay to wait after a retryable failure on `attempt` (1-based).

    min_delay * factor ** (attempt - 1), clamped to [min_delay, max_delay].
    """
    try:
        delay = policy.min_delay_seconds * (policy.factor ** (attempt - 1))
    except OverflowError:
        delay = policy.max_delay_seconds
    return min(max(delay, policy.min_delay_seconds), policy.max_delay_seconds)


# ============================================================
# RETRY EXECUTOR
# ============================================================

class RetryExecutor:
    """
    Executes operations with bounded exponential backoff.

    Holds no per-execution state, so one executor can serve any
    number of concurrent execute() calls.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: Optional[Sleep] = None,
        name: str = "operation",
    ):
        """
        Initialize executor.

        Args:
            policy: Default retry policy
            sleep: Coroutine used for backoff waits (asyncio.sleep)
            name: Label used in log messages
        """
        self._policy = policy or RetryPolicy()
        self._sleep = sleep or asyncio.sleep
        self._name = name

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def execute(
        self,
        operation: Operation,
        policy: Optional[RetryPolicy] = None,
        cancel_event: Optional[asyncio.Event] = None,
        name: Optional[str] = None,
    ) -> OperationOutcome:
        """
        Run operation until it succeeds, fails fatally or runs out of retries.

        Args:
            operation: Zero-argument coroutine function returning an outcome
            policy: Overrides the executor's default policy for this call
            cancel_event: When set, aborts the pending wait and stops retrying
            name: Label used in log messages

        Returns:
            Final OperationOutcome (never Retryable)
        """
        policy = policy or self._policy
        name = name or self._name
        attempt = 1

        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"{name}: cancelled before attempt {attempt}")
                return Fail(reason=RETRY_CANCELLED)

            outcome = await self._attempt(operation, name)

            if isinstance(outcome, (Ok, Acknowledged)):
                if attempt > 1:
                    logger.info(f"{name}: succeeded on attempt {attempt}/{policy.max_attempts}")
                return outcome

            if not isinstance(outcome, Retryable):
                logger.error(f"{name}: failed with non-retryable error: {outcome.reason}")
                return outcome

            if attempt > policy.max_retries:
                logger.error(
                    f"{name}: giving up after {attempt} attempts, last error: {outcome.reason}"
                )
                return Fail(reason=MAX_RETRIES_EXCEEDED, cause=outcome)

            if outcome.retry_after_seconds is not None:
                delay = outcome.retry_after_seconds
            else:
                delay = compute_backoff_delay(attempt, policy)

            logger.warning(
                f"{name}: transient error "
                f"(attempt {attempt}/{policy.max_attempts}): "
                f"{outcome.reason}. Retrying in {delay:.3f}s..."
            )

            if not await self._wait(delay, cancel_event):
                logger.warning(f"{name}: cancelled while waiting to retry")
                return Fail(reason=RETRY_CANCELLED, cause=outcome)

            attempt += 1

    async def _attempt(self, operation: Operation, name: str) -> OperationOutcome:
        """Run one attempt, turning escaped exceptions into outcome values."""
        try:
            outcome = await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"{name}: attempt raised {e.__class__.__name__}: {e}")
            return outcome_from_exception(e)

        if not isinstance(outcome, (Ok, Fail, Retryable, Acknowledged)):
            # Plain return values count as success
            return Ok(payload=outcome)
        return outcome

    async def _wait(self, delay: float, cancel_event: Optional[asyncio.Event]) -> bool:
        """
        Wait before the next attempt.

        Returns:
            False if cancel_event fired during the wait
        """
        if cancel_event is None:
            await self._sleep(delay)
            return True

        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================

async def execute_with_retry(
    operation: Operation,
    policy: Optional[RetryPolicy] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> OperationOutcome:
    """
    Run operation under policy.

    Convenience wrapper for RetryExecutor.execute().
    """
    return await RetryExecutor(policy).execute(operation, cancel_event=cancel_event)
