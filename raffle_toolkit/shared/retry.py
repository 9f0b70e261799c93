"""
Retry executor for fallible remote reads.

This is the single place failure-handling policy lives. Every component that
issues network reads routes them through RetryExecutor.execute.

Policy:
- Each attempt is raced against the active profile's timeout; a timeout is
  a network failure like any other
- User rejections and business rule errors abort immediately
- Network errors abort immediately on constrained (mobile) profiles
- Anything else is retried with linear backoff: retry_delay * attempt
- After the last attempt the last error is raised unchanged
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from raffle_toolkit.shared.error_classifier import (
    ErrorClass,
    ErrorKind,
    classify_error,
)
from raffle_toolkit.shared.logging import get_logger
from raffle_toolkit.shared.profiles import UNCONSTRAINED_PROFILE, PlatformProfile

T = TypeVar("T")

logger = get_logger(__name__)


class RetryExecutor:
    """
    Runs zero-argument async operations under the retry policy.

    Args:
        classifier: Callable mapping an exception to an ErrorClass
        on_retry: Optional callback called on each failed attempt that will
            be retried, with (exception, attempt)

    Example:
        executor = RetryExecutor()
        pools = await executor.execute(
            lambda: client.eth_call(registry, data),
            "getAllPools",
            profile,
        )
    """

    def __init__(
        self,
        classifier: Callable[[BaseException], ErrorClass] = classify_error,
        on_retry: Optional[Callable[[Exception, int], None]] = None,
    ):
        self.classifier = classifier
        self.on_retry = on_retry

    def should_abort(
        self, verdict: ErrorClass, profile: PlatformProfile
    ) -> bool:
        """Whether a failure with this verdict must not be retried."""
        if verdict.kind in (ErrorKind.USER_REJECTED, ErrorKind.BUSINESS_RULE):
            return True
        # Mobile network failures are likely persistent; avoid retry storms
        if verdict.kind == ErrorKind.NETWORK and profile.is_constrained:
            return True
        return False

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        context: str = "",
        profile: Optional[PlatformProfile] = None,
        *,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> T:
        """
        Run an operation with timeout, classification and backoff.

        Args:
            operation: Zero-argument async callable performing the read
            context: Label used in log lines
            profile: Active platform profile (defaults to desktop)
            max_retries: Override of profile.retry_count
            retry_delay: Override of profile.retry_delay (seconds)
            timeout: Override of profile.timeout (seconds)

        Returns:
            Result of the operation

        Raises:
            The last exception raised by the operation
        """
        profile = profile or UNCONSTRAINED_PROFILE
        attempts = max(1, max_retries if max_retries is not None else profile.retry_count)
        delay_step = retry_delay if retry_delay is not None else profile.retry_delay
        time_limit = timeout if timeout is not None else profile.timeout
        name = context or getattr(operation, "__name__", "operation")

        last_exception: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.wait_for(operation(), time_limit)
            except Exception as e:
                last_exception = e
                verdict = self.classifier(e)

                logger.warning(
                    f"{name} attempt {attempt}/{attempts} failed "
                    f"[{verdict}]: {e!r}"
                )

                if self.should_abort(verdict, profile):
                    logger.warning(
                        f"Not retrying {name}: {verdict} on {profile.name}"
                    )
                    raise

                if attempt < attempts:
                    delay = delay_step * attempt
                    logger.debug(f"Retrying {name} in {delay:.2f}s...")
                    if self.on_retry:
                        self.on_retry(e, attempt)
                    await asyncio.sleep(delay)

        if last_exception:
            raise last_exception
        raise RuntimeError(
            "Unexpected state: no exception but all attempts exhausted"
        )
