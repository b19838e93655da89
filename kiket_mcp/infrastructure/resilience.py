"""Bounded retry with exponential backoff and jitter.

The executor wraps any zero-argument coroutine factory. It is constructed
explicitly and injected into the operation registries; each instance carries
its own RetryConfig.
"""

import asyncio
import random
from typing import Awaitable, Callable, TypeVar

from ..domain.error_mapping import is_transient_network_message
from ..domain.events import OperationFailed, RetryScheduled
from ..domain.exceptions import ErrorKind, KiketError
from ..domain.value_objects import RetryConfig, RetryState
from ..logging_config import get_logger
from .event_bus import EventBus

logger = get_logger(__name__)

T = TypeVar("T")

JITTER_RATIO = 0.25
"""Upper bound of the random jitter, as a fraction of the exponential delay."""

SleepFn = Callable[[float], Awaitable[None]]


def is_retriable(error: BaseException) -> bool:
    """Decide whether a failed attempt is worth repeating.

    Rate limits and server errors are always retriable. Network failures (and
    unclassified exceptions) only when their message points at a timeout or
    a reset, refused or unresolved connection.
    """
    if isinstance(error, KiketError):
        if error.kind in (ErrorKind.RATE_LIMIT, ErrorKind.SERVER):
            return True
        if error.kind is ErrorKind.NETWORK:
            return is_transient_network_message(error.message)
        return False
    return is_transient_network_message(str(error))


class ResilienceExecutor:
    """Runs an async operation with bounded retries.

    Attributes:
        config: Retry bounds used for every invocation.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        event_bus: EventBus | None = None,
        sleep: SleepFn = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        """Initialize the executor.

        Args:
            config: Retry bounds (defaults: 3 retries, 1000 ms base, 30000 ms cap).
            event_bus: Receives RetryScheduled / OperationFailed events.
            sleep: Coroutine used to wait between attempts, in seconds.
            rng: Random source for jitter.
        """
        self._config = config or RetryConfig()
        self._event_bus = event_bus
        self._sleep = sleep
        self._rng = rng or random.Random()

    @property
    def config(self) -> RetryConfig:
        """Get the retry configuration."""
        return self._config

    async def execute_with_backoff(self, operation: Callable[[], Awaitable[T]], label: str = "API request") -> T:
        """Run ``operation`` until it succeeds, fails permanently or runs out of retries.

        Args:
            operation: Zero-argument callable returning a fresh awaitable per attempt.
            label: Name used in logs and events.

        Returns:
            The operation's result.

        Raises:
            Exception: The last error raised by the operation, unchanged.
        """
        state = RetryState()

        while True:
            try:
                return await operation()
            except Exception as exc:
                state.last_error = exc
                retriable = is_retriable(exc)

                if not retriable or state.attempt >= self._config.max_retries:
                    self._report_failure(label, state, retriable)
                    raise

                delay_ms = self.calculate_delay(state.attempt, exc)
                self._report_retry(label, state, delay_ms)
                await self._sleep(delay_ms / 1000.0)
                state.attempt += 1

    def calculate_delay(self, attempt: int, error: BaseException | None = None) -> float:
        """Delay in milliseconds before retrying after failed attempt ``attempt`` (0-based).

        A rate limit error carrying a retry-after hint uses the hint, otherwise
        the delay is exponential with up to 25% random jitter. Both are capped
        at ``max_delay_ms``.
        """
        if isinstance(error, KiketError) and error.kind is ErrorKind.RATE_LIMIT:
            if error.retry_after_seconds is not None:
                return min(error.retry_after_seconds * 1000.0, float(self._config.max_delay_ms))

        exponential = self._exponential_delay(attempt)
        jitter = self._rng.uniform(0.0, JITTER_RATIO * exponential)
        return min(exponential + jitter, float(self._config.max_delay_ms))

    def base_delay(self, attempt: int) -> float:
        """Delay in milliseconds for ``attempt`` without jitter, capped at ``max_delay_ms``."""
        return min(self._exponential_delay(attempt), float(self._config.max_delay_ms))

    def _exponential_delay(self, attempt: int) -> float:
        return float(self._config.base_delay_ms) * (2**attempt)

    def _report_retry(self, label: str, state: RetryState, delay_ms: float) -> None:
        error = state.last_error
        kind, message = _describe(error)
        logger.warning(
            "operation_retry_scheduled",
            label=label,
            attempt=state.attempt + 1,
            max_retries=self._config.max_retries,
            delay_ms=round(delay_ms, 1),
            error_kind=kind,
            error=message,
        )
        self._publish(
            RetryScheduled(
                label=label,
                attempt=state.attempt + 1,
                max_retries=self._config.max_retries,
                delay_ms=delay_ms,
                error_kind=kind,
                error_message=message,
            )
        )

    def _report_failure(self, label: str, state: RetryState, retriable: bool) -> None:
        kind, message = _describe(state.last_error)
        logger.error(
            "operation_failed",
            label=label,
            attempts=state.attempt + 1,
            retriable=retriable,
            error_kind=kind,
            error=message,
        )
        self._publish(
            OperationFailed(
                label=label,
                attempts=state.attempt + 1,
                retriable=retriable,
                error_kind=kind,
                error_message=message,
            )
        )

    def _publish(self, event) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)


def _describe(error: BaseException | None) -> tuple[str, str]:
    if isinstance(error, KiketError):
        return error.kind.value, error.message
    if error is None:
        return ErrorKind.INTERNAL.value, ""
    return type(error).__name__, str(error)


__all__ = [
    "JITTER_RATIO",
    "ResilienceExecutor",
    "is_retriable",
]
