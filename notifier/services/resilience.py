"""
Resilience patterns for calls to external services.

Provides a circuit breaker and a hard timeout helper so a slow or dead
dependency (the grammar service) degrades quickly instead of holding up
requests.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Circuit Breaker
# -----------------------------------------------------------------------------


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation, requests pass through
    OPEN = "open"  # Failing, requests are blocked
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitOpenError(Exception):
    """Raised when circuit breaker is open."""

    pass


@dataclass
class CircuitBreaker:
    """
    Circuit breaker to prevent hammering a failing service.

    When a service fails repeatedly, the circuit opens and blocks further
    requests for a cooldown period. After the cooldown, it enters half-open
    state and allows a single request to test if the service recovered.

    Usage:
        breaker = CircuitBreaker(name="languagetool", failure_threshold=5)

        try:
            result = await breaker.call(post_text, text)
        except CircuitOpenError:
            # Use the local strategy
            pass
    """

    name: str
    failure_threshold: int = 5
    reset_timeout_seconds: float = 60
    half_open_max_calls: int = 1

    # Internal state
    _state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    _failure_count: int = field(default=0, init=False)
    _last_failure_time: float = field(default=0, init=False)
    _half_open_calls: int = field(default=0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    @property
    def state(self) -> CircuitState:
        """Get current circuit state, checking for timeout."""
        if self._state == CircuitState.OPEN:
            if time.time() - self._last_failure_time >= self.reset_timeout_seconds:
                return CircuitState.HALF_OPEN
        return self._state

    async def call(self, func: Callable[..., Awaitable[T] | T], *args: Any, **kwargs: Any) -> T:
        """
        Execute function through the circuit breaker.

        Raises:
            CircuitOpenError: If circuit is open
            Exception: Any exception from the wrapped function
        """
        async with self._lock:
            current_state = self.state

            if current_state == CircuitState.OPEN:
                raise CircuitOpenError(
                    f"Circuit '{self.name}' is open. Will retry after {self.reset_timeout_seconds}s cooldown."
                )

            if current_state == CircuitState.HALF_OPEN:
                if self._half_open_calls >= self.half_open_max_calls:
                    raise CircuitOpenError(f"Circuit '{self.name}' is half-open with max test calls reached.")
                self._half_open_calls += 1

        try:
            # Execute the function (outside the lock)
            if inspect.iscoroutinefunction(func):
                result = await func(*args, **kwargs)
            else:
                result = func(*args, **kwargs)

        except Exception:
            async with self._lock:
                self._failure_count += 1
                self._last_failure_time = time.time()
                self._half_open_calls = 0

                if current_state == CircuitState.HALF_OPEN:
                    self._state = CircuitState.OPEN
                    logger.warning(f"Circuit '{self.name}' reopened after half-open failure")
                elif self._failure_count >= self.failure_threshold:
                    self._state = CircuitState.OPEN
                    logger.warning(
                        f"Circuit '{self.name}' opened after {self._failure_count} failures. "
                        f"Cooldown: {self.reset_timeout_seconds}s"
                    )
            raise
        except asyncio.CancelledError:
            # An aborted test call frees its half-open slot without counting as a failure
            self._half_open_calls = 0
            raise

        # Success - reset the circuit
        async with self._lock:
            self._failure_count = 0
            self._half_open_calls = 0
            if self._state != CircuitState.CLOSED:
                logger.info(f"Circuit '{self.name}' closed after successful call")
            self._state = CircuitState.CLOSED

        return result

    def reset(self) -> None:
        """Manually reset the circuit breaker."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._half_open_calls = 0
        logger.info(f"Circuit '{self.name}' manually reset")


# -----------------------------------------------------------------------------
# Timeout Helper
# -----------------------------------------------------------------------------


class OperationTimeoutError(Exception):
    """Raised when an awaited operation exceeds its hard timeout."""

    pass


async def with_timeout(coro: Awaitable[T], timeout_seconds: float, error_message: str = "Operation timed out") -> T:
    """
    Execute a coroutine with a timeout.

    Args:
        coro: The coroutine to execute
        timeout_seconds: Maximum time to wait
        error_message: Error message if timeout occurs

    Raises:
        OperationTimeoutError: If the operation times out
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    except TimeoutError:
        raise OperationTimeoutError(f"{error_message} (timeout: {timeout_seconds}s)")
