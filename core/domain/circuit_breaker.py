# core/domain/circuit_breaker.py
#
# Description:
# Minimal circuit breaker guarding calls to the search engine.
# After `failure_threshold` consecutive failures the circuit opens and callers
# skip the engine until `reset_timeout` seconds have passed; the next call is
# then let through as a probe (half-open) and its outcome closes or re-opens it.

import logging
import time
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    def __init__(
        self,
        name: str,
        failure_threshold: int = 3,
        reset_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = max(failure_threshold, 1)
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._failures = 0
        self._opened_at: Optional[float] = None

    @property
    def state(self) -> CircuitState:
        if self._opened_at is None:
            return CircuitState.CLOSED
        if self._clock() - self._opened_at >= self.reset_timeout:
            return CircuitState.HALF_OPEN
        return CircuitState.OPEN

    @property
    def failure_count(self) -> int:
        return self._failures

    def can_execute(self) -> bool:
        return self.state != CircuitState.OPEN

    def record_success(self) -> None:
        if self._opened_at is not None:
            logger.info(f"Circuit '{self.name}' closed")
        self._failures = 0
        self._opened_at = None

    def record_failure(self) -> None:
        self._failures += 1
        if self.state == CircuitState.HALF_OPEN or self._failures >= self.failure_threshold:
            self._open()

    def trip(self) -> None:
        """Open the circuit immediately, e.g. when a startup probe fails."""
        self._failures = max(self._failures, self.failure_threshold)
        self._open()

    def _open(self) -> None:
        if self.state != CircuitState.OPEN:
            logger.warning(
                f"Circuit '{self.name}' opened after {self._failures} failures; "
                f"retrying in {self.reset_timeout}s"
            )
        self._opened_at = self._clock()
