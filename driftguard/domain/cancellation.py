"""Caller-supplied cancellation and deadline token for blocking lookups."""

from __future__ import annotations

import threading
import time
from typing import Callable


class OperationCancelledError(RuntimeError):
    """Raised when a drift check or status commit is aborted by its caller."""


class OperationDeadlineExceededError(OperationCancelledError, TimeoutError):
    """Raised when the caller deadline passed before an external call could start."""


class CancellationToken:
    """Cancel flag plus optional monotonic deadline shared with one invocation.

    The token is checked before every external call. Adapters also use
    `cancellation_remaining_seconds` to cap their own transport timeouts.
    """

    def __init__(
        self,
        timeout_seconds: float | None = None,
        monotonic_clock: Callable[[], float] | None = None,
    ):
        """Initialize token state.

        Args:
            timeout_seconds: Optional budget in seconds measured from construction.
            monotonic_clock: Optional clock override used by tests.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when timeout is negative.
        """

        if timeout_seconds is not None and timeout_seconds < 0:
            raise ValueError("timeout_seconds must be >= 0")

        self._clock = monotonic_clock or time.monotonic
        self._cancelled = threading.Event()
        self._deadline = None if timeout_seconds is None else self._clock() + timeout_seconds

    def cancellation_cancel(self) -> None:
        """Mark the token as cancelled."""

        self._cancelled.set()

    def cancellation_is_cancelled(self) -> bool:
        """Return whether the token was cancelled explicitly."""

        return self._cancelled.is_set()

    def cancellation_remaining_seconds(self) -> float | None:
        """Return seconds left before the deadline, or None without a deadline.

        Returns:
            float | None: Non-negative remaining budget.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def cancellation_raise_if_cancelled(self, operation: str) -> None:
        """Abort the current invocation if the token is cancelled or expired.

        Args:
            operation: Label of the external call about to run.

        Returns:
            None: Returns only when the call may proceed.

        Raises:
            OperationCancelledError: Raised when the token was cancelled.
            OperationDeadlineExceededError: Raised when the deadline passed.
        """

        if self._cancelled.is_set():
            raise OperationCancelledError(f"operation cancelled before {operation}")
        remaining_seconds = self.cancellation_remaining_seconds()
        if remaining_seconds is not None and remaining_seconds <= 0:
            raise OperationDeadlineExceededError(f"deadline exceeded before {operation}")


def domain_never_cancelled() -> CancellationToken:
    """Return a fresh token without deadline for callers that never cancel."""

    return CancellationToken()
