"""Status committer recording the last applied configuration."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable

from driftguard.adapters import StatusPersistencePort
from driftguard.domain import (
    ApplicationSpec,
    ApplicationStatus,
    CancellationToken,
    ConfigSourceReference,
    domain_never_cancelled,
)


class StatusCommitter:
    """Persist a new status record after a successful redeploy.

    The committer never retries. A concurrent update surfaces as
    `StatusUpdateConflictError`; the caller re-reads the application and
    re-runs the whole decision.
    """

    def __init__(
        self,
        status_store: StatusPersistencePort,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize committer dependencies.

        Args:
            status_store: Conditional status persistence port.
            clock: Optional UTC clock override used by tests.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when the store is missing.
        """

        if status_store is None:
            raise ValueError("status_store must not be None")
        self._status_store = status_store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def deployer_commit_status(
        self,
        spec: ApplicationSpec,
        status: ApplicationStatus,
        config_source: ConfigSourceReference,
        cancellation: CancellationToken | None = None,
    ) -> ApplicationStatus:
        """Record `config_source` as applied and persist the full status record.

        Only the config source reference and the configuration time change;
        URLs and fields owned by other reconcile steps are carried over.

        Args:
            spec: Desired application state; its identity keys the conditional update.
            status: Status record as last read.
            config_source: Reference of the configuration blob that was just applied.
            cancellation: Optional caller cancellation token.

        Returns:
            ApplicationStatus: Status record that was persisted.

        Raises:
            ValueError: Raised when config_source is missing.
            OperationCancelledError: Raised when the caller cancelled the commit.
            StatusUpdateConflictError: Raised when the record changed concurrently.
            StatusPersistenceError: Raised for other write failures.
        """

        if config_source is None:
            raise ValueError("config_source must not be None")

        active_cancellation = cancellation or domain_never_cancelled()
        committed_status = replace(
            status,
            config_source=config_source,
            last_configuration_time=self._committer_next_configuration_time(status.last_configuration_time),
        )

        active_cancellation.cancellation_raise_if_cancelled(
            f"status commit {spec.identity.namespace}/{spec.identity.name}"
        )
        self._status_store.status_persist(
            identity=spec.identity,
            status=committed_status,
            cancellation=active_cancellation,
        )
        return committed_status

    def _committer_next_configuration_time(self, previous_time: datetime | None) -> datetime:
        """Return the current time, moved past `previous_time` when the clock did not advance."""

        current_time = _committer_as_utc(self._clock())
        if previous_time is None:
            return current_time
        previous_time = _committer_as_utc(previous_time)
        if current_time <= previous_time:
            return previous_time + timedelta(microseconds=1)
        return current_time


def _committer_as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
