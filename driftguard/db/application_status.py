"""Database service for application status records with optimistic concurrency."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from driftguard.adapters import StatusPersistencePort
from driftguard.domain import (
    ApplicationIdentity,
    ApplicationStatus,
    CancellationToken,
    StatusPersistenceError,
    StatusRecordNotFoundError,
    StatusUpdateConflictError,
)


@dataclass(frozen=True)
class ApplicationStatusRecord:
    """Persistence model for one status row.

    Attributes:
        identity: Application identity; `resource_version` is the row's record version.
        status: Parsed status record.
    """

    identity: ApplicationIdentity
    status: ApplicationStatus


class SQLAlchemyApplicationStatusService(StatusPersistencePort):
    """SQLAlchemy-backed status record store.

    Every write is an `UPDATE ... WHERE record_version = :expected` that bumps
    the version, so a writer holding a stale version changes nothing and is
    told so.
    """

    def __init__(self, engine: Engine):
        """Initialize status persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_application_status_register(self, application_name: str, namespace: str) -> ApplicationStatusRecord:
        """Create an empty status row, or return the existing one.

        Args:
            application_name: Application object name.
            namespace: Application object namespace.

        Returns:
            ApplicationStatusRecord: Stored row.

        Raises:
            ValueError: Raised when identity inputs are blank.
            StatusPersistenceError: Raised when persistence fails.
        """

        normalized_name = self._validate_non_empty_text(application_name, "application_name")
        normalized_namespace = self._validate_non_empty_text(namespace, "namespace")

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO application_status ("
                        "application_name, namespace, record_version, status_payload, updated_at_utc"
                        ") VALUES (:application_name, :namespace, 1, :status_payload, :updated_at_utc) "
                        "ON CONFLICT (application_name, namespace) DO NOTHING"
                    ),
                    {
                        "application_name": normalized_name,
                        "namespace": normalized_namespace,
                        "status_payload": json.dumps(ApplicationStatus().to_payload()),
                        "updated_at_utc": datetime.now(timezone.utc).isoformat(),
                    },
                )
        except SQLAlchemyError as error:
            raise StatusPersistenceError(
                "failed to register application status",
                application_name=normalized_name,
                namespace=normalized_namespace,
            ) from error

        stored_record = self.db_application_status_get(application_name=normalized_name, namespace=normalized_namespace)
        if stored_record is None:
            raise StatusRecordNotFoundError(
                "application status vanished after registration",
                application_name=normalized_name,
                namespace=normalized_namespace,
            )
        return stored_record

    def db_application_status_get(self, application_name: str, namespace: str) -> ApplicationStatusRecord | None:
        """Fetch one status row.

        Args:
            application_name: Application object name.
            namespace: Application object namespace.

        Returns:
            ApplicationStatusRecord | None: Stored row or None.

        Raises:
            StatusPersistenceError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        "SELECT application_name, namespace, record_version, status_payload "
                        "FROM application_status "
                        "WHERE application_name = :application_name AND namespace = :namespace"
                    ),
                    {"application_name": application_name, "namespace": namespace},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise StatusPersistenceError(
                "failed to read application status",
                application_name=application_name,
                namespace=namespace,
            ) from error

        if row is None:
            return None
        return ApplicationStatusRecord(
            identity=ApplicationIdentity(
                name=str(row["application_name"]),
                namespace=str(row["namespace"]),
                resource_version=str(row["record_version"]),
            ),
            status=ApplicationStatus.from_payload(json.loads(row["status_payload"])),
        )

    def status_persist(
        self,
        identity: ApplicationIdentity,
        status: ApplicationStatus,
        cancellation: CancellationToken,
    ) -> None:
        """Replace the status row when it is still at `identity.resource_version`.

        Args:
            identity: Application identity and expected record version.
            status: Full status record.
            cancellation: Caller cancellation token.

        Returns:
            None: The write either succeeds or raises.

        Raises:
            ValueError: Raised when the expected version is not an integer.
            StatusUpdateConflictError: Raised when the row version moved on.
            StatusRecordNotFoundError: Raised when no row exists for the application.
            StatusPersistenceError: Raised when persistence fails.
        """

        try:
            expected_version = int(identity.resource_version)
        except ValueError as error:
            raise ValueError(f"resource_version must be an integer record version: {identity.resource_version}") from error

        cancellation.cancellation_raise_if_cancelled(f"status write {identity.namespace}/{identity.name}")
        try:
            with self._engine.begin() as connection:
                update_result = connection.execute(
                    text(
                        "UPDATE application_status SET "
                        "status_payload = :status_payload, "
                        "record_version = record_version + 1, "
                        "updated_at_utc = :updated_at_utc "
                        "WHERE application_name = :application_name "
                        "AND namespace = :namespace "
                        "AND record_version = :expected_version"
                    ),
                    {
                        "status_payload": json.dumps(status.to_payload()),
                        "updated_at_utc": datetime.now(timezone.utc).isoformat(),
                        "application_name": identity.name,
                        "namespace": identity.namespace,
                        "expected_version": expected_version,
                    },
                )
                if update_result.rowcount == 1:
                    return

                existing_row = connection.execute(
                    text(
                        "SELECT record_version FROM application_status "
                        "WHERE application_name = :application_name AND namespace = :namespace"
                    ),
                    {"application_name": identity.name, "namespace": identity.namespace},
                ).first()
        except SQLAlchemyError as error:
            raise StatusPersistenceError(
                "failed to persist application status",
                application_name=identity.name,
                namespace=identity.namespace,
            ) from error

        if existing_row is None:
            raise StatusRecordNotFoundError(
                "application status not found",
                application_name=identity.name,
                namespace=identity.namespace,
            )
        raise StatusUpdateConflictError(
            f"application status version changed: expected={expected_version}, actual={existing_row[0]}",
            application_name=identity.name,
            namespace=identity.namespace,
        )

    def _validate_non_empty_text(self, value: str, field_name: str) -> str:
        """Validate and normalize required text input."""

        normalized_value = value.strip()
        if not normalized_value:
            raise ValueError(f"{field_name} must not be blank")
        return normalized_value
