"""Typed interfaces for adapter-layer responsibilities."""

from typing import Protocol

from driftguard.domain import (
    ApplicationIdentity,
    ApplicationSpec,
    ApplicationStatus,
    CancellationToken,
    ObservedService,
)


class ConfigPropertyPort(Protocol):
    """Port definition for best-effort lookups in rendered configuration.

    Implementations report every lookup failure as `LookupError` or
    `ValueError`; callers treat both as "value unavailable". Any other
    exception is a defect in the implementation and propagates.
    """

    def properties_lookup_bool(self, key: str, default: bool) -> bool:
        """Return a boolean property value.

        Args:
            key: Dotted property path.
            default: Value returned when the key is absent.

        Returns:
            bool: Resolved value.

        Raises:
            LookupError: Raised when the value exists but cannot be resolved.
            ValueError: Raised when the underlying configuration cannot be read.
        """


class LiveServicePort(Protocol):
    """Port definition for fetching live service objects."""

    def adapter_get_service(
        self,
        name: str,
        namespace: str,
        cancellation: CancellationToken,
    ) -> ObservedService | None:
        """Fetch one live service object.

        Args:
            name: Service object name.
            namespace: Service object namespace.
            cancellation: Caller cancellation token.

        Returns:
            ObservedService | None: Observed state, or None when the object does not exist.

        Raises:
            ConnectionError: Raised when the cluster cannot be reached.
            TimeoutError: Raised when the request exceeds its timeout.
        """


class LoadBalancerPort(Protocol):
    """Port definition for resolving externally visible load-balancer URLs."""

    def adapter_find_load_balancer_url(
        self,
        name: str,
        namespace: str,
        ssl_enabled: bool,
        cancellation: CancellationToken,
    ) -> str:
        """Return the load-balancer URL of one service.

        Args:
            name: Service object name.
            namespace: Service object namespace.
            ssl_enabled: Whether the service terminates TLS itself.
            cancellation: Caller cancellation token.

        Returns:
            str: URL, or an empty string when no address is assigned yet.

        Raises:
            ConnectionError: Raised when the cluster cannot be reached.
            TimeoutError: Raised when the request exceeds its timeout.
        """


class AnnotationAggregatorPort(Protocol):
    """Port definition for computing the expected annotations of one service."""

    def annotations_aggregate(self, spec: ApplicationSpec, short_name: str) -> dict[str, str]:
        """Return expected annotations for one logical service.

        Args:
            spec: Desired application state.
            short_name: Logical service short name.

        Returns:
            dict[str, str]: Expected annotation map.

        Raises:
            ValueError: Raised when annotation inputs are invalid.
        """


class StatusPersistencePort(Protocol):
    """Port definition for conditional status record writes."""

    def status_persist(
        self,
        identity: ApplicationIdentity,
        status: ApplicationStatus,
        cancellation: CancellationToken,
    ) -> None:
        """Replace the status record when the application is still at `identity.resource_version`.

        Args:
            identity: Application identity and expected version.
            status: Full status record to write.
            cancellation: Caller cancellation token.

        Returns:
            None: The write either succeeds or raises.

        Raises:
            StatusUpdateConflictError: Raised when the record changed since it was read.
            StatusPersistenceError: Raised for other write failures.
        """
