"""In-process port implementations for pre-fetched state and spec-derived annotations."""

from __future__ import annotations

from typing import Iterable

from driftguard.domain import ApplicationSpec, CancellationToken, ObservedService

from .interfaces import AnnotationAggregatorPort, LiveServicePort


class StaticServiceLookup(LiveServicePort):
    """Serve observed services that the caller already fetched.

    Lookups still honor the cancellation token so behavior matches the
    cluster-backed adapter.
    """

    def __init__(self, observed_services: Iterable[ObservedService] = ()):
        """Index observed services by namespace and name.

        Args:
            observed_services: Observed service snapshots.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when two snapshots share the same identity.
        """

        self._services: dict[tuple[str, str], ObservedService] = {}
        for observed_service in observed_services:
            service_key = (observed_service.namespace, observed_service.name)
            if service_key in self._services:
                raise ValueError(f"duplicate observed service {observed_service.namespace}/{observed_service.name}")
            self._services[service_key] = observed_service

    def adapter_get_service(
        self,
        name: str,
        namespace: str,
        cancellation: CancellationToken,
    ) -> ObservedService | None:
        cancellation.cancellation_raise_if_cancelled(f"service lookup {namespace}/{name}")
        return self._services.get((namespace, name))


class SpecAnnotationAggregator(AnnotationAggregatorPort):
    """Merge spec-wide expose annotations with the per-service override annotations."""

    def annotations_aggregate(self, spec: ApplicationSpec, short_name: str) -> dict[str, str]:
        """Return expected annotations for one logical service.

        Override annotations win over spec-wide annotations with the same key.

        Args:
            spec: Desired application state.
            short_name: Logical service short name.

        Returns:
            dict[str, str]: Expected annotation map.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        aggregated_annotations = dict(spec.annotations)
        override = spec.overrides.get(short_name)
        if override is not None:
            aggregated_annotations.update(override.annotations)
        return aggregated_annotations
