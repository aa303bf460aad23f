"""Expose configuration checks for externally reachable logical services."""

from __future__ import annotations

from typing import Any

from driftguard.adapters import AnnotationAggregatorPort, ConfigPropertyPort, LiveServicePort, LoadBalancerPort
from driftguard.domain import (
    REQUIRED_EXPOSED_SERVICES,
    ApplicationSpec,
    ApplicationStatus,
    CancellationToken,
    ExposeMode,
    LogicalService,
    domain_build_stage_event,
)

from .errors import UnsupportedExposeModeError
from .interfaces import (
    DRIFT_REASON_ANNOTATIONS_CHANGED,
    DRIFT_REASON_EXPOSURE_TYPE_CHANGED,
    DRIFT_REASON_SERVICE_MISSING,
    DRIFT_REASON_STATUS_URL_AVAILABLE,
    ExposeCheckResult,
)


def deployer_parse_expose_mode(raw_expose_mode: str) -> ExposeMode:
    """Normalize the declared expose mode.

    Args:
        raw_expose_mode: Mode string from the application spec; blank means `none`.

    Returns:
        ExposeMode: Parsed mode.

    Raises:
        UnsupportedExposeModeError: Raised for any mode other than `none` or `service`.
    """

    normalized_mode = raw_expose_mode.strip().lower()
    if normalized_mode in {"", ExposeMode.NONE.value}:
        return ExposeMode.NONE
    if normalized_mode == ExposeMode.SERVICE.value:
        return ExposeMode.SERVICE
    raise UnsupportedExposeModeError(raw_expose_mode)


class ExposeConfigComparator:
    """Decide whether every exposed logical service matches its desired exposure."""

    def __init__(
        self,
        live_services: LiveServicePort,
        load_balancers: LoadBalancerPort,
        annotation_aggregator: AnnotationAggregatorPort,
    ):
        """Initialize comparator dependencies.

        Args:
            live_services: Live service lookup port.
            load_balancers: Load-balancer URL lookup port.
            annotation_aggregator: Expected annotation port.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when a dependency is missing.
        """

        if live_services is None:
            raise ValueError("live_services must not be None")
        if load_balancers is None:
            raise ValueError("load_balancers must not be None")
        if annotation_aggregator is None:
            raise ValueError("annotation_aggregator must not be None")

        self._live_services = live_services
        self._load_balancers = load_balancers
        self._annotation_aggregator = annotation_aggregator

    def expose_is_up_to_date(
        self,
        spec: ApplicationSpec,
        properties: ConfigPropertyPort,
        status: ApplicationStatus,
        cancellation: CancellationToken,
    ) -> ExposeCheckResult:
        """Check the expose configuration of every required logical service.

        SSL flags are resolved best-effort: a failed property lookup counts as
        `False` and is only reported in the timeline.

        Args:
            spec: Desired application state.
            properties: Rendered configuration properties.
            status: Current status record.
            cancellation: Caller cancellation token.

        Returns:
            ExposeCheckResult: Result of the first failing service, or an up-to-date result.

        Raises:
            UnsupportedExposeModeError: Raised when the expose mode is not supported.
            OperationCancelledError: Raised when the caller cancelled the check.
        """

        expose_mode = deployer_parse_expose_mode(spec.expose_mode)
        timeline: list[dict[str, Any]] = []
        if expose_mode is ExposeMode.NONE:
            timeline.append(domain_build_stage_event(stage="expose", status="skipped", details={"mode": "none"}))
            return ExposeCheckResult(up_to_date=True, timeline=timeline)

        for service in REQUIRED_EXPOSED_SERVICES:
            ssl_enabled = self._expose_resolve_ssl_enabled(service=service, properties=properties, timeline=timeline)
            service_result = self.expose_service_is_up_to_date(
                service=service,
                ssl_enabled=ssl_enabled,
                spec=spec,
                status=status,
                cancellation=cancellation,
            )
            timeline.extend(service_result.timeline)
            if not service_result.up_to_date:
                return ExposeCheckResult(
                    up_to_date=False,
                    reason=service_result.reason,
                    service=service_result.service,
                    timeline=timeline,
                )

        return ExposeCheckResult(up_to_date=True, timeline=timeline)

    def expose_service_is_up_to_date(
        self,
        service: LogicalService,
        ssl_enabled: bool,
        spec: ApplicationSpec,
        status: ApplicationStatus,
        cancellation: CancellationToken,
    ) -> ExposeCheckResult:
        """Compare one logical service against its desired exposure.

        Checks run in order and the first failing one decides: the service
        must exist, its type must match, its annotations must match, and a
        missing status URL must not have a ready load balancer behind it.

        Args:
            service: Logical service to check.
            ssl_enabled: Whether the service terminates TLS itself.
            spec: Desired application state.
            status: Current status record.
            cancellation: Caller cancellation token.

        Returns:
            ExposeCheckResult: Service-level outcome.

        Raises:
            OperationCancelledError: Raised when the caller cancelled the check.
            ConnectionError: Raised when a live lookup cannot reach the cluster.
            TimeoutError: Raised when a live lookup times out.
        """

        namespace = spec.identity.namespace
        service_name = service.canonical_name
        timeline: list[dict[str, Any]] = []

        cancellation.cancellation_raise_if_cancelled(f"service lookup {namespace}/{service_name}")
        observed_service = self._live_services.adapter_get_service(
            name=service_name,
            namespace=namespace,
            cancellation=cancellation,
        )
        if observed_service is None:
            timeline.append(domain_build_stage_event(stage="expose_service", status="drift", service=service_name))
            return self._expose_drift(DRIFT_REASON_SERVICE_MISSING, service_name, timeline)

        desired_type = spec.spec_desired_exposure_type(service)
        if observed_service.exposure_type != desired_type:
            timeline.append(
                domain_build_stage_event(
                    stage="expose_type",
                    status="drift",
                    service=service_name,
                    details={"expected": desired_type, "actual": observed_service.exposure_type},
                )
            )
            return self._expose_drift(DRIFT_REASON_EXPOSURE_TYPE_CHANGED, service_name, timeline)

        expected_annotations = self._annotation_aggregator.annotations_aggregate(spec, service.short_name)
        if dict(observed_service.annotations) != dict(expected_annotations):
            timeline.append(
                domain_build_stage_event(
                    stage="expose_annotations",
                    status="drift",
                    service=service_name,
                    details={"expected": dict(expected_annotations), "actual": dict(observed_service.annotations)},
                )
            )
            return self._expose_drift(DRIFT_REASON_ANNOTATIONS_CHANGED, service_name, timeline)

        if not status.status_url_for(service):
            cancellation.cancellation_raise_if_cancelled(f"load balancer lookup {namespace}/{service_name}")
            load_balancer_url = self._load_balancers.adapter_find_load_balancer_url(
                name=service_name,
                namespace=namespace,
                ssl_enabled=ssl_enabled,
                cancellation=cancellation,
            )
            if load_balancer_url:
                timeline.append(
                    domain_build_stage_event(
                        stage="status_url",
                        status="drift",
                        service=service_name,
                        details={"load_balancer_url": load_balancer_url},
                    )
                )
                return self._expose_drift(DRIFT_REASON_STATUS_URL_AVAILABLE, service_name, timeline)

        timeline.append(domain_build_stage_event(stage="expose_service", status="passed", service=service_name))
        return ExposeCheckResult(up_to_date=True, timeline=timeline)

    def _expose_resolve_ssl_enabled(
        self,
        service: LogicalService,
        properties: ConfigPropertyPort,
        timeline: list[dict[str, Any]],
    ) -> bool:
        """Resolve the SSL flag of one service; every failure the property port reports defaults to False."""

        try:
            return bool(properties.properties_lookup_bool(service.ssl_property, False))
        except (LookupError, ValueError) as error:
            timeline.append(
                domain_build_stage_event(
                    stage="ssl_flag",
                    status="defaulted",
                    service=service.canonical_name,
                    details={"property": service.ssl_property, "error_type": type(error).__name__, "error_message": str(error)},
                )
            )
            return False

    def _expose_drift(self, reason: str, service_name: str, timeline: list[dict[str, Any]]) -> ExposeCheckResult:
        return ExposeCheckResult(up_to_date=False, reason=reason, service=service_name, timeline=timeline)
