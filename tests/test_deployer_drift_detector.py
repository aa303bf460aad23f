"""Regression tests for the drift detector verdicts."""

from __future__ import annotations

import pytest

from driftguard.adapters import SpecAnnotationAggregator, StaticServiceLookup
from driftguard.deployer import (
    DRIFT_REASON_CONFIG_SOURCE_CHANGED,
    DRIFT_REASON_EXPOSURE_TYPE_CHANGED,
    UNSUPPORTED_EXPOSE_MODE_CODE,
    ConfigDriftDetector,
    ExposeConfigComparator,
    UnsupportedExposeModeError,
)
from driftguard.domain import (
    ApplicationIdentity,
    ApplicationSpec,
    ApplicationStatus,
    CancellationToken,
    ConfigSourceKind,
    ConfigSourceReference,
    ExposeServiceOverride,
    ObservedService,
    OperationCancelledError,
    RenderedConfigProperties,
)

_NAMESPACE = "spinnaker"
_LIVE_REFERENCE = ConfigSourceReference(
    kind=ConfigSourceKind.CONFIG_MAP,
    name="spinnaker-config",
    namespace=_NAMESPACE,
    resource_version="4711",
)


class _LoadBalancerStub:
    """Return a fixed load-balancer URL and count lookups."""

    def __init__(self, url: str = ""):
        """Initialize deterministic URL.

        Args:
            url: URL returned for every lookup.

        Returns:
            None: Initializer does not return values.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        self._url = url
        self.lookup_count = 0

    def adapter_find_load_balancer_url(self, name, namespace, ssl_enabled, cancellation) -> str:
        """Return the configured URL.

        Returns:
            str: Configured URL.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        _ = (name, namespace, ssl_enabled, cancellation)
        self.lookup_count += 1
        return self._url


class _ExplodingServiceLookup:
    """Fail the test if the cluster is consulted."""

    def adapter_get_service(self, name, namespace, cancellation):
        """Raise to prove the lookup was not expected.

        Raises:
            AssertionError: Always raised.
        """

        raise AssertionError(f"unexpected service lookup {namespace}/{name}")


def _build_spec(expose_mode: str = "", exposure_type: str = "ClusterIP", overrides=None) -> ApplicationSpec:
    return ApplicationSpec(
        identity=ApplicationIdentity(name="spinnaker", namespace=_NAMESPACE, resource_version="12"),
        expose_mode=expose_mode,
        exposure_type=exposure_type,
        overrides=overrides or {},
    )


def _build_detector(live_services, load_balancer_url: str = "") -> ConfigDriftDetector:
    return ConfigDriftDetector(
        expose_comparator=ExposeConfigComparator(
            live_services=live_services,
            load_balancers=_LoadBalancerStub(url=load_balancer_url),
            annotation_aggregator=SpecAnnotationAggregator(),
        )
    )


def _observed(name: str, exposure_type: str) -> ObservedService:
    return ObservedService(name=name, namespace=_NAMESPACE, exposure_type=exposure_type)


def test_deployer_detector_matching_reference_with_expose_none_is_up_to_date() -> None:
    """Report up to date when the recorded reference matches and nothing is exposed.

    Returns:
        None: Assertions validate verdict.

    Raises:
        AssertionError: Raised when verdict is unexpected.
    """

    detector = _build_detector(live_services=_ExplodingServiceLookup())
    status = ApplicationStatus(config_source=_LIVE_REFERENCE)

    for expose_mode in ("", "none", "None"):
        verdict = detector.deployer_is_up_to_date(
            spec=_build_spec(expose_mode=expose_mode),
            status=status,
            live_config_source=_LIVE_REFERENCE,
            properties=RenderedConfigProperties(),
        )
        assert verdict.up_to_date
        assert verdict.reason is None


def test_deployer_detector_resource_version_change_is_drift() -> None:
    """Report drift when only the recorded resource version differs.

    Returns:
        None: Assertions validate verdict.

    Raises:
        AssertionError: Raised when verdict is unexpected.
    """

    detector = _build_detector(live_services=_ExplodingServiceLookup())
    recorded_reference = ConfigSourceReference(
        kind=ConfigSourceKind.CONFIG_MAP,
        name="spinnaker-config",
        namespace=_NAMESPACE,
        resource_version="4710",
    )

    verdict = detector.deployer_is_up_to_date(
        spec=_build_spec(),
        status=ApplicationStatus(config_source=recorded_reference),
        live_config_source=_LIVE_REFERENCE,
        properties=RenderedConfigProperties(),
    )

    assert not verdict.up_to_date
    assert verdict.reason == DRIFT_REASON_CONFIG_SOURCE_CHANGED
    assert verdict.timeline[-1]["stage"] == "config_source"


def test_deployer_detector_variant_switch_with_same_coordinates_is_drift() -> None:
    """Report drift when the recorded reference is a Secret and the live one a ConfigMap.

    Returns:
        None: Assertions validate verdict.

    Raises:
        AssertionError: Raised when verdict is unexpected.
    """

    detector = _build_detector(live_services=_ExplodingServiceLookup())
    recorded_reference = ConfigSourceReference(
        kind=ConfigSourceKind.SECRET,
        name=_LIVE_REFERENCE.name,
        namespace=_LIVE_REFERENCE.namespace,
        resource_version=_LIVE_REFERENCE.resource_version,
    )

    verdict = detector.deployer_is_up_to_date(
        spec=_build_spec(),
        status=ApplicationStatus(config_source=recorded_reference),
        live_config_source=_LIVE_REFERENCE,
        properties=RenderedConfigProperties(),
    )

    assert not verdict.up_to_date
    assert verdict.reason == DRIFT_REASON_CONFIG_SOURCE_CHANGED


def test_deployer_detector_first_deployment_without_recorded_reference_is_drift() -> None:
    """Report drift, not an error, when no reference was ever recorded.

    Returns:
        None: Assertions validate verdict.

    Raises:
        AssertionError: Raised when verdict is unexpected.
    """

    detector = _build_detector(live_services=_ExplodingServiceLookup())

    verdict = detector.deployer_is_up_to_date(
        spec=_build_spec(expose_mode="service"),
        status=ApplicationStatus(),
        live_config_source=_LIVE_REFERENCE,
        properties=RenderedConfigProperties(),
    )

    assert not verdict.up_to_date
    assert verdict.reason == DRIFT_REASON_CONFIG_SOURCE_CHANGED


def test_deployer_detector_override_type_mismatch_is_drift() -> None:
    """Report drift when the `deck` override asks for LoadBalancer but ClusterIP is running.

    Returns:
        None: Assertions validate verdict.

    Raises:
        AssertionError: Raised when verdict is unexpected.
    """

    live_services = StaticServiceLookup(
        [_observed("spin-deck", "ClusterIP"), _observed("spin-gate", "ClusterIP")]
    )
    detector = _build_detector(live_services=live_services)

    verdict = detector.deployer_is_up_to_date(
        spec=_build_spec(
            expose_mode="service",
            overrides={"deck": ExposeServiceOverride(exposure_type="LoadBalancer")},
        ),
        status=ApplicationStatus(config_source=_LIVE_REFERENCE, ui_url="http://ui", api_url="http://api"),
        live_config_source=_LIVE_REFERENCE,
        properties=RenderedConfigProperties(),
    )

    assert not verdict.up_to_date
    assert verdict.reason == DRIFT_REASON_EXPOSURE_TYPE_CHANGED
    assert verdict.service == "spin-deck"


def test_deployer_detector_default_type_matching_observed_is_up_to_date() -> None:
    """Report up to date when no override exists and the default type matches.

    Returns:
        None: Assertions validate verdict.

    Raises:
        AssertionError: Raised when verdict is unexpected.
    """

    live_services = StaticServiceLookup(
        [_observed("spin-deck", "ClusterIP"), _observed("spin-gate", "ClusterIP")]
    )
    detector = _build_detector(live_services=live_services)

    verdict = detector.deployer_is_up_to_date(
        spec=_build_spec(expose_mode="service", exposure_type="ClusterIP"),
        status=ApplicationStatus(config_source=_LIVE_REFERENCE),
        live_config_source=_LIVE_REFERENCE,
        properties=RenderedConfigProperties(),
    )

    assert verdict.up_to_date
    passed_services = [event["service"] for event in verdict.timeline if event["stage"] == "expose_service"]
    assert passed_services == ["spin-deck", "spin-gate"]


def test_deployer_detector_unsupported_expose_mode_raises_configuration_error() -> None:
    """Raise a terminal configuration error instead of returning a drift verdict.

    Returns:
        None: Assertions validate raised error.

    Raises:
        AssertionError: Raised when no configuration error surfaces.
    """

    detector = _build_detector(live_services=_ExplodingServiceLookup())

    with pytest.raises(UnsupportedExposeModeError) as error_info:
        detector.deployer_is_up_to_date(
            spec=_build_spec(expose_mode="ingress"),
            status=ApplicationStatus(config_source=_LIVE_REFERENCE),
            live_config_source=_LIVE_REFERENCE,
            properties=RenderedConfigProperties(),
        )

    assert error_info.value.error_code == UNSUPPORTED_EXPOSE_MODE_CODE
    assert error_info.value.expose_mode == "ingress"


def test_deployer_detector_propagates_live_lookup_errors() -> None:
    """Propagate hard lookup failures unchanged.

    Returns:
        None: Assertions validate raised error.

    Raises:
        AssertionError: Raised when the error is swallowed.
    """

    class _UnreachableCluster:
        def adapter_get_service(self, name, namespace, cancellation):
            raise ConnectionError("cluster unreachable")

    detector = _build_detector(live_services=_UnreachableCluster())

    with pytest.raises(ConnectionError, match="cluster unreachable"):
        detector.deployer_is_up_to_date(
            spec=_build_spec(expose_mode="service"),
            status=ApplicationStatus(config_source=_LIVE_REFERENCE),
            live_config_source=_LIVE_REFERENCE,
            properties=RenderedConfigProperties(),
        )


def test_deployer_detector_cancelled_token_aborts_check() -> None:
    """Abort with a cancellation error instead of returning a verdict.

    Returns:
        None: Assertions validate raised error.

    Raises:
        AssertionError: Raised when a verdict is returned.
    """

    detector = _build_detector(live_services=_ExplodingServiceLookup())
    cancellation = CancellationToken()
    cancellation.cancellation_cancel()

    with pytest.raises(OperationCancelledError):
        detector.deployer_is_up_to_date(
            spec=_build_spec(),
            status=ApplicationStatus(config_source=_LIVE_REFERENCE),
            live_config_source=_LIVE_REFERENCE,
            properties=RenderedConfigProperties(),
            cancellation=cancellation,
        )


def test_deployer_detector_manifest_overrides_keyed_by_short_name_settle() -> None:
    """Apply `deck`/`gate` overrides from a parsed manifest so a matching cluster is up to date.

    Returns:
        None: Assertions validate verdict.

    Raises:
        AssertionError: Raised when manifest overrides are ignored.
    """

    spec = ApplicationSpec.from_manifest(
        {
            "metadata": {"name": "spinnaker", "namespace": _NAMESPACE, "resourceVersion": "12"},
            "spec": {
                "expose": {
                    "type": "service",
                    "service": {
                        "type": "ClusterIP",
                        "overrides": {"gate": {"type": "LoadBalancer", "annotations": {"x": "1"}}},
                    },
                },
            },
        }
    )
    live_services = StaticServiceLookup(
        [
            _observed("spin-deck", "ClusterIP"),
            ObservedService(
                name="spin-gate",
                namespace=_NAMESPACE,
                exposure_type="LoadBalancer",
                annotations={"x": "1"},
            ),
        ]
    )
    detector = _build_detector(live_services=live_services, load_balancer_url="http://gate.example.test")

    verdict = detector.deployer_is_up_to_date(
        spec=spec,
        status=ApplicationStatus(config_source=_LIVE_REFERENCE, ui_url="http://ui", api_url="http://api"),
        live_config_source=_LIVE_REFERENCE,
        properties=RenderedConfigProperties(),
    )

    assert verdict.up_to_date
    assert verdict.reason is None
