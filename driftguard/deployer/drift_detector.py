"""Drift detector deciding whether a running deployment matches its desired state."""

from __future__ import annotations

from typing import Any

from driftguard.adapters import ConfigPropertyPort
from driftguard.domain import (
    ApplicationSpec,
    ApplicationStatus,
    CancellationToken,
    ConfigSourceReference,
    domain_build_stage_event,
    domain_never_cancelled,
)

from .config_source import deployer_config_source_matches
from .expose import ExposeConfigComparator
from .interfaces import DRIFT_REASON_CONFIG_SOURCE_CHANGED, DriftVerdict


class ConfigDriftDetector:
    """Compose config-source and expose checks into one verdict.

    The config source is checked first; a mismatch returns immediately
    without touching the cluster. Errors from the expose checks propagate
    unchanged, including terminal configuration errors.
    """

    def __init__(self, expose_comparator: ExposeConfigComparator):
        """Initialize detector dependencies.

        Args:
            expose_comparator: Expose configuration comparator.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when the comparator is missing.
        """

        if expose_comparator is None:
            raise ValueError("expose_comparator must not be None")
        self._expose_comparator = expose_comparator

    def deployer_is_up_to_date(
        self,
        spec: ApplicationSpec,
        status: ApplicationStatus,
        live_config_source: ConfigSourceReference | None,
        properties: ConfigPropertyPort,
        cancellation: CancellationToken | None = None,
    ) -> DriftVerdict:
        """Return whether the running deployment matches the desired state.

        Args:
            spec: Desired application state.
            status: Current status record.
            live_config_source: Reference to the configuration blob currently declared.
            properties: Rendered configuration properties.
            cancellation: Optional caller cancellation token.

        Returns:
            DriftVerdict: Verdict with reason code and timeline.

        Raises:
            UnsupportedExposeModeError: Raised when the expose mode is not supported.
            OperationCancelledError: Raised when the caller cancelled the check.
            ConnectionError: Raised when a live lookup cannot reach the cluster.
            TimeoutError: Raised when a live lookup times out.
        """

        active_cancellation = cancellation or domain_never_cancelled()
        active_cancellation.cancellation_raise_if_cancelled("drift check")
        timeline: list[dict[str, Any]] = []

        if not deployer_config_source_matches(status.config_source, live_config_source):
            timeline.append(
                domain_build_stage_event(
                    stage="config_source",
                    status="drift",
                    details={
                        "recorded": status.config_source.to_payload() if status.config_source is not None else None,
                        "live": live_config_source.to_payload() if live_config_source is not None else None,
                    },
                )
            )
            return DriftVerdict(up_to_date=False, reason=DRIFT_REASON_CONFIG_SOURCE_CHANGED, timeline=timeline)
        timeline.append(domain_build_stage_event(stage="config_source", status="passed"))

        expose_result = self._expose_comparator.expose_is_up_to_date(
            spec=spec,
            properties=properties,
            status=status,
            cancellation=active_cancellation,
        )
        timeline.extend(expose_result.timeline)
        if not expose_result.up_to_date:
            return DriftVerdict(
                up_to_date=False,
                reason=expose_result.reason,
                service=expose_result.service,
                timeline=timeline,
            )

        return DriftVerdict(up_to_date=True, timeline=timeline)
