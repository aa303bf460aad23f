"""Typed result contracts for drift checks."""

from dataclasses import dataclass, field
from typing import Any, Final

DRIFT_REASON_CONFIG_SOURCE_CHANGED: Final[str] = "config_source_changed"
DRIFT_REASON_SERVICE_MISSING: Final[str] = "service_missing"
DRIFT_REASON_EXPOSURE_TYPE_CHANGED: Final[str] = "exposure_type_changed"
DRIFT_REASON_ANNOTATIONS_CHANGED: Final[str] = "annotations_changed"
DRIFT_REASON_STATUS_URL_AVAILABLE: Final[str] = "status_url_available"


@dataclass(frozen=True)
class ExposeCheckResult:
    """Outcome of the expose configuration check.

    Attributes:
        up_to_date: True when every exposed service matches its desired state.
        reason: Drift reason code when not up to date.
        service: Canonical name of the first drifted service.
        timeline: Structured events describing each check.
    """

    up_to_date: bool
    reason: str | None = None
    service: str | None = None
    timeline: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class DriftVerdict:
    """Final answer of one drift check.

    Attributes:
        up_to_date: True when no redeploy is needed.
        reason: Drift reason code when a redeploy is needed.
        service: Canonical name of the drifted service, for expose-related drift.
        timeline: Structured events describing each check.
    """

    up_to_date: bool
    reason: str | None = None
    service: str | None = None
    timeline: list[dict[str, Any]] = field(default_factory=list)
