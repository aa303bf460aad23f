"""Structured timeline events attached to drift verdicts and commit results."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_build_stage_event(
    stage: str,
    status: str,
    service: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured timeline event payload.

    Comparators return these events to their caller instead of logging, so
    the reconcile loop decides where (and whether) they are emitted.

    Args:
        stage: Check or step name, for example `config_source` or `expose_type`.
        status: Outcome marker (`passed`, `drift`, `skipped`, `started`, ...).
        service: Optional canonical name of the logical service the event is about.
        details: Optional structured details object.

    Returns:
        dict[str, object]: Structured timeline event.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    event_payload: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if service is not None:
        event_payload["service"] = service
    if details is not None:
        event_payload["details"] = details
    return event_payload
