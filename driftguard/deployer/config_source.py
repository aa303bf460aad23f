"""Comparison of the recorded and live configuration blob references."""

from __future__ import annotations

from driftguard.domain import ConfigSourceReference


def deployer_config_source_matches(
    recorded: ConfigSourceReference | None,
    live: ConfigSourceReference | None,
) -> bool:
    """Return whether the recorded reference still points at the live blob version.

    A missing recorded reference (first deployment) or a switch between
    ConfigMap and Secret is a mismatch, not an error.

    Args:
        recorded: Reference stored in the status record.
        live: Reference of the blob currently declared by the application.

    Returns:
        bool: True when kind, name, namespace and resource version are all equal.

    Raises:
        RuntimeError: This function does not raise runtime errors.
    """

    if recorded is None or live is None:
        return False
    return (
        recorded.kind is live.kind
        and recorded.name == live.name
        and recorded.namespace == live.namespace
        and recorded.resource_version == live.resource_version
    )
