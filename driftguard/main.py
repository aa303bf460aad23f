"""Main module entrypoint for one-shot drift checks and status commits.

This module validates startup configuration, reads the application and its
configuration blob from the cluster, and runs one decision or one commit.
"""

import argparse
import json
from dataclasses import asdict, replace

from driftguard.bootstrap import (
    bootstrap_create_drift_detector,
    bootstrap_create_kubernetes_adapter,
    bootstrap_create_status_committer,
    bootstrap_create_status_store,
)
from driftguard.config import config_load_settings
from driftguard.db import SQLAlchemyApplicationStatusService
from driftguard.deployer import DeployerConfigurationError
from driftguard.domain import (
    ApplicationSpec,
    ApplicationStatus,
    CancellationToken,
    ConfigSourceReference,
    RenderedConfigProperties,
)

EXIT_UP_TO_DATE = 0
EXIT_DRIFT_DETECTED = 1
EXIT_CONFIGURATION_ERROR = 2


def main() -> None:
    """Run selected command with validated startup configuration.

    Returns:
        None: Exits the process with a command-specific status code.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        StatusUpdateConflictError: Raised when `commit` loses an optimistic concurrency race.
    """

    argument_parser = argparse.ArgumentParser(description="Application drift check entrypoint")
    argument_parser.add_argument(
        "command",
        choices=("check", "commit"),
        help="`check` prints the drift verdict, `commit` records the live configuration as applied",
        type=str,
    )
    argument_parser.add_argument("--name", dest="name", required=True, type=str, help="Application object name")
    argument_parser.add_argument("--namespace", dest="namespace", required=True, type=str, help="Application namespace")
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    cancellation = CancellationToken(timeout_seconds=settings.drift_check_timeout_seconds)
    kubernetes_adapter = bootstrap_create_kubernetes_adapter(settings)

    application_manifest = kubernetes_adapter.adapter_get_application(
        name=parsed_arguments.name,
        namespace=parsed_arguments.namespace,
        cancellation=cancellation,
    )
    spec = ApplicationSpec.from_manifest(application_manifest)
    status = ApplicationStatus.from_payload(application_manifest.get("status"))

    status_store = bootstrap_create_status_store(settings, kubernetes_adapter)
    if isinstance(status_store, SQLAlchemyApplicationStatusService):
        status_record = status_store.db_application_status_register(
            application_name=spec.identity.name,
            namespace=spec.identity.namespace,
        )
        spec = replace(spec, identity=status_record.identity)
        status = status_record.status

    if spec.config_source_kind is None:
        main_print_json({"error_code": "MISSING_CONFIG_SOURCE", "error_message": "spec.halConfig names no source"})
        raise SystemExit(EXIT_CONFIGURATION_ERROR)

    config_source_manifest = kubernetes_adapter.adapter_get_config_source(
        kind=spec.config_source_kind,
        name=spec.config_source_name,
        namespace=spec.identity.namespace,
        cancellation=cancellation,
    )
    live_config_source = ConfigSourceReference.from_manifest(config_source_manifest)

    if parsed_arguments.command == "commit":
        committer = bootstrap_create_status_committer(status_store)
        committed_status = committer.deployer_commit_status(
            spec=spec,
            status=status,
            config_source=live_config_source,
            cancellation=cancellation,
        )
        main_print_json({"committed_status": committed_status.to_payload()})
        return

    try:
        properties = RenderedConfigProperties.from_manifest(config_source_manifest, data_key=settings.config_data_key)
        detector = bootstrap_create_drift_detector(kubernetes_adapter)
        verdict = detector.deployer_is_up_to_date(
            spec=spec,
            status=status,
            live_config_source=live_config_source,
            properties=properties,
            cancellation=cancellation,
        )
    except DeployerConfigurationError as error:
        main_print_json({"error_code": error.error_code, "error_message": str(error)})
        raise SystemExit(EXIT_CONFIGURATION_ERROR) from error

    main_print_json(asdict(verdict))
    if not verdict.up_to_date:
        raise SystemExit(EXIT_DRIFT_DETECTED)


def main_print_json(payload: dict[str, object]) -> None:
    """Print one JSON document to stdout.

    Args:
        payload: JSON-compatible mapping.

    Returns:
        None: Prints as side effect.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


if __name__ == "__main__":
    main()
