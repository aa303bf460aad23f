"""Dependency assembly for drift checks and status commits."""

from kubernetes import client, config

from driftguard.adapters import (
    KubernetesApiAdapter,
    LiveServicePort,
    SpecAnnotationAggregator,
    StatusPersistencePort,
)
from driftguard.config import AppSettings, SettingsLoadError, config_load_settings
from driftguard.db import SQLAlchemyApplicationStatusService, db_create_engine
from driftguard.deployer import ConfigDriftDetector, ExposeConfigComparator, StatusCommitter


def bootstrap_load_kubernetes_configuration(settings: AppSettings) -> client.Configuration:
    """Load cluster credentials for the configured mode.

    `in_cluster` reads the service-account token and CA mounted under
    `/var/run/secrets/kubernetes.io/serviceaccount`. `auto` tries that first
    and falls back to kubeconfig when not running inside a pod.

    Args:
        settings: Runtime settings.

    Returns:
        client.Configuration: Client configuration carrying host, credentials and CA.

    Raises:
        SettingsLoadError: Raised when no usable cluster credentials are found.
    """

    client_configuration = client.Configuration()
    try:
        if settings.kubernetes_config_mode == "kubeconfig":
            _bootstrap_load_kubeconfig(settings, client_configuration)
        elif settings.kubernetes_config_mode == "in_cluster":
            config.load_incluster_config(client_configuration=client_configuration)
        else:
            try:
                config.load_incluster_config(client_configuration=client_configuration)
            except config.ConfigException:
                _bootstrap_load_kubeconfig(settings, client_configuration)
    except config.ConfigException as error:
        raise SettingsLoadError(
            f"Kubernetes credentials could not be loaded (mode={settings.kubernetes_config_mode}): {error}"
        ) from error
    return client_configuration


def _bootstrap_load_kubeconfig(settings: AppSettings, client_configuration: client.Configuration) -> None:
    config.load_kube_config(
        config_file=settings.kubeconfig_path,
        context=settings.kubeconfig_context,
        client_configuration=client_configuration,
    )


def bootstrap_create_kubernetes_adapter(
    settings: AppSettings | None = None,
    client_configuration: client.Configuration | None = None,
) -> KubernetesApiAdapter:
    """Build the Kubernetes API adapter from runtime settings.

    Args:
        settings: Optional pre-loaded settings; loaded from the environment when omitted.
        client_configuration: Optional pre-loaded client configuration; loaded per settings when omitted.

    Returns:
        KubernetesApiAdapter: Configured adapter.

    Raises:
        SettingsLoadError: Raised when settings or cluster credentials cannot be loaded.
    """

    resolved_settings = settings or config_load_settings()
    api_client = client.ApiClient(
        configuration=client_configuration or bootstrap_load_kubernetes_configuration(resolved_settings)
    )

    return KubernetesApiAdapter(
        core_api=client.CoreV1Api(api_client),
        custom_objects_api=client.CustomObjectsApi(api_client),
        application_group=resolved_settings.application_group,
        application_version=resolved_settings.application_version,
        application_plural=resolved_settings.application_plural,
        application_kind=resolved_settings.application_kind,
        status_update_mode=resolved_settings.status_update_mode,
        request_timeout_seconds=resolved_settings.kubernetes_request_timeout_seconds,
    )


def bootstrap_create_drift_detector(
    kubernetes_adapter: KubernetesApiAdapter,
    live_services: LiveServicePort | None = None,
) -> ConfigDriftDetector:
    """Build the drift detector.

    Args:
        kubernetes_adapter: Adapter used for load-balancer lookups and, by default, live services.
        live_services: Optional live service port, for callers holding pre-fetched services.

    Returns:
        ConfigDriftDetector: Fully wired detector.

    Raises:
        ValueError: Raised when dependencies are missing.
    """

    return ConfigDriftDetector(
        expose_comparator=ExposeConfigComparator(
            live_services=live_services or kubernetes_adapter,
            load_balancers=kubernetes_adapter,
            annotation_aggregator=SpecAnnotationAggregator(),
        )
    )


def bootstrap_create_status_store(
    settings: AppSettings,
    kubernetes_adapter: KubernetesApiAdapter,
) -> StatusPersistencePort:
    """Select the status store configured by `status_store_backend`.

    Args:
        settings: Runtime settings.
        kubernetes_adapter: Adapter used for the `kubernetes` backend.

    Returns:
        StatusPersistencePort: Status store.

    Raises:
        ValueError: Raised when the database URL is blank.
    """

    if settings.status_store_backend == "database":
        return SQLAlchemyApplicationStatusService(engine=db_create_engine(database_url=settings.database_url))
    return kubernetes_adapter


def bootstrap_create_status_committer(status_store: StatusPersistencePort) -> StatusCommitter:
    """Build the status committer over the selected status store.

    Args:
        status_store: Store returned by `bootstrap_create_status_store`.

    Returns:
        StatusCommitter: Fully wired committer.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    return StatusCommitter(status_store=status_store)
