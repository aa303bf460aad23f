"""Kubernetes API adapter for live service lookups and status record writes."""

from __future__ import annotations

from typing import Any, Callable, Final, Literal, TypeVar

import urllib3
from kubernetes.client import ApiException, CoreV1Api, CustomObjectsApi

from driftguard.domain import (
    ApplicationIdentity,
    ApplicationStatus,
    CancellationToken,
    ConfigSourceKind,
    ObservedService,
    StatusPersistenceError,
    StatusRecordNotFoundError,
    StatusUpdateConflictError,
)

from .errors import (
    KubernetesAdapterConnectionError,
    KubernetesAdapterTimeoutError,
    KubernetesAuthorizationError,
    KubernetesResponseError,
)
from .interfaces import LiveServicePort, LoadBalancerPort, StatusPersistencePort

StatusUpdateMode = Literal["status_subresource", "full_object"]

_ResultT = TypeVar("_ResultT")


class KubernetesApiAdapter(LiveServicePort, LoadBalancerPort, StatusPersistencePort):
    """Adapter implementation over the official Kubernetes Python client.

    Status writes carry `metadata.resourceVersion` so the API server rejects
    them with `409 Conflict` when the object changed since it was read.
    """

    _DEFAULT_PORT_BY_SCHEME: Final[dict[str, int]] = {"http": 80, "https": 443}

    def __init__(
        self,
        core_api: CoreV1Api,
        custom_objects_api: CustomObjectsApi,
        application_group: str = "spinnaker.io",
        application_version: str = "v1alpha1",
        application_plural: str = "spinnakerservices",
        application_kind: str = "SpinnakerService",
        status_update_mode: StatusUpdateMode = "status_subresource",
        request_timeout_seconds: float = 30.0,
    ):
        """Initialize Kubernetes API adapter.

        Args:
            core_api: Client for core resources (services, ConfigMaps, Secrets).
            custom_objects_api: Client for the application custom resource.
            application_group: Custom resource API group.
            application_version: Custom resource API version.
            application_plural: Custom resource plural name.
            application_kind: Custom resource kind.
            status_update_mode: `status_subresource` writes `/status`; `full_object` writes the whole resource.
            request_timeout_seconds: Upper bound for one API request.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        if core_api is None:
            raise ValueError("core_api must not be None")
        if custom_objects_api is None:
            raise ValueError("custom_objects_api must not be None")
        if status_update_mode not in {"status_subresource", "full_object"}:
            raise ValueError("status_update_mode must be one of: status_subresource, full_object")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")
        for label, value in (
            ("application_group", application_group),
            ("application_version", application_version),
            ("application_plural", application_plural),
            ("application_kind", application_kind),
        ):
            if not value.strip():
                raise ValueError(f"{label} must not be blank")

        self._core_api = core_api
        self._custom_objects_api = custom_objects_api
        self._application_group = application_group.strip()
        self._application_version = application_version.strip()
        self._application_plural = application_plural.strip()
        self._application_kind = application_kind.strip()
        self._status_update_mode = status_update_mode
        self._request_timeout_seconds = request_timeout_seconds

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
            ObservedService | None: Observed state, or None when the service does not exist.

        Raises:
            KubernetesAdapterConnectionError: Raised when the API server cannot be reached.
            KubernetesAdapterTimeoutError: Raised when the request times out.
            KubernetesResponseError: Raised for unexpected responses.
        """

        service = self._adapter_read_or_none(
            description=f"service {namespace}/{name}",
            cancellation=cancellation,
            read_call=lambda timeout: self._core_api.read_namespaced_service(
                name=name, namespace=namespace, _request_timeout=timeout
            ),
        )
        if service is None:
            return None
        return self._adapter_parse_service(service)

    def adapter_find_load_balancer_url(
        self,
        name: str,
        namespace: str,
        ssl_enabled: bool,
        cancellation: CancellationToken,
    ) -> str:
        """Build the external URL from the first load-balancer ingress of a service.

        Args:
            name: Service object name.
            namespace: Service object namespace.
            ssl_enabled: Selects `https` over `http`.
            cancellation: Caller cancellation token.

        Returns:
            str: URL, or an empty string when the service or its address does not exist yet.

        Raises:
            KubernetesAdapterConnectionError: Raised when the API server cannot be reached.
            KubernetesAdapterTimeoutError: Raised when the request times out.
            KubernetesResponseError: Raised for unexpected responses.
        """

        observed_service = self.adapter_get_service(name=name, namespace=namespace, cancellation=cancellation)
        if observed_service is None or not observed_service.load_balancer_hosts:
            return ""

        scheme = "https" if ssl_enabled else "http"
        host = observed_service.load_balancer_hosts[0]
        if observed_service.ports and observed_service.ports[0] != self._DEFAULT_PORT_BY_SCHEME[scheme]:
            return f"{scheme}://{host}:{observed_service.ports[0]}"
        return f"{scheme}://{host}"

    def adapter_get_application(self, name: str, namespace: str, cancellation: CancellationToken) -> dict[str, Any]:
        """Fetch the application custom resource.

        Args:
            name: Application object name.
            namespace: Application object namespace.
            cancellation: Caller cancellation token.

        Returns:
            dict[str, Any]: Custom resource payload.

        Raises:
            LookupError: Raised when the application does not exist.
            KubernetesAdapterError: Raised for transport or response failures.
        """

        application_payload = self._adapter_get_application_or_none(
            name=name,
            namespace=namespace,
            cancellation=cancellation,
        )
        if application_payload is None:
            raise LookupError(f"application {namespace}/{name} not found")
        return application_payload

    def adapter_get_config_source(
        self,
        kind: ConfigSourceKind,
        name: str,
        namespace: str,
        cancellation: CancellationToken,
    ) -> dict[str, Any]:
        """Fetch the ConfigMap or Secret holding the configuration blob.

        Args:
            kind: Config source kind.
            name: Object name.
            namespace: Object namespace.
            cancellation: Caller cancellation token.

        Returns:
            dict[str, Any]: Object payload in API field naming, including `kind`,
            `metadata.resourceVersion` and `data`.

        Raises:
            LookupError: Raised when the object does not exist.
            KubernetesAdapterError: Raised for transport or response failures.
        """

        if kind is ConfigSourceKind.CONFIG_MAP:
            kind_name = "ConfigMap"
            read_method = self._core_api.read_namespaced_config_map
        else:
            kind_name = "Secret"
            read_method = self._core_api.read_namespaced_secret

        source_object = self._adapter_read_or_none(
            description=f"{kind_name} {namespace}/{name}",
            cancellation=cancellation,
            read_call=lambda timeout: read_method(name=name, namespace=namespace, _request_timeout=timeout),
        )
        if source_object is None:
            raise LookupError(f"config source {kind_name} {namespace}/{name} not found")

        source_payload = self._core_api.api_client.sanitize_for_serialization(source_object)
        source_payload.setdefault("kind", kind_name)
        return source_payload

    def status_persist(
        self,
        identity: ApplicationIdentity,
        status: ApplicationStatus,
        cancellation: CancellationToken,
    ) -> None:
        """Write the full status record guarded by the application resource version.

        Args:
            identity: Application identity and expected version.
            status: Full status record.
            cancellation: Caller cancellation token.

        Returns:
            None: The write either succeeds or raises.

        Raises:
            StatusUpdateConflictError: Raised when the API server reports a version conflict.
            StatusRecordNotFoundError: Raised when the application does not exist.
            StatusPersistenceError: Raised for other rejected writes.
            KubernetesAdapterError: Raised for transport failures.
        """

        if self._status_update_mode == "full_object":
            request_body = self._adapter_build_full_object_body(identity=identity, status=status, cancellation=cancellation)
            write_method = self._custom_objects_api.replace_namespaced_custom_object
        else:
            request_body = {
                "apiVersion": f"{self._application_group}/{self._application_version}",
                "kind": self._application_kind,
                "metadata": {
                    "name": identity.name,
                    "namespace": identity.namespace,
                    "resourceVersion": identity.resource_version,
                },
                "status": status.to_payload(),
            }
            write_method = self._custom_objects_api.replace_namespaced_custom_object_status

        try:
            self._adapter_call(
                description=f"status write {identity.namespace}/{identity.name}",
                cancellation=cancellation,
                api_call=lambda timeout: write_method(
                    group=self._application_group,
                    version=self._application_version,
                    namespace=identity.namespace,
                    plural=self._application_plural,
                    name=identity.name,
                    body=request_body,
                    _request_timeout=timeout,
                ),
            )
        except ApiException as error:
            raise self._adapter_status_write_error(error=error, identity=identity) from error

    def _adapter_build_full_object_body(
        self,
        identity: ApplicationIdentity,
        status: ApplicationStatus,
        cancellation: CancellationToken,
    ) -> dict[str, Any]:
        """Read the current resource and replace its status for a whole-object update.

        Args:
            identity: Application identity and expected version.
            status: Full status record.
            cancellation: Caller cancellation token.

        Returns:
            dict[str, Any]: Resource body to replace.

        Raises:
            StatusUpdateConflictError: Raised when the stored version already moved on.
            StatusRecordNotFoundError: Raised when the application does not exist.
        """

        current_payload = self._adapter_get_application_or_none(
            name=identity.name,
            namespace=identity.namespace,
            cancellation=cancellation,
        )
        if current_payload is None:
            raise StatusRecordNotFoundError(
                "application not found for status update",
                application_name=identity.name,
                namespace=identity.namespace,
            )

        current_version = str((current_payload.get("metadata") or {}).get("resourceVersion", ""))
        if current_version != identity.resource_version:
            raise StatusUpdateConflictError(
                f"application version changed: expected={identity.resource_version}, actual={current_version}",
                application_name=identity.name,
                namespace=identity.namespace,
            )

        current_payload["status"] = status.to_payload()
        return current_payload

    def _adapter_status_write_error(self, error: ApiException, identity: ApplicationIdentity) -> StatusPersistenceError:
        """Map a rejected status write onto the status persistence error family."""

        if error.status == 409:
            return StatusUpdateConflictError(
                "status update rejected by optimistic concurrency check",
                application_name=identity.name,
                namespace=identity.namespace,
            )
        if error.status == 404:
            return StatusRecordNotFoundError(
                f"status update target not found (mode={self._status_update_mode})",
                application_name=identity.name,
                namespace=identity.namespace,
            )
        return StatusPersistenceError(
            f"status update failed with HTTP {error.status}",
            application_name=identity.name,
            namespace=identity.namespace,
        )

    def _adapter_get_application_or_none(
        self,
        name: str,
        namespace: str,
        cancellation: CancellationToken,
    ) -> dict[str, Any] | None:
        """Fetch the application custom resource, or None on `404`."""

        application_payload = self._adapter_read_or_none(
            description=f"application {namespace}/{name}",
            cancellation=cancellation,
            read_call=lambda timeout: self._custom_objects_api.get_namespaced_custom_object(
                group=self._application_group,
                version=self._application_version,
                namespace=namespace,
                plural=self._application_plural,
                name=name,
                _request_timeout=timeout,
            ),
        )
        if application_payload is not None and not isinstance(application_payload, dict):
            raise KubernetesResponseError(f"Kubernetes API returned a non-object body for application {namespace}/{name}")
        return application_payload

    def _adapter_read_or_none(
        self,
        description: str,
        cancellation: CancellationToken,
        read_call: Callable[[float], _ResultT],
    ) -> _ResultT | None:
        """Run one read and return None on `404`.

        Args:
            description: Human-readable target used in error messages.
            cancellation: Caller cancellation token.
            read_call: Client call receiving the request timeout.

        Returns:
            _ResultT | None: Client result or None.

        Raises:
            KubernetesAuthorizationError: Raised on `401` or `403`.
            KubernetesResponseError: Raised for other error responses.
        """

        try:
            return self._adapter_call(description=description, cancellation=cancellation, api_call=read_call)
        except ApiException as error:
            if error.status == 404:
                return None
            if error.status in {401, 403}:
                raise KubernetesAuthorizationError(
                    f"Kubernetes API denied read of {description}",
                    status_code=error.status,
                ) from error
            raise KubernetesResponseError(
                f"Kubernetes API returned HTTP {error.status} for {description}",
                status_code=error.status,
            ) from error

    def _adapter_call(
        self,
        description: str,
        cancellation: CancellationToken,
        api_call: Callable[[float], _ResultT],
    ) -> _ResultT:
        """Run one client call with a timeout bounded by the caller deadline.

        Args:
            description: Human-readable target used in error messages.
            cancellation: Caller cancellation token.
            api_call: Client call receiving the request timeout.

        Returns:
            _ResultT: Client result; `ApiException` is left to the caller.

        Raises:
            OperationCancelledError: Raised when the token is cancelled or expired.
            KubernetesAdapterTimeoutError: Raised when the transport times out.
            KubernetesAdapterConnectionError: Raised when the transport fails.
        """

        cancellation.cancellation_raise_if_cancelled(description)
        timeout_seconds = self._request_timeout_seconds
        remaining_seconds = cancellation.cancellation_remaining_seconds()
        if remaining_seconds is not None:
            timeout_seconds = min(timeout_seconds, remaining_seconds)

        try:
            return api_call(timeout_seconds)
        except urllib3.exceptions.MaxRetryError as error:
            if isinstance(error.reason, urllib3.exceptions.TimeoutError):
                raise KubernetesAdapterTimeoutError(f"Kubernetes API request timed out: {description}") from error
            raise KubernetesAdapterConnectionError(f"Kubernetes API request failed: {description}") from error
        except urllib3.exceptions.TimeoutError as error:
            raise KubernetesAdapterTimeoutError(f"Kubernetes API request timed out: {description}") from error
        except urllib3.exceptions.HTTPError as error:
            raise KubernetesAdapterConnectionError(f"Kubernetes API request failed: {description}") from error

    def _adapter_parse_service(self, service: Any) -> ObservedService:
        """Translate a `V1Service` into the observed-state contract."""

        metadata = service.metadata
        service_spec = service.spec
        load_balancer = service.status.load_balancer if service.status is not None else None
        ingress_entries = (load_balancer.ingress if load_balancer is not None else None) or []

        load_balancer_hosts = tuple(
            str(entry.hostname or entry.ip) for entry in ingress_entries if entry.hostname or entry.ip
        )
        ports = tuple(int(port.port) for port in (service_spec.ports if service_spec is not None else None) or [])
        return ObservedService(
            name=str(metadata.name or ""),
            namespace=str(metadata.namespace or ""),
            exposure_type=str((service_spec.type if service_spec is not None else "") or ""),
            annotations={str(key): str(value) for key, value in (metadata.annotations or {}).items()},
            load_balancer_hosts=load_balancer_hosts,
            ports=ports,
        )
