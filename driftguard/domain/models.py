"""Typed domain models shared across runtime layers.

These contracts describe the desired state of one composite application, the
state observed on the cluster, and the persisted status record. Payload
helpers translate between the models and the custom resource JSON shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class ConfigSourceKind(Enum):
    """Kinds of objects that can hold the configuration blob."""

    CONFIG_MAP = "configMap"
    SECRET = "secret"

    @classmethod
    def from_manifest_kind(cls, manifest_kind: str) -> ConfigSourceKind:
        """Map a Kubernetes object kind onto a config source kind.

        Args:
            manifest_kind: Object kind such as `ConfigMap` or `Secret`.

        Returns:
            ConfigSourceKind: Matching source kind.

        Raises:
            ValueError: Raised when the kind cannot hold a configuration blob.
        """

        normalized_kind = manifest_kind.strip().lower()
        if normalized_kind == "configmap":
            return cls.CONFIG_MAP
        if normalized_kind == "secret":
            return cls.SECRET
        raise ValueError(f"unsupported config source kind={manifest_kind}")


@dataclass(frozen=True)
class ConfigSourceReference:
    """Versioned reference to the configuration blob.

    Attributes:
        kind: Tag telling which object kind holds the blob.
        name: Object name.
        namespace: Object namespace.
        resource_version: Opaque token that changes on every object update.
    """

    kind: ConfigSourceKind
    name: str
    namespace: str
    resource_version: str

    def to_payload(self) -> dict[str, dict[str, str]]:
        """Serialize as the single-key status payload for this variant."""

        return {
            self.kind.value: {
                "name": self.name,
                "namespace": self.namespace,
                "resourceVersion": self.resource_version,
            }
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> ConfigSourceReference | None:
        """Parse a status payload holding at most one populated variant.

        Args:
            payload: Mapping with optional `configMap` or `secret` entries.

        Returns:
            ConfigSourceReference | None: Parsed reference, or None when nothing is recorded.

        Raises:
            ValueError: Raised when both variants are populated.
        """

        if not payload:
            return None
        populated = [kind for kind in ConfigSourceKind if payload.get(kind.value)]
        if not populated:
            return None
        if len(populated) > 1:
            raise ValueError("config source payload must populate exactly one of configMap, secret")

        kind = populated[0]
        reference_payload = payload[kind.value]
        return cls(
            kind=kind,
            name=str(reference_payload.get("name", "")),
            namespace=str(reference_payload.get("namespace", "")),
            resource_version=str(reference_payload.get("resourceVersion", "")),
        )

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> ConfigSourceReference:
        """Build the live reference from a ConfigMap or Secret manifest.

        Args:
            manifest: Kubernetes object as a mapping.

        Returns:
            ConfigSourceReference: Reference to the live object version.

        Raises:
            ValueError: Raised when kind or metadata are missing or unsupported.
        """

        metadata = manifest.get("metadata") or {}
        name = str(metadata.get("name", "")).strip()
        if not name:
            raise ValueError("config source manifest metadata.name must not be blank")
        return cls(
            kind=ConfigSourceKind.from_manifest_kind(str(manifest.get("kind", ""))),
            name=name,
            namespace=str(metadata.get("namespace", "")),
            resource_version=str(metadata.get("resourceVersion", "")),
        )


class ExposeMode(Enum):
    """Supported policies for exposing logical services."""

    NONE = "none"
    SERVICE = "service"


class LogicalService(Enum):
    """Logical services of the composite application that may be exposed.

    Each member carries its deployed object name, the short name used for
    override and annotation lookups, the rendered-config key of its SSL flag,
    and the status field holding its external URL.
    """

    UI = ("spin-deck", "deck", "security.uiSecurity.ssl.enabled", "ui_url")
    API_GATEWAY = ("spin-gate", "gate", "security.apiSecurity.ssl.enabled", "api_url")

    def __init__(self, canonical_name: str, short_name: str, ssl_property: str, status_url_field: str):
        self.canonical_name = canonical_name
        self.short_name = short_name
        self.ssl_property = ssl_property
        self.status_url_field = status_url_field


# Evaluation order of the expose check.
REQUIRED_EXPOSED_SERVICES: tuple[LogicalService, ...] = (LogicalService.UI, LogicalService.API_GATEWAY)


@dataclass(frozen=True)
class ExposeServiceOverride:
    """Per-service exposure override.

    Attributes:
        exposure_type: Service type override; empty means "use the application-wide type".
        annotations: Extra annotations for this service only.
    """

    exposure_type: str = ""
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ApplicationIdentity:
    """Identity and version of the application object being reconciled.

    Attributes:
        name: Application object name.
        namespace: Application object namespace.
        resource_version: Version token used as the optimistic concurrency key.
    """

    name: str
    namespace: str
    resource_version: str


@dataclass(frozen=True)
class ApplicationSpec:
    """Desired state of one composite application.

    Attributes:
        identity: Object identity and version.
        expose_mode: Raw exposure mode string as declared by the user.
        exposure_type: Default service type for every exposed service.
        annotations: Annotations applied to every exposed service.
        overrides: Per-service overrides keyed by logical service short name.
        config_source_kind: Kind of the object holding the configuration blob, if declared.
        config_source_name: Name of that object, in the application namespace.
    """

    identity: ApplicationIdentity
    expose_mode: str = ""
    exposure_type: str = ""
    annotations: dict[str, str] = field(default_factory=dict)
    overrides: dict[str, ExposeServiceOverride] = field(default_factory=dict)
    config_source_kind: ConfigSourceKind | None = None
    config_source_name: str = ""

    def spec_desired_exposure_type(self, service: LogicalService) -> str:
        """Return the override type for the service when set, else the application-wide type."""

        override = self.overrides.get(service.short_name)
        if override is not None and override.exposure_type:
            return override.exposure_type
        return self.exposure_type

    @classmethod
    def from_manifest(cls, manifest: Mapping[str, Any]) -> ApplicationSpec:
        """Parse the desired state from an application custom resource.

        Args:
            manifest: Custom resource as a mapping.

        Returns:
            ApplicationSpec: Parsed desired state.

        Raises:
            ValueError: Raised when identity metadata is missing.
        """

        metadata = manifest.get("metadata") or {}
        name = str(metadata.get("name", "")).strip()
        if not name:
            raise ValueError("application manifest metadata.name must not be blank")

        spec_payload = manifest.get("spec") or {}
        expose_payload = spec_payload.get("expose") or {}
        service_payload = expose_payload.get("service") or {}
        overrides = {
            str(short_name): ExposeServiceOverride(
                exposure_type=str((override_payload or {}).get("type", "") or ""),
                annotations=_domain_string_map((override_payload or {}).get("annotations")),
            )
            for short_name, override_payload in (service_payload.get("overrides") or {}).items()
        }

        config_source_kind = None
        config_source_name = ""
        hal_config_payload = spec_payload.get("halConfig") or {}
        for kind in ConfigSourceKind:
            declared_name = str((hal_config_payload.get(kind.value) or {}).get("name", "") or "").strip()
            if declared_name:
                config_source_kind = kind
                config_source_name = declared_name
                break

        return cls(
            identity=ApplicationIdentity(
                name=name,
                namespace=str(metadata.get("namespace", "")),
                resource_version=str(metadata.get("resourceVersion", "")),
            ),
            expose_mode=str(expose_payload.get("type", "") or ""),
            exposure_type=str(service_payload.get("type", "") or ""),
            annotations=_domain_string_map(service_payload.get("annotations")),
            overrides=overrides,
            config_source_kind=config_source_kind,
            config_source_name=config_source_name,
        )


@dataclass(frozen=True)
class ObservedService:
    """Live state of one logical service on the cluster.

    Attributes:
        name: Deployed object name.
        namespace: Deployed object namespace.
        exposure_type: Observed service type.
        annotations: Observed annotations.
        load_balancer_hosts: Hostnames or IPs assigned by the load balancer, in order.
        ports: Declared service ports.
    """

    name: str
    namespace: str
    exposure_type: str
    annotations: dict[str, str] = field(default_factory=dict)
    load_balancer_hosts: tuple[str, ...] = ()
    ports: tuple[int, ...] = ()


@dataclass(frozen=True)
class ApplicationStatus:
    """Persisted status record of one application.

    Attributes:
        config_source: Last applied config source reference, if any.
        api_url: Externally visible API gateway URL.
        ui_url: Externally visible UI URL.
        last_configuration_time: Time of the last successful commit.
        extra_fields: Status fields owned by other reconcile steps, kept verbatim.
    """

    config_source: ConfigSourceReference | None = None
    api_url: str = ""
    ui_url: str = ""
    last_configuration_time: datetime | None = None
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def status_url_for(self, service: LogicalService) -> str:
        """Return the recorded external URL of one logical service."""

        return getattr(self, service.status_url_field)

    def to_payload(self) -> dict[str, Any]:
        """Serialize as the custom resource status payload."""

        payload: dict[str, Any] = dict(self.extra_fields)
        payload["halConfig"] = self.config_source.to_payload() if self.config_source is not None else {}
        payload["apiUrl"] = self.api_url
        payload["uiUrl"] = self.ui_url
        payload["lastConfigurationTime"] = (
            self.last_configuration_time.isoformat() if self.last_configuration_time is not None else None
        )
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> ApplicationStatus:
        """Parse a custom resource status payload.

        Args:
            payload: Status mapping, or None for a never-reconciled object.

        Returns:
            ApplicationStatus: Parsed status.

        Raises:
            ValueError: Raised when the payload is malformed.
        """

        if not payload:
            return cls()

        known_keys = {"halConfig", "apiUrl", "uiUrl", "lastConfigurationTime"}
        raw_time = payload.get("lastConfigurationTime")
        last_configuration_time = None
        if raw_time:
            last_configuration_time = datetime.fromisoformat(str(raw_time))
            if last_configuration_time.tzinfo is None:
                last_configuration_time = last_configuration_time.replace(tzinfo=timezone.utc)

        return cls(
            config_source=ConfigSourceReference.from_payload(payload.get("halConfig")),
            api_url=str(payload.get("apiUrl") or ""),
            ui_url=str(payload.get("uiUrl") or ""),
            last_configuration_time=last_configuration_time,
            extra_fields={key: value for key, value in payload.items() if key not in known_keys},
        )


def _domain_string_map(raw_value: Any) -> dict[str, str]:
    """Coerce an optional manifest mapping into a string-to-string dict."""

    if not raw_value:
        return {}
    if not isinstance(raw_value, Mapping):
        raise ValueError("annotations must be a mapping")
    return {str(key): str(value) for key, value in raw_value.items()}
