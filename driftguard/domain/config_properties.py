"""Rendered configuration properties with dotted-key lookup."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Final, Mapping

import yaml

DEFAULT_CONFIG_DATA_KEY: Final[str] = "config"

_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS: Final[frozenset[str]] = frozenset({"false", "no", "off", "0"})


class ConfigPropertyError(LookupError):
    """Raised when a rendered configuration property is missing or has the wrong type."""


class RenderedConfigProperties:
    """Read-only view over the rendered configuration blob.

    Keys use dots to walk nested mappings, for example
    `security.uiSecurity.ssl.enabled`.
    """

    def __init__(self, properties: Mapping[str, Any] | None = None):
        """Initialize property view.

        Args:
            properties: Parsed configuration mapping.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when properties is not a mapping.
        """

        if properties is None:
            properties = {}
        if not isinstance(properties, Mapping):
            raise ValueError("properties must be a mapping")
        self._properties = properties

    @classmethod
    def from_yaml_text(cls, yaml_text: str) -> RenderedConfigProperties:
        """Parse rendered configuration from YAML text.

        Args:
            yaml_text: YAML document text.

        Returns:
            RenderedConfigProperties: Parsed property view.

        Raises:
            ValueError: Raised when the YAML is invalid or not a mapping.
        """

        try:
            parsed_payload = yaml.safe_load(yaml_text)
        except yaml.YAMLError as error:
            raise ValueError("rendered configuration is not valid YAML") from error
        if parsed_payload is None:
            parsed_payload = {}
        if not isinstance(parsed_payload, Mapping):
            raise ValueError("rendered configuration must be a YAML mapping")
        return cls(parsed_payload)

    @classmethod
    def from_manifest(
        cls,
        manifest: Mapping[str, Any],
        data_key: str = DEFAULT_CONFIG_DATA_KEY,
    ) -> RenderedConfigProperties:
        """Load rendered configuration from a ConfigMap or Secret manifest.

        Secret data values are base64 encoded; ConfigMap values are plain text.

        Args:
            manifest: Kubernetes object as a mapping.
            data_key: Key under `data` that holds the YAML document.

        Returns:
            RenderedConfigProperties: Parsed property view.

        Raises:
            ValueError: Raised when the data key is missing or cannot be decoded.
        """

        data_payload = manifest.get("data") or {}
        if data_key not in data_payload:
            raise ValueError(f"config source manifest has no data key={data_key}")

        raw_value = str(data_payload[data_key])
        if str(manifest.get("kind", "")).strip().lower() == "secret":
            try:
                raw_value = base64.b64decode(raw_value, validate=True).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as error:
                raise ValueError(f"secret data key={data_key} is not valid base64 text") from error
        return cls.from_yaml_text(raw_value)

    def properties_lookup(self, key: str) -> Any:
        """Return the raw value at a dotted key.

        Args:
            key: Dotted property path.

        Returns:
            Any: Raw property value.

        Raises:
            ConfigPropertyError: Raised when a path segment is missing.
        """

        current_value: Any = self._properties
        for segment in key.split("."):
            if not isinstance(current_value, Mapping) or segment not in current_value:
                raise ConfigPropertyError(f"config property not found: {key}")
            current_value = current_value[segment]
        return current_value

    def properties_lookup_bool(self, key: str, default: bool) -> bool:
        """Return a boolean property, or the default when the key is absent.

        Args:
            key: Dotted property path.
            default: Value returned when the key is missing.

        Returns:
            bool: Parsed boolean value.

        Raises:
            ConfigPropertyError: Raised when the value cannot be read as a boolean.
        """

        try:
            raw_value = self.properties_lookup(key)
        except ConfigPropertyError:
            return default

        if raw_value is None:
            return default
        if isinstance(raw_value, bool):
            return raw_value
        if isinstance(raw_value, str):
            normalized_value = raw_value.strip().lower()
            if normalized_value in _TRUE_STRINGS:
                return True
            if normalized_value in _FALSE_STRINGS:
                return False
        raise ConfigPropertyError(f"config property {key} is not a boolean: {raw_value!r}")
