"""Project-native typed exceptions for Kubernetes API adapter failures."""

from __future__ import annotations


class KubernetesAdapterError(Exception):
    """Base exception for adapter-level Kubernetes API failures.

    Attributes:
        status_code: Optional HTTP status code returned by the API server.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class KubernetesAdapterConnectionError(KubernetesAdapterError, ConnectionError):
    """Transport-level connectivity failure while calling the API server."""


class KubernetesAdapterTimeoutError(KubernetesAdapterError, TimeoutError):
    """Transport timeout while waiting for the API server."""


class KubernetesResponseError(KubernetesAdapterError, RuntimeError):
    """API server answered with an unexpected status or an unreadable body."""


class KubernetesAuthorizationError(KubernetesResponseError):
    """API server rejected the credentials (`401`) or the operation (`403`)."""
