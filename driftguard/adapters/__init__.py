"""Adapter layer package for cluster and collaborator integration boundaries."""

from .errors import (
	KubernetesAdapterConnectionError,
	KubernetesAdapterError,
	KubernetesAdapterTimeoutError,
	KubernetesAuthorizationError,
	KubernetesResponseError,
)
from .interfaces import (
	AnnotationAggregatorPort,
	ConfigPropertyPort,
	LiveServicePort,
	LoadBalancerPort,
	StatusPersistencePort,
)
from .kubernetes_api import KubernetesApiAdapter
from .static_lookup import SpecAnnotationAggregator, StaticServiceLookup

__all__ = [
	"AnnotationAggregatorPort",
	"ConfigPropertyPort",
	"KubernetesAdapterConnectionError",
	"KubernetesAdapterError",
	"KubernetesAdapterTimeoutError",
	"KubernetesApiAdapter",
	"KubernetesAuthorizationError",
	"KubernetesResponseError",
	"LiveServicePort",
	"LoadBalancerPort",
	"SpecAnnotationAggregator",
	"StaticServiceLookup",
	"StatusPersistencePort",
]
