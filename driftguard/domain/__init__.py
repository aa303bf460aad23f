"""Domain models used across application layer boundaries."""

from .cancellation import (
	CancellationToken,
	OperationCancelledError,
	OperationDeadlineExceededError,
	domain_never_cancelled,
)
from .config_properties import DEFAULT_CONFIG_DATA_KEY, ConfigPropertyError, RenderedConfigProperties
from .models import (
	REQUIRED_EXPOSED_SERVICES,
	ApplicationIdentity,
	ApplicationSpec,
	ApplicationStatus,
	ConfigSourceKind,
	ConfigSourceReference,
	ExposeMode,
	ExposeServiceOverride,
	LogicalService,
	ObservedService,
)
from .errors import StatusPersistenceError, StatusRecordNotFoundError, StatusUpdateConflictError
from .timeline import domain_build_stage_event

__all__ = [
	"ApplicationIdentity",
	"ApplicationSpec",
	"ApplicationStatus",
	"CancellationToken",
	"ConfigPropertyError",
	"ConfigSourceKind",
	"ConfigSourceReference",
	"DEFAULT_CONFIG_DATA_KEY",
	"ExposeMode",
	"ExposeServiceOverride",
	"LogicalService",
	"ObservedService",
	"OperationCancelledError",
	"OperationDeadlineExceededError",
	"REQUIRED_EXPOSED_SERVICES",
	"RenderedConfigProperties",
	"StatusPersistenceError",
	"StatusRecordNotFoundError",
	"StatusUpdateConflictError",
	"domain_build_stage_event",
	"domain_never_cancelled",
]
