"""Deployer core: drift detection and status commit."""

from .config_source import deployer_config_source_matches
from .drift_detector import ConfigDriftDetector
from .errors import UNSUPPORTED_EXPOSE_MODE_CODE, DeployerConfigurationError, UnsupportedExposeModeError
from .expose import ExposeConfigComparator, deployer_parse_expose_mode
from .interfaces import (
	DRIFT_REASON_ANNOTATIONS_CHANGED,
	DRIFT_REASON_CONFIG_SOURCE_CHANGED,
	DRIFT_REASON_EXPOSURE_TYPE_CHANGED,
	DRIFT_REASON_SERVICE_MISSING,
	DRIFT_REASON_STATUS_URL_AVAILABLE,
	DriftVerdict,
	ExposeCheckResult,
)
from .status_committer import StatusCommitter

__all__ = [
	"ConfigDriftDetector",
	"DRIFT_REASON_ANNOTATIONS_CHANGED",
	"DRIFT_REASON_CONFIG_SOURCE_CHANGED",
	"DRIFT_REASON_EXPOSURE_TYPE_CHANGED",
	"DRIFT_REASON_SERVICE_MISSING",
	"DRIFT_REASON_STATUS_URL_AVAILABLE",
	"DeployerConfigurationError",
	"DriftVerdict",
	"ExposeCheckResult",
	"ExposeConfigComparator",
	"StatusCommitter",
	"UNSUPPORTED_EXPOSE_MODE_CODE",
	"UnsupportedExposeModeError",
	"deployer_config_source_matches",
	"deployer_parse_expose_mode",
]
