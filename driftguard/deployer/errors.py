"""Terminal configuration errors raised by drift checks."""

from __future__ import annotations

from typing import Final

UNSUPPORTED_EXPOSE_MODE_CODE: Final[str] = "UNSUPPORTED_EXPOSE_MODE"


class DeployerConfigurationError(ValueError):
    """Base exception for user configuration that a redeploy cannot fix.

    Attributes:
        error_code: Stable code for user-facing reporting.
    """

    error_code: str = "INVALID_CONFIGURATION"


class UnsupportedExposeModeError(DeployerConfigurationError):
    """Raised when the application declares an expose mode this deployer cannot apply.

    Attributes:
        expose_mode: Raw expose mode from the application spec.
    """

    error_code = UNSUPPORTED_EXPOSE_MODE_CODE

    def __init__(self, expose_mode: str):
        super().__init__(f'expose type {expose_mode} not supported. Valid types: "service"')
        self.expose_mode = expose_mode
