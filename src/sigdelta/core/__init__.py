"""Core module exports."""

from sigdelta.core.errors import (
    ConfigError,
    DocumentError,
    ErrorCode,
    SigDeltaError,
    UnsupportedVariantError,
)
from sigdelta.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "SigDeltaError",
    "ConfigError",
    "DocumentError",
    "ErrorCode",
    "UnsupportedVariantError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
