"""Config module exports."""

from sigdelta.config.loader import SigDeltaSettings, load_config
from sigdelta.config.models import (
    LoggingConfig,
    OutputConfig,
    SigDeltaConfig,
    SubtractConfig,
)

__all__ = [
    "load_config",
    "SigDeltaConfig",
    "SigDeltaSettings",
    "LoggingConfig",
    "OutputConfig",
    "SubtractConfig",
]
