"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (SIGDELTA__SECTION__KEY)
3. Project YAML (.sigdelta/config.yaml)
4. Global YAML (~/.config/sigdelta/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    SIGDELTA__<SECTION>__<KEY>=<VALUE>

Examples:
    SIGDELTA__LOGGING__LEVEL=DEBUG
    SIGDELTA__SUBTRACT__ACCESSOR_POLICY=both
    SIGDELTA__OUTPUT__FORMAT=yaml
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
AccessorPolicy = Literal["either", "both"]
DocumentFormat = Literal["json", "yaml"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        SIGDELTA__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every dropped declaration and member.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class SubtractConfig(BaseModel):
    """Subtraction policy.

    Env vars:
        SIGDELTA__SUBTRACT__ACCESSOR_POLICY: either | both
    """

    accessor_policy: AccessorPolicy = Field(
        default="either",
        description="When an attr_accessor counts as already present. "
        "'either': the reader or the writer exists in the subtrahend. "
        "'both': the reader and the writer exist. "
        "NOTE: 'either' may drop the half of an accessor the subtrahend lacks.",
    )


class OutputConfig(BaseModel):
    """How subtraction results are written.

    Env vars:
        SIGDELTA__OUTPUT__FORMAT: json | yaml
        SIGDELTA__OUTPUT__INDENT: Indentation width for written documents
        SIGDELTA__OUTPUT__REMOVE_EMPTY: Delete files left empty in --write mode
    """

    format: DocumentFormat = Field(
        default="json",
        description="Document format used when printing results to stdout.",
    )
    indent: int = Field(
        default=2,
        description="Indentation width for written documents.",
    )
    remove_empty: bool = Field(
        default=True,
        description="In --write mode, delete minuend files whose result is empty.",
    )

    @field_validator("indent")
    @classmethod
    def validate_indent(cls, v: int) -> int:
        if not (0 <= v <= 8):
            raise ValueError(f"Indent must be 0-8, got {v}")
        return v


class SigDeltaConfig(BaseModel):
    """Root configuration for sigdelta.

    All settings can be configured via:
    1. Environment variables: SIGDELTA__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    subtract: SubtractConfig = Field(default_factory=SubtractConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
