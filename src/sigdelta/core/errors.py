"""sigdelta error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Signature documents
- 4xxx: Subtraction
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Signature documents (3xxx)
    DOCUMENT_PARSE_ERROR = 3001
    DOCUMENT_INVALID_NODE = 3002
    DOCUMENT_UNSUPPORTED_FORMAT = 3003
    DOCUMENT_FILE_NOT_FOUND = 3004

    # Subtraction (4xxx)
    UNSUPPORTED_DECLARATION = 4001
    UNSUPPORTED_MEMBER = 4002


@dataclass(frozen=True, slots=True)
class SigDeltaError(Exception):
    """Base error with structured context for CLI and JSON output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(SigDeltaError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class DocumentError(SigDeltaError):
    """Malformed or unreadable signature documents."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "DocumentError":
        return cls(
            code=ErrorCode.DOCUMENT_PARSE_ERROR,
            message=f"Failed to parse signature document {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_node(cls, node: Any, reason: str) -> "DocumentError":
        return cls(
            code=ErrorCode.DOCUMENT_INVALID_NODE,
            message=f"Invalid signature node: {reason}",
            details={"node": repr(node)[:200], "reason": reason},
        )

    @classmethod
    def unsupported_format(cls, path: str) -> "DocumentError":
        return cls(
            code=ErrorCode.DOCUMENT_UNSUPPORTED_FORMAT,
            message=f"Unsupported signature document format: {path}",
            details={"path": path},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "DocumentError":
        return cls(
            code=ErrorCode.DOCUMENT_FILE_NOT_FOUND,
            message=f"Signature document not found: {path}",
            details={"path": path},
        )


class UnsupportedVariantError(SigDeltaError):
    """A declaration or member outside the closed set of known kinds.

    Indicates a malformed or out-of-date tree handed over by a collaborator.
    Never raised for well-formed input.
    """

    @classmethod
    def declaration(cls, decl: Any) -> "UnsupportedVariantError":
        type_name = type(decl).__name__
        return cls(
            code=ErrorCode.UNSUPPORTED_DECLARATION,
            message=f"Unknown declaration: {type_name}",
            details={"type": type_name},
        )

    @classmethod
    def member(cls, member: Any) -> "UnsupportedVariantError":
        type_name = type(member).__name__
        return cls(
            code=ErrorCode.UNSUPPORTED_MEMBER,
            message=f"Unknown member: {type_name}",
            details={"type": type_name},
        )
