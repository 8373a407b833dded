"""
Structured error handling for codenav.

Every failure of the language server client is a CodenavError subclass
carrying an internal code, a developer message, and one of the short
user-facing messages the UI shows ("language server not available",
"request timed out", ...).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from codenav.constants import utcnow


class LspErrorCode(IntEnum):
    """JSON-RPC 2.0 and LSP error codes a server may answer with."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    SERVER_NOT_INITIALIZED = -32002
    UNKNOWN_ERROR_CODE = -32001
    REQUEST_CANCELLED = -32800
    CONTENT_MODIFIED = -32801


class ErrorCode(IntEnum):
    """Internal error codes for categorization."""

    # Server lifecycle (1000-1999)
    SERVER_NOT_FOUND = 1001
    PROCESS_SPAWN_FAILED = 1002
    HANDSHAKE_FAILED = 1003
    SERVER_NOT_RUNNING = 1004

    # Transport (2000-2999)
    REQUEST_TIMEOUT = 2001
    INVALID_RESPONSE = 2002
    IO_ERROR = 2003

    # Query results (3000-3999)
    AMBIGUOUS_SYMBOL = 3001

    # Configuration (4000-4999)
    INVALID_CONFIG = 4001


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Canonical messages shown by the UI layer.
MSG_NO_REFERENCES = "no references found"
MSG_SERVER_UNAVAILABLE = "language server not available"
MSG_REQUEST_TIMED_OUT = "request timed out"


@dataclass
class ErrorContext:
    """Context information for an error."""

    operation: str | None = None
    file_path: str | None = None
    component: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
    additional_info: dict[str, Any] = field(default_factory=dict)


class CodenavError(Exception):
    """Base error class for codenav."""

    code: ErrorCode = ErrorCode.IO_ERROR
    default_user_message: str = MSG_SERVER_UNAVAILABLE
    default_severity: ErrorSeverity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.user_message = user_message or self.default_user_message
        self.severity = self.default_severity
        self.context = context or ErrorContext()
        self.original_error = original_error
        self.context.timestamp = utcnow()

    def get_formatted_message(self) -> str:
        """Get a formatted error message for display to users."""
        parts = [
            f"[Error] {self.user_message}",
            f"   Code: {self.code.value}",
        ]
        if self.context.operation:
            parts.append(f"   Operation: {self.context.operation}")
        if self.context.file_path:
            parts.append(f"   File: {self.context.file_path}")
        if self.context.component:
            parts.append(f"   Component: {self.context.component}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "name": self.__class__.__name__,
            "code": self.code.value,
            "message": str(self),
            "user_message": self.user_message,
            "severity": self.severity.value,
            "context": {
                "operation": self.context.operation,
                "file_path": self.context.file_path,
                "component": self.context.component,
                "timestamp": self.context.timestamp.isoformat(),
                "additional_info": self.context.additional_info,
            },
            "original_error": str(self.original_error) if self.original_error else None,
        }


class ServerNotFoundError(CodenavError):
    """No language server executable was found on PATH."""

    code = ErrorCode.SERVER_NOT_FOUND
    default_severity = ErrorSeverity.HIGH

    def __init__(self, executable: str, **kwargs: Any) -> None:
        super().__init__(f"Language server executable not found on PATH: {executable}", **kwargs)
        self.executable = executable


class ProcessSpawnError(CodenavError):
    """The OS refused to start the language server process."""

    code = ErrorCode.PROCESS_SPAWN_FAILED
    default_severity = ErrorSeverity.HIGH


class HandshakeError(CodenavError):
    """The initialize / initialized exchange did not complete."""

    code = ErrorCode.HANDSHAKE_FAILED
    default_severity = ErrorSeverity.HIGH


class ServerNotRunningError(CodenavError):
    """An operation was attempted before start() or after stop()."""

    code = ErrorCode.SERVER_NOT_RUNNING

    def __init__(self, operation: str, **kwargs: Any) -> None:
        super().__init__(
            f"Language server is not running (operation: {operation})",
            context=ErrorContext(operation=operation, component="lsp.client"),
            **kwargs,
        )


class RequestTimeoutError(CodenavError):
    """No matching response arrived before the deadline."""

    code = ErrorCode.REQUEST_TIMEOUT
    default_user_message = MSG_REQUEST_TIMED_OUT

    def __init__(self, method: str, timeout: float, **kwargs: Any) -> None:
        super().__init__(f"No response to {method} within {timeout}s", **kwargs)
        self.method = method
        self.timeout = timeout


class InvalidResponseError(CodenavError):
    """The server sent something that is not a usable response.

    When the server answered with a JSON-RPC error object, ``rpc_code``
    and ``rpc_message`` hold its fields.
    """

    code = ErrorCode.INVALID_RESPONSE
    default_user_message = "invalid response from language server"

    def __init__(
        self,
        message: str,
        rpc_code: int | None = None,
        rpc_message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.rpc_code = rpc_code
        self.rpc_message = rpc_message


class TransportIOError(CodenavError):
    """Reading from or writing to the server's pipes failed."""

    code = ErrorCode.IO_ERROR


class AmbiguousSymbolError(CodenavError):
    """prepareCallHierarchy returned more than one candidate symbol."""

    code = ErrorCode.AMBIGUOUS_SYMBOL
    default_user_message = "multiple symbols at position"
    default_severity = ErrorSeverity.LOW

    def __init__(self, candidates: list[Any], **kwargs: Any) -> None:
        names = ", ".join(getattr(c, "name", "?") for c in candidates)
        super().__init__(f"{len(candidates)} candidate symbols at position: {names}", **kwargs)
        self.candidates = candidates


class ConfigurationError(CodenavError):
    """Error related to configuration issues."""

    code = ErrorCode.INVALID_CONFIG
    default_user_message = "Configuration error occurred."
    default_severity = ErrorSeverity.HIGH
