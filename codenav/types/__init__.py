"""
Codenav type definitions.

This module exports the value types and error types shared by the
LSP client and the navigation models.
"""

# Core types
from .core import CallHierarchyItem, SymbolKind, SymbolReference

# Error types
from .errors import (
    MSG_NO_REFERENCES,
    MSG_REQUEST_TIMED_OUT,
    MSG_SERVER_UNAVAILABLE,
    AmbiguousSymbolError,
    CodenavError,
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    ErrorSeverity,
    HandshakeError,
    InvalidResponseError,
    LspErrorCode,
    ProcessSpawnError,
    RequestTimeoutError,
    ServerNotFoundError,
    ServerNotRunningError,
    TransportIOError,
)

__all__ = [
    # Core types
    "CallHierarchyItem",
    "SymbolKind",
    "SymbolReference",
    # Error types
    "MSG_NO_REFERENCES",
    "MSG_REQUEST_TIMED_OUT",
    "MSG_SERVER_UNAVAILABLE",
    "AmbiguousSymbolError",
    "CodenavError",
    "ConfigurationError",
    "ErrorCode",
    "ErrorContext",
    "ErrorSeverity",
    "HandshakeError",
    "InvalidResponseError",
    "LspErrorCode",
    "ProcessSpawnError",
    "RequestTimeoutError",
    "ServerNotFoundError",
    "ServerNotRunningError",
    "TransportIOError",
]
