"""
Tests for the structured error hierarchy.
"""

import pytest

from codenav.types import (
    AmbiguousSymbolError,
    CallHierarchyItem,
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
    SymbolKind,
    TransportIOError,
)
from codenav.types.errors import MSG_REQUEST_TIMED_OUT, MSG_SERVER_UNAVAILABLE


class TestErrorCodes:
    """Tests for the error code enums."""

    def test_lsp_codes(self):
        assert LspErrorCode.PARSE_ERROR == -32700
        assert LspErrorCode.METHOD_NOT_FOUND == -32601
        assert LspErrorCode.SERVER_NOT_INITIALIZED == -32002
        assert LspErrorCode.CONTENT_MODIFIED == -32801

    @pytest.mark.parametrize(
        "error_cls,code",
        [
            (ProcessSpawnError, ErrorCode.PROCESS_SPAWN_FAILED),
            (HandshakeError, ErrorCode.HANDSHAKE_FAILED),
            (TransportIOError, ErrorCode.IO_ERROR),
            (ConfigurationError, ErrorCode.INVALID_CONFIG),
        ],
    )
    def test_subclass_codes(self, error_cls, code):
        """Each subclass reports its own internal code."""
        error = error_cls("boom")
        assert isinstance(error, CodenavError)
        assert error.code == code


class TestUserMessages:
    """The short messages surfaced to users."""

    def test_server_not_found(self):
        error = ServerNotFoundError("zls")
        assert error.user_message == MSG_SERVER_UNAVAILABLE
        assert error.executable == "zls"
        assert "zls" in str(error)
        assert error.severity == ErrorSeverity.HIGH

    def test_request_timeout(self):
        error = RequestTimeoutError("textDocument/references", 3.0)
        assert error.user_message == MSG_REQUEST_TIMED_OUT == "request timed out"
        assert error.method == "textDocument/references"
        assert error.timeout == 3.0

    def test_server_not_running_has_context(self):
        error = ServerNotRunningError("textDocument/references")
        assert error.code == ErrorCode.SERVER_NOT_RUNNING
        assert error.context.operation == "textDocument/references"
        assert error.context.component == "lsp.client"

    def test_explicit_user_message_wins(self):
        error = TransportIOError("pipe closed", user_message="server crashed")
        assert error.user_message == "server crashed"


class TestInvalidResponseError:
    def test_rpc_fields(self):
        error = InvalidResponseError("failed", rpc_code=-32601, rpc_message="Method not found")
        assert error.rpc_code == LspErrorCode.METHOD_NOT_FOUND
        assert error.rpc_message == "Method not found"
        assert error.user_message == "invalid response from language server"

    def test_rpc_fields_default_none(self):
        error = InvalidResponseError("garbage")
        assert error.rpc_code is None
        assert error.rpc_message is None


class TestAmbiguousSymbolError:
    def test_candidates_listed(self):
        candidates = [
            CallHierarchyItem("init", SymbolKind.FUNCTION, "/a.zig", 1, 0),
            CallHierarchyItem("init", SymbolKind.METHOD, "/b.zig", 2, 0),
        ]
        error = AmbiguousSymbolError(candidates)
        assert error.candidates == candidates
        assert "2 candidate symbols" in str(error)
        assert error.severity == ErrorSeverity.LOW
        assert error.user_message == "multiple symbols at position"


class TestSerialization:
    def test_to_dict(self):
        original = OSError("broken pipe")
        error = TransportIOError(
            "write failed",
            context=ErrorContext(operation="send", component="lsp.transport"),
            original_error=original,
        )
        data = error.to_dict()
        assert data["name"] == "TransportIOError"
        assert data["code"] == ErrorCode.IO_ERROR.value
        assert data["message"] == "write failed"
        assert data["context"]["operation"] == "send"
        assert data["original_error"] == "broken pipe"
        assert isinstance(data["context"]["timestamp"], str)

    def test_formatted_message(self):
        error = HandshakeError(
            "no reply",
            context=ErrorContext(operation="initialize", file_path="/proj", component="lsp.client"),
        )
        text = error.get_formatted_message()
        assert text.startswith(f"[Error] {MSG_SERVER_UNAVAILABLE}")
        assert f"Code: {ErrorCode.HANDSHAKE_FAILED.value}" in text
        assert "Operation: initialize" in text
        assert "File: /proj" in text
        assert "Component: lsp.client" in text
