"""Synchronous LSP client for references and call hierarchy queries.

Lifecycle:
1. LspClient(settings) - create the client; nothing is spawned yet
2. start(root_path) - launch the server and complete the handshake
3. did_open() / find_references() / get_incoming_calls() / get_outgoing_calls()
4. stop() - shut the server down and reap the process

Exactly one request is outstanding at a time. Each call blocks until the
matching response arrives or the configured timeout passes.
"""

from __future__ import annotations

import os
import time
from typing import Any

from codenav.config import ClientSettings
from codenav.lsp.transport import Transport
from codenav.lsp.utils import path_to_uri, read_source_context, uri_to_path
from codenav.types.core import CallHierarchyItem, SymbolKind, SymbolReference
from codenav.types.errors import (
    AmbiguousSymbolError,
    CodenavError,
    ErrorContext,
    HandshakeError,
    InvalidResponseError,
    RequestTimeoutError,
    ServerNotRunningError,
)
from codenav.utils.logger import logger

JSONRPC_VERSION = "2.0"


def _position_params(uri: str, line: int, column: int) -> dict[str, Any]:
    return {
        "textDocument": {"uri": uri},
        "position": {"line": line, "character": column},
    }


def _non_negative_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def _range_start(obj: dict[str, Any]) -> tuple[int, int] | None:
    """Return (line, character) of ``obj["range"]["start"]`` if well formed."""
    rng = obj.get("range")
    if not isinstance(rng, dict):
        return None
    start = rng.get("start")
    if not isinstance(start, dict):
        return None
    line = _non_negative_int(start.get("line"))
    column = _non_negative_int(start.get("character"))
    if line is None or column is None:
        return None
    return line, column


class LspClient:
    """One language server session over the process's stdin/stdout.

    Request ids start at 0 and increase by one per request for the
    lifetime of the client. Messages that do not carry the awaited id
    (notifications, stale replies) are read and discarded.
    """

    def __init__(self, settings: ClientSettings | None = None) -> None:
        self._settings = settings or ClientSettings()
        self._transport: Transport | None = None
        self._request_id = 0
        self._root_path: str | None = None
        self._initialized = False

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def root_path(self) -> str | None:
        return self._root_path

    @property
    def next_request_id(self) -> int:
        return self._request_id

    def is_running(self) -> bool:
        """Check if the server process exists and the handshake completed."""
        return self._transport is not None and self._initialized

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, root_path: str) -> None:
        """Spawn the language server and perform the initialize handshake.

        A client that is already running is stopped first.

        Raises:
            ServerNotFoundError: The server executable is not on PATH.
            ProcessSpawnError: The process could not be started.
            HandshakeError: initialize did not complete.
        """
        if self._transport is not None:
            self.stop()

        self._root_path = root_path
        self._transport = Transport.spawn(
            self._settings.server_command,
            cwd=root_path if os.path.isdir(root_path) else None,
            max_header_size=self._settings.max_header_size,
            max_message_size=self._settings.max_message_size,
        )

        try:
            self._handshake(root_path)
        except CodenavError as e:
            self._transport.close()
            self._transport = None
            raise HandshakeError(
                f"initialize handshake failed: {e}",
                context=ErrorContext(operation="initialize", component="lsp.client"),
                original_error=e,
            ) from e

        self._initialized = True
        logger.info(f"Language server initialized for {root_path}")

    def stop(self) -> None:
        """Shut down the server: shutdown + exit if initialized, then kill and reap.

        Idempotent; safe on a client that was never started.
        """
        transport = self._transport
        if transport is None:
            self._initialized = False
            return

        if self._initialized:
            try:
                self._send_request("shutdown", None)
                self._send_notification("exit", None)
            except CodenavError as e:
                logger.debug(f"Ignoring error during shutdown: {e}")

        transport.close()
        self._transport = None
        self._initialized = False

    def __enter__(self) -> LspClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def did_open(self, file_path: str, content: str) -> None:
        """Announce the in-memory content of *file_path* (textDocument/didOpen)."""
        self._require_running("textDocument/didOpen")
        self._send_notification(
            "textDocument/didOpen",
            {
                "textDocument": {
                    "uri": path_to_uri(file_path),
                    "languageId": self._settings.language_id,
                    "version": 1,
                    "text": content,
                },
            },
        )

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def find_references(self, file_path: str, line: int, column: int) -> list[SymbolReference]:
        """Find every reference to the symbol at a 0-indexed position.

        The declaration itself is included. A null or empty result gives an
        empty list. Malformed locations are skipped.
        """
        self._require_running("textDocument/references")
        params = _position_params(path_to_uri(file_path), line, column)
        params["context"] = {"includeDeclaration": True}
        result = self._send_request("textDocument/references", params)

        if not isinstance(result, list):
            return []

        references = []
        for location in result:
            ref = self._parse_location(location)
            if ref is None:
                logger.debug(f"Skipping malformed location: {location!r}")
                continue
            references.append(ref)
        return references

    def _parse_location(self, location: Any) -> SymbolReference | None:
        if not isinstance(location, dict):
            return None
        uri = location.get("uri")
        if not isinstance(uri, str):
            return None
        start = _range_start(location)
        if start is None:
            return None

        path = uri_to_path(uri)
        line, column = start
        source = read_source_context(
            path, line, self._settings.max_snippet_bytes, self._settings.encoding
        )
        return SymbolReference(
            file_path=path,
            line=line,
            column=column,
            snippet=source.snippet,
            context_before=source.before,
            context_after=source.after,
        )

    # ------------------------------------------------------------------
    # Call hierarchy
    # ------------------------------------------------------------------

    def prepare_call_hierarchy(
        self, file_path: str, line: int, column: int
    ) -> list[CallHierarchyItem]:
        """Resolve the symbol(s) at a position (textDocument/prepareCallHierarchy).

        Returns every candidate the server reports, possibly none.
        """
        self._require_running("textDocument/prepareCallHierarchy")
        result = self._send_request(
            "textDocument/prepareCallHierarchy",
            _position_params(path_to_uri(file_path), line, column),
        )
        if not isinstance(result, list):
            return []
        return [item for item in map(self._parse_hierarchy_item, result) if item is not None]

    def get_incoming_calls(
        self, file_path: str, line: int, column: int, *, strict: bool = False
    ) -> list[CallHierarchyItem]:
        """Callers of the symbol at a position; empty if no symbol is there.

        With ``strict`` set, several candidate symbols raise
        AmbiguousSymbolError instead of using the first one.
        """
        root = self._resolve_symbol(file_path, line, column, strict)
        if root is None:
            return []
        return self._calls(root, incoming=True)

    def get_outgoing_calls(
        self, file_path: str, line: int, column: int, *, strict: bool = False
    ) -> list[CallHierarchyItem]:
        """Callees of the symbol at a position; empty if no symbol is there."""
        root = self._resolve_symbol(file_path, line, column, strict)
        if root is None:
            return []
        return self._calls(root, incoming=False)

    def get_call_hierarchy(
        self, file_path: str, line: int, column: int, *, strict: bool = False
    ) -> tuple[CallHierarchyItem | None, list[CallHierarchyItem], list[CallHierarchyItem]]:
        """Resolve the symbol once, then fetch both its callers and callees.

        Returns ``(root, incoming, outgoing)``; ``root`` is None (and both
        lists empty) when no symbol is at the position.
        """
        root = self._resolve_symbol(file_path, line, column, strict)
        if root is None:
            return None, [], []
        return root, self._calls(root, incoming=True), self._calls(root, incoming=False)

    def _resolve_symbol(
        self, file_path: str, line: int, column: int, strict: bool
    ) -> CallHierarchyItem | None:
        candidates = self.prepare_call_hierarchy(file_path, line, column)
        if not candidates:
            return None
        if len(candidates) > 1:
            if strict:
                raise AmbiguousSymbolError(
                    candidates,
                    context=ErrorContext(
                        operation="textDocument/prepareCallHierarchy",
                        file_path=file_path,
                        component="lsp.client",
                    ),
                )
            logger.debug(
                f"{len(candidates)} symbols at {file_path}:{line}:{column}, "
                f"using {candidates[0].name}"
            )
        return candidates[0]

    def _calls(self, item: CallHierarchyItem, *, incoming: bool) -> list[CallHierarchyItem]:
        method = "callHierarchy/incomingCalls" if incoming else "callHierarchy/outgoingCalls"
        field_name = "from" if incoming else "to"
        self._require_running(method)
        result = self._send_request(method, {"item": item.raw})

        if not isinstance(result, list):
            return []

        items = []
        for call in result:
            parsed = None
            if isinstance(call, dict):
                parsed = self._parse_hierarchy_item(call.get(field_name))
            if parsed is None:
                logger.debug(f"Skipping malformed {method} entry: {call!r}")
                continue
            items.append(parsed)
        return items

    def _parse_hierarchy_item(self, obj: Any) -> CallHierarchyItem | None:
        if not isinstance(obj, dict):
            return None
        name = obj.get("name")
        uri = obj.get("uri")
        kind = SymbolKind.from_int(obj.get("kind"))
        start = _range_start(obj)
        if not isinstance(name, str) or not isinstance(uri, str) or kind is None or start is None:
            return None

        path = uri_to_path(uri)
        line, column = start
        return CallHierarchyItem(
            name=name,
            kind=kind,
            file_path=path,
            line=line,
            column=column,
            snippet=read_source_context(
                path, line, self._settings.max_snippet_bytes, self._settings.encoding
            ).snippet,
            raw=obj,
        )

    # ------------------------------------------------------------------
    # JSON-RPC
    # ------------------------------------------------------------------

    def _require_running(self, operation: str) -> None:
        if not self.is_running():
            raise ServerNotRunningError(operation)

    def _handshake(self, root_path: str) -> None:
        self._send_request(
            "initialize",
            {
                "processId": os.getpid(),
                "rootUri": path_to_uri(root_path),
                "capabilities": {},
            },
        )
        self._send_notification("initialized", None)

    def send_request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send a request on a running session and return its ``result``."""
        self._require_running(method)
        return self._send_request(method, params)

    def send_notification(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification on a running session; nothing is read back."""
        self._require_running(method)
        self._send_notification(method, params)

    def _send_request(self, method: str, params: dict[str, Any] | None) -> Any:
        transport = self._transport
        if transport is None:
            raise ServerNotRunningError(method)

        request_id = self._request_id
        self._request_id += 1
        message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": request_id, "method": method}
        if params is not None:
            message["params"] = params

        transport.send(message)
        logger.debug(f"-> request id={request_id} method={method}")
        return self._wait_response(transport, request_id, method)

    def _send_notification(self, method: str, params: dict[str, Any] | None) -> None:
        transport = self._transport
        if transport is None:
            raise ServerNotRunningError(method)

        message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
        if params is not None:
            message["params"] = params
        transport.send(message)
        logger.debug(f"-> notification method={method}")

    def _wait_response(self, transport: Transport, request_id: int, method: str) -> Any:
        timeout = self._settings.timeout
        deadline = time.monotonic() + timeout
        while True:
            try:
                message = transport.receive(deadline)
            except TimeoutError as e:
                raise RequestTimeoutError(
                    method,
                    timeout,
                    context=ErrorContext(operation=method, component="lsp.client"),
                ) from e

            msg_id = message.get("id")
            # Server-initiated requests carry a method and an id from the server's own sequence.
            if "method" in message or isinstance(msg_id, bool) or msg_id != request_id:
                logger.debug(
                    f"<- discarded message id={msg_id} method={message.get('method', '-')}"
                )
                continue

            if "error" in message:
                error = message["error"]
                code = error.get("code") if isinstance(error, dict) else None
                text = error.get("message") if isinstance(error, dict) else str(error)
                raise InvalidResponseError(
                    f"{method} failed: {text} (code {code})",
                    rpc_code=code,
                    rpc_message=text,
                    context=ErrorContext(operation=method, component="lsp.client"),
                )

            logger.debug(f"<- response id={request_id}")
            return message.get("result")
