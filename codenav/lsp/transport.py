"""Process and wire layer for talking to a language server.

Every message on the wire is a UTF-8 JSON payload preceded by a header:

    Content-Length: 52\\r\\n
    \\r\\n
    {"jsonrpc":"2.0","id":1,"method":"initialize","params":{}}

Reads go through our own byte buffer filled with os.read() on the raw
stdout descriptor, gated by select.select(). Python's BufferedReader is
bypassed because data it has already buffered is invisible to select(),
which would make the read deadline unreliable.
"""

from __future__ import annotations

import json
import os
import select
import shutil
import subprocess
import time
from typing import Any

from codenav.constants import (
    CONTENT_LENGTH_HEADER,
    HEADER_DELIMITER,
    MAX_HEADER_SIZE,
    MAX_MESSAGE_SIZE,
    READ_CHUNK_SIZE,
)
from codenav.types.errors import (
    ErrorContext,
    InvalidResponseError,
    ProcessSpawnError,
    ServerNotFoundError,
    TransportIOError,
)
from codenav.utils.logger import logger


def encode_message(message: dict[str, Any]) -> bytes:
    """Serialize a JSON-RPC message and prefix it with its Content-Length header."""
    body = json.dumps(message, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    header = f"{CONTENT_LENGTH_HEADER}{len(body)}\r\n\r\n".encode("ascii")
    return header + body


def parse_content_length(header: bytes) -> int:
    """Extract the declared payload length from a header block.

    *header* is everything up to and including the blank-line delimiter.
    """
    try:
        text = header.decode("ascii")
    except UnicodeDecodeError as e:
        raise InvalidResponseError("Message header is not ASCII", original_error=e) from e

    idx = text.find(CONTENT_LENGTH_HEADER)
    if idx < 0:
        raise InvalidResponseError(f"No Content-Length in header: {text!r}")
    start = idx + len(CONTENT_LENGTH_HEADER)
    end = text.find("\r\n", start)
    value = text[start:end]
    if not value.isdigit():
        raise InvalidResponseError(f"Malformed Content-Length: {value!r}")
    return int(value)


class MessageReader:
    """Reads Content-Length framed messages from a file descriptor.

    Bytes that arrive past the end of one message stay in the buffer and
    are consumed by the next read.
    """

    def __init__(
        self,
        fd: int,
        max_header_size: int = MAX_HEADER_SIZE,
        max_message_size: int = MAX_MESSAGE_SIZE,
    ) -> None:
        self._fd = fd
        self._max_header_size = max_header_size
        self._max_message_size = max_message_size
        self._buffer = bytearray()
        # Declared length of a message whose header was consumed but whose body
        # has not fully arrived yet.
        self._pending_length: int | None = None

    def read_message(self, deadline: float) -> dict[str, Any]:
        """Read one message, waiting no later than *deadline* (time.monotonic()).

        Raises:
            TimeoutError: The deadline passed before a full message arrived.
            InvalidResponseError: Oversized header or payload, bad length,
                or a payload that is not a JSON object.
            TransportIOError: The descriptor failed or reached EOF.
        """
        if self._pending_length is None:
            header = self._read_header(deadline)
            length = parse_content_length(header)
            if length > self._max_message_size:
                raise InvalidResponseError(
                    f"Declared message length {length} exceeds limit {self._max_message_size}"
                )
            self._pending_length = length
        body = self._read_exactly(self._pending_length, deadline)
        self._pending_length = None

        try:
            message = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidResponseError("Message body is not valid JSON", original_error=e) from e
        if not isinstance(message, dict):
            raise InvalidResponseError(f"Expected a JSON object, got {type(message).__name__}")
        return message

    def _read_header(self, deadline: float) -> bytes:
        while True:
            end = self._buffer.find(HEADER_DELIMITER, 0, self._max_header_size)
            if end >= 0:
                end += len(HEADER_DELIMITER)
                header = bytes(self._buffer[:end])
                del self._buffer[:end]
                return header
            if len(self._buffer) >= self._max_header_size:
                raise InvalidResponseError(
                    f"No header delimiter within {self._max_header_size} bytes"
                )
            self._fill(deadline)

    def _read_exactly(self, n: int, deadline: float) -> bytes:
        while len(self._buffer) < n:
            self._fill(deadline)
        data = bytes(self._buffer[:n])
        del self._buffer[:n]
        return data

    def _fill(self, deadline: float) -> None:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError("read deadline passed")
        try:
            ready, _, _ = select.select([self._fd], [], [], remaining)
        except (OSError, ValueError) as e:
            raise TransportIOError("Cannot poll server output", original_error=e) from e
        if not ready:
            raise TimeoutError("read deadline passed")
        try:
            chunk = os.read(self._fd, READ_CHUNK_SIZE)
        except OSError as e:
            raise TransportIOError("Reading server output failed", original_error=e) from e
        if not chunk:
            raise TransportIOError("Language server closed its output")
        self._buffer.extend(chunk)


class Transport:
    """Owns a spawned language server process and its stdio pipes."""

    def __init__(
        self,
        proc: subprocess.Popen[bytes],
        max_header_size: int = MAX_HEADER_SIZE,
        max_message_size: int = MAX_MESSAGE_SIZE,
    ) -> None:
        if proc.stdin is None or proc.stdout is None:
            raise TransportIOError("Language server process must have piped stdin and stdout")
        self._proc = proc
        self._stdin = proc.stdin
        self._stdout = proc.stdout
        self._reader = MessageReader(proc.stdout.fileno(), max_header_size, max_message_size)
        self._closed = False

    @classmethod
    def spawn(
        cls,
        command: list[str],
        cwd: str | None = None,
        max_header_size: int = MAX_HEADER_SIZE,
        max_message_size: int = MAX_MESSAGE_SIZE,
    ) -> Transport:
        """Locate ``command[0]`` on PATH and start it with piped stdin/stdout.

        Raises:
            ServerNotFoundError: The executable is not on PATH.
            ProcessSpawnError: The OS failed to start the process.
        """
        executable = shutil.which(command[0])
        if executable is None:
            raise ServerNotFoundError(command[0])

        argv = [executable, *command[1:]]
        logger.info(f"Starting language server: {' '.join(argv)}")
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                cwd=cwd,
            )
        except OSError as e:
            raise ProcessSpawnError(
                f"Failed to start {executable}: {e}",
                context=ErrorContext(operation="spawn", component="lsp.transport"),
                original_error=e,
            ) from e
        return cls(proc, max_header_size, max_message_size)

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: dict[str, Any]) -> None:
        """Write one framed message to the server's stdin."""
        data = encode_message(message)
        try:
            self._stdin.write(data)
            self._stdin.flush()
        except (OSError, ValueError) as e:
            raise TransportIOError("Writing to language server failed", original_error=e) from e

    def receive(self, deadline: float) -> dict[str, Any]:
        """Read the next framed message; see MessageReader.read_message."""
        return self._reader.read_message(deadline)

    def close(self) -> None:
        """Close both pipes, kill the process and reap it. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        for stream in (self._stdin, self._stdout):
            try:
                stream.close()
            except OSError:
                logger.opt(exception=True).debug("Error closing language server pipe")
        self._proc.kill()
        self._proc.wait()
        logger.info(f"Language server process {self._proc.pid} exited")
