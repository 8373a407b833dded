"""Shared constants for codenav.

Centralizes server defaults, wire protocol limits, and the
timezone-aware datetime helper used by error contexts.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


# Executable searched for on PATH when no server command is configured.
DEFAULT_SERVER_COMMAND: list[str] = ["zls"]

# languageId sent with textDocument/didOpen.
DEFAULT_LANGUAGE_ID: str = "zig"

# Seconds to wait for a matching response before giving up.
DEFAULT_TIMEOUT: float = 3.0

# Content-Length framing
CONTENT_LENGTH_HEADER: str = "Content-Length: "
HEADER_DELIMITER: bytes = b"\r\n\r\n"

# Largest header region accepted before the delimiter must appear.
MAX_HEADER_SIZE: int = 256

# Largest declared payload accepted from a server (10 MiB).
MAX_MESSAGE_SIZE: int = 10 * 1024 * 1024

# Largest prefix of a source file read to build a snippet (1 MiB).
MAX_SNIPPET_BYTES: int = 1 * 1024 * 1024

# Bytes requested per os.read() on the server's stdout.
READ_CHUNK_SIZE: int = 65536

FILE_URI_SCHEME: str = "file://"
