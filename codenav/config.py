"""
Configuration for the language server client.

Settings come from keyword arguments, a dict (unknown keys ignored), or
the environment:

- CODENAV_SERVER: server command line, split with shlex (default ``zls``)
- CODENAV_LANGUAGE_ID: languageId announced in didOpen (default ``zig``)
- CODENAV_TIMEOUT: seconds to wait for each response (default 3)
"""

from __future__ import annotations

import inspect
import os
import shlex
from dataclasses import dataclass, field
from typing import Any, Mapping, Self

from codenav.constants import (
    DEFAULT_LANGUAGE_ID,
    DEFAULT_SERVER_COMMAND,
    DEFAULT_TIMEOUT,
    MAX_HEADER_SIZE,
    MAX_MESSAGE_SIZE,
    MAX_SNIPPET_BYTES,
)
from codenav.types.errors import ConfigurationError, ErrorContext


@dataclass
class ClientSettings:
    """Configuration parameters for LspClient."""

    server_command: list[str] = field(default_factory=lambda: list(DEFAULT_SERVER_COMMAND))
    """Executable (searched on PATH) followed by its arguments."""
    language_id: str = DEFAULT_LANGUAGE_ID
    timeout: float = DEFAULT_TIMEOUT
    """Seconds allowed for each response; the read loop enforces it."""
    max_message_size: int = MAX_MESSAGE_SIZE
    max_header_size: int = MAX_HEADER_SIZE
    max_snippet_bytes: int = MAX_SNIPPET_BYTES
    encoding: str = "utf-8"
    """Encoding used when reading source files for snippets."""

    def __post_init__(self) -> None:
        if not self.server_command or not self.server_command[0]:
            raise self._invalid("server_command must name an executable")
        if self.timeout <= 0:
            raise self._invalid(f"timeout must be positive, got {self.timeout}")
        for name in ("max_message_size", "max_header_size", "max_snippet_bytes"):
            if getattr(self, name) <= 0:
                raise self._invalid(f"{name} must be positive")

    @property
    def executable(self) -> str:
        return self.server_command[0]

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> Self:
        params = inspect.signature(cls).parameters
        return cls(**{k: v for k, v in values.items() if k in params})

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Build settings from CODENAV_* environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        server = env.get("CODENAV_SERVER", "").strip()
        if server:
            values["server_command"] = shlex.split(server)

        language_id = env.get("CODENAV_LANGUAGE_ID", "").strip()
        if language_id:
            values["language_id"] = language_id

        timeout = env.get("CODENAV_TIMEOUT", "").strip()
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as e:
                raise cls._invalid(f"CODENAV_TIMEOUT is not a number: {timeout!r}", e) from e

        return cls.from_dict(values)

    @staticmethod
    def _invalid(message: str, original: Exception | None = None) -> ConfigurationError:
        return ConfigurationError(
            message,
            context=ErrorContext(component="config"),
            original_error=original,
        )
