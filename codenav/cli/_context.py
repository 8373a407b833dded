"""CLI client context -- one language server session per command.

All CLI commands that talk to the server should use client_scope(root)
instead of driving LspClient directly. This provides:
- Server start with the command's settings
- Guaranteed stop (shutdown, exit, kill, reap) on command exit
"""

from __future__ import annotations

import contextlib
from collections.abc import Generator
from pathlib import Path

from codenav.config import ClientSettings
from codenav.lsp.client import LspClient
from codenav.types.errors import CodenavError
from codenav.utils.logger import logger


@contextlib.contextmanager
def client_scope(root: str, settings: ClientSettings) -> Generator[LspClient, None, None]:
    """Context manager providing a started LspClient with cleanup on exit."""
    client = LspClient(settings)
    client.start(str(Path(root).resolve()))
    try:
        yield client
    finally:
        try:
            client.stop()
        except CodenavError:
            logger.opt(exception=True).debug("Error during CLI client cleanup")
