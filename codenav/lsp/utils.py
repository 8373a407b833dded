"""Shared utilities for the LSP integration layer.

URI conversion and snippet extraction used by LspClient when it turns
server locations into SymbolReference / CallHierarchyItem values.
"""

from __future__ import annotations

import pathlib
from dataclasses import dataclass

from codenav.constants import FILE_URI_SCHEME, MAX_SNIPPET_BYTES
from codenav.utils.logger import logger


def path_to_uri(path: str) -> str:
    """Convert an absolute path to a file:// URI.

    The path is appended to the scheme as-is; no percent-encoding is
    performed, so this is only correct for absolute, unescaped paths.
    """
    return f"{FILE_URI_SCHEME}{path}"


def uri_to_path(uri: str) -> str:
    """Strip the file:// scheme from a URI; other strings are returned unchanged."""
    if uri.startswith(FILE_URI_SCHEME):
        return uri[len(FILE_URI_SCHEME):]
    return uri


def relative_to_root(path: str, project_root: str) -> str:
    """Express *path* relative to the project root when it lies inside it."""
    try:
        return str(pathlib.Path(path).relative_to(project_root))
    except ValueError:
        return path


def _trim(line: str) -> str:
    return line.rstrip(" \t\r")


@dataclass(frozen=True)
class SourceContext:
    """A source line and its immediate neighbours."""

    snippet: str = ""
    before: str = ""
    after: str = ""


def read_source_context(
    path: str,
    line: int,
    max_bytes: int = MAX_SNIPPET_BYTES,
    encoding: str = "utf-8",
) -> SourceContext:
    """Read line *line* (0-indexed) of *path* plus the lines around it.

    At most *max_bytes* of the file are read. Trailing spaces, tabs and
    carriage returns are trimmed. Any read failure, or a line past the end
    of the file, yields empty strings.
    """
    try:
        with open(path, "rb") as f:
            data = f.read(max_bytes)
    except OSError:
        logger.debug(f"Snippet unavailable, cannot read {path}")
        return SourceContext()

    lines = data.decode(encoding, errors="replace").split("\n")
    if line < 0 or line >= len(lines):
        return SourceContext()

    return SourceContext(
        snippet=_trim(lines[line]),
        before=_trim(lines[line - 1]) if line > 0 else "",
        after=_trim(lines[line + 1]) if line + 1 < len(lines) else "",
    )


def read_snippet(
    path: str,
    line: int,
    max_bytes: int = MAX_SNIPPET_BYTES,
    encoding: str = "utf-8",
) -> str:
    """Read one trimmed source line (0-indexed); empty string on failure."""
    return read_source_context(path, line, max_bytes, encoding).snippet
