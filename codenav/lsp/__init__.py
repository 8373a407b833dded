"""LSP integration for codenav.

A synchronous JSON-RPC 2.0 client for one external language server,
limited to references and call hierarchy queries.
"""

from codenav.lsp.client import LspClient
from codenav.lsp.transport import MessageReader, Transport, encode_message, parse_content_length

__all__ = [
    "LspClient",
    "MessageReader",
    "Transport",
    "encode_message",
    "parse_content_length",
]
