"""
Codenav - code-intelligence core for a terminal file explorer.

Talks to an external language server over JSON-RPC 2.0 and turns its
answers into navigable structures:
- A synchronous LSP client (process lifecycle, Content-Length framing,
  request/response correlation, references and call hierarchy queries)
- A glob-filterable, cursor-navigable reference list
- A one-hop call hierarchy graph with text tree and DOT export
"""

__version__ = "0.1.0"
