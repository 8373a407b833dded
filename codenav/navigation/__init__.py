"""In-memory navigation models fed by the LSP client.

- ReferenceList: references to one symbol with glob filtering and a cursor
- CallHierarchyGraph: a symbol with its direct callers and callees
"""

from codenav.navigation.glob import glob_match, path_matches
from codenav.navigation.graph import CallGraphNode, CallHierarchyGraph
from codenav.navigation.references import ReferenceList

__all__ = [
    "CallGraphNode",
    "CallHierarchyGraph",
    "ReferenceList",
    "glob_match",
    "path_matches",
]
