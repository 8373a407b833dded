"""One-hop call hierarchy graph.

Nodes live in a single list. Edges and the root are integer positions
into that list and are resolved to nodes only when they are used, so
appending nodes never invalidates an edge.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Iterable

from codenav.types.core import CallHierarchyItem


@dataclass
class CallGraphNode:
    """A symbol in the graph plus the positions of its neighbours."""

    item: CallHierarchyItem
    incoming: list[int] = field(default_factory=list)
    outgoing: list[int] = field(default_factory=list)

    def add_incoming(self, node_idx: int) -> None:
        self.incoming.append(node_idx)

    def add_outgoing(self, node_idx: int) -> None:
        self.outgoing.append(node_idx)


def _display_location(item: CallHierarchyItem) -> str:
    return f"{posixpath.basename(item.file_path)}:{item.line}"


def _dot_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


class CallHierarchyGraph:
    """A symbol, its direct callers and its direct callees.

    Only one hop is modelled: callers of callers and callees of callees
    are never added.
    """

    def __init__(self) -> None:
        self._nodes: list[CallGraphNode] = []
        self._root: int | None = None
        self.cursor = 0

    @property
    def nodes(self) -> tuple[CallGraphNode, ...]:
        return tuple(self._nodes)

    @property
    def root_index(self) -> int | None:
        return self._root

    @property
    def root(self) -> CallGraphNode | None:
        if self._root is None:
            return None
        return self._nodes[self._root]

    def node_count(self) -> int:
        return len(self._nodes)

    def node(self, index: int) -> CallGraphNode | None:
        if index < 0 or index >= len(self._nodes):
            return None
        return self._nodes[index]

    def clear(self) -> None:
        self._nodes.clear()
        self._root = None
        self.cursor = 0

    def build_from_call_hierarchy(
        self,
        root_item: CallHierarchyItem,
        incoming: Iterable[CallHierarchyItem],
        outgoing: Iterable[CallHierarchyItem],
    ) -> None:
        """Replace the graph with *root_item* and its direct neighbours.

        Each caller gets an edge caller -> root; each callee an edge
        root -> callee. Nodes are ordered root, callers, callees.
        """
        self.clear()
        root_idx = self._create_node(root_item)
        self._root = root_idx

        for item in incoming:
            caller_idx = self._create_node(item)
            self._nodes[caller_idx].add_outgoing(root_idx)
            self._nodes[root_idx].add_incoming(caller_idx)

        for item in outgoing:
            callee_idx = self._create_node(item)
            self._nodes[root_idx].add_outgoing(callee_idx)
            self._nodes[callee_idx].add_incoming(root_idx)

    def callers(self) -> list[CallHierarchyItem]:
        root = self.root
        if root is None:
            return []
        return [self._nodes[i].item for i in root.incoming]

    def callees(self) -> list[CallHierarchyItem]:
        root = self.root
        if root is None:
            return []
        return [self._nodes[i].item for i in root.outgoing]

    def to_text_tree(self) -> str:
        """Render callers, the root, and callees as indented text.

        Example::

            Callers:
              ← main (main.zig:10)

            ◉ parse (parser.zig:42)

            Callees:
              → next (lexer.zig:7)
        """
        root = self.root
        if root is None:
            return ""

        lines: list[str] = []
        if root.incoming:
            lines.append("Callers:")
            for idx in root.incoming:
                caller = self._nodes[idx].item
                lines.append(f"  ← {caller.name} ({_display_location(caller)})")
            lines.append("")

        lines.append(f"◉ {root.item.name} ({_display_location(root.item)})")

        if root.outgoing:
            lines.append("")
            lines.append("Callees:")
            for idx in root.outgoing:
                callee = self._nodes[idx].item
                lines.append(f"  → {callee.name} ({_display_location(callee)})")

        return "\n".join(lines) + "\n"

    def to_dot(self) -> str:
        """Render the graph in Graphviz DOT for external tools."""
        out = [
            "digraph callgraph {",
            "    rankdir=LR;",
            '    node [shape=box, fontname="monospace"];',
            "    edge [arrowhead=vee];",
            "",
        ]
        for i, node in enumerate(self._nodes):
            label = f"{_dot_escape(node.item.name)}\\n{_dot_escape(_display_location(node.item))}"
            out.append(f'    n{i} [label="{label}"];')
        out.append("")
        for i, node in enumerate(self._nodes):
            for target in node.outgoing:
                out.append(f"    n{i} -> n{target};")
        out.append("}")
        return "\n".join(out) + "\n"

    def move_down(self) -> None:
        if self.cursor + 1 < len(self._nodes):
            self.cursor += 1

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def get_current(self) -> CallGraphNode | None:
        return self.node(self.cursor)

    def _create_node(self, item: CallHierarchyItem) -> int:
        self._nodes.append(CallGraphNode(item))
        return len(self._nodes) - 1
