"""Keyed node arena for one view's document tree.

Every node attached under ``DocumentTree.root`` gets a stable integer key.  A
node keeps its key while it stays in the tree, including when it is moved to
another parent.  A side table maps rendered-element handles (any hashable a
renderer chooses: DOM ids, widget objects, ...) to keys, so a gesture on a
rendered element resolves to its node with two dict lookups instead of a walk
over the whole tree.  Detaching a subtree drops its element bindings; the
renderer binds again when it redraws.

The tree belongs to exactly one view instance and is thrown away on unmount.
"""

from typing import Hashable, Iterator

from mdsync.exceptions import TreeInvariantError
from mdsync.tree.nodes import DocumentNode, NodeKind, RootNode, TableNode


class DocumentTree:
    """A Root node plus the key index and rendered-element bindings for its subtree."""

    def __init__(self):
        self._nodes: dict[int, DocumentNode] = {}
        self._elements: dict[Hashable, int] = {}
        self._next_key = 1
        self.root = RootNode()
        self._register(self.root)

    @classmethod
    def adopt(cls, root: RootNode) -> "DocumentTree":
        """Build a tree whose root takes over every top-level child of a detached *root*."""
        tree = cls()
        tree.root.append(*list(root.children))
        return tree

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: DocumentNode) -> bool:
        return node.key is not None and self._nodes.get(node.key) is node

    # ── Key bookkeeping (called by DocumentNode on attach/detach) ─────────

    def _register(self, subtree: DocumentNode) -> None:
        for node in subtree.walk():
            # Keep an existing key unless another live node already holds it
            if node.key is None or (node.key in self._nodes and self._nodes[node.key] is not node):
                node.key = self._next_key
                self._next_key += 1
            elif node.key >= self._next_key:
                self._next_key = node.key + 1
            self._nodes[node.key] = node
            node._tree = self  # pylint: disable=protected-access

    def _release(self, subtree: DocumentNode) -> None:
        released: set[int] = set()
        for node in subtree.walk():
            if node.key is not None and self._nodes.get(node.key) is node:
                del self._nodes[node.key]
                released.add(node.key)
            node._tree = None  # pylint: disable=protected-access
        if released:
            self._elements = {element: key for element, key in self._elements.items() if key not in released}

    # ── Lookups ───────────────────────────────────────────────────────────

    def get(self, key: int) -> DocumentNode | None:
        """Return the live node with this key, or None."""
        return self._nodes.get(key)

    def nodes(self, kind: NodeKind | None = None) -> Iterator[DocumentNode]:
        """Yield nodes in document order, optionally filtered by kind."""
        for node in self.root.walk():
            if kind is None or node.kind is kind:
                yield node

    def tables(self) -> list[TableNode]:
        """Return every table in document order."""
        return list(self.nodes(NodeKind.TABLE))

    # ── Rendered-element side table ───────────────────────────────────────

    def bind_element(self, element: Hashable, node: DocumentNode) -> None:
        """Record that *element* is the rendered form of *node*."""
        if node not in self:
            raise TreeInvariantError(f"{node!r} is not part of this tree")
        self._elements[element] = node.key

    def unbind_element(self, element: Hashable) -> None:
        self._elements.pop(element, None)

    def node_for_element(self, element: Hashable) -> DocumentNode | None:
        """Return the node rendered as *element*, or None if unknown or already removed."""
        key = self._elements.get(element)
        if key is None:
            return None
        return self._nodes.get(key)
