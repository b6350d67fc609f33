"""Node classes for the structured document tree.

The tree is a tagged variant: every node class carries a ``kind`` and the set
of child kinds it accepts.  Attaching a node checks those rules and the
table-nesting rule (no Table may sit anywhere below another Table), so an
illegal structure is rejected at the point of mutation instead of surfacing
later as broken markdown.

Nodes may be built detached (the table codec and block transformer do this)
and are given stable keys once they are attached under a ``DocumentTree``
root.  See ``mdsync.tree.arena``.
"""

from enum import Enum, IntFlag
from typing import Iterator

from mdsync.exceptions import TreeInvariantError


class NodeKind(str, Enum):
    """Discriminator for document node classes."""

    ROOT = "root"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "listitem"
    QUOTE = "quote"
    CODE_BLOCK = "code"
    TABLE = "table"
    TABLE_ROW = "tablerow"
    TABLE_CELL = "tablecell"
    TEXT = "text"


class FormatFlag(IntFlag):
    """Inline formatting bitset carried by TextRun nodes."""

    NONE = 0
    BOLD = 1
    ITALIC = 2
    STRIKETHROUGH = 4
    UNDERLINE = 8
    CODE = 16


# Kinds that may appear at block level (children of Root, Quote, ListItem)
BLOCK_KINDS = frozenset(
    {
        NodeKind.HEADING,
        NodeKind.PARAGRAPH,
        NodeKind.LIST,
        NodeKind.QUOTE,
        NodeKind.CODE_BLOCK,
        NodeKind.TABLE,
    }
)

_INLINE_ONLY = frozenset({NodeKind.TEXT})


# ─── Base Node ───────────────────────────────────────────────────────────────


class DocumentNode:
    """Base class for every node in the document tree."""

    kind: NodeKind
    allowed_children: frozenset = frozenset()
    # Joins children's text in text_content()
    text_separator = "\n\n"

    def __init__(self):
        self.key: int | None = None
        self.parent: DocumentNode | None = None
        self.children: list[DocumentNode] = []
        self._tree = None  # owning DocumentTree, set while attached under its root

    def __repr__(self) -> str:
        return f"<{type(self).__name__} key={self.key} children={len(self.children)}>"

    # ── Mutation ──────────────────────────────────────────────────────────

    def append(self, *nodes: "DocumentNode") -> "DocumentNode":
        """Append *nodes* as the last children, moving them if already attached elsewhere."""
        for node in nodes:
            self._prepare_child(node)
            self._link(len(self.children), node)
        return self

    def insert_after(self, node: "DocumentNode") -> "DocumentNode":
        """Insert *node* as the next sibling of this node."""
        parent = self._require_parent()
        parent._prepare_child(node)
        parent._link(self.index_in_parent() + 1, node)
        return node

    def insert_before(self, node: "DocumentNode") -> "DocumentNode":
        """Insert *node* as the previous sibling of this node."""
        parent = self._require_parent()
        parent._prepare_child(node)
        parent._link(self.index_in_parent(), node)
        return node

    def remove(self) -> None:
        """Detach this node (and its subtree) from its parent."""
        self._require_parent()
        self._detach()

    def _require_parent(self) -> "DocumentNode":
        if self.parent is None:
            raise TreeInvariantError(f"{type(self).__name__} has no parent")
        return self.parent

    def _prepare_child(self, node: "DocumentNode") -> None:
        """Check that *node* may become a child here, then detach it from its old parent."""
        if node.kind not in self.allowed_children:
            raise TreeInvariantError(f"{type(self).__name__} cannot contain {type(node).__name__}")
        if node is self or any(ancestor is node for ancestor in self.ancestors()):
            raise TreeInvariantError("A node cannot be attached below itself")
        inside_table = self.kind is NodeKind.TABLE or self.enclosing(NodeKind.TABLE) is not None
        if inside_table and node.contains_table():
            raise TreeInvariantError("A table cannot be nested inside another table")
        if node.parent is not None:
            node._detach()

    def _link(self, index: int, node: "DocumentNode") -> None:
        self.children.insert(index, node)
        node.parent = self
        if self._tree is not None:
            self._tree._register(node)

    def _detach(self) -> None:
        self.parent.children.remove(self)
        self.parent = None
        if self._tree is not None:
            self._tree._release(self)

    # ── Queries ───────────────────────────────────────────────────────────

    def index_in_parent(self) -> int:
        """Return this node's position among its siblings."""
        parent = self._require_parent()
        for idx, sibling in enumerate(parent.children):
            if sibling is self:
                return idx
        raise TreeInvariantError("Node is not listed among its parent's children")

    def text_content(self) -> str:
        """Return the flattened text of this subtree."""
        return self.text_separator.join(child.text_content() for child in self.children)

    def ancestors(self) -> Iterator["DocumentNode"]:
        """Yield parent, grandparent, ... up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def walk(self) -> Iterator["DocumentNode"]:
        """Yield this node and every descendant in document (pre-)order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def enclosing(self, kind: NodeKind) -> "DocumentNode | None":
        """Return the nearest ancestor-or-self of the given kind."""
        if self.kind is kind:
            return self
        for ancestor in self.ancestors():
            if ancestor.kind is kind:
                return ancestor
        return None

    def top_level_element(self) -> "DocumentNode | None":
        """Return the ancestor-or-self that is a direct child of the Root, if any."""
        node = self
        while node.parent is not None:
            if node.parent.kind is NodeKind.ROOT:
                return node
            node = node.parent
        return None

    def contains_table(self) -> bool:
        return any(node.kind is NodeKind.TABLE for node in self.walk())


# ─── Block Nodes ─────────────────────────────────────────────────────────────


class RootNode(DocumentNode):
    kind = NodeKind.ROOT
    allowed_children = BLOCK_KINDS


class HeadingNode(DocumentNode):
    kind = NodeKind.HEADING
    allowed_children = _INLINE_ONLY
    text_separator = ""

    def __init__(self, level: int = 1):
        super().__init__()
        if not 1 <= level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {level}")
        self.level = level


class ParagraphNode(DocumentNode):
    kind = NodeKind.PARAGRAPH
    allowed_children = _INLINE_ONLY
    text_separator = ""


class ListNode(DocumentNode):
    kind = NodeKind.LIST
    allowed_children = frozenset({NodeKind.LIST_ITEM})
    text_separator = "\n"

    def __init__(self, ordered: bool = False):
        super().__init__()
        self.ordered = ordered


class ListItemNode(DocumentNode):
    kind = NodeKind.LIST_ITEM
    allowed_children = BLOCK_KINDS
    text_separator = "\n"


class QuoteNode(DocumentNode):
    kind = NodeKind.QUOTE
    allowed_children = BLOCK_KINDS


class CodeBlockNode(DocumentNode):
    kind = NodeKind.CODE_BLOCK
    allowed_children = _INLINE_ONLY
    text_separator = ""

    def __init__(self, language: str = ""):
        super().__init__()
        self.language = language


# ─── Table Nodes ─────────────────────────────────────────────────────────────


class TableNode(DocumentNode):
    kind = NodeKind.TABLE
    allowed_children = frozenset({NodeKind.TABLE_ROW})
    text_separator = "\n"

    @property
    def rows(self) -> list["TableRowNode"]:
        return [child for child in self.children if child.kind is NodeKind.TABLE_ROW]

    @property
    def column_count(self) -> int:
        rows = self.rows
        return len(rows[0].cells) if rows else 0


class TableRowNode(DocumentNode):
    kind = NodeKind.TABLE_ROW
    allowed_children = frozenset({NodeKind.TABLE_CELL})
    text_separator = "\t"

    @property
    def cells(self) -> list["TableCellNode"]:
        return [child for child in self.children if child.kind is NodeKind.TABLE_CELL]


class TableCellNode(DocumentNode):
    kind = NodeKind.TABLE_CELL
    allowed_children = frozenset({NodeKind.PARAGRAPH})

    def __init__(self, is_header: bool = False):
        super().__init__()
        self.is_header = is_header

    @property
    def paragraph(self) -> ParagraphNode | None:
        return self.children[0] if self.children else None


# ─── Inline Nodes ────────────────────────────────────────────────────────────


class TextRun(DocumentNode):
    """A span of text sharing one set of format flags (and optionally a link)."""

    kind = NodeKind.TEXT

    def __init__(self, text: str = "", flags: FormatFlag = FormatFlag.NONE, link_url: str | None = None):
        super().__init__()
        self.text = text
        self.flags = FormatFlag(flags)
        self.link_url = link_url

    def __repr__(self) -> str:
        return f"<TextRun {self.text!r} flags={self.flags!r}>"

    def text_content(self) -> str:
        return self.text

    def has_format(self, flag: FormatFlag) -> bool:
        return bool(self.flags & flag)


# ─── Helpers ─────────────────────────────────────────────────────────────────


def make_cell(runs: list[TextRun], is_header: bool = False) -> TableCellNode:
    """Build a table cell holding one paragraph with the given runs."""
    paragraph = ParagraphNode()
    paragraph.append(*runs)
    cell = TableCellNode(is_header=is_header)
    cell.append(paragraph)
    return cell


def validate_table(table: TableNode) -> None:
    """Raise TreeInvariantError unless *table* has >=1 row, uniform widths and one paragraph per cell."""
    rows = table.rows
    if len(rows) != len(table.children) or not rows:
        raise TreeInvariantError("A table must contain one or more rows and nothing else")
    width = len(rows[0].children)
    for idx, row in enumerate(rows):
        if len(row.cells) != len(row.children):
            raise TreeInvariantError(f"Row {idx} contains non-cell children")
        if len(row.cells) != width:
            raise TreeInvariantError(f"Row {idx} has {len(row.cells)} cells, expected {width}")
        for cell in row.cells:
            if len(cell.children) != 1 or cell.children[0].kind is not NodeKind.PARAGRAPH:
                raise TreeInvariantError(f"Cell in row {idx} must hold exactly one paragraph")
    if any(ancestor.kind is NodeKind.TABLE for ancestor in table.ancestors()):
        raise TreeInvariantError("Table is nested inside another table")
