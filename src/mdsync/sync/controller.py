"""One-shot content synchronization between the canonical markdown string and a view's tree.

Each mounted view owns one ``ViewSyncController``.  The controller starts
``UNINITIALIZED``, builds its tree exactly once from the first canonical
string it is given, and stays ``READY`` until the view unmounts.  Canonical
updates that arrive after that are ignored: a different document is shown by
mounting a fresh controller (e.g. keyed by tab + view mode), never by
re-parsing into a live tree.

Structured view initialization:

    canonical ──scan──> table regions (ascending offsets)
        │
        ├─ drop regions inside code blocks and regions that do not parse
        │
        └─ substitute placeholders, last region first (offsets stay valid)
              │
              └─ block transformer ──> tree with placeholder paragraphs
                    │
                    └─ walk top-level children in order, replace the n-th
                       placeholder with parse_table(region n)

Substitution runs in descending offset order while consumption runs in
ascending order; swapping either one scrambles tables in multi-table
documents.

Dropped regions are left as-is in the text handed to the block transformer.

The raw-text view skips all of this and keeps the canonical string verbatim
in a single paragraph.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from mdsync.config import EditorSettings
from mdsync.exceptions import PlaceholderMismatchError, SyncStateError
from mdsync.sync.blocks import BlockTransformer
from mdsync.tables.codec import parse_table
from mdsync.tables.patterns import TABLE_REGION_RE
from mdsync.tree.arena import DocumentTree
from mdsync.tree.nodes import DocumentNode, HeadingNode, NodeKind, ParagraphNode, RootNode, TextRun

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    """The two ways a document can be shown."""

    STRUCTURED = "structured"
    RAW_TEXT = "raw_text"


class SyncPhase(str, Enum):
    """Lifecycle of one view instance's sync state."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class TableRegion:
    """A table's span inside the canonical markdown string."""

    start: int
    length: int
    text: str


# ─── Region Scanning & Placeholder Substitution ──────────────────────────────


def find_table_regions(markdown: str) -> list[TableRegion]:
    """Return every table region (row line, separator line, further row lines) in ascending offset order."""
    return [TableRegion(m.start(), m.end() - m.start(), m.group(0)) for m in TABLE_REGION_RE.finditer(markdown)]


def substitute_placeholders(markdown: str, regions: list[TableRegion], placeholder: str) -> str:
    """Replace each region's span with *placeholder* set off by blank lines.

    Regions are replaced from the last one backwards so that the offsets of
    regions not yet processed still point at the right text.
    """
    replacement = f"\n\n{placeholder}\n\n"
    result = markdown
    for region in sorted(regions, key=lambda r: r.start, reverse=True):
        result = result[: region.start] + replacement + result[region.start + region.length :]
    return result


def usable_regions(canonical: str, regions: list[TableRegion], transformer: BlockTransformer) -> list[TableRegion]:
    """Drop regions that must stay ordinary text: those inside a code block and those that do not parse."""
    code_spans = transformer.code_line_ranges(canonical)
    kept: list[TableRegion] = []
    for region in regions:
        line = canonical.count("\n", 0, region.start)
        if any(start <= line < end for start, end in code_spans):
            logger.debug("Table-shaped lines at offset %d are inside a code block; kept as code", region.start)
            continue
        if parse_table(region.text) is None:
            logger.debug("Table region at offset %d did not parse; kept as text", region.start)
            continue
        kept.append(region)
    return kept


def _is_placeholder_block(node: DocumentNode, placeholder: str) -> bool:
    return node.kind is NodeKind.PARAGRAPH and node.text_content().strip() == placeholder


def splice_tables(root: RootNode, regions: list[TableRegion], placeholder: str) -> int:
    """Swap placeholder paragraphs under *root* for parsed tables, consuming regions in ascending order.

    Returns how many top-level paragraphs consisted of the placeholder alone.
    Placeholders beyond the number of regions are left in place.  A region
    that does not parse goes back in as a paragraph of its original text.
    """
    found = 0
    for child in list(root.children):
        if not _is_placeholder_block(child, placeholder):
            continue
        found += 1
        if found > len(regions):
            continue
        region = regions[found - 1]
        table = parse_table(region.text)
        if table is None:
            logger.warning("Table region at offset %d did not parse; kept as text", region.start)
            child.insert_after(ParagraphNode().append(TextRun(region.text.rstrip("\n"))))
        else:
            child.insert_after(table)
        child.remove()
    return found


# ─── Tree Builders ───────────────────────────────────────────────────────────


def build_structured_root(
    canonical: str,
    transformer: BlockTransformer,
    settings: EditorSettings,
) -> RootNode:
    """Parse *canonical* into a detached RootNode for the structured view.

    Empty or whitespace-only input yields a single empty level-1 heading.
    Raises PlaceholderMismatchError (strict settings) when the placeholder
    count in the parsed tree differs from the number of table regions.
    """
    if not canonical.strip():
        return RootNode().append(HeadingNode(1))

    regions = find_table_regions(canonical)
    if regions:
        regions = usable_regions(canonical, regions, transformer)
    if not regions:
        return transformer.parse(canonical)

    logger.debug("Found %d table region(s) in %d chars of markdown", len(regions), len(canonical))
    root = transformer.parse(substitute_placeholders(canonical, regions, settings.placeholder))
    found = splice_tables(root, regions, settings.placeholder)
    if found != len(regions):
        if settings.strict_placeholders:
            raise PlaceholderMismatchError(expected=len(regions), found=found)
        logger.error("Placeholder mismatch: %d table region(s), %d placeholder block(s)", len(regions), found)
    return root


def build_raw_root(canonical: str) -> RootNode:
    """Wrap *canonical* verbatim in one paragraph, even when it is empty."""
    return RootNode().append(ParagraphNode().append(TextRun(canonical)))


# ─── Controller ──────────────────────────────────────────────────────────────


class ViewSyncController:
    """Owns the tree of one mounted view and converts it to and from the canonical string.

    ``on_change`` receives the new canonical string after every tree edit
    reported through ``tree_changed``.  It is never called during
    initialization, so opening a document does not mark it as modified.
    """

    def __init__(
        self,
        view_mode: ViewMode,
        on_change: Callable[[str], None] | None = None,
        transformer: BlockTransformer | None = None,
        settings: EditorSettings | None = None,
    ):
        self.view_mode = ViewMode(view_mode)
        self.on_change = on_change
        self.transformer = transformer or BlockTransformer()
        self.settings = settings or EditorSettings()
        self._phase = SyncPhase.UNINITIALIZED
        self._tree: DocumentTree | None = None

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def tree(self) -> DocumentTree | None:
        return self._tree

    def initialize(self, canonical: str) -> DocumentTree | None:
        """Build this view's tree from *canonical*; allowed once, from UNINITIALIZED only.

        The tree is built off to the side and committed only if the instance
        is still UNINITIALIZED at that point; if the view was disposed in the
        meantime the result is dropped and None is returned.  A failed build
        leaves the instance untouched.
        """
        if self._phase is not SyncPhase.UNINITIALIZED:
            raise SyncStateError(f"initialize() called in phase {self._phase.value}")

        if self.view_mode is ViewMode.STRUCTURED:
            root = build_structured_root(canonical, self.transformer, self.settings)
        else:
            root = build_raw_root(canonical)
        tree = DocumentTree.adopt(root)

        if self._phase is not SyncPhase.UNINITIALIZED:
            logger.debug("View disposed during initialization; discarding tree")
            return None
        self._tree = tree
        self._phase = SyncPhase.READY
        logger.info("Initialized %s view (%d nodes)", self.view_mode.value, len(tree))
        return tree

    def receive_canonical(self, canonical: str) -> DocumentTree | None:
        """Handle the host handing over the canonical string (on mount or on a later update).

        Only the first call initializes; later ones are ignored.
        """
        if self._phase is SyncPhase.UNINITIALIZED:
            return self.initialize(canonical)
        logger.debug("Ignoring canonical update in phase %s", self._phase.value)
        return self._tree

    def serialize(self) -> str:
        """Render the current tree as markdown without notifying anyone."""
        if self._phase is not SyncPhase.READY or self._tree is None:
            raise SyncStateError(f"serialize() called in phase {self._phase.value}")
        if self.view_mode is ViewMode.RAW_TEXT:
            return self._tree.root.text_content()
        return self.transformer.serialize(self._tree.root)

    def tree_changed(self) -> str:
        """Serialize the edited tree, pass the result to ``on_change`` and return it."""
        markdown = self.serialize()
        if self.on_change is not None:
            self.on_change(markdown)
        return markdown

    def dispose(self) -> None:
        """Unmount: drop the tree.  Safe to call more than once."""
        if self._phase is not SyncPhase.DISPOSED:
            logger.debug("Disposing %s view", self.view_mode.value)
        self._tree = None
        self._phase = SyncPhase.DISPOSED
