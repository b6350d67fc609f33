"""Structural table edits driven by user gestures.

A gesture (context-menu click, drag on a resize handle, menu command with the
cursor somewhere in the document) arrives as a rendered-element handle, a node key
or a node.  ``TableEditCoordinator.resolve`` maps it to the TableCell under it,
then that cell's TableRow and Table, through the tree's element side table.
Only then is the mutation handed to ``mdsync.tables.geometry``, so with
several tables in a document the edit lands on the one the user pointed at.

New tables are always inserted as siblings at Root level, after the
top-level block that holds the cursor, which keeps tables from nesting.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Hashable

from mdsync.config import EditorSettings
from mdsync.tables import geometry
from mdsync.tables.schema import build_table, empty_matrix
from mdsync.tree.arena import DocumentTree
from mdsync.tree.nodes import DocumentNode, NodeKind, TableCellNode, TableNode, TableRowNode

logger = logging.getLogger(__name__)

# Used when the renderer cannot measure a cell
DEFAULT_CELL_WIDTH = 100
DEFAULT_CELL_HEIGHT = 40


class ResizeMode(str, Enum):
    """Which resize handle was dragged."""

    ROWS = "rows"  # bottom handle
    COLUMNS = "columns"  # right handle


@dataclass(frozen=True)
class TableContext:
    """A resolved cell position inside a specific table."""

    table: TableNode
    row: TableRowNode
    cell: TableCellNode
    row_index: int
    col_index: int


def resize_count(delta: float, cell_size: float) -> int:
    """Convert a drag distance into a whole number of rows/columns to add (never negative)."""
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive, got {cell_size}")
    return max(0, math.floor(delta / cell_size))


class TableEditCoordinator:
    """Resolves gesture targets to table cells and applies structural edits to one tree."""

    def __init__(self, tree: DocumentTree, settings: EditorSettings | None = None):
        self.tree = tree
        self.settings = settings or EditorSettings()

    # ── Resolution ────────────────────────────────────────────────────────

    def _node_for(self, target: DocumentNode | Hashable) -> DocumentNode | None:
        """Map a node, a rendered-element handle or a node key to a live node of this tree."""
        if isinstance(target, DocumentNode):
            return target if target in self.tree else None
        node = self.tree.node_for_element(target)
        if node is None and isinstance(target, int):
            node = self.tree.get(target)
        return node

    def resolve(self, target: DocumentNode | Hashable) -> TableContext | None:
        """Return the table/row/cell under *target*, or None when it is not inside a table."""
        node = self._node_for(target)
        if node is None:
            return None
        cell = node.enclosing(NodeKind.TABLE_CELL)
        if cell is None:
            return None
        row = cell.parent
        table = row.parent if row is not None else None
        if row is None or table is None or table.kind is not NodeKind.TABLE:
            logger.warning("Cell key=%s is not inside a table row/table", cell.key)
            return None
        return TableContext(table, row, cell, row.index_in_parent(), cell.index_in_parent())

    def _apply(self, target: DocumentNode | Hashable, action: str, operation) -> bool:
        context = self.resolve(target)
        if context is None:
            logger.debug("Ignoring %s: target is not inside a table", action)
            return False
        operation(context)
        logger.debug(
            "%s on table key=%s at row %d, column %d", action, context.table.key, context.row_index, context.col_index
        )
        return True

    # ── Row / Column Operations ──────────────────────────────────────────

    def insert_row_above(self, target: DocumentNode | Hashable) -> bool:
        return self._apply(target, "insert-row-above", lambda ctx: geometry.insert_row(ctx.table, ctx.row_index))

    def insert_row_below(self, target: DocumentNode | Hashable) -> bool:
        return self._apply(target, "insert-row-below", lambda ctx: geometry.insert_row(ctx.table, ctx.row_index + 1))

    def insert_column_left(self, target: DocumentNode | Hashable) -> bool:
        return self._apply(
            target, "insert-column-left", lambda ctx: geometry.insert_column(ctx.table, ctx.col_index)
        )

    def insert_column_right(self, target: DocumentNode | Hashable) -> bool:
        return self._apply(
            target, "insert-column-right", lambda ctx: geometry.insert_column(ctx.table, ctx.col_index + 1)
        )

    def delete_row(self, target: DocumentNode | Hashable) -> bool:
        return self._apply(target, "delete-row", lambda ctx: geometry.delete_row(ctx.table, ctx.row_index))

    def delete_column(self, target: DocumentNode | Hashable) -> bool:
        return self._apply(target, "delete-column", lambda ctx: geometry.delete_column(ctx.table, ctx.col_index))

    def delete_table(self, target: DocumentNode | Hashable) -> bool:
        return self._apply(target, "delete-table", lambda ctx: ctx.table.remove())

    # ── Table Insertion ──────────────────────────────────────────────────

    def insert_table_at_cursor(
        self,
        cursor: DocumentNode | Hashable | None = None,
        rows: int | None = None,
        columns: int | None = None,
    ) -> TableNode:
        """Insert a blank table (header row included) after the top-level block holding *cursor*.

        With the cursor inside a table cell, the new table goes after that
        whole table, never inside it.  Without a usable cursor the table is
        appended to the end of the document.
        """
        matrix = empty_matrix(rows or self.settings.table_rows, columns or self.settings.table_columns)
        table = build_table(matrix)

        node = self._node_for(cursor) if cursor is not None else None
        anchor = node.top_level_element() if node is not None else None
        if anchor is None:
            self.tree.root.append(table)
        else:
            anchor.insert_after(table)
        logger.info("Inserted %dx%d table key=%s", len(matrix.rows), matrix.column_count, table.key)
        return table

    # ── Drag Resize ──────────────────────────────────────────────────────

    def resize_table(
        self,
        target: DocumentNode | Hashable,
        mode: ResizeMode,
        delta: float,
        cell_size: float | None = None,
    ) -> int:
        """Append rows (bottom handle) or columns (right handle) for a drag of *delta* pixels.

        Returns the number of rows or columns added.
        """
        mode = ResizeMode(mode)
        node = self._node_for(target)
        table = node.enclosing(NodeKind.TABLE) if node is not None else None
        if table is None:
            logger.debug("Ignoring resize: target is not inside a table")
            return 0

        if cell_size is None:
            cell_size = DEFAULT_CELL_HEIGHT if mode is ResizeMode.ROWS else DEFAULT_CELL_WIDTH
        count = resize_count(delta, cell_size)
        for _ in range(count):
            if mode is ResizeMode.ROWS:
                geometry.insert_row(table, len(table.rows))
            else:
                geometry.insert_column(table, table.column_count)
        if count:
            logger.debug("Resized table key=%s: +%d %s", table.key, count, mode.value)
        return count
