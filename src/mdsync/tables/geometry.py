"""Row and column insert/delete on an already-located table.

These functions trust that the caller has found the right table; locating it
from a gesture or cursor is the job of ``mdsync.tables.edits``.  Every
operation keeps the rectangular shape of the table and checks it with
``validate_table`` afterwards, so a table that was already malformed raises
TreeInvariantError instead of being edited further.  Removing the last row or
the last column removes the whole table, since a table without rows is not a
valid node.
"""

import logging

from mdsync.tree.nodes import TableCellNode, TableNode, TableRowNode, make_cell, validate_table

logger = logging.getLogger(__name__)


def _blank_cell(is_header: bool) -> TableCellNode:
    return make_cell([], is_header=is_header)


def _check_index(index: int, upper: int, what: str) -> None:
    if not 0 <= index <= upper:
        raise IndexError(f"{what} index {index} out of range 0..{upper}")


def _remove_table(table: TableNode) -> None:
    if table.parent is not None:
        table.remove()
    logger.debug("Removed table key=%s after deleting its last row/column", table.key)


def insert_row(table: TableNode, index: int) -> TableRowNode:
    """Insert a blank row so that it ends up at position *index* (0..row count)."""
    rows = table.rows
    _check_index(index, len(rows), "Row")
    row = TableRowNode()
    row.append(*[_blank_cell(False) for _ in range(table.column_count)])
    if index == len(rows):
        table.append(row)
    else:
        rows[index].insert_before(row)
    validate_table(table)
    return row


def insert_column(table: TableNode, index: int) -> None:
    """Insert a blank cell at position *index* (0..column count) in every row.

    A cell added to a header row is itself a header cell.
    """
    _check_index(index, table.column_count, "Column")
    for row in table.rows:
        cells = row.cells
        is_header = bool(cells) and all(cell.is_header for cell in cells)
        cell = _blank_cell(is_header)
        if index == len(cells):
            row.append(cell)
        else:
            cells[index].insert_before(cell)
    validate_table(table)


def delete_row(table: TableNode, index: int) -> TableNode | None:
    """Delete row *index*; returns the table, or None if the table was removed."""
    rows = table.rows
    _check_index(index, len(rows) - 1, "Row")
    if len(rows) == 1:
        _remove_table(table)
        return None
    rows[index].remove()
    validate_table(table)
    return table


def delete_column(table: TableNode, index: int) -> TableNode | None:
    """Delete column *index* from every row; returns the table, or None if it was removed."""
    _check_index(index, table.column_count - 1, "Column")
    if table.column_count == 1:
        _remove_table(table)
        return None
    for row in table.rows:
        row.cells[index].remove()
    validate_table(table)
    return table
