"""Pydantic model for a table's plain cell-text grid.

``TableMatrix`` is the formatting-free view of a table: one string per cell,
code spans written back with backticks.  "Insert table" builds new tables from
it through ``build_table``.  ``table_to_matrix`` is the host-facing read side:
a renderer or clipboard handler that wants a table as a plain grid calls it
instead of walking rows and cells itself.  The validator guarantees
every row has the same number of cells, the same invariant the tree enforces
for TableNode.
"""

from pydantic import BaseModel, Field, model_validator

from mdsync.tables.inline import parse_inline, wrap_text_with_format
from mdsync.tree.nodes import ParagraphNode, TableNode, TableRowNode, TextRun, make_cell


class TableMatrix(BaseModel):
    """Rectangular grid of cell texts, with the first row optionally a header."""

    rows: list[list[str]] = Field(min_length=1)
    has_header: bool = True

    @model_validator(mode="after")
    def validate_row_widths(self) -> "TableMatrix":
        """Ensure every row has exactly len(rows[0]) cells, and at least one."""
        n_cols = len(self.rows[0])
        if n_cols == 0:
            raise ValueError("Rows must have at least one cell")
        for i, row in enumerate(self.rows):
            if len(row) != n_cols:
                raise ValueError(f"Row {i} has {len(row)} cells, expected {n_cols} (matching row 0)")
        return self

    @property
    def column_count(self) -> int:
        return len(self.rows[0])


def empty_matrix(rows: int, columns: int, has_header: bool = True) -> TableMatrix:
    """Return a blank rows x columns grid."""
    return TableMatrix(rows=[[""] * columns for _ in range(rows)], has_header=has_header)


def _cell_text(paragraph: ParagraphNode | None) -> str:
    if paragraph is None:
        return ""
    parts = []
    for run in paragraph.children:
        if isinstance(run, TextRun):
            parts.append(wrap_text_with_format(run.text, run.flags))
    return "".join(parts)


def table_to_matrix(table: TableNode) -> TableMatrix:
    """Read a TableNode into a TableMatrix (cell markdown, no pipe escaping)."""
    rows = [[_cell_text(cell.paragraph) for cell in row.cells] for row in table.rows]
    has_header = bool(table.rows) and all(cell.is_header for cell in table.rows[0].cells)
    return TableMatrix(rows=rows, has_header=has_header)


def build_table(matrix: TableMatrix) -> TableNode:
    """Build a detached TableNode from *matrix*, inline-parsing each cell."""
    table = TableNode()
    for row_idx, cells in enumerate(matrix.rows):
        row = TableRowNode()
        for text in cells:
            row.append(make_cell(parse_inline(text), is_header=matrix.has_header and row_idx == 0))
        table.append(row)
    return table
