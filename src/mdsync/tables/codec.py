"""GFM table parsing and serialization.

``parse_table`` turns a block of ``|``-delimited lines into a ``TableNode``;
``serialize_table`` turns a ``TableNode`` back into markdown lines.  Tables are
the one block type handled here rather than by the generic block transformer,
because cell text needs pipe escaping and inline-code runs.

Round trip: for any table produced by ``parse_table``,
``parse_table(serialize_table(table))`` has the same cell texts and code
flags.  Header status is the exception: serialization always writes the first
row followed by a separator, so the first row comes back as a header.
"""

import logging

from mdsync.tables.inline import parse_inline, wrap_text_with_format
from mdsync.tables.patterns import CELL_SPLIT_RE, ESCAPED_PIPE_RE, SEPARATOR_CONTENT_RE, UNESCAPED_PIPE_RE
from mdsync.tree.nodes import DocumentNode, NodeKind, TableNode, TableRowNode, TextRun, make_cell, validate_table

logger = logging.getLogger(__name__)


# ─── Row Classification ──────────────────────────────────────────────────────


def _is_row_line(line: str) -> bool:
    """Return True if the trimmed line starts and ends with a pipe."""
    trimmed = line.strip()
    return len(trimmed) >= 2 and trimmed.startswith("|") and trimmed.endswith("|")


def _row_content(line: str) -> str:
    """Strip surrounding whitespace and the outer pipes from a row line."""
    return line.strip()[1:-1]


def is_separator_row(content: str) -> bool:
    """Return True if row *content* (outer pipes removed) is a ``---|:-:`` separator.

    The dash requirement keeps an all-blank row ("|   |   |") from being
    treated as a separator.
    """
    return bool(SEPARATOR_CONTENT_RE.match(content)) and "-" in content


def split_cells(content: str) -> list[str]:
    """Split row *content* on unescaped pipes, unescape ``\\|`` and trim each cell."""
    return [ESCAPED_PIPE_RE.sub("|", cell).strip() for cell in CELL_SPLIT_RE.split(content)]


# ─── Parsing ─────────────────────────────────────────────────────────────────


def parse_table(block_text: str) -> TableNode | None:
    """Parse a block of pipe-delimited lines into a TableNode.

    Lines that do not start and end with ``|`` are ignored.  The first row is a
    header only when a separator row appears after it; without any separator
    no row is a header.  Blank cells and blank rows are kept.  Short rows are
    padded with empty cells to the widest row.

    Returns None when fewer than two qualifying lines exist or no data rows
    remain after separator removal.
    """
    lines = block_text.strip().split("\n")
    row_lines = [(idx, line) for idx, line in enumerate(lines) if _is_row_line(line)]
    if len(row_lines) < 2:
        logger.debug("Rejected table block: %d qualifying line(s)", len(row_lines))
        return None

    rows: list[list[str]] = []
    separator_idx: int | None = None
    for idx, line in row_lines:
        content = _row_content(line)
        if is_separator_row(content):
            if separator_idx is None:
                separator_idx = idx
            continue
        rows.append(split_cells(content))

    if not rows:
        logger.debug("Rejected table block: only separator rows")
        return None

    has_header = separator_idx is not None and separator_idx > 0
    width = max(len(cells) for cells in rows)

    table = TableNode()
    for row_idx, cells in enumerate(rows):
        row = TableRowNode()
        is_header = has_header and row_idx == 0
        for cell_text in cells + [""] * (width - len(cells)):
            row.append(make_cell(parse_inline(cell_text), is_header=is_header))
        table.append(row)
    validate_table(table)
    return table


# ─── Serialization ───────────────────────────────────────────────────────────


def _cell_markdown(cell: DocumentNode) -> str:
    """Concatenate a cell's runs back into markdown and escape stray pipes."""
    parts: list[str] = []
    for child in cell.children:
        if child.kind is not NodeKind.PARAGRAPH:
            parts.append(child.text_content())
            continue
        for inline in child.children:
            if isinstance(inline, TextRun):
                parts.append(wrap_text_with_format(inline.text, inline.flags))
            else:
                parts.append(inline.text_content())
    return UNESCAPED_PIPE_RE.sub(r"\\|", "".join(parts))


def serialize_table(node: DocumentNode) -> str | None:
    """Render a TableNode as GFM markdown.

    A ``---`` separator row always follows the first row.  Returns None for
    anything that is not a table, or for a table without rows.
    """
    if node.kind is not NodeKind.TABLE:
        return None

    lines: list[str] = []
    for row in node.children:
        if row.kind is not NodeKind.TABLE_ROW:
            continue
        cells = [f" {_cell_markdown(cell)} " for cell in row.children if cell.kind is NodeKind.TABLE_CELL]
        if not cells:
            continue
        lines.append(f"|{'|'.join(cells)}|")
        if len(lines) == 1:
            lines.append(f"|{'|'.join(['---'] * len(cells))}|")

    return "\n".join(lines) if lines else None
