"""Compiled regex patterns for GFM table handling.

Used by inline.py (code spans), codec.py (row classification, cell
splitting, pipe escaping) and the sync controller (table region scanning).
"""

import re

# ─── Inline Patterns ──────────────────────────────────────────────────────────

# Inline code span: `text`.  Empty spans (``) and unterminated backticks
# never match, so they stay plain text.
CODE_SPAN_RE = re.compile(r"`([^`]+)`")


# ─── Row Patterns ─────────────────────────────────────────────────────────────

# Content of a separator row once the outer pipes are removed, e.g. "---|:--:".
# Must also contain a "-" (checked separately) so a row of blank cells like
# "|   |   |" is not mistaken for a separator.
SEPARATOR_CONTENT_RE = re.compile(r"^[\s\-:|]+$")

# A "|" cell delimiter that is not escaped as "\|"
CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")

# An escaped pipe inside cell text
ESCAPED_PIPE_RE = re.compile(r"\\\|")

# A literal "|" with no backtick on either side; these get escaped on output.
# Pipes touching a backtick are assumed to belong to a code context.
UNESCAPED_PIPE_RE = re.compile(r"(?<!`)\|(?!`)")


# ─── Document Patterns ────────────────────────────────────────────────────────

# A whole table region inside a markdown document: a "|...|" line, a
# separator line containing at least one "-", then any number of further
# "|...|" lines.  Each line must start at column 0.
TABLE_REGION_RE = re.compile(
    r"^\|.+\|[ \t]*(?:\n|$)"
    r"\|[-:| \t]*-[-:| \t]*\|[ \t]*(?:\n|$)"
    r"(?:\|.+\|[ \t]*(?:\n|$))*",
    re.MULTILINE,
)
