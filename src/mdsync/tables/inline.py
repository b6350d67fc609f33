"""Inline run parsing for table cell text.

Only inline code is recognised here: cell text is split into plain runs and
code-flagged runs.  Bold, italic and strikethrough markers inside a cell are
kept verbatim as plain text.  The reverse direction, ``wrap_text_with_format``,
renders any run (from a cell or from ordinary blocks) back to markdown.
"""

from mdsync.tables.patterns import CODE_SPAN_RE
from mdsync.tree.nodes import FormatFlag, TextRun


def parse_inline(text: str) -> list[TextRun]:
    """Split *text* into plain and inline-code runs, left to right.

    Empty gaps between or around code spans produce no run.  When no code
    span is present the result is a single plain run holding all of *text*,
    including the empty string.
    """
    runs: list[TextRun] = []
    current = 0

    for match in CODE_SPAN_RE.finditer(text):
        if match.start() > current:
            runs.append(TextRun(text[current : match.start()]))
        runs.append(TextRun(match.group(1), FormatFlag.CODE))
        current = match.end()

    if current < len(text):
        runs.append(TextRun(text[current:]))

    if not runs:
        runs.append(TextRun(text))
    return runs


def wrap_text_with_format(text: str, flags: FormatFlag) -> str:
    """Render *text* with the markdown markers for *flags*.

    Code wins over everything else (no formatting inside code spans).
    Underline has no markdown form and is dropped.  Empty text gets no
    markers at all.
    """
    if not text:
        return text
    if flags & FormatFlag.CODE:
        return f"`{text}`"
    result = text
    if flags & FormatFlag.STRIKETHROUGH:
        result = f"~~{result}~~"
    bold_italic = FormatFlag.BOLD | FormatFlag.ITALIC
    if flags & bold_italic == bold_italic:
        result = f"***{result}***"
    elif flags & FormatFlag.BOLD:
        result = f"**{result}**"
    elif flags & FormatFlag.ITALIC:
        result = f"*{result}*"
    return result
