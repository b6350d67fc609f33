"""Bracket auto-pairing for markdown link syntax in the raw-text view.

One call per keystroke, given the text around the cursor:

- ``[`` inserts ``[]`` with the cursor between them.
- ``(`` right after ``]`` inserts ``()`` with the cursor between them, so
  ``[text](url)`` types naturally.  Anywhere else ``(`` is not intercepted.
- ``]`` or ``)`` typed in front of the same character steps over it instead
  of inserting a second one.
- Every other key is left to normal text insertion.

A ``None`` result means "not intercepted": the caller inserts the key itself.
"""

from dataclasses import dataclass

OPEN_BRACKET = "["
CLOSE_BRACKET = "]"
OPEN_PAREN = "("
CLOSE_PAREN = ")"


@dataclass(frozen=True)
class KeyResult:
    """Text and collapsed cursor position after an intercepted keystroke."""

    text: str
    cursor: int


def _insert_pair(text: str, start: int, end: int, pair: str) -> KeyResult:
    return KeyResult(text[:start] + pair + text[end:], start + 1)


def handle_key(text: str, key: str, anchor: int, focus: int | None = None) -> KeyResult | None:
    """Apply auto-pairing for *key* typed with the selection [anchor, focus] in *text*.

    *focus* defaults to *anchor* (collapsed cursor).  Only ``[`` acts on a
    non-collapsed selection, replacing it with the pair.
    """
    if focus is None:
        focus = anchor
    start, end = min(anchor, focus), max(anchor, focus)
    if not 0 <= start <= end <= len(text):
        raise ValueError(f"Selection {anchor}..{focus} outside text of length {len(text)}")
    collapsed = start == end

    if key == OPEN_BRACKET:
        return _insert_pair(text, start, end, OPEN_BRACKET + CLOSE_BRACKET)

    if not collapsed:
        return None

    if key == OPEN_PAREN:
        if start > 0 and text[start - 1] == CLOSE_BRACKET:
            return _insert_pair(text, start, end, OPEN_PAREN + CLOSE_PAREN)
        return None

    if key in (CLOSE_BRACKET, CLOSE_PAREN):
        if start < len(text) and text[start] == key:
            return KeyResult(text, start + 1)
        return None

    return None
