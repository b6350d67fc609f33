"""Block-level markdown transformer built on markdown-it-py.

Covers everything except tables: headings, paragraphs, bullet and ordered
lists, block quotes, fenced and indented code, links, and bold / italic /
strikethrough / inline code.  The GFM ``table`` rule stays disabled; table
regions are cut out before parsing and handled by ``mdsync.tables.codec``.

HTML blocks become paragraphs holding their raw text.  That is how the table
placeholder comments survive parsing so the sync controller can find them.
"""

import itertools
import logging

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdsync.tables.codec import serialize_table
from mdsync.tables.inline import wrap_text_with_format
from mdsync.tree.nodes import (
    CodeBlockNode,
    DocumentNode,
    FormatFlag,
    HeadingNode,
    ListItemNode,
    ListNode,
    NodeKind,
    ParagraphNode,
    QuoteNode,
    RootNode,
    TextRun,
)

logger = logging.getLogger(__name__)

# markdown-it container token types -> the flag they add to nested runs
_INLINE_FORMATS = {
    "strong": FormatFlag.BOLD,
    "em": FormatFlag.ITALIC,
    "s": FormatFlag.STRIKETHROUGH,
}


def create_parser() -> MarkdownIt:
    """Create the markdown-it parser: CommonMark plus strikethrough, no tables."""
    md = MarkdownIt("commonmark")
    md.enable("strikethrough")
    return md


# ─── Markdown -> Tree ────────────────────────────────────────────────────────


def _merge_runs(runs: list[TextRun]) -> list[TextRun]:
    """Merge neighbouring runs that share flags and link target."""
    merged: list[TextRun] = []
    for run in runs:
        if merged and merged[-1].flags == run.flags and merged[-1].link_url == run.link_url:
            merged[-1].text += run.text
        else:
            merged.append(run)
    return merged


def _collect_runs(node: SyntaxTreeNode, flags: FormatFlag, link_url: str | None) -> list[TextRun]:
    runs: list[TextRun] = []
    for child in node.children:
        kind = child.type
        if kind in ("text", "html_inline"):
            # markdown-it emits empty text tokens around nested emphasis
            if child.content:
                runs.append(TextRun(child.content, flags, link_url))
        elif kind in ("softbreak", "hardbreak"):
            runs.append(TextRun("\n", flags, link_url))
        elif kind == "code_inline":
            runs.append(TextRun(child.content, flags | FormatFlag.CODE, link_url))
        elif kind in _INLINE_FORMATS:
            runs.extend(_collect_runs(child, flags | _INLINE_FORMATS[kind], link_url))
        elif kind == "link":
            runs.extend(_collect_runs(child, flags, str(child.attrs.get("href", ""))))
        elif kind == "image":
            # No image node in the tree; keep the markdown so it round-trips as text
            runs.append(TextRun(f"![{child.content}]({child.attrs.get('src', '')})", flags, link_url))
        else:
            runs.extend(_collect_runs(child, flags, link_url))
    return runs


def inline_runs(node: SyntaxTreeNode) -> list[TextRun]:
    """Convert the ``inline`` children of a block token node into merged TextRuns."""
    runs: list[TextRun] = []
    for child in node.children:
        if child.type == "inline":
            runs.extend(_collect_runs(child, FormatFlag.NONE, None))
    return _merge_runs(runs)


def _strip_final_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def _convert_block(node: SyntaxTreeNode) -> DocumentNode:
    kind = node.type
    if kind == "heading":
        return HeadingNode(int(node.tag[1:])).append(*inline_runs(node))
    if kind == "paragraph":
        return ParagraphNode().append(*inline_runs(node))
    if kind in ("bullet_list", "ordered_list"):
        list_node = ListNode(ordered=kind == "ordered_list")
        for item in node.children:
            list_item = ListItemNode()
            list_item.append(*_convert_blocks(item.children))
            list_node.append(list_item)
        return list_node
    if kind == "blockquote":
        return QuoteNode().append(*_convert_blocks(node.children))
    if kind in ("fence", "code_block"):
        info = node.info.strip() if kind == "fence" else ""
        language = info.split()[0] if info else ""
        return CodeBlockNode(language).append(TextRun(_strip_final_newline(node.content)))
    if kind == "html_block":
        return ParagraphNode().append(TextRun(_strip_final_newline(node.content)))
    if kind == "hr":
        return ParagraphNode().append(TextRun("---"))

    logger.warning("Unsupported block token '%s' kept as plain text", kind)
    return ParagraphNode().append(TextRun(node.content))


def _convert_blocks(nodes: list[SyntaxTreeNode]) -> list[DocumentNode]:
    return [_convert_block(node) for node in nodes]


# ─── Tree -> Markdown ────────────────────────────────────────────────────────


def serialize_inline(node: DocumentNode) -> str:
    """Render a block's TextRun children as inline markdown."""
    runs = [child for child in node.children if isinstance(child, TextRun)]
    parts: list[str] = []
    for link_url, group in itertools.groupby(runs, key=lambda run: run.link_url):
        text = "".join(wrap_text_with_format(run.text, run.flags) for run in group)
        parts.append(f"[{text}]({link_url})" if link_url else text)
    return "".join(parts)


def _indent_continuation(text: str, width: int) -> str:
    """Indent every line after the first by *width* spaces (blank lines stay blank)."""
    lines = text.split("\n")
    pad = " " * width
    return "\n".join([lines[0]] + [pad + line if line else line for line in lines[1:]])


def _serialize_list(node: ListNode) -> str:
    items: list[str] = []
    for number, item in enumerate(node.children, start=1):
        marker = f"{number}. " if node.ordered else "- "
        body = "\n".join(block for block in (serialize_block(child) for child in item.children) if block)
        items.append(marker + _indent_continuation(body, len(marker)))
    return "\n".join(items)


def _serialize_quote(node: QuoteNode) -> str:
    body = "\n\n".join(block for block in (serialize_block(child) for child in node.children) if block)
    return "\n".join(f"> {line}" if line else ">" for line in body.split("\n"))


def serialize_block(node: DocumentNode) -> str | None:
    """Render one block node as markdown; None when the node produces no output."""
    kind = node.kind
    if kind is NodeKind.HEADING:
        return f"{'#' * node.level} {serialize_inline(node)}".rstrip()
    if kind is NodeKind.PARAGRAPH:
        return serialize_inline(node)
    if kind is NodeKind.LIST:
        return _serialize_list(node)
    if kind is NodeKind.QUOTE:
        return _serialize_quote(node)
    if kind is NodeKind.CODE_BLOCK:
        return f"```{node.language}\n{node.text_content()}\n```"
    if kind is NodeKind.TABLE:
        return serialize_table(node)
    logger.warning("Cannot serialize %s at block level", type(node).__name__)
    return None


# ─── Transformer ─────────────────────────────────────────────────────────────


class BlockTransformer:
    """Markdown <-> tree conversion for every block type except tables."""

    def __init__(self, parser: MarkdownIt | None = None):
        self.parser = parser or create_parser()

    def parse(self, markdown: str) -> RootNode:
        """Parse *markdown* into a detached RootNode."""
        syntax_tree = SyntaxTreeNode(self.parser.parse(markdown))
        root = RootNode()
        root.append(*_convert_blocks(syntax_tree.children))
        return root

    def serialize(self, root: DocumentNode) -> str:
        """Render *root*'s blocks as markdown separated by blank lines; Table nodes use the table codec."""
        blocks = (serialize_block(child) for child in root.children)
        return "\n\n".join(block for block in blocks if block)

    def code_line_ranges(self, markdown: str) -> list[tuple[int, int]]:
        """Return ``[start, end)`` source line spans of fenced and indented code blocks, nested ones included."""
        return [
            (token.map[0], token.map[1])
            for token in self.parser.parse(markdown)
            if token.type in ("fence", "code_block") and token.map
        ]
