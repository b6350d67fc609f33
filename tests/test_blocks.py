"""Unit tests for the markdown-it based block transformer."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import pytest

from mdsync.sync.blocks import serialize_block, serialize_inline
from mdsync.tables.codec import parse_table
from mdsync.tree.nodes import (
    FormatFlag,
    HeadingNode,
    ListItemNode,
    ListNode,
    NodeKind,
    ParagraphNode,
    RootNode,
    TextRun,
)


def kinds(root: RootNode) -> list[NodeKind]:
    return [child.kind for child in root.children]


# ===========================================================================
# Markdown -> tree
# ===========================================================================


class TestParse:

    def test_heading_levels(self, transformer):
        root = transformer.parse("# One\n\n### Three")
        assert [child.level for child in root.children] == [1, 3]
        assert root.children[1].text_content() == "Three"

    def test_inline_formats(self, transformer):
        paragraph = transformer.parse("Some **bold**, *it* and ~~gone~~ `x`").children[0]
        flags = {run.text: run.flags for run in paragraph.children}
        assert flags["bold"] == FormatFlag.BOLD
        assert flags["it"] == FormatFlag.ITALIC
        assert flags["gone"] == FormatFlag.STRIKETHROUGH
        assert flags["x"] == FormatFlag.CODE

    def test_nested_formats_combine(self, transformer):
        runs = transformer.parse("***both***").children[0].children
        assert [(run.text, run.flags) for run in runs] == [("both", FormatFlag.BOLD | FormatFlag.ITALIC)]

    def test_link(self, transformer):
        runs = transformer.parse("see [docs](http://example.com)").children[0].children
        assert [(run.text, run.link_url) for run in runs] == [("see ", None), ("docs", "http://example.com")]

    def test_softbreak_kept_in_text(self, transformer):
        paragraph = transformer.parse("line one\nline two").children[0]
        assert paragraph.text_content() == "line one\nline two"
        assert len(paragraph.children) == 1

    def test_lists(self, transformer):
        root = transformer.parse("- a\n- b\n\n1. x\n2. y")
        bullet, ordered = root.children
        assert not bullet.ordered and ordered.ordered
        assert [item.text_content() for item in ordered.children] == ["x", "y"]

    def test_quote(self, transformer):
        quote = transformer.parse("> quoted").children[0]
        assert quote.kind is NodeKind.QUOTE
        assert quote.children[0].text_content() == "quoted"

    def test_fenced_code(self, transformer):
        code = transformer.parse("```python extra\nprint(1)\n```").children[0]
        assert code.kind is NodeKind.CODE_BLOCK
        assert code.language == "python"
        assert code.text_content() == "print(1)"

    def test_indented_code(self, transformer):
        code = transformer.parse("    x = 1").children[0]
        assert code.language == ""
        assert code.text_content() == "x = 1"

    def test_html_comment_becomes_paragraph(self, transformer):
        root = transformer.parse("before\n\n<!--TABLE_PLACEHOLDER-->\n\nafter")
        assert kinds(root) == [NodeKind.PARAGRAPH] * 3
        assert root.children[1].text_content() == "<!--TABLE_PLACEHOLDER-->"

    def test_thematic_break(self, transformer):
        assert transformer.parse("---").children[0].text_content() == "---"

    def test_pipe_table_not_recognised(self, transformer):
        """Tables are handled outside the block transformer."""
        root = transformer.parse("| A |\n|---|\n| 1 |")
        assert NodeKind.TABLE not in kinds(root)

    def test_empty_input(self, transformer):
        assert not transformer.parse("").children

    def test_code_line_ranges(self, transformer):
        markdown = "text\n\n```\na\n```\n\n    x = 1\n\n- item\n\n      nested"
        assert transformer.code_line_ranges(markdown) == [(2, 5), (6, 7), (10, 11)]

    def test_no_code_blocks(self, transformer):
        assert transformer.code_line_ranges("| A |\n|---|") == []


# ===========================================================================
# Tree -> markdown
# ===========================================================================


class TestSerialize:

    def test_heading(self):
        heading = HeadingNode(2).append(TextRun("Title"))
        assert serialize_block(heading) == "## Title"

    def test_empty_heading(self):
        assert serialize_block(HeadingNode(1)) == "#"

    def test_link_groups_runs(self):
        paragraph = ParagraphNode().append(
            TextRun("a ", link_url="u"), TextRun("b", FormatFlag.BOLD, link_url="u"), TextRun(" c")
        )
        assert serialize_inline(paragraph) == "[a **b**](u) c"

    def test_underline_dropped(self):
        paragraph = ParagraphNode().append(TextRun("u", FormatFlag.UNDERLINE))
        assert serialize_inline(paragraph) == "u"

    def test_ordered_list(self):
        items = [ListItemNode().append(ParagraphNode().append(TextRun(t))) for t in ("x", "y")]
        assert serialize_block(ListNode(ordered=True).append(*items)) == "1. x\n2. y"

    def test_nested_list(self, transformer):
        root = transformer.parse("- a\n  - b")
        assert transformer.serialize(root) == "- a\n  - b"

    def test_quote_with_two_paragraphs(self, transformer):
        root = transformer.parse("> a\n>\n> b")
        assert transformer.serialize(root) == "> a\n>\n> b"

    def test_table_block(self, transformer):
        root = RootNode().append(ParagraphNode().append(TextRun("t")), parse_table("| A |\n|---|\n| 1 |"))
        assert transformer.serialize(root) == "t\n\n| A |\n|---|\n| 1 |"

    def test_empty_blocks_skipped(self, transformer):
        root = RootNode().append(ParagraphNode(), ParagraphNode().append(TextRun("x")))
        assert transformer.serialize(root) == "x"


ROUND_TRIP_DOCUMENTS = [
    "# Title\n\nSome **bold** and *italic* and `code`.\n\n- one\n- two\n\n> quoted\n\n```py\nprint(1)\n```",
    "## Steps\n\n1. first\n2. second",
    "see [docs](http://example.com) and ~~old~~",
    "- a\n  - b\n- c",
    "***both*** and **bold** text",
]


class TestRoundTrip:

    @pytest.mark.parametrize("markdown", ROUND_TRIP_DOCUMENTS)
    def test_document_survives(self, transformer, markdown):
        assert transformer.serialize(transformer.parse(markdown)) == markdown
