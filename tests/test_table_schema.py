"""Unit tests for the TableMatrix model and matrix <-> TableNode conversion."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import pytest
from pydantic import ValidationError

from mdsync.tables.codec import parse_table
from mdsync.tables.schema import TableMatrix, build_table, empty_matrix, table_to_matrix
from mdsync.tree.nodes import FormatFlag, validate_table

# ===========================================================================
# TableMatrix validation tests
# ===========================================================================


class TestTableMatrix:

    def test_valid_matrix(self):
        matrix = TableMatrix(rows=[["A", "B"], ["1", "2"]])
        assert matrix.column_count == 2
        assert matrix.has_header is True

    def test_row_width_mismatch_raises(self):
        with pytest.raises(ValidationError):
            TableMatrix(rows=[["A", "B"], ["1"]])

    def test_extra_cells_raises(self):
        with pytest.raises(ValidationError):
            TableMatrix(rows=[["A"], ["1", "2"]])

    def test_no_rows_raises(self):
        with pytest.raises(ValidationError):
            TableMatrix(rows=[])

    def test_zero_width_raises(self):
        with pytest.raises(ValidationError):
            TableMatrix(rows=[[]])


class TestEmptyMatrix:

    def test_shape(self):
        matrix = empty_matrix(3, 2)
        assert matrix.rows == [["", ""], ["", ""], ["", ""]]
        assert matrix.has_header is True

    def test_rows_are_independent(self):
        matrix = empty_matrix(2, 2)
        matrix.rows[0][0] = "x"
        assert matrix.rows[1][0] == ""


# ===========================================================================
# Conversion tests
# ===========================================================================


class TestTableToMatrix:

    def test_header_table(self):
        matrix = table_to_matrix(parse_table("| A | B |\n|---|---|\n| 1 | 2 |"))
        assert matrix.rows == [["A", "B"], ["1", "2"]]
        assert matrix.has_header is True

    def test_headerless_table(self):
        matrix = table_to_matrix(parse_table("| a |\n| b |"))
        assert matrix.has_header is False

    def test_code_written_with_backticks(self):
        matrix = table_to_matrix(parse_table("| C |\n|---|\n| run `x` |"))
        assert matrix.rows[1] == ["run `x`"]

    def test_escaped_pipe_unescaped(self):
        matrix = table_to_matrix(parse_table("| C |\n|---|\n| a \\| b |"))
        assert matrix.rows[1] == ["a | b"]


class TestBuildTable:

    def test_header_flags(self):
        table = build_table(TableMatrix(rows=[["A", "B"], ["1", "2"]]))
        assert [cell.is_header for cell in table.rows[0].cells] == [True, True]
        assert [cell.is_header for cell in table.rows[1].cells] == [False, False]

    def test_no_header(self):
        table = build_table(TableMatrix(rows=[["A"], ["1"]], has_header=False))
        assert not table.rows[0].cells[0].is_header

    def test_cells_inline_parsed(self):
        table = build_table(TableMatrix(rows=[["`code` x"]]))
        runs = table.rows[0].cells[0].paragraph.children
        assert [run.text for run in runs] == ["code", " x"]
        assert runs[0].has_format(FormatFlag.CODE)

    def test_valid_tree(self):
        validate_table(build_table(empty_matrix(3, 3)))

    def test_matrix_round_trip(self):
        matrix = TableMatrix(rows=[["A", "`b`"], ["1", ""]])
        assert table_to_matrix(build_table(matrix)) == matrix
