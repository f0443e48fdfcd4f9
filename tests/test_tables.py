import pytest

from coursepress.config import StructuringConfig
from coursepress.tables import (
    align_rows,
    collect_pipe_table,
    collect_tab_table,
    is_separator_row,
    looks_like_header,
    split_pipe_row,
    split_tab_row,
    synthetic_headers,
)


@pytest.fixture
def cfg():
    return StructuringConfig()


def test_split_tab_row_splits_on_interior_tabs_only():
    assert split_tab_row("\tA\tB\t ") == ["A", "B"]
    assert split_tab_row("A\t\tC") == ["A", "", "C"]


def test_split_pipe_row_drops_only_edge_delimiters():
    assert split_pipe_row("| a | b |") == ["a", "b"]
    assert split_pipe_row("a | | c") == ["a", "", "c"]


@pytest.mark.parametrize("line", ["|---|---|", "| :--- | ---: |", "=====", "|:-:|"])
def test_separator_rows(line):
    assert is_separator_row(line)


@pytest.mark.parametrize("line", ["", None, "| a | b |", "| | |", "-- x --"])
def test_non_separator_rows(line):
    assert not is_separator_row(line)


def test_header_detection(cfg):
    assert looks_like_header(["Name", "Price"], cfg)
    assert looks_like_header(["步驟", "這一欄的文字雖然很長很長很長很長很長很長，但含關鍵字"], cfg)
    assert looks_like_header(["Alpha", "10.5"], cfg)
    assert not looks_like_header(["Apples are red.", "They grow on trees."], cfg)
    assert not looks_like_header(["Short", "A cell that runs well past twenty chars"], cfg)
    assert not looks_like_header([], cfg)


def test_align_rows_pads_truncates_and_drops_empty():
    rows = [["a"], ["b", "c", "d"], ["", ""]]
    assert align_rows(rows, 2) == [["a", ""], ["b", "c"]]


def test_synthetic_headers_use_configured_label():
    assert synthetic_headers(3, StructuringConfig(synthetic_column_label="欄{n}")) == ["欄1", "欄2", "欄3"]


def test_tab_table_with_header(cfg):
    match = collect_tab_table(["Name\tPrice", "A\t10", "B\t20"], 0, cfg)
    assert match.consumed == 3
    assert match.table.headers == ["Name", "Price"]
    assert match.table.rows == [["A", "10"], ["B", "20"]]
    assert match.table.has_real_header is True


def test_tab_table_without_header_synthesizes_columns(cfg):
    lines = [
        "Apples are red.\tThey grow on trees.",
        "Bananas are yellow.\tThey grow in bunches.",
    ]
    match = collect_tab_table(lines, 0, cfg)
    assert match.table.has_real_header is False
    assert match.table.headers == ["Column 1", "Column 2"]
    assert match.table.rows == [
        ["Apples are red.", "They grow on trees."],
        ["Bananas are yellow.", "They grow in bunches."],
    ]


def test_tab_table_synthetic_width_is_widest_row(cfg):
    lines = ["This is a sentence.\tAnother one.", "x\ty\tz"]
    match = collect_tab_table(lines, 0, cfg)
    assert match.table.headers == ["Column 1", "Column 2", "Column 3"]
    assert match.table.rows[0] == ["This is a sentence.", "Another one.", ""]


def test_tab_table_pads_and_truncates_body_rows(cfg):
    match = collect_tab_table(["Name\tPrice\tUnit", "A\t5", "B\t1\tkg\textra"], 0, cfg)
    assert match.table.rows == [["A", "5", ""], ["B", "1", "kg"]]


def test_tab_table_tolerates_interior_blank_lines(cfg):
    lines = ["Name\tPrice", "", "A\t10", "", "", "after"]
    match = collect_tab_table(lines, 0, cfg)
    assert match.consumed == 3
    assert match.table.rows == [["A", "10"]]


def test_tab_table_stops_at_first_untabbed_line(cfg):
    lines = ["Name\tPrice", "A\t10", "Plain prose", "B\t20"]
    match = collect_tab_table(lines, 0, cfg)
    assert match.consumed == 2
    assert match.table.rows == [["A", "10"]]


def test_tab_table_needs_two_rows(cfg):
    assert collect_tab_table(["Name\tPrice"], 0, cfg) is None


def test_tab_table_needs_a_data_row(cfg):
    assert collect_tab_table(["Name\tPrice", "\t"], 0, cfg) is None


def test_tab_table_from_offset(cfg):
    lines = ["intro", "Name\tPrice", "A\t10"]
    match = collect_tab_table(lines, 1, cfg)
    assert match.consumed == 2


def test_pipe_table_skips_interior_separators():
    lines = ["| a | b |", "|---|---|", "| 1 | 2 |", "|---|---|", "| 3 | 4 |", "after"]
    match = collect_pipe_table(lines, 0)
    assert match.consumed == 5
    assert match.table.rows == [["1", "2"], ["3", "4"]]
    assert match.table.has_real_header is True


def test_pipe_table_aligns_rows_to_header():
    lines = ["| a | b |", "|---|---|", "| 1 |", "| 2 | 3 | 4 |"]
    match = collect_pipe_table(lines, 0)
    assert match.table.rows == [["1", ""], ["2", "3"]]


@pytest.mark.parametrize(
    "lines",
    [
        ["| a | b |"],
        ["| a | b |", "| 1 | 2 |"],
        ["| a | b |", "|---|---|"],
        ["| a | b |", "|---|---|", "| | |"],
        ["a b", "|---|---|", "| 1 | 2 |"],
    ],
)
def test_pipe_table_rejects(lines):
    assert collect_pipe_table(lines, 0) is None


@pytest.mark.parametrize(
    "lines",
    [
        ["\tFirst indented paragraph of prose here.", "\tSecond indented paragraph of prose."],
        ["Wash the face gently.\t", "Rinse with warm water.\t"],
    ],
)
def test_edge_tabs_do_not_make_a_table(cfg, lines):
    assert collect_tab_table(lines, 0, cfg) is None
