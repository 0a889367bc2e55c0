"""Rule-based table-region detector tests."""

from __future__ import annotations

import pytest

from ediflow.services.detection import (
    TableRegion,
    analyze_density,
    detect_table_regions,
    extract_table_data,
    find_header_candidates,
    merge_overlapping_regions,
)
from ediflow.services.detection.keywords import DEFAULT_KEYWORDS, classify_header, merge_keywords
from ediflow_io import Grid


def _keyword_sheet() -> list[list[object]]:
    rows: list[list[object]] = [["業務アプリ", "共通EDI", "マッピング", "情報項目"]]
    rows += [[r, r * 10, r * 100, r * 1000] for r in range(1, 7)]
    rows += [[None] * 4 for _ in range(3)]
    return rows


def _region(start_row, end_row, start_col, end_col, confidence, table_type="mapping") -> TableRegion:
    return TableRegion(
        start_row=start_row,
        end_row=end_row,
        start_col=start_col,
        end_col=end_col,
        header_row=start_row,
        table_type=table_type,
        confidence=confidence,
    )


def test_keyword_header_yields_single_mapping_region() -> None:
    result = detect_table_regions(_keyword_sheet(), "Sheet1")

    assert len(result.regions) == 1
    region = result.regions[0]
    assert (region.start_row, region.end_row, region.start_col, region.end_col) == (0, 6, 0, 3)
    assert region.header_row == 0
    assert region.table_type == "mapping"
    expected = 0.7 * 4 / len(DEFAULT_KEYWORDS) + 0.3 + 0.2 + 0.1
    assert region.confidence == pytest.approx(expected)
    assert region.confidence >= 0.7
    assert result.needs_ai is False
    assert result.confidence == pytest.approx(expected)


def test_region_starts_below_nearest_dense_row_and_closes_after_sparse_run(mapping_grid: Grid) -> None:
    result = detect_table_regions(mapping_grid, "注文マッピング")

    assert len(result.regions) == 1
    region = result.regions[0]
    assert region.start_row == 0
    assert region.header_row == 2
    assert region.end_row == 7
    assert (region.start_col, region.end_col) == (0, 3)
    assert region.table_type == "mapping"


def test_regions_respect_structural_invariants(mapping_grid: Grid) -> None:
    for grid in (mapping_grid, Grid.from_rows(_keyword_sheet())):
        for region in detect_table_regions(grid).regions:
            assert region.start_row <= region.header_row <= region.end_row
            assert region.start_col <= region.end_col
            assert region.row_span >= 3
            assert region.col_span >= 2
            assert 0.0 <= region.confidence <= 1.0


def test_empty_grid_and_keywordless_grid_request_ai() -> None:
    empty = detect_table_regions([], "Blank")
    assert empty.regions == []
    assert empty.needs_ai is True
    assert empty.confidence == 0.0

    plain = detect_table_regions([["品名", "数量", "単価"], ["ねじ", 10, 5], ["ナット", 20, 3], ["座金", 5, 1]])
    assert plain.regions == []
    assert plain.needs_ai is True


def test_custom_keywords_extend_header_vocabulary() -> None:
    rows = [["品名", "数量", "単価"], ["ねじ", 10, 5], ["ナット", 20, 3], ["座金", 5, 1]]

    result = detect_table_regions(rows, "Parts", ["品名"])

    assert len(result.regions) == 1
    assert result.regions[0].table_type == "unknown"
    assert 0.0 < result.confidence < 0.6
    assert result.needs_ai is True
    assert merge_keywords(["品名", "コード"])[-1] == "品名"
    assert len(merge_keywords(["コード"])) == len(DEFAULT_KEYWORDS)


def test_two_column_code_table_runs_to_last_row() -> None:
    rows = [["コード", "名称"], ["EA", "個"], ["KGM", "キログラム"], ["MTR", "メートル"]]

    result = detect_table_regions(rows, "単位コード")

    assert len(result.regions) == 1
    region = result.regions[0]
    assert (region.start_row, region.end_row, region.start_col, region.end_col) == (0, 3, 0, 1)
    assert region.table_type == "code-definition"
    assert region.confidence == pytest.approx(0.7 * 2 / len(DEFAULT_KEYWORDS) + 0.1)
    assert result.needs_ai is True


def test_three_sparse_rows_close_region_after_data() -> None:
    rows = [
        ["コード", "名称", "値"],
        ["A", "甲", 1],
        ["B", "乙", 2],
        [None, None, None],
        [None, None, None],
        [None, None, None],
        ["x", "y", "z"],
    ]

    region = detect_table_regions(rows).regions[0]

    assert (region.start_row, region.end_row) == (0, 2)


def test_confidence_is_mean_of_merged_regions() -> None:
    rows = _keyword_sheet() + [
        ["コード", "名称", "説明"],
        ["EA", "個", "数量の単位（個数）"],
        ["KGM", "キログラム", "重量の単位"],
        ["MTR", "メートル", "長さの単位"],
    ]

    result = detect_table_regions(rows, "Mixed")

    assert len(result.regions) == 2
    spans = sorted((r.start_row, r.end_row) for r in result.regions)
    assert spans == [(0, 6), (7, 13)]
    mean = sum(r.confidence for r in result.regions) / len(result.regions)
    assert result.confidence == pytest.approx(mean)
    assert result.needs_ai is (mean < 0.6)


def test_detection_is_repeatable(mapping_grid: Grid) -> None:
    first = detect_table_regions(mapping_grid, "注文マッピング")
    second = detect_table_regions(mapping_grid, "注文マッピング")

    assert first == second
    assert first.regions


def test_header_candidates_sorted_by_confidence() -> None:
    grid = Grid.from_rows(
        [
            ["コード", None, None],
            ["コード", "名称", "値"],
            ["A", "B", "C"],
        ]
    )

    candidates = find_header_candidates(grid)

    assert [c.row_index for c in candidates] == [1, 0]
    assert candidates[0].matched_keywords == ("コード", "名称", "値")
    assert candidates[0].confidence > candidates[1].confidence


def test_keywords_only_match_text_cells() -> None:
    grid = Grid.from_rows([[2024, 1, 1], ["値", "x", "y"]])

    assert [c.row_index for c in find_header_candidates(grid, ["2024"])] == [1]


def test_sparse_trailing_columns_are_cut_from_region() -> None:
    rows = [
        ["行番号", "項目名", "データ型", "繰返し", "備考", "注記"],
        ["1", "発注番号", "String", "1", None, None],
        ["2", "発注日", "Date", "1", None, None],
        ["3", "合計", "Number", "1", None, None],
    ]

    region = detect_table_regions(rows).regions[0]

    assert (region.start_col, region.end_col) == (0, 3)
    assert region.table_type == "data-type-supplement"


def test_min_data_cells_controls_density() -> None:
    grid = Grid.from_rows([["a", "b", None], ["c", None, None]])

    rows, cols = analyze_density(grid, min_data_cells=2)
    assert rows == [True, False]
    assert cols == [True, False, False]


def test_merge_keeps_more_confident_region_even_with_other_type() -> None:
    first = _region(0, 6, 0, 3, 0.5, "mapping")
    second = _region(1, 6, 0, 3, 0.8, "code-definition")

    merged = merge_overlapping_regions([first, second])

    assert merged == [second]


def test_merge_keeps_first_on_tie_and_separate_regions() -> None:
    first = _region(0, 6, 0, 3, 0.7)
    twin = _region(0, 6, 1, 4, 0.7)
    apart = _region(20, 25, 0, 3, 0.4)

    assert merge_overlapping_regions([first, twin, apart]) == [first, apart]


def test_merge_requires_majority_row_overlap() -> None:
    upper = _region(0, 5, 0, 3, 0.6)
    lower = _region(4, 9, 0, 3, 0.9)

    assert merge_overlapping_regions([upper, lower]) == [upper, lower]


def test_extract_table_data_clips_and_keeps_zero() -> None:
    grid = Grid.from_rows([["a", 0], [None, "b"]])
    region = _region(0, 5, 0, 4, 0.5)

    assert extract_table_data(grid, region) == [["a", 0], ["", "b"]]


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("相互連携性情報項目表", "information-items"),
        ("国連CEFACT BIE", "cefact-bie"),
        ("データ型 補足情報", "data-type-supplement"),
        ("業務アプリ マッピング", "mapping"),
        ("Code Name", "code-definition"),
        ("品名 数量", "unknown"),
    ],
)
def test_classify_header(header: str, expected: str) -> None:
    assert classify_header(header) == expected
