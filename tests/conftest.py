from __future__ import annotations

import faulthandler
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

faulthandler.enable()  # Ensure crashes emit tracebacks.

from ediflow_io import Grid

Rows = List[List[Any]]

# A title line, a spacer, then a mapping table (header + five rows) and a trailing note.
MAPPING_ROWS: Rows = [
    ["受注メッセージ", None, None, None],
    [None, None, None, None],
    ["業務アプリ", "共通EDI マッピング", "識別子", "必須"],
    ["受注番号", "header.orderNo", "ID001", "必須"],
    ["受注日", "header.issueDay", "ID002", "必須"],
    ["合計金額", "header.total", "ID003", None],
    ["通貨", "header.currency", "ID004", None],
    ["備考欄", "header.remarks", "ID005", None],
    [None, None, None, None],
    ["備考", None, None, None],
]

# Code list: header on the first row, three codes below.
CODE_ROWS: Rows = [
    ["コード", "名称", "説明"],
    ["EA", "個", "数量の単位（個数）"],
    ["KGM", "キログラム", "重量の単位"],
    ["MTR", "メートル", "長さの単位"],
]


@pytest.fixture()
def mapping_grid() -> Grid:
    return Grid.from_rows(MAPPING_ROWS)


@pytest.fixture()
def make_workbook(tmp_path: Path) -> Callable[[str, Dict[str, Rows]], Path]:
    """Write ``{sheet name: rows}`` as an .xlsx workbook with openpyxl."""

    from openpyxl import Workbook

    def _make(name: str, sheets: Dict[str, Rows]) -> Path:
        wb = Workbook()
        wb.remove(wb.active)
        for title, rows in sheets.items():
            ws = wb.create_sheet(title=title)
            for row in rows:
                ws.append(list(row))
        path = tmp_path / name
        wb.save(path)
        return path

    return _make


@pytest.fixture()
def quiet_logger(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep the application log file out of the project workspace."""

    import logging

    import ediflow.core.logger as core_logger

    app_logger = logging.getLogger("ediflow")
    handlers = list(app_logger.handlers)
    monkeypatch.setattr(core_logger, "_work_dir", lambda: tmp_path / "work")
    monkeypatch.setattr(core_logger, "_LOGGER", None, raising=False)
    yield
    for handler in app_logger.handlers[:]:
        if handler not in handlers:
            app_logger.removeHandler(handler)
            handler.close()
    app_logger.setLevel(logging.INFO)
