"""Keyword tables used for header discovery and table-type classification."""

from __future__ import annotations

from typing import Iterable, List, Tuple

# Header-row vocabulary found in the SME common EDI standard workbooks.
DEFAULT_KEYWORDS: Tuple[str, ...] = (
    "業務アプリ",
    "共通EDI",
    "マッピング",
    "情報項目",
    "コード",
    "Code",
    "名称",
    "Name",
    "値",
    "国連CEFACT",
    "CEFACT",
    "BIE",
    "メッセージ辞書",
    "データ型",
    "コード表",
    "入力値",
    "行番号",
    "ヘッダ",
    "項目名",
    "項目定義",
    "繰返し",
    "制定",
    "改定",
)

# Checked in order against the lower-cased header text; first match wins.
TABLE_TYPE_PHRASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("information-items", ("相互連携性情報項目", "情報項目表", "相互連携")),
    ("cefact-bie", ("国連cefact", "bie", "メッセージ辞書", "cefact")),
    ("data-type-supplement", ("データ型", "コード表", "補足情報")),
    ("mapping", ("マッピング",)),
    ("code-definition", ("コード", "code")),
)


def merge_keywords(custom: Iterable[str] = ()) -> List[str]:
    """Built-in keywords followed by caller keywords, duplicates dropped."""

    merged: List[str] = []
    for keyword in (*DEFAULT_KEYWORDS, *custom):
        if keyword and keyword not in merged:
            merged.append(keyword)
    return merged


def classify_header(header_text: str) -> str:
    text = header_text.lower()
    for table_type, phrases in TABLE_TYPE_PHRASES:
        if any(phrase in text for phrase in phrases):
            return table_type
    return "unknown"
