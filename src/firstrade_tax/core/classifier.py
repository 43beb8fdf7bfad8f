"""
CSV形式判定・読み込みモジュール

Firstradeから出力されたCSVの形式（Gain/Loss または 取引履歴）を
ヘッダー行から判定し、形式ごとの型付き行データに変換します。
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
import csv
import io
import logging

from ..config.constants import (
    GAIN_LOSS_HEADER_KEYWORD, HEADER_PREFIXES, HISTORY_HEADER_KEYWORDS,
    TOTAL_ROW_PREFIX, GainLossColumns, HistoryColumns, IncomeAction,
)
from ..config.settings import FILE_ENCODING
from .error import (
    CsvParseError, EmptyFileError, HeaderNotFoundError, LoaderError,
    NoRowsError, UnrecognizedFormatError,
)
from .rows import GainLossRow, HistoryRow


class FileSchema(Enum):
    """CSVの形式"""

    GAIN_LOSS = 'gain_loss'
    HISTORY = 'history'
    UNKNOWN = 'unknown'


def split_lines(text: str) -> List[str]:
    """空行を除いた前後空白なしの行リストを返す"""
    return [line.strip() for line in text.lstrip('\ufeff').split('\n') if line.strip()]


def find_header_index(lines: List[str]) -> int:
    """
    ヘッダー行の位置を検索

    Args:
        lines: split_linesで分割した行

    Returns:
        "symbol"（引用符付きを含む）で始まる最初の行の位置。見つからない場合は-1
    """
    for index, line in enumerate(lines):
        if line.lower().startswith(HEADER_PREFIXES):
            return index
    return -1


def classify(header_line: str, first_row: Optional[Mapping[str, Any]] = None) -> FileSchema:
    """
    CSV形式を判定

    ヘッダー行に "sales proceeds" を含めばGain/Loss、"action" と "amount" を
    含めば取引履歴と判定します。いずれでもない場合は最初のデータ行の
    列名から判定を試みます。

    Args:
        header_line: ヘッダー行
        first_row: 最初のデータ行（列名 -> 値）

    Returns:
        FileSchema: 判定結果
    """
    header = header_line.lower()
    if GAIN_LOSS_HEADER_KEYWORD in header:
        return FileSchema.GAIN_LOSS
    if all(keyword in header for keyword in HISTORY_HEADER_KEYWORDS):
        return FileSchema.HISTORY

    if first_row:
        if first_row.get(GainLossColumns.SALES_PROCEEDS):
            return FileSchema.GAIN_LOSS
        if first_row.get(HistoryColumns.ACTION):
            return FileSchema.HISTORY

    return FileSchema.UNKNOWN


@dataclass(frozen=True)
class ParsedExport:
    """1ファイル分の読み込み結果"""

    schema: FileSchema
    source: str
    gain_loss_rows: Tuple[GainLossRow, ...] = ()
    dividend_rows: Tuple[HistoryRow, ...] = ()
    interest_rows: Tuple[HistoryRow, ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.gain_loss_rows) + len(self.dividend_rows) + len(self.interest_rows)


class ExportLoader:
    """
    FirstradeのCSVエクスポートを読み込むローダー

    ヘッダー行の検出、形式判定、集計行やアクションによる
    フィルタリングを行い、ParsedExportを生成します。
    """

    def __init__(self, encoding: str = FILE_ENCODING) -> None:
        self.encoding = encoding
        self.logger = logging.getLogger(self.__class__.__name__)

    def load(self, source: Path) -> ParsedExport:
        """
        CSVファイルを読み込む

        Args:
            source: CSVファイルのパス

        Returns:
            ParsedExport: 読み込み結果

        Raises:
            LoaderError: ファイルが存在しない・読めない・形式が不正な場合
        """
        source = Path(source)
        self._validate_source(source)
        self.logger.info(f"ファイル処理中: {source}")

        try:
            text = source.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise LoaderError(
                f"ファイルの読み込みに失敗: {source}", str(source), {'error': str(e)}
            ) from e

        return self.load_text(text, str(source))

    def load_text(self, text: str, source: str = '<text>') -> ParsedExport:
        """
        デコード済みのCSVテキストを読み込む

        Args:
            text: CSVテキスト
            source: エラーメッセージ用のデータソース名

        Returns:
            ParsedExport: 読み込み結果

        Raises:
            LoaderError: 形式が不正な場合（各サブクラス）
        """
        if not text or not text.strip():
            raise EmptyFileError(source)

        lines = split_lines(text)
        header_index = find_header_index(lines)
        if header_index == -1:
            self.logger.error(f"ヘッダーが見つかりません。先頭行: {lines[:3]}")
            raise HeaderNotFoundError(source, lines[:3])

        header_line = lines[header_index]
        self.logger.debug(f"ヘッダー検出: {header_line}")

        records = self._parse_csv('\n'.join(lines[header_index:]), source)
        self.logger.debug(f"{len(records)}行をパースしました")

        schema = classify(header_line, records[0] if records else None)
        self.logger.info(f"ファイル形式: {schema.value} ({source})")

        if schema is FileSchema.GAIN_LOSS:
            return self._build_gain_loss(records, source)
        if schema is FileSchema.HISTORY:
            return self._build_history(records, source)

        raise UnrecognizedFormatError(source, header_line)

    def _validate_source(self, source: Path) -> None:
        """データソースを検証"""
        if not source.exists():
            raise LoaderError(
                f"ソースファイルが存在しません: {source}",
                str(source),
                {'type': 'file_not_found'}
            )
        if not source.is_file():
            raise LoaderError(
                f"指定されたパスはファイルではありません: {source}",
                str(source),
                {'type': 'invalid_source_type'}
            )

    def _parse_csv(self, text: str, source: str) -> List[Dict[str, Any]]:
        """ヘッダー付きCSVを辞書のリストに変換"""
        try:
            return list(csv.DictReader(io.StringIO(text)))
        except csv.Error as e:
            self.logger.error(f"CSVのパースに失敗: {e}")
            raise CsvParseError(source, str(e)) from e

    def _build_gain_loss(self, records: List[Dict[str, Any]], source: str) -> ParsedExport:
        """Gain/Loss行を抽出（空シンボル・合計行は除外）"""
        rows = tuple(
            row for row in (GainLossRow.from_dict(r) for r in records)
            if row.symbol and not row.symbol.startswith(TOTAL_ROW_PREFIX)
        )
        if not rows:
            raise NoRowsError("有効なデータが見つかりませんでした(Gain/Loss)", source)

        self.logger.info(f"{len(rows)}件の譲渡取引を読み込みました: {source}")
        return ParsedExport(FileSchema.GAIN_LOSS, source, gain_loss_rows=rows)

    def _build_history(self, records: List[Dict[str, Any]], source: str) -> ParsedExport:
        """取引履歴を配当と利子に振り分け（その他のアクションは除外）"""
        history = [HistoryRow.from_dict(r) for r in records]
        dividend_rows = tuple(r for r in history if r.action == IncomeAction.DIVIDEND)
        interest_rows = tuple(r for r in history if r.action == IncomeAction.INTEREST)

        if not dividend_rows and not interest_rows:
            raise NoRowsError(
                "CSVは読み込めましたが、配当(Dividend)も利子(Interest)も含まれていません",
                source,
            )

        self.logger.info(
            f"配当{len(dividend_rows)}件、利子{len(interest_rows)}件を読み込みました: {source}"
        )
        return ParsedExport(
            FileSchema.HISTORY, source,
            dividend_rows=dividend_rows,
            interest_rows=interest_rows,
        )
