"""
セッション状態モジュール

読み込んだ行データ・レート表・換算済み記録・対象年をまとめた
イミュータブルな状態と、状態を丸ごと置き換える遷移関数を提供します。
換算済み記録は入力が変わるたびに全件再計算し、部分的な更新は行いません。
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterator, List, Optional, Tuple

from ..core.classifier import FileSchema, ParsedExport
from ..core.parser import parse_date_any
from ..core.rows import GainLossRow, HistoryRow
from ..exchange.rate_table import RateTable
from ..processors.dividend import DividendCalculator
from ..processors.gain_loss import GainLossCalculator
from ..processors.interest import InterestCalculator
from ..processors.records import DividendRecord, GainLossRecord, InterestRecord
from ..report.aggregator import YearSummary, available_years, build_year_summary, default_year

EMPTY_RATES_MESSAGE = "指定期間の為替レートが取得できませんでした"


@dataclass(frozen=True)
class SessionState:
    """1セッション分のアプリケーション状態"""

    selected_year: int
    rates: RateTable = field(default_factory=RateTable)
    gain_loss_rows: Optional[Tuple[GainLossRow, ...]] = None
    dividend_rows: Optional[Tuple[HistoryRow, ...]] = None
    interest_rows: Optional[Tuple[HistoryRow, ...]] = None
    gain_loss: Tuple[GainLossRecord, ...] = ()
    dividends: Tuple[DividendRecord, ...] = ()
    interests: Tuple[InterestRecord, ...] = ()
    rates_loaded: bool = False
    error_message: Optional[str] = None
    fetching: bool = False

    @classmethod
    def initial(cls, today: Optional[date] = None) -> SessionState:
        """データ読み込み前の状態（対象年は今年）"""
        return cls(selected_year=(today or date.today()).year)

    @property
    def has_raw_data(self) -> bool:
        return any(rows for rows in (self.gain_loss_rows, self.dividend_rows, self.interest_rows))

    @property
    def has_rates(self) -> bool:
        return not self.rates.is_empty

    def raw_dates(self) -> Iterator[date]:
        """レート取得範囲の算出に使う全ての日付"""
        for row in self.gain_loss_rows or ():
            for text in (row.date_acquired, row.date_sold):
                parsed = parse_date_any(text)
                if parsed:
                    yield parsed
        for row in (self.dividend_rows or ()) + (self.interest_rows or ()):
            parsed = parse_date_any(row.trade_date)
            if parsed:
                yield parsed

    def available_years(self, today: Optional[date] = None) -> List[int]:
        return available_years(self.gain_loss, self.dividends, self.interests, today)

    def year_summary(self, year: Optional[int] = None) -> YearSummary:
        """対象年（省略時は選択中の年）の集計結果"""
        return build_year_summary(
            self.selected_year if year is None else year,
            self.gain_loss, self.dividends, self.interests,
        )


def recalculate(state: SessionState) -> SessionState:
    """
    換算済み記録を全件再計算

    レート取得が一度も完了していない間は換算を行いません。
    取得済みのレート表が空の場合も換算し、各記録をレートエラーとして残します。
    """
    if not state.rates_loaded:
        return replace(state, gain_loss=(), dividends=(), interests=())

    return replace(
        state,
        gain_loss=tuple(GainLossCalculator().calculate(state.gain_loss_rows or (), state.rates)),
        dividends=tuple(DividendCalculator().calculate(state.dividend_rows or (), state.rates)),
        interests=tuple(InterestCalculator().calculate(state.interest_rows or (), state.rates)),
    )


def apply_export(state: SessionState, export: ParsedExport) -> SessionState:
    """
    読み込んだファイルの行データで状態を更新

    Gain/Lossファイルは譲渡の行を、履歴ファイルは配当・利子の行を丸ごと置き換えます。
    """
    if export.schema is FileSchema.GAIN_LOSS:
        updated = replace(state, gain_loss_rows=export.gain_loss_rows, error_message=None)
    elif export.schema is FileSchema.HISTORY:
        updated = replace(
            state,
            dividend_rows=export.dividend_rows,
            interest_rows=export.interest_rows,
            error_message=None,
        )
    else:
        return state
    return recalculate(updated)


def apply_rates(state: SessionState, rates: RateTable, today: Optional[date] = None) -> SessionState:
    """
    新しいレート表で全件再計算し、対象年を記録のある最新の年にする

    レート表が空でも記録は残し、エラーメッセージを設定します。
    """
    message = EMPTY_RATES_MESSAGE if rates.is_empty else None
    updated = recalculate(replace(state, rates=rates, rates_loaded=True, error_message=message))
    year = default_year(updated.gain_loss, updated.dividends, updated.interests, today)
    return replace(updated, selected_year=year)


def select_year(state: SessionState, year: int) -> SessionState:
    """対象年の変更（記録自体は変更しない）"""
    return replace(state, selected_year=year)


def with_error(state: SessionState, message: Optional[str]) -> SessionState:
    """現在のエラーメッセージを置き換える"""
    return replace(state, error_message=message)


def with_fetching(state: SessionState, fetching: bool) -> SessionState:
    return replace(state, fetching=fetching)
