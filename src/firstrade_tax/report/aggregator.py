"""
集計モジュール

換算済み記録を課税年で絞り込み、銘柄別・区分別に集計します。
集計結果は毎回作り直し、元の記録リストは変更しません。
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar
import logging

from ..processors.records import DividendRecord, GainLossRecord, InterestRecord

logger = logging.getLogger(__name__)

R = TypeVar('R', GainLossRecord, DividendRecord, InterestRecord)


@dataclass(frozen=True)
class SymbolSummary:
    """銘柄別の譲渡損益集計"""

    symbol: str
    proceeds_jpy: int = 0
    cost_jpy: int = 0
    gain_loss_jpy: int = 0
    proceeds_usd: Decimal = Decimal('0')
    cost_usd: Decimal = Decimal('0')
    gain_loss_usd: Decimal = Decimal('0')
    transactions: Tuple[GainLossRecord, ...] = ()


@dataclass(frozen=True)
class GainLossTotals:
    """譲渡損益の合計"""

    proceeds_jpy: int = 0
    cost_jpy: int = 0
    gain_loss_jpy: int = 0
    proceeds_usd: Decimal = Decimal('0')
    cost_usd: Decimal = Decimal('0')
    gain_loss_usd: Decimal = Decimal('0')
    ws_disallowed_usd: Decimal = Decimal('0')
    count: int = 0


@dataclass(frozen=True)
class DividendTotals:
    """配当の合計"""

    gross_jpy: int = 0
    tax_jpy: int = 0
    net_jpy: int = 0
    gross_usd: Decimal = Decimal('0')
    tax_usd: Decimal = Decimal('0')
    net_usd: Decimal = Decimal('0')
    count: int = 0


@dataclass(frozen=True)
class InterestTotals:
    """利子の合計"""

    net_jpy: int = 0
    net_usd: Decimal = Decimal('0')
    count: int = 0


@dataclass(frozen=True)
class YearSummary:
    """1課税年分の集計結果（各出力の入力）"""

    year: int
    gain_loss: Tuple[GainLossRecord, ...] = ()
    dividends: Tuple[DividendRecord, ...] = ()
    interests: Tuple[InterestRecord, ...] = ()
    groups: Tuple[SymbolSummary, ...] = ()
    gain_loss_totals: GainLossTotals = field(default_factory=GainLossTotals)
    dividend_totals: DividendTotals = field(default_factory=DividendTotals)
    interest_totals: InterestTotals = field(default_factory=InterestTotals)

    @property
    def is_empty(self) -> bool:
        return not (self.gain_loss or self.dividends or self.interests)


def filter_by_year(records: Iterable[R], year: int) -> List[R]:
    """
    課税年で絞り込み

    Args:
        records: 換算済み記録（譲渡は売却日、配当・利子は受取日で判定）
        year: 対象年

    Returns:
        対象年の記録の新しいリスト
    """
    return [record for record in records if record.record_date.year == year]


def group_by_symbol(records: Iterable[GainLossRecord]) -> List[SymbolSummary]:
    """
    譲渡取引を銘柄別に集計

    Args:
        records: 譲渡取引の記録

    Returns:
        銘柄の昇順に並べた銘柄別集計
    """
    groups: Dict[str, List[GainLossRecord]] = {}
    for record in records:
        groups.setdefault(record.symbol, []).append(record)

    return [
        SymbolSummary(
            symbol=symbol,
            proceeds_jpy=sum(r.proceeds_jpy for r in members),
            cost_jpy=sum(r.cost_jpy for r in members),
            gain_loss_jpy=sum(r.gain_loss_jpy for r in members),
            proceeds_usd=sum((r.proceeds_usd for r in members), Decimal('0')),
            cost_usd=sum((r.cost_usd for r in members), Decimal('0')),
            gain_loss_usd=sum((r.gain_loss_usd for r in members), Decimal('0')),
            transactions=tuple(members),
        )
        for symbol, members in sorted(groups.items())
    ]


def total_gain_loss(records: Sequence[GainLossRecord]) -> GainLossTotals:
    """譲渡損益の合計を計算"""
    return GainLossTotals(
        proceeds_jpy=sum(r.proceeds_jpy for r in records),
        cost_jpy=sum(r.cost_jpy for r in records),
        gain_loss_jpy=sum(r.gain_loss_jpy for r in records),
        proceeds_usd=sum((r.proceeds_usd for r in records), Decimal('0')),
        cost_usd=sum((r.cost_usd for r in records), Decimal('0')),
        gain_loss_usd=sum((r.gain_loss_usd for r in records), Decimal('0')),
        ws_disallowed_usd=sum((r.ws_disallowed_usd for r in records), Decimal('0')),
        count=len(records),
    )


def total_dividends(records: Sequence[DividendRecord]) -> DividendTotals:
    """配当の合計を計算"""
    return DividendTotals(
        gross_jpy=sum(r.gross_jpy for r in records),
        tax_jpy=sum(r.tax_jpy for r in records),
        net_jpy=sum(r.net_jpy for r in records),
        gross_usd=sum((r.gross_usd for r in records), Decimal('0')),
        tax_usd=sum((r.tax_usd for r in records), Decimal('0')),
        net_usd=sum((r.net_usd for r in records), Decimal('0')),
        count=len(records),
    )


def total_interest(records: Sequence[InterestRecord]) -> InterestTotals:
    """利子の合計を計算"""
    return InterestTotals(
        net_jpy=sum(r.net_jpy for r in records),
        net_usd=sum((r.net_usd for r in records), Decimal('0')),
        count=len(records),
    )


def available_years(
    gain_loss: Iterable[GainLossRecord],
    dividends: Iterable[DividendRecord],
    interests: Iterable[InterestRecord],
    today: Optional[date] = None,
) -> List[int]:
    """
    記録に含まれる課税年の一覧

    Returns:
        降順の年リスト。記録がない場合は今年のみ
    """
    years = {r.record_date.year for r in gain_loss}
    years.update(r.record_date.year for r in dividends)
    years.update(r.record_date.year for r in interests)
    if not years:
        return [(today or date.today()).year]
    return sorted(years, reverse=True)


def default_year(
    gain_loss: Iterable[GainLossRecord],
    dividends: Iterable[DividendRecord],
    interests: Iterable[InterestRecord],
    today: Optional[date] = None,
) -> int:
    """既定の対象年（記録のある最新の年、記録がなければ今年）"""
    return available_years(gain_loss, dividends, interests, today)[0]


def build_year_summary(
    year: int,
    gain_loss: Iterable[GainLossRecord],
    dividends: Iterable[DividendRecord],
    interests: Iterable[InterestRecord],
) -> YearSummary:
    """
    1課税年分の集計結果を生成

    Args:
        year: 対象年
        gain_loss: 全期間の譲渡取引記録
        dividends: 全期間の配当記録
        interests: 全期間の利子記録

    Returns:
        YearSummary: 対象年の記録・銘柄別集計・区分別合計
    """
    year_gain_loss = filter_by_year(gain_loss, year)
    year_dividends = filter_by_year(dividends, year)
    year_interests = filter_by_year(interests, year)

    logger.debug(
        f"{year}年: 譲渡{len(year_gain_loss)}件、配当{len(year_dividends)}件、"
        f"利子{len(year_interests)}件"
    )

    return YearSummary(
        year=year,
        gain_loss=tuple(year_gain_loss),
        dividends=tuple(year_dividends),
        interests=tuple(year_interests),
        groups=tuple(group_by_symbol(year_gain_loss)),
        gain_loss_totals=total_gain_loss(year_gain_loss),
        dividend_totals=total_dividends(year_dividends),
        interest_totals=total_interest(year_interests),
    )
