# exchange/rate_table.py

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Iterator, Optional, Union

from ..config.constants import RATE_LOOKUP_ATTEMPTS
from ..config.settings import ISO_DATE_FORMAT


class RateTable(Mapping):
    """
    USD/JPYの日次レート表

    ISO形式の日付文字列をキーとする読み取り専用のマッピングです。
    土日祝日のレートは含まれません。再取得時は表ごと置き換えます。
    """

    def __init__(self, rates: Optional[Mapping] = None) -> None:
        values: Dict[str, Decimal] = {}
        for key, value in (rates or {}).items():
            rate_key = key.strftime(ISO_DATE_FORMAT) if isinstance(key, date) else str(key)
            values[rate_key] = value if isinstance(value, Decimal) else Decimal(str(value))
        self._rates = MappingProxyType(values)

    def __getitem__(self, key: str) -> Decimal:
        return self._rates[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        if not self._rates:
            return "RateTable(empty)"
        keys = sorted(self._rates)
        return f"RateTable({len(keys)} rates, {keys[0]}..{keys[-1]})"

    @property
    def is_empty(self) -> bool:
        return not self._rates


@dataclass(frozen=True)
class ResolvedRate:
    """レート検索の結果"""

    rate: Decimal
    date_used: Optional[date] = None

    @property
    def found(self) -> bool:
        """レートが見つかったかどうか"""
        return self.date_used is not None

    @property
    def date_label(self) -> str:
        """参照日の表示用文字列"""
        return self.date_used.strftime(ISO_DATE_FORMAT) if self.date_used else 'N/A'


RATE_NOT_FOUND = ResolvedRate(Decimal('0'), None)


def resolve_rate(
    target_date: date,
    rates: Union[RateTable, Mapping],
    attempts: int = RATE_LOOKUP_ATTEMPTS,
) -> ResolvedRate:
    """
    指定日の為替レートを検索

    指定日にレートがない場合は1日ずつ遡り、指定日を含めて最大
    attempts日分を検索します。値が0のエントリは欠損として扱います。

    Args:
        target_date: 取引日
        rates: 日付文字列 -> レートのマッピング
        attempts: 検索する日数（指定日を含む）

    Returns:
        ResolvedRate: 見つかったレートと参照日。見つからない場合はレート0
    """
    current = target_date
    for _ in range(attempts):
        rate = rates.get(current.strftime(ISO_DATE_FORMAT))
        if rate:
            return ResolvedRate(rate, current)
        current -= timedelta(days=1)
    return RATE_NOT_FOUND
