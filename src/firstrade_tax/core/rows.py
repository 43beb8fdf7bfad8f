from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..config.constants import GainLossColumns, HistoryColumns


def _field(data: Dict[str, Any], key: str) -> str:
    """CSV行から列の値を取得（欠損はNone -> 空文字）"""
    value: Optional[Any] = data.get(key)
    return '' if value is None else str(value).strip()


@dataclass(frozen=True)
class GainLossRow:
    """Gain/Loss CSVの1行（未加工の文字列）"""

    symbol: str
    description: str
    quantity: str
    date_acquired: str
    date_sold: str
    sales_proceeds: str
    adjust_cost: str
    ws_loss_disallowed: str
    wash_sales: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GainLossRow:
        """DictReaderの行から生成"""
        return cls(
            symbol=_field(data, GainLossColumns.SYMBOL),
            description=_field(data, GainLossColumns.DESCRIPTION),
            quantity=_field(data, GainLossColumns.QUANTITY),
            date_acquired=_field(data, GainLossColumns.DATE_ACQUIRED),
            date_sold=_field(data, GainLossColumns.DATE_SOLD),
            sales_proceeds=_field(data, GainLossColumns.SALES_PROCEEDS),
            adjust_cost=_field(data, GainLossColumns.ADJUST_COST),
            ws_loss_disallowed=_field(data, GainLossColumns.WS_LOSS_DISALLOWED),
            wash_sales=_field(data, GainLossColumns.WASH_SALES),
        )


@dataclass(frozen=True)
class HistoryRow:
    """取引履歴CSVの1行（未加工の文字列）"""

    symbol: str
    action: str
    description: str
    trade_date: str
    amount: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> HistoryRow:
        """DictReaderの行から生成"""
        return cls(
            symbol=_field(data, HistoryColumns.SYMBOL),
            action=_field(data, HistoryColumns.ACTION),
            description=_field(data, HistoryColumns.DESCRIPTION),
            trade_date=_field(data, HistoryColumns.TRADE_DATE),
            amount=_field(data, HistoryColumns.AMOUNT),
        )
