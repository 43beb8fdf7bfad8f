"""
譲渡損益処理モジュール

Gain/Loss CSVの各売却取引を、売却日と取得日それぞれの為替レートで
円換算します。
"""

from collections.abc import Mapping
from typing import Optional

from ..config.constants import Notes, WASH_SALE_FLAG
from ..core.parser import is_various, parse_date_any, parse_money
from ..core.rows import GainLossRow
from .base import BaseCalculator
from .records import GainLossRecord


class GainLossCalculator(BaseCalculator[GainLossRow, GainLossRecord]):
    """譲渡取引の換算クラス

    収入金額は売却日のレート、取得費は取得日のレートで換算します。
    取得日が「Various」の場合は取得日を不明(None)とし、売却日のレートを使います。
    """

    category = '譲渡損益'

    def _calculate_row(self, record_id: int, row: GainLossRow, rates: Mapping) -> Optional[GainLossRecord]:
        date_sold = parse_date_any(row.date_sold)
        if date_sold is None:
            self.logger.debug(f"売却日を解釈できないため除外: {row.symbol} {row.date_sold!r}")
            return None

        date_acquired = parse_date_any(row.date_acquired)
        various = date_acquired is None and is_various(row.date_acquired)
        rate_date_acquired = date_acquired or date_sold

        proceeds_usd = parse_money(row.sales_proceeds)
        cost_usd = parse_money(row.adjust_cost)

        sold = self._resolve(date_sold, rates)
        acquired = self._resolve(rate_date_acquired, rates)
        proceeds_jpy = self._to_jpy(proceeds_usd, sold)
        cost_jpy = self._to_jpy(cost_usd, acquired)

        if various:
            notes = Notes.VARIOUS_DATE
        elif not sold.found or not acquired.found:
            notes = Notes.RATE_ERROR
        else:
            notes = ''

        return GainLossRecord(
            id=record_id,
            symbol=row.symbol,
            quantity=parse_money(row.quantity),
            date_acquired=None if various else rate_date_acquired,
            date_sold=date_sold,
            proceeds_usd=proceeds_usd,
            cost_usd=cost_usd,
            ws_disallowed_usd=parse_money(row.ws_loss_disallowed),
            rate_acquired=acquired.rate,
            rate_sold=sold.rate,
            proceeds_jpy=proceeds_jpy,
            cost_jpy=cost_jpy,
            gain_loss_jpy=proceeds_jpy - cost_jpy,
            is_wash_sale=row.wash_sales == WASH_SALE_FLAG,
            notes=notes,
        )
