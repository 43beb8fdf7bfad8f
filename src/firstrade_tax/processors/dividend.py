"""
配当処理モジュール

このモジュールは、取引履歴の配当(Dividend)行を円換算します。
源泉徴収税は説明文から抽出し、受取額に加算して配当総額とします。
"""

from collections.abc import Mapping
from typing import Optional

from ..config.constants import Notes
from ..core.parser import extract_tax, parse_date_any, parse_money
from ..core.rows import HistoryRow
from .base import BaseCalculator
from .records import DividendRecord


class DividendCalculator(BaseCalculator[HistoryRow, DividendRecord]):
    """配当の換算クラス

    受取日に同日のレートで換算されたものとみなし、
    総額・源泉税・受取額をそれぞれ個別に円換算（切り捨て）します。
    """

    category = '配当'

    def _calculate_row(self, record_id: int, row: HistoryRow, rates: Mapping) -> Optional[DividendRecord]:
        record_date = parse_date_any(row.trade_date)
        if record_date is None:
            self.logger.debug(f"取引日を解釈できないため除外: {row.symbol} {row.trade_date!r}")
            return None

        net_usd = parse_money(row.amount)
        tax_usd = extract_tax(row.description)
        gross_usd = net_usd + tax_usd

        resolved = self._resolve(record_date, rates)

        return DividendRecord(
            id=record_id,
            symbol=row.symbol,
            date=record_date,
            net_usd=net_usd,
            tax_usd=tax_usd,
            gross_usd=gross_usd,
            rate=resolved.rate,
            gross_jpy=self._to_jpy(gross_usd, resolved),
            tax_jpy=self._to_jpy(tax_usd, resolved),
            net_jpy=self._to_jpy(net_usd, resolved),
            description=row.description,
            notes='' if resolved.found else Notes.RATE_ERROR,
        )
