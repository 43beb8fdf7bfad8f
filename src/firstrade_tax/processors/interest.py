from collections.abc import Mapping
from typing import Optional

from ..config.constants import Notes
from ..core.parser import parse_date_any, parse_money
from ..core.rows import HistoryRow
from .base import BaseCalculator
from .records import InterestRecord


class InterestCalculator(BaseCalculator[HistoryRow, InterestRecord]):
    """利子の換算クラス（源泉税なし）"""

    category = '利子'

    def _calculate_row(self, record_id: int, row: HistoryRow, rates: Mapping) -> Optional[InterestRecord]:
        record_date = parse_date_any(row.trade_date)
        if record_date is None:
            self.logger.debug(f"取引日を解釈できないため除外: {row.description!r} {row.trade_date!r}")
            return None

        net_usd = parse_money(row.amount)
        resolved = self._resolve(record_date, rates)

        return InterestRecord(
            id=record_id,
            symbol=row.symbol,
            date=record_date,
            net_usd=net_usd,
            rate=resolved.rate,
            net_jpy=self._to_jpy(net_usd, resolved),
            description=row.description,
            notes='' if resolved.found else Notes.RATE_ERROR,
        )
