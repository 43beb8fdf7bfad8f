from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class GainLossRecord:
    """
    譲渡取引の換算済み記録

    円換算額はそれぞれ1円未満を切り捨てた整数で、
    損益は切り捨て後の収入金額と取得費の差額です。
    """

    id: int
    symbol: str
    quantity: Decimal
    date_acquired: Optional[date]
    date_sold: date
    proceeds_usd: Decimal
    cost_usd: Decimal
    ws_disallowed_usd: Decimal
    rate_acquired: Decimal
    rate_sold: Decimal
    proceeds_jpy: int
    cost_jpy: int
    gain_loss_jpy: int
    is_wash_sale: bool
    notes: str = ''

    @property
    def record_date(self) -> date:
        """課税年の判定に使う日付（売却日）"""
        return self.date_sold

    @property
    def gain_loss_usd(self) -> Decimal:
        return self.proceeds_usd - self.cost_usd


@dataclass(frozen=True)
class DividendRecord:
    """
    配当の換算済み記録

    総額 = 受取額 + 源泉税 (USD)。円換算額は各金額を個別に切り捨てるため、
    円では総額と受取額+源泉税が一致しない場合があります。
    """

    id: int
    symbol: str
    date: date
    net_usd: Decimal
    tax_usd: Decimal
    gross_usd: Decimal
    rate: Decimal
    gross_jpy: int
    tax_jpy: int
    net_jpy: int
    description: str
    notes: str = ''

    @property
    def record_date(self) -> date:
        return self.date


@dataclass(frozen=True)
class InterestRecord:
    """利子の換算済み記録"""

    id: int
    symbol: str
    date: date
    net_usd: Decimal
    rate: Decimal
    net_jpy: int
    description: str
    notes: str = ''

    @property
    def record_date(self) -> date:
        return self.date
