# exchange/currency.py

from enum import Enum, unique
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR
from typing import Union


@dataclass(frozen=True)
class CurrencyInfo:
    """通貨の詳細情報を表すイミュータブルなデータクラス"""
    code: str
    symbol: str
    decimals: int
    display_name: str


@unique
class Currency(Enum):
    """通貨を表現する列挙型"""
    USD = CurrencyInfo('USD', '$', 2, 'US Dollar')
    JPY = CurrencyInfo('JPY', '¥', 0, 'Japanese Yen')

    @property
    def code(self) -> str:
        """通貨コードを取得"""
        return self.value.code

    @property
    def symbol(self) -> str:
        """通貨シンボルを取得"""
        return self.value.symbol

    @property
    def decimals(self) -> int:
        """小数点以下の桁数を取得"""
        return self.value.decimals

    def format_amount(
        self,
        amount: Union[Decimal, float, int],
        include_symbol: bool = True
    ) -> str:
        """
        金額を通貨形式でフォーマット

        円は切り捨てた整数、ドルは小数2桁で表示します。

        Args:
            amount: フォーマットする金額
            include_symbol: シンボルを含めるかどうか

        Returns:
            フォーマットされた金額文字列
        """
        try:
            decimal_amount = Decimal(str(amount))

            if self.decimals == 0:
                formatted = f"{int(decimal_amount.to_integral_value(rounding=ROUND_FLOOR)):,}"
            else:
                formatted = f"{decimal_amount:,.{self.decimals}f}"

            return f"{self.symbol} {formatted}" if include_symbol else formatted

        except (TypeError, ValueError, ArithmeticError) as e:
            raise ValueError(f"金額のフォーマットに失敗: {amount}") from e

    def __str__(self) -> str:
        """通貨コードを文字列として返す"""
        return self.code


def to_jpy(amount_usd: Decimal, rate: Decimal) -> int:
    """
    USD金額を円に換算（1円未満切り捨て）

    積はDecimalで正確に計算するため、浮動小数点で計算した場合より
    1円多くなることがあります（例: 1.15 × 100 は115円、floatでは114円）。

    Args:
        amount_usd: USD金額
        rate: USD/JPYレート

    Returns:
        int: 円金額。負数は負の無限大方向に切り捨て
    """
    return int((amount_usd * rate).to_integral_value(rounding=ROUND_FLOOR))
