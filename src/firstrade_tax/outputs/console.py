from ..exchange.currency import Currency
from ..report.aggregator import YearSummary
from .base import BaseFormatter, BaseOutput


class ConsoleFormatter(BaseFormatter[YearSummary]):
    """コンソール出力用フォーマッター"""

    def format(self, data: YearSummary) -> str:
        sections = [
            f"{data.year}年分 取引サマリー",
            "-" * 40,
        ]

        if data.is_empty:
            sections.append(self._color("対象年の取引はありません", 'WARNING'))
            return "\n".join(sections)

        totals = data.gain_loss_totals
        if totals.count:
            header = self._color(f"譲渡損益 ({totals.count}件):", 'GREEN')
            sections.extend([
                f"\n{header}",
                f"総収入金額: {self.format_money(totals.proceeds_jpy, Currency.JPY)}",
                f"総取得費: {self.format_money(totals.cost_jpy, Currency.JPY)}",
                f"差引金額: {self.format_money(totals.gain_loss_jpy, Currency.JPY, use_color=True)}"
                f" ({self.format_money(totals.gain_loss_usd, use_color=True)})",
            ])
            for group in data.groups:
                sections.append(
                    f"  {group.symbol:<8} "
                    f"{self.format_money(group.gain_loss_jpy, Currency.JPY, use_color=True)}"
                )

        dividends = data.dividend_totals
        if dividends.count:
            header = self._color(f"配当所得 ({dividends.count}件):", 'BLUE')
            sections.extend([
                f"\n{header}",
                f"配当総額: {self.format_money(dividends.gross_jpy, Currency.JPY)}"
                f" ({self.format_money(dividends.gross_usd)})",
                f"外国所得税: {self.format_money(dividends.tax_jpy, Currency.JPY)}",
                f"差引受取額: {self.format_money(dividends.net_jpy, Currency.JPY)}",
            ])

        interest = data.interest_totals
        if interest.count:
            header = self._color(f"利子所得 ({interest.count}件):", 'BLUE')
            sections.extend([
                f"\n{header}",
                f"受取利子総額: {self.format_money(interest.net_jpy, Currency.JPY)}"
                f" ({self.format_money(interest.net_usd)})",
            ])

        return "\n".join(sections)


class ConsoleOutput(BaseOutput[YearSummary]):
    """コンソール出力クラス"""

    def __init__(self, use_color: bool = True):
        formatter = ConsoleFormatter(use_color)
        super().__init__(formatter)

    def output(self, data: YearSummary) -> None:
        formatted_data = self.format_data(data)
        print(formatted_data)
