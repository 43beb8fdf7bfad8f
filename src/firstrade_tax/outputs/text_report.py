"""
取引報告書出力モジュール

確定申告の添付資料として印刷できる、対象年の株式等の取引報告書を
プレーンテキストで生成します。データのない区分は出力しません。
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import List, Optional
import logging

from ..config.settings import BROKER_NAME, EXPORT_ENCODING, REIWA_OFFSET
from ..exchange.currency import Currency
from ..report.aggregator import YearSummary
from .base import BaseFormatter, BaseOutput

RULE_WIDTH = 72
DESCRIPTION_WIDTH = 30

FOOTER_LINES = (
    "※本計算書は、Firstradeから発行されたCSVに基づき、取引日の為替レート"
    "(欧州中央銀行参照TTM)を用いて日本円換算したものです。",
    "※確定申告の添付書類として使用する場合は、内容を十分にご確認の上、"
    "ご自身の責任においてご使用ください。",
)


def format_yen(amount: int) -> str:
    """円金額（桁区切り、記号なし）"""
    return Currency.JPY.format_amount(amount, include_symbol=False)


def format_signed_yen(amount: int) -> str:
    """損失を「▲」付きの絶対値で表す円金額"""
    prefix = "▲ " if amount < 0 else ""
    return f"{prefix}{format_yen(abs(amount))}"


def format_usd(amount: Decimal) -> str:
    return f"{amount:.2f}"


class TextReportFormatter(BaseFormatter[YearSummary]):
    """
    取引報告書のフォーマッター

    Attributes:
        created: 作成日として記載する日付
    """

    def __init__(self, created: Optional[date] = None):
        super().__init__(use_color=False)
        self.created = created or date.today()

    def format(self, data: YearSummary) -> str:
        lines: List[str] = []
        lines.extend(self._title(data.year))

        if data.gain_loss_totals.count:
            lines.extend(self._gain_loss_section(data))
        if data.dividend_totals.count:
            lines.extend(self._dividend_section(data))
        if data.interest_totals.count:
            lines.extend(self._interest_section(data))

        lines.extend(["", "-" * RULE_WIDTH, *FOOTER_LINES])
        return "\n".join(lines)

    def _title(self, year: int) -> List[str]:
        return [
            f"令和{year - REIWA_OFFSET}年分 株式等の取引報告書",
            "（特定口座以外の外国証券取引分）",
            "=" * RULE_WIDTH,
            f"証券会社: {BROKER_NAME}",
            "通貨: 米ドル (USD) → 日本円 (JPY)",
            "換算基準: TTM (Frankfurter API参照)",
            f"作成日: {self.created.strftime('%Y年%m月%d日')}",
            f"対象期間: {year}年1月1日 〜 {year}年12月31日",
        ]

    def _gain_loss_section(self, data: YearSummary) -> List[str]:
        totals = data.gain_loss_totals
        lines = [
            "",
            "1. 株式等の譲渡損益 (一般株式等)",
            "-" * RULE_WIDTH,
            f"{'総収入金額 (A)':<20}{format_yen(totals.proceeds_jpy):>20} 円",
            f"{'総取得費 (B)':<20}{format_yen(totals.cost_jpy):>20} 円",
            f"{'差引金額 (A - B)':<20}{format_signed_yen(totals.gain_loss_jpy):>20} 円",
            "",
            "銘柄別内訳 (譲渡)",
            f"{'銘柄':<10}{'収入金額 (円)':>18}{'取得費 (円)':>18}{'損益金額 (円)':>18}",
        ]
        for group in data.groups:
            lines.append(
                f"{group.symbol:<10}"
                f"{format_yen(group.proceeds_jpy):>18}"
                f"{format_yen(group.cost_jpy):>18}"
                f"{format_signed_yen(group.gain_loss_jpy):>18}"
            )
        return lines

    def _dividend_section(self, data: YearSummary) -> List[str]:
        totals = data.dividend_totals
        lines = [
            "",
            "2. 配当所得 (配当控除または外国税額控除用)",
            "-" * RULE_WIDTH,
            f"{'配当収入総額 (税込)':<20}{format_yen(totals.gross_jpy):>20} 円"
            f"  (参考 $ {format_usd(totals.gross_usd)})",
            f"{'外国所得税額':<20}{format_yen(totals.tax_jpy):>20} 円",
            f"{'差引受取金額':<20}{format_yen(totals.net_jpy):>20} 円",
            "",
            "受取配当金明細",
            f"{'入金日':<6}{'銘柄':<8}{'レート':>8}{'配当総額(USD)':>14}{'外国税(USD)':>12}"
            f"{'配当総額(円)':>14}{'外国税(円)':>12}",
        ]
        for record in data.dividends:
            lines.append(
                f"{record.date.strftime('%m/%d'):<6}"
                f"{record.symbol:<8}"
                f"{format_usd(record.rate):>8}"
                f"{format_usd(record.gross_usd):>14}"
                f"{'-' + format_usd(record.tax_usd):>12}"
                f"{format_yen(record.gross_jpy):>14}"
                f"{'-' + format_yen(record.tax_jpy):>12}"
            )
        return lines

    def _interest_section(self, data: YearSummary) -> List[str]:
        totals = data.interest_totals
        lines = [
            "",
            "3. 利子所得 (一般利子等)",
            "-" * RULE_WIDTH,
            f"{'受取利子総額':<20}{format_yen(totals.net_jpy):>20} 円"
            f"  (参考 $ {format_usd(totals.net_usd)})",
            "",
            "受取利子明細",
            f"{'入金日':<6}{'項目':<34}{'レート':>8}{'受取額(USD)':>12}{'受取額(円)':>12}",
        ]
        for record in data.interests:
            description = record.description
            if len(description) > DESCRIPTION_WIDTH:
                description = description[:DESCRIPTION_WIDTH] + "..."
            lines.append(
                f"{record.date.strftime('%m/%d'):<6}"
                f"{description:<34}"
                f"{format_usd(record.rate):>8}"
                f"{format_usd(record.net_usd):>12}"
                f"{format_yen(record.net_jpy):>12}"
            )
        return lines


class TextReportOutput(BaseOutput[YearSummary]):
    """取引報告書のファイル出力クラス"""

    def __init__(
        self,
        output_path: Path,
        formatter: Optional[TextReportFormatter] = None,
        encoding: str = EXPORT_ENCODING,
    ):
        super().__init__(formatter or TextReportFormatter())
        self.output_path = output_path
        self.encoding = encoding
        self.logger = logging.getLogger(self.__class__.__name__)

    def output(self, data: YearSummary) -> None:
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with self.output_path.open("w", encoding=self.encoding) as f:
                f.write(self.format_data(data) + "\n")

            self.logger.info(f"{self.output_path}への書き込みが完了")

        except OSError as e:
            self.logger.error(f"ファイル出力エラー: {e}")
            raise
