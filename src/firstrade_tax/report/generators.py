from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, TypeVar
import logging

from ..config.settings import ISO_DATE_FORMAT
from .aggregator import YearSummary

T = TypeVar('T')

USD_PLACES = Decimal('0.01')


class BaseReportGenerator(Generic[T], ABC):
    """
    レポート生成の基本インターフェース

    対象年の集計結果から出力用の行を生成し、ライターに渡します。
    """

    def __init__(self, writer: Any):
        """
        初期化メソッド

        Args:
            writer: レポートを書き出すライター（outputメソッドを持つこと）
        """
        self.writer = writer
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def _error_handling(self, operation: str):
        """
        エラーハンドリングのコンテキストマネージャ

        Args:
            operation: エラーが発生した操作の説明
        """
        try:
            yield
        except Exception as e:
            self.logger.error(f"{operation}中にエラーが発生: {e}", exc_info=True)
            raise

    def generate_and_write(self, data: Dict[str, Any]) -> Optional[List[T]]:
        """
        レポートの生成と書き出しを行う

        生成結果が空の場合は書き出しを行いません。

        Args:
            data: 'summary' キーにYearSummaryを持つ辞書

        Returns:
            生成された行のリスト。書き出さなかった場合はNone
        """
        with self._error_handling("レポート生成"):
            records = self.generate(data)
            if not records:
                self.logger.info("出力対象の記録がないため書き出しをスキップ")
                return None

            with self._error_handling("レポート書き出し"):
                self.writer.output(records)

            return records

    @abstractmethod
    def generate(self, data: Dict[str, Any]) -> List[T]:
        """
        レポート生成の抽象メソッド

        Args:
            data: レポート生成に必要なデータ

        Returns:
            生成された行のリスト
        """
        pass

    @staticmethod
    def _summary(data: Dict[str, Any]) -> YearSummary:
        try:
            return data['summary']
        except KeyError as e:
            raise ValueError(f"レポート生成に必要なデータが不足しています: {e}") from e

    @staticmethod
    def _format_date(value: Optional[date]) -> str:
        return value.strftime(ISO_DATE_FORMAT) if value else ''


class GainLossReportGenerator(BaseReportGenerator[Dict[str, Any]]):
    """譲渡取引の明細行を生成するジェネレータ"""

    FIELDNAMES = [
        'Symbol', 'Quantity', 'Date Acquired', 'Date Sold',
        'Rate (Acq)', 'Rate (Sold)',
        'Proceeds (USD)', 'Cost (USD)', 'Gain/Loss (USD)',
        'Proceeds (JPY)', 'Cost (JPY)', 'Gain/Loss (JPY)',
        'Wash Sale', 'Notes',
    ]

    def generate(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {
                'Symbol': record.symbol,
                'Quantity': str(record.quantity),
                'Date Acquired': self._format_date(record.date_acquired),
                'Date Sold': self._format_date(record.date_sold),
                'Rate (Acq)': str(record.rate_acquired),
                'Rate (Sold)': str(record.rate_sold),
                'Proceeds (USD)': str(record.proceeds_usd),
                'Cost (USD)': str(record.cost_usd),
                'Gain/Loss (USD)': str(record.gain_loss_usd.quantize(USD_PLACES)),
                'Proceeds (JPY)': record.proceeds_jpy,
                'Cost (JPY)': record.cost_jpy,
                'Gain/Loss (JPY)': record.gain_loss_jpy,
                'Wash Sale': 'YES' if record.is_wash_sale else 'NO',
                'Notes': record.notes,
            }
            for record in self._summary(data).gain_loss
        ]


class DividendReportGenerator(BaseReportGenerator[Dict[str, Any]]):
    """
    配当の明細行を生成するジェネレータ

    円換算額は記録に保持された切り捨て済みの値をそのまま出力します。
    """

    FIELDNAMES = [
        'Symbol', 'Date', 'Rate',
        'Gross Amount (USD)', 'Tax (USD)', 'Net Amount (USD)',
        'Gross Amount (JPY)', 'Tax (JPY)', 'Net Amount (JPY)',
        'Description',
    ]

    def generate(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {
                'Symbol': record.symbol,
                'Date': self._format_date(record.date),
                'Rate': str(record.rate),
                'Gross Amount (USD)': str(record.gross_usd),
                'Tax (USD)': str(record.tax_usd),
                'Net Amount (USD)': str(record.net_usd),
                'Gross Amount (JPY)': record.gross_jpy,
                'Tax (JPY)': record.tax_jpy,
                'Net Amount (JPY)': record.net_jpy,
                'Description': record.description,
            }
            for record in self._summary(data).dividends
        ]


class InterestReportGenerator(BaseReportGenerator[Dict[str, Any]]):
    """利子の明細行を生成するジェネレータ"""

    FIELDNAMES = ['Symbol', 'Date', 'Rate', 'Amount (USD)', 'Amount (JPY)', 'Description']

    def generate(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {
                'Symbol': record.symbol,
                'Date': self._format_date(record.date),
                'Rate': str(record.rate),
                'Amount (USD)': str(record.net_usd),
                'Amount (JPY)': record.net_jpy,
                'Description': record.description,
            }
            for record in self._summary(data).interests
        ]
