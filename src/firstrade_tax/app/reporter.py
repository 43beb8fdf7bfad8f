from typing import Any, Dict
import logging

from ..report.aggregator import YearSummary
from ..report.generators import (
    DividendReportGenerator, GainLossReportGenerator, InterestReportGenerator,
)


class TaxReporter:
    """対象年の集計結果をCSV・取引報告書・コンソールに出力するクラス"""

    def __init__(self, writers: Dict[str, Any]):
        self.writers = writers
        self.logger = logging.getLogger(self.__class__.__name__)
        self._initialize_generators()

    def _initialize_generators(self):
        self.generators = {
            'gain_loss': GainLossReportGenerator(self.writers['gain_loss_csv']),
            'dividend': DividendReportGenerator(self.writers['dividend_csv']),
            'interest': InterestReportGenerator(self.writers['interest_csv']),
        }

    def generate_reports(self, summary: YearSummary, export: bool = True) -> bool:
        """
        全ての出力を実行

        Args:
            summary: 対象年の集計結果
            export: CSVと取引報告書をファイルに書き出すかどうか

        Returns:
            全ての書き出しに成功した場合True
        """
        success = True
        if export:
            success = self._generate_detail_reports({'summary': summary})
            success = self._write_report(summary) and success
        self.writers['console'].output(summary)
        return success

    def _generate_detail_reports(self, data: Dict[str, Any]) -> bool:
        success = True
        for name, generator in self.generators.items():
            try:
                generator.generate_and_write(data)
            except OSError as e:
                self.logger.error(f"{name}レポート生成エラー: {e}")
                success = False
        return success

    def _write_report(self, summary: YearSummary) -> bool:
        if summary.is_empty:
            self.logger.info(f"{summary.year}年の取引がないため取引報告書は出力しません")
            return True
        try:
            self.writers['report'].output(summary)
        except OSError as e:
            self.logger.error(f"取引報告書の出力エラー: {e}")
            return False
        return True
