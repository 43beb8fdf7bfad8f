from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional
import logging

from ..config.settings import OUTPUT_FILES
from ..outputs.console import ConsoleOutput
from ..outputs.csv import CSVOutput
from ..outputs.text_report import TextReportFormatter, TextReportOutput
from ..report.generators import (
    DividendReportGenerator, GainLossReportGenerator, InterestReportGenerator,
)


class ComponentLoader:
    """
    出力コンポーネントのローダー

    対象年ごとのCSVライター、取引報告書、コンソール出力を作成します。
    """

    def __init__(self, output_dir: Path, use_color: bool = True, created: Optional[date] = None) -> None:
        """
        ローダーを初期化

        Args:
            output_dir: 出力先ディレクトリ
            use_color: コンソールのカラー出力
            created: 取引報告書に記載する作成日（省略時は今日）
        """
        self.output_dir = Path(output_dir)
        self.use_color = use_color
        self.created = created
        self.logger = logging.getLogger(self.__class__.__name__)

    def output_path(self, key: str, year: int) -> Path:
        """出力ファイルのパス"""
        return self.output_dir / OUTPUT_FILES[key].format(year=year)

    def create_writers(self, year: int) -> Dict[str, Any]:
        """
        対象年の出力コンポーネントを作成

        Returns:
            出力タイプ -> 出力コンポーネントの辞書
        """
        writers = {
            'gain_loss_csv': CSVOutput(
                self.output_path('gain_loss', year), GainLossReportGenerator.FIELDNAMES
            ),
            'dividend_csv': CSVOutput(
                self.output_path('dividend', year), DividendReportGenerator.FIELDNAMES
            ),
            'interest_csv': CSVOutput(
                self.output_path('interest', year), InterestReportGenerator.FIELDNAMES
            ),
            'report': TextReportOutput(
                self.output_path('report', year), TextReportFormatter(self.created)
            ),
            'console': ConsoleOutput(self.use_color),
        }
        self.logger.debug(f"{year}年分の出力コンポーネントを{len(writers)}個作成しました")
        return writers
