from pathlib import Path
from typing import Any, Dict, List
import csv
import logging

from ..config.settings import EXPORT_ENCODING
from .base import BaseOutput


class CSVOutput(BaseOutput[List[Dict[str, Any]]]):
    """
    CSV出力クラス

    表計算ソフトでの文字化けを避けるため、既定ではBOM付きUTF-8で書き出します。
    """

    def __init__(
        self,
        output_path: Path,
        fieldnames: List[str],
        encoding: str = EXPORT_ENCODING,
    ):
        super().__init__()
        self.output_path = output_path
        self.fieldnames = fieldnames
        self.encoding = encoding
        self.logger = logging.getLogger(self.__class__.__name__)

    def output(self, records: List[Dict[str, Any]]) -> None:
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

            with self.output_path.open("w", newline="", encoding=self.encoding) as f:
                writer = csv.DictWriter(f, fieldnames=self.fieldnames)
                writer.writeheader()
                writer.writerows(records)

            self.logger.info(f"{len(records)}件のレコードを{self.output_path}に出力")

        except OSError as e:
            self.logger.error(f"CSV出力エラー: {e}")
            raise
