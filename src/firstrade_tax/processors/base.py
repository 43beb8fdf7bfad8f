"""
換算処理の基底クラスモジュール

このモジュールは、各種取引の円換算処理クラスの基底となる抽象クラスを提供します。
全ての具象計算クラスはこのクラスを継承して実装します。
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from decimal import Decimal
from datetime import date
from typing import Generic, Iterable, List, Optional, TypeVar
import logging

from ..exchange.currency import to_jpy
from ..exchange.rate_table import ResolvedRate, resolve_rate

R = TypeVar('R')
T = TypeVar('T')


class BaseCalculator(ABC, Generic[R, T]):
    """換算処理の基底クラス

    未加工の行とレート表から換算済み記録を生成します。
    入力が同じであれば結果も常に同じで、呼び出し間で状態を持ちません。
    記録のIDは出力順の0始まりの連番です。

    Attributes:
        logger: ロガーインスタンス
    """

    category: str = ''

    def __init__(self) -> None:
        """初期化処理"""
        self.logger = logging.getLogger(self.__class__.__name__)

    def calculate(self, rows: Iterable[R], rates: Mapping) -> List[T]:
        """複数行を一括換算

        Args:
            rows: 未加工の行
            rates: 日付文字列 -> レートのマッピング

        Returns:
            換算済み記録のリスト（入力順）
        """
        records: List[T] = []
        skipped = 0

        for row in rows:
            record = self._calculate_row(len(records), row, rates)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        if skipped:
            self.logger.info(f"日付を解釈できない{skipped}行を除外しました")
        self.logger.info(f"{self.category}: {len(records)}件の記録を生成")
        return records

    @abstractmethod
    def _calculate_row(self, record_id: int, row: R, rates: Mapping) -> Optional[T]:
        """1行の換算

        Args:
            record_id: 付与するID
            row: 未加工の行
            rates: レート表

        Returns:
            換算済み記録。日付を解釈できない行はNone
        """
        pass

    def _resolve(self, target_date: date, rates: Mapping) -> ResolvedRate:
        """レートの検索（見つからない場合は警告を記録）"""
        resolved = resolve_rate(target_date, rates)
        if not resolved.found:
            self.logger.warning(f"{target_date}のレートが見つかりません")
        elif resolved.date_used != target_date:
            self.logger.debug(f"{target_date}のレートとして{resolved.date_label}を使用")
        return resolved

    @staticmethod
    def _to_jpy(amount_usd: Decimal, resolved: ResolvedRate) -> int:
        """USD金額を円に換算（1円未満切り捨て）"""
        return to_jpy(amount_usd, resolved.rate)
