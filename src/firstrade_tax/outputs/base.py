from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Generic, Optional, TypeVar, Union

from ..exchange.currency import Currency

T = TypeVar('T')


@dataclass
class ColorScheme:
    """色スキーマのデータクラス定義"""
    BLUE: str = '\033[94m'
    GREEN: str = '\033[92m'
    WARNING: str = '\033[93m'
    RED: str = '\033[91m'
    END: str = '\033[0m'


class BaseFormatter(ABC, Generic[T]):
    """
    出力フォーマットの抽象基本クラス

    このクラスは、異なる出力先（コンソール、ファイルなど）に
    データをフォーマットするための基本的な機能を提供します。
    """

    def __init__(self, use_color: bool = True):
        """
        フォーマッターを初期化

        Args:
            use_color: カラー出力を使用するかどうか
        """
        self.use_color = use_color
        self.color_scheme = ColorScheme() if use_color else None

    @abstractmethod
    def format(self, data: T) -> str:
        """
        データをフォーマット

        Args:
            data: フォーマットするデータ

        Returns:
            フォーマットされた文字列
        """
        pass

    def format_money(self,
                     value: Union[Decimal, int],
                     currency: Currency = Currency.USD,
                     use_color: bool = False) -> str:
        """
        金額をフォーマット

        Args:
            value: フォーマットする金額
            currency: 通貨
            use_color: 負数を赤で表示するかどうか

        Returns:
            フォーマットされた金額文字列（例: "¥ 1,234", "$ 12.30"）
        """
        formatted = currency.format_amount(value)

        if value < 0 and use_color:
            return self._color(formatted, 'RED')

        return formatted

    def _color(self, text: str, color: str) -> str:
        """
        色付きテキストを生成

        Args:
            text: カラーリングするテキスト
            color: 色の名前

        Returns:
            カラーリングされたテキスト
        """
        if not self.use_color or not self.color_scheme:
            return text

        color_code = getattr(self.color_scheme, color.upper(), '')
        return f"{color_code}{text}{self.color_scheme.END}" if color_code else text


class BaseOutput(ABC, Generic[T]):
    """
    出力処理の抽象基本クラス

    異なる出力先に対する共通の出力インターフェースを提供します。
    """

    def __init__(self, formatter: Optional[BaseFormatter[T]] = None):
        """
        出力クラスを初期化

        Args:
            formatter: オプションのフォーマッター
        """
        self.formatter = formatter

    @abstractmethod
    def output(self, data: T) -> None:
        """
        データを出力

        Args:
            data: 出力するデータ
        """
        pass

    def format_data(self, data: T) -> str:
        """
        データをフォーマット

        Args:
            data: フォーマットするデータ

        Returns:
            フォーマットされた文字列
        """
        return str(data) if self.formatter is None else self.formatter.format(data)
