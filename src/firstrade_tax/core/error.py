from typing import Optional, Dict, Any
from datetime import date


class AssistantError(Exception):
    """
    確定申告アシスタントの基本例外クラス

    アプリケーション固有の全ての例外の基底クラスとして機能し、
    エラーの詳細情報を構造化された形で保持します。
    メッセージはそのままユーザーに表示されます。
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        例外を初期化

        Args:
            message: ユーザー向けエラーメッセージ
            details: エラーの詳細情報（オプション）
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DataError(AssistantError):
    """
    データ処理関連の基本例外クラス

    CSVの読み込み、判定、パースに関する
    全ての例外の基底クラスとして機能します。
    """

    pass


class LoaderError(DataError):
    """
    データ読み込み関連の例外

    ファイルの読み込みやCSV形式の判定に
    関するエラーを表現します。
    """

    def __init__(self, message: str, source: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        例外を初期化

        Args:
            message: エラーメッセージ
            source: エラーが発生したデータソース
            details: エラーの詳細情報（オプション）
        """
        super().__init__(message, details)
        self.source = source


class EmptyFileError(LoaderError):
    """ファイルが空"""

    def __init__(self, source: str) -> None:
        super().__init__("ファイルが空です", source)


class HeaderNotFoundError(LoaderError):
    """ヘッダー行(Symbol)が存在しない"""

    def __init__(self, source: str, first_lines: Optional[list] = None) -> None:
        super().__init__(
            "ヘッダー(Symbol)が見つかりません。正しいCSVか確認してください。",
            source,
            {'first_lines': first_lines or []},
        )


class NoRowsError(LoaderError):
    """フィルタ後に有効な行が残らない"""

    def __init__(self, message: str, source: str) -> None:
        super().__init__(message, source)


class UnrecognizedFormatError(LoaderError):
    """Gain/Loss形式でも履歴形式でもない"""

    def __init__(self, source: str, header: str = '') -> None:
        super().__init__(
            "不明なCSV形式です。Firstradeの Gain/Loss または History ファイルを使用してください。",
            source,
            {'header': header},
        )


class CsvParseError(LoaderError):
    """区切り文字テキストのパース失敗"""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"パースエラー: {reason}", source, {'error': reason})


class ParseError(DataError):
    """
    データパース処理の例外

    データの解析や型変換に関するエラーを
    表現します。
    """

    def __init__(self, message: str, raw_value: str, target_type: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        例外を初期化

        Args:
            message: エラーメッセージ
            raw_value: パースに失敗した元の値
            target_type: 変換しようとした目標の型
            details: エラーの詳細情報（オプション）
        """
        super().__init__(message, details)
        self.raw_value = raw_value
        self.target_type = target_type


class ConfigurationError(AssistantError):
    """
    設定関連の例外

    設定の読み込みや検証時に発生するエラーを
    表現します。
    """

    pass


class ExchangeRateError(AssistantError):
    """
    為替レート関連の例外

    為替レートの取得時に発生するエラーを
    表現します。
    """

    def __init__(
        self,
        message: str,
        base_currency: str = 'USD',
        target_currency: str = 'JPY',
        rate_date: Optional[date] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        例外を初期化

        Args:
            message: エラーメッセージ
            base_currency: 基準通貨
            target_currency: 変換先通貨
            rate_date: レート参照日
            details: エラーの詳細情報（オプション）
        """
        super().__init__(message, details)
        self.base_currency = base_currency
        self.target_currency = target_currency
        self.rate_date = rate_date

    def __str__(self) -> str:
        """エラーの文字列表現を返す"""
        base_info = f"{self.base_currency}/{self.target_currency}"
        date_info = f" ({self.rate_date})" if self.rate_date else ""
        return f"{super().__str__()} [{base_info}{date_info}]"


class NoDateRangeError(ExchangeRateError):
    """レート取得範囲を決める日付がない"""

    def __init__(self) -> None:
        super().__init__("日付データが見つかりません")


class RateFetchBusyError(ExchangeRateError):
    """レート取得中に新たな取得が要求された"""

    def __init__(self, generation: int) -> None:
        super().__init__(
            "為替レートを取得中です。完了までお待ちください。",
            details={'generation': generation},
        )
