# exchange/provider.py
"""
為替レートプロバイダーモジュール

指定期間のUSD/JPY日次レートを取得し、RateTableとして返します。
Frankfurter API（欧州中央銀行の参照レート）とローカルのCSVファイルに対応します。
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple
import csv
import logging

import requests

from ..config.constants import RATE_FETCH_PADDING_DAYS
from ..config.settings import (
    FILE_ENCODING, FRANKFURTER_BASE_URL, ISO_DATE_FORMAT,
    RATE_FILE_DATE_FORMATS, RATE_REQUEST_TIMEOUT,
)
from ..core.error import ConfigurationError, ExchangeRateError, NoDateRangeError, ParseError
from .currency import Currency
from .rate_table import RateTable


def compute_fetch_window(
    dates: Iterable[date],
    padding_days: int = RATE_FETCH_PADDING_DAYS,
) -> Tuple[date, date]:
    """
    レート取得期間を算出

    最も古い日付からpadding_days日遡った日を開始日とし、
    レート検索の遡り範囲にもデータが存在するようにします。

    Args:
        dates: 取引に含まれる全ての日付
        padding_days: 開始日を遡らせる日数

    Returns:
        (開始日, 終了日)のタプル

    Raises:
        NoDateRangeError: 日付が1件もない場合
    """
    collected = list(dates)
    if not collected:
        raise NoDateRangeError()
    return min(collected) - timedelta(days=padding_days), max(collected)


class RateProvider(ABC):
    """為替レートプロバイダーの基底クラス"""

    base: Currency = Currency.USD
    target: Currency = Currency.JPY

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def fetch(self, start: date, end: date) -> RateTable:
        """
        期間内の日次レートを取得

        Args:
            start: 開始日（含む）
            end: 終了日（含む）

        Returns:
            RateTable: 日付 -> レートの表

        Raises:
            ExchangeRateError: 取得に失敗した場合
        """
        pass


class FrankfurterRateProvider(RateProvider):
    """Frankfurter APIから日次レートを取得するプロバイダー"""

    def __init__(
        self,
        base_url: str = FRANKFURTER_BASE_URL,
        timeout: float = RATE_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__()
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._http = session or requests

    def build_url(self, start: date, end: date) -> str:
        """期間指定のリクエストURLを生成"""
        return (
            f"{self.base_url}/{start.strftime(ISO_DATE_FORMAT)}.."
            f"{end.strftime(ISO_DATE_FORMAT)}"
        )

    def fetch(self, start: date, end: date) -> RateTable:
        url = self.build_url(start, end)
        params = {'from': self.base.code, 'to': self.target.code}
        self.logger.info(f"為替レートを取得: {url} {params}")

        try:
            response = self._http.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"為替レート取得エラー: {e}")
            raise ExchangeRateError(
                "為替レート取得失敗", self.base.code, self.target.code,
                details={'url': url, 'error': str(e)},
            ) from e

        if not response.ok:
            self.logger.error(f"為替レート取得エラー: HTTP {response.status_code}")
            raise ExchangeRateError(
                "為替レート取得失敗", self.base.code, self.target.code,
                details={'url': url, 'status': response.status_code},
            )

        try:
            payload = response.json(parse_float=Decimal)
        except ValueError as e:
            raise ExchangeRateError(
                "為替レート取得失敗", self.base.code, self.target.code,
                details={'url': url, 'error': f"不正なレスポンス: {e}"},
            ) from e

        table = self._parse_payload(payload)
        self.logger.info(f"{len(table)}件のレートを取得しました")
        return table

    def _parse_payload(self, payload: Dict[str, Any]) -> RateTable:
        """
        レスポンスJSONをRateTableに変換

        Raises:
            ExchangeRateError: レスポンスの構造やレートの値が不正な場合
        """
        rates: Dict[str, Decimal] = {}
        try:
            for rate_date, values in (payload.get('rates') or {}).items():
                value = (values or {}).get(self.target.code)
                if value is None:
                    self.logger.warning(f"{rate_date}に{self.target.code}のレートがありません")
                    continue
                rates[rate_date] = Decimal(str(value))
        except (AttributeError, TypeError, InvalidOperation) as e:
            raise ExchangeRateError(
                "為替レート取得失敗",
                self.base.code, self.target.code,
                details={'error': f"不正なレスポンス形式: {e}"},
            ) from e
        return RateTable(rates)


class CsvRateProvider(RateProvider):
    """
    ローカルの為替レートCSVからレートを読み込むプロバイダー

    WSJのHistoricalPrices.csv形式（Date, Open, High, Low, Close）を想定し、
    終値(Close)をその日のレートとして扱います。
    """

    def __init__(self, rate_file: Path) -> None:
        super().__init__()
        self.rate_file = Path(rate_file)

    def fetch(self, start: date, end: date) -> RateTable:
        if not self.rate_file.exists():
            raise ExchangeRateError(
                f"為替レートファイルが見つかりません: {self.rate_file}",
                self.base.code, self.target.code,
            )

        rates: Dict[str, Decimal] = {}
        try:
            with self.rate_file.open('r', encoding=FILE_ENCODING) as f:
                reader = csv.DictReader(line.replace(' ', '') for line in f)
                for row in reader:
                    try:
                        rate_date = self._parse_date(row['Date'])
                        rate = Decimal(row['Close'])
                    except (KeyError, TypeError, ParseError, InvalidOperation) as e:
                        self.logger.warning(f"レート行を読み飛ばします {row.get('Date', '不明な日付')}: {e}")
                        continue
                    if start <= rate_date <= end:
                        rates[rate_date.strftime(ISO_DATE_FORMAT)] = rate
        except (OSError, csv.Error) as e:
            raise ExchangeRateError(
                f"為替レートファイルの読み込みに失敗: {e}",
                self.base.code, self.target.code,
            ) from e

        self.logger.info(f"{self.rate_file}から{len(rates)}件のレートを読み込みました")
        return RateTable(rates)

    @staticmethod
    def _parse_date(date_str: str) -> date:
        """日付文字列をパース"""
        value = (date_str or '').strip()
        for fmt in RATE_FILE_DATE_FORMATS:
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                continue
        raise ParseError(f"未対応の日付形式: {date_str}", date_str, "date")


def create_rate_provider(exchange_config: Dict[str, Any]) -> RateProvider:
    """
    設定からレートプロバイダーを生成

    Args:
        exchange_config: 為替設定（provider, base_url, timeout, rates_file）

    Returns:
        RateProvider: 生成されたプロバイダー

    Raises:
        ConfigurationError: 未知のプロバイダーが指定された場合
    """
    provider = str(exchange_config.get('provider', 'frankfurter')).lower()

    if provider == 'frankfurter':
        return FrankfurterRateProvider(
            base_url=exchange_config.get('base_url', FRANKFURTER_BASE_URL),
            timeout=float(exchange_config.get('timeout', RATE_REQUEST_TIMEOUT)),
        )
    if provider == 'csv':
        rates_file = exchange_config.get('rates_file')
        if not rates_file:
            raise ConfigurationError("csvプロバイダーにはrates_fileの指定が必要です")
        return CsvRateProvider(Path(rates_file))

    raise ConfigurationError(f"未知の為替レートプロバイダー: {provider}")
