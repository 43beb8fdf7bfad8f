"""
金額・日付パースモジュール

証券会社CSVの文字列表現を数値・日付に変換するための
ヒューリスティックなパース関数を提供します。
形式の判定は区切り文字の有無のみで行い、厳密な文法検証は行いません。
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
import logging
import re

from ..config.constants import VARIOUS_DATE_MARKER, TAX_WITHHELD_PATTERN
from ..config.settings import GAIN_LOSS_DATE_FORMAT, ISO_DATE_FORMAT

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r'[^0-9.\-]')
_LEADING_NUMBER = re.compile(r'^-?(\d+\.?\d*|\.\d+)')
_TAX_WITHHELD = re.compile(TAX_WITHHELD_PATTERN, re.IGNORECASE)


def parse_money(text: Optional[str]) -> Decimal:
    """
    金額文字列をDecimalに変換

    数字・小数点・マイナス記号以外の文字を全て除去し、
    先頭の数値部分を解釈します。括弧による負数表記は扱いません。

    Args:
        text: 金額文字列（例: "$1,234.56", "-$12.00"）

    Returns:
        Decimal: 変換後の金額。空または数値部分がない場合は0
    """
    if not text:
        return Decimal('0')

    cleaned = _NON_NUMERIC.sub('', text)
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        logger.debug(f"金額として解釈できません: {text!r}")
        return Decimal('0')

    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        logger.debug(f"金額の変換に失敗: {text!r}")
        return Decimal('0')


def is_various(text: Optional[str]) -> bool:
    """取得日が「Various」等の不定表記かどうかを判定"""
    return bool(text) and VARIOUS_DATE_MARKER in text.lower()


def parse_date_any(text: Optional[str]) -> Optional[date]:
    """
    日付文字列をパース

    "/" を含む場合は MM/DD/YYYY、"-" を含む場合は ISO形式 (YYYY-MM-DD) とみなします。

    Args:
        text: 日付文字列

    Returns:
        パースされた日付。不定表記・未対応形式の場合はNone
    """
    if not text or is_various(text):
        return None

    value = text.strip()

    if '/' in value:
        try:
            return datetime.strptime(value, GAIN_LOSS_DATE_FORMAT).date()
        except ValueError:
            pass

    if '-' in value:
        try:
            return datetime.strptime(value[:10], ISO_DATE_FORMAT).date()
        except ValueError:
            pass

    logger.debug(f"日付のパースに失敗: {text!r}")
    return None


def extract_tax(description: Optional[str]) -> Decimal:
    """
    説明文から源泉徴収税額を抽出

    Args:
        description: 説明文（例: "NON-RES TAX WITHHELD $1.23"）

    Returns:
        Decimal: 税額。該当する記述がない場合は0
    """
    if not description:
        return Decimal('0')

    match = _TAX_WITHHELD.search(description)
    if match and match.group(1):
        return parse_money(match.group(1))
    return Decimal('0')
