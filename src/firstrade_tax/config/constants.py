# 履歴CSVのアクション種別
class IncomeAction:
    DIVIDEND = 'Dividend'
    INTEREST = 'Interest'


# Gain/Loss CSVの列名
class GainLossColumns:
    SYMBOL = 'Symbol'
    DESCRIPTION = 'Description'
    QUANTITY = 'Quantity'
    DATE_ACQUIRED = 'Date Acquired'
    DATE_SOLD = 'Date Sold'
    SALES_PROCEEDS = 'Sales Proceeds'
    ADJUST_COST = 'Adjust Cost'
    WS_LOSS_DISALLOWED = 'WS Loss Disallowed'
    WASH_SALES = 'Wash Sales'


# 履歴CSVの列名
class HistoryColumns:
    SYMBOL = 'Symbol'
    ACTION = 'Action'
    DESCRIPTION = 'Description'
    TRADE_DATE = 'TradeDate'
    AMOUNT = 'Amount'


# ヘッダー判定キーワード（小文字で比較）
HEADER_PREFIXES = ('symbol', '"symbol"')
GAIN_LOSS_HEADER_KEYWORD = 'sales proceeds'
HISTORY_HEADER_KEYWORDS = ('action', 'amount')

# 集計行の接頭辞
TOTAL_ROW_PREFIX = 'Total'

# 取得日不明を示す部分文字列（小文字で比較）
VARIOUS_DATE_MARKER = 'var'

# ウォッシュセール該当フラグ
WASH_SALE_FLAG = 'YES'

# 源泉徴収税の抽出パターン
TAX_WITHHELD_PATTERN = r'TAX WITHHELD\s+\$?([0-9,.]+)'

# 備考
class Notes:
    VARIOUS_DATE = '取得日不明(Various)'
    RATE_ERROR = 'レートエラー'


# 為替レート検索
RATE_LOOKUP_ATTEMPTS = 10
RATE_FETCH_PADDING_DAYS = 10
