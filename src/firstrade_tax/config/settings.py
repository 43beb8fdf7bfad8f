from pathlib import Path

# ベースパス
BASE_DIR = Path(__file__).parent.parent.parent.parent
DATA_DIR = BASE_DIR / 'data'
OUTPUT_DIR = BASE_DIR / 'output'
LOG_DIR = OUTPUT_DIR / 'logs'

# ファイル設定
FILE_ENCODING = 'utf-8-sig'
EXPORT_ENCODING = 'utf-8-sig'

# 日付形式
GAIN_LOSS_DATE_FORMAT = '%m/%d/%Y'
ISO_DATE_FORMAT = '%Y-%m-%d'
RATE_FILE_DATE_FORMATS = ('%m/%d/%y', '%m/%d/%Y', '%Y-%m-%d')

# 為替レート設定
FRANKFURTER_BASE_URL = 'https://api.frankfurter.app'
RATE_REQUEST_TIMEOUT = 30
EXCHANGE_RATE_FILE = DATA_DIR / 'HistoricalPrices.csv'

# 出力ファイル名（{year}は対象年）
OUTPUT_FILES = {
    'gain_loss': 'GainLoss_{year}_Calculated.csv',
    'dividend': 'Dividends_{year}_Calculated.csv',
    'interest': 'Interest_{year}_Calculated.csv',
    'report': 'Firstrade_Report_{year}.txt',
}

# レポート設定
BROKER_NAME = 'Firstrade Securities Inc.'
REIWA_OFFSET = 2018

# ロギング設定
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
