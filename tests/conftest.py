from datetime import date
from decimal import Decimal

import pytest

from firstrade_tax.exchange.rate_table import RateTable

GAIN_LOSS_CSV = "\ufeff" + """Firstrade Securities Inc.
Realized Gain/Loss Report

Symbol,Description,Quantity,Date Acquired,Date Sold,Sales Proceeds,Adjust Cost,WS Loss Disallowed,Wash Sales
AAPL,APPLE INC,10,01/02/2023,03/04/2023,"$1,500.00","$1,000.00",$0.00,NO
MSFT,MICROSOFT CORP,5,Various,03/04/2023,$900.00,$1000.00,$20.00,YES
Total,,,,,"$2,400.00","$2,000.00",,
"""

HISTORY_CSV = """Symbol,Quantity,Price,Action,Description,TradeDate,SettledDate,Interest,Amount,Commission,Fee,CUSIP,RecordType
KO,0,0,Dividend,COCA COLA CO CASH DIV NON-RES TAX WITHHELD $1.50,2023-06-15,2023-06-15,0,$8.50,0,0,191216100,Financial
,0,0,Interest,INTEREST ON CREDIT BALANCE,2023-06-30,2023-06-30,0,$2.00,0,0,,Financial
AAPL,10,150,BUY,APPLE INC,2023-06-01,2023-06-05,0,-1500,0,0,037833100,Trade
"""


@pytest.fixture
def gain_loss_csv():
    return GAIN_LOSS_CSV


@pytest.fixture
def history_csv():
    return HISTORY_CSV


@pytest.fixture
def rates():
    """2023年の取引日をカバーするレート表"""
    return RateTable({
        '2023-01-02': Decimal('130.0'),
        '2023-03-04': Decimal('140.0'),
        '2023-06-15': Decimal('145.2'),
        '2023-06-30': Decimal('144.0'),
    })


@pytest.fixture
def today():
    return date(2024, 2, 1)
