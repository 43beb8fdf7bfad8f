from datetime import date
from decimal import Decimal

import pytest

from firstrade_tax.config.constants import Notes
from firstrade_tax.core.rows import GainLossRow, HistoryRow
from firstrade_tax.exchange.rate_table import RateTable
from firstrade_tax.processors.dividend import DividendCalculator
from firstrade_tax.processors.gain_loss import GainLossCalculator
from firstrade_tax.processors.interest import InterestCalculator


def gain_loss_row(**overrides):
    values = {
        'Symbol': 'AAPL',
        'Description': 'APPLE INC',
        'Quantity': '10',
        'Date Acquired': '01/02/2023',
        'Date Sold': '03/04/2023',
        'Sales Proceeds': '$1,500.00',
        'Adjust Cost': '$1,000.00',
        'WS Loss Disallowed': '$0.00',
        'Wash Sales': 'NO',
    }
    values.update(overrides)
    return GainLossRow.from_dict(values)


def history_row(**overrides):
    values = {
        'Symbol': 'KO',
        'Action': 'Dividend',
        'Description': 'NON-RES TAX WITHHELD $1.50',
        'TradeDate': '2023-06-15',
        'Amount': '$8.50',
    }
    values.update(overrides)
    return HistoryRow.from_dict(values)


def test_gain_loss_scenario(rates):
    [record] = GainLossCalculator().calculate([gain_loss_row()], rates)

    assert record.id == 0
    assert record.date_acquired == date(2023, 1, 2)
    assert record.date_sold == date(2023, 3, 4)
    assert record.rate_acquired == Decimal('130.0')
    assert record.rate_sold == Decimal('140.0')
    assert record.proceeds_jpy == 210000
    assert record.cost_jpy == 130000
    assert record.gain_loss_jpy == 80000
    assert record.gain_loss_usd == Decimal('500.00')
    assert record.quantity == Decimal('10')
    assert not record.is_wash_sale
    assert record.notes == ''


def test_gain_loss_various_acquisition_uses_sale_rate(rates):
    row = gain_loss_row(**{'Date Acquired': 'Various', 'Wash Sales': 'YES'})
    [record] = GainLossCalculator().calculate([row], rates)

    assert record.date_acquired is None
    assert record.rate_acquired == Decimal('140.0')
    assert record.cost_jpy == 140000
    assert record.notes == Notes.VARIOUS_DATE
    assert record.is_wash_sale


def test_gain_loss_missing_rate_is_annotated():
    rates = RateTable({'2023-03-04': Decimal('140.0')})
    [record] = GainLossCalculator().calculate([gain_loss_row()], rates)

    assert record.rate_acquired == Decimal('0')
    assert record.cost_jpy == 0
    assert record.proceeds_jpy == 210000
    assert record.notes == Notes.RATE_ERROR


def test_gain_loss_unparseable_acquisition_falls_back_to_sale_date(rates):
    [record] = GainLossCalculator().calculate([gain_loss_row(**{'Date Acquired': 'N/A'})], rates)

    assert record.date_acquired == date(2023, 3, 4)
    assert record.rate_acquired == Decimal('140.0')
    assert record.cost_jpy == 140000
    assert record.notes == ''


@pytest.mark.parametrize("table", [
    RateTable(),
    RateTable({'2023-01-02': Decimal('130.0')}),
])
def test_gain_loss_various_note_wins_over_rate_error(table):
    row = gain_loss_row(**{'Date Acquired': 'Various'})
    [record] = GainLossCalculator().calculate([row], table)

    assert record.rate_sold == Decimal('0')
    assert record.proceeds_jpy == 0
    assert record.notes == Notes.VARIOUS_DATE


def test_gain_loss_drops_unparseable_sale_date_and_keeps_ids_dense(rates):
    rows = [
        gain_loss_row(Symbol='BAD', **{'Date Sold': 'pending'}),
        gain_loss_row(),
        gain_loss_row(Symbol='MSFT'),
    ]
    records = GainLossCalculator().calculate(rows, rates)

    assert [r.symbol for r in records] == ['AAPL', 'MSFT']
    assert [r.id for r in records] == [0, 1]


def test_gain_loss_invariant(rates):
    rows = [
        gain_loss_row(**{'Sales Proceeds': '$333.33', 'Adjust Cost': '$777.77'}),
        gain_loss_row(**{'Sales Proceeds': '$0.01', 'Adjust Cost': '$0.00'}),
    ]
    for record in GainLossCalculator().calculate(rows, rates):
        assert record.gain_loss_jpy == record.proceeds_jpy - record.cost_jpy


def test_dividend_scenario(rates):
    [record] = DividendCalculator().calculate([history_row()], rates)

    assert record.tax_usd == Decimal('1.50')
    assert record.net_usd == Decimal('8.50')
    assert record.gross_usd == Decimal('10.00')
    assert record.rate == Decimal('145.2')
    assert record.net_jpy == 1234
    assert record.tax_jpy == 217
    assert record.gross_jpy == 1452
    assert record.notes == ''


def test_dividend_without_withholding(rates):
    row = history_row(Description='COCA COLA CO CASH DIV')
    [record] = DividendCalculator().calculate([row], rates)

    assert record.tax_usd == Decimal('0')
    assert record.gross_usd == record.net_usd


def test_dividend_rate_fallback_from_weekend(rates):
    [record] = DividendCalculator().calculate([history_row(TradeDate='2023-06-17')], rates)

    assert record.rate == Decimal('145.2')
    assert record.notes == ''


def test_interest_record(rates):
    row = history_row(Symbol='', Action='Interest', Description='INTEREST ON CREDIT BALANCE',
                      TradeDate='2023-06-30', Amount='$2.00')
    [record] = InterestCalculator().calculate([row], rates)

    assert record.net_usd == Decimal('2.00')
    assert record.net_jpy == 288
    assert record.description == 'INTEREST ON CREDIT BALANCE'


def test_interest_missing_rate():
    row = history_row(Action='Interest', TradeDate='2020-01-01', Amount='$2.00')
    [record] = InterestCalculator().calculate([row], RateTable())

    assert record.net_jpy == 0
    assert record.notes == Notes.RATE_ERROR


@pytest.mark.parametrize("calculator, rows", [
    (GainLossCalculator(), [gain_loss_row(), gain_loss_row(Symbol='MSFT')]),
    (DividendCalculator(), [history_row(), history_row(Symbol='PEP')]),
])
def test_recalculation_is_idempotent(calculator, rows, rates):
    assert calculator.calculate(rows, rates) == calculator.calculate(rows, rates)
