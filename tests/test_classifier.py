import pytest

from firstrade_tax.core.classifier import ExportLoader, FileSchema, classify, find_header_index, split_lines
from firstrade_tax.core.error import (
    EmptyFileError, HeaderNotFoundError, LoaderError, NoRowsError, UnrecognizedFormatError,
)


@pytest.fixture
def loader():
    return ExportLoader()


def test_classify_by_header():
    assert classify("Symbol,Quantity,Date Sold,Sales Proceeds,Adjust Cost") is FileSchema.GAIN_LOSS
    assert classify('"Symbol","Action","Description","Amount"') is FileSchema.HISTORY
    assert classify("Symbol,Price,Volume") is FileSchema.UNKNOWN


def test_classify_falls_back_to_first_row():
    assert classify("Symbol,X", {'Sales Proceeds': '$1.00'}) is FileSchema.GAIN_LOSS
    assert classify("Symbol,X", {'Action': 'Dividend'}) is FileSchema.HISTORY
    assert classify("Symbol,X", {'Action': ''}) is FileSchema.UNKNOWN


def test_find_header_skips_preamble(gain_loss_csv):
    lines = split_lines(gain_loss_csv)

    assert lines[0] == "Firstrade Securities Inc."
    assert lines[find_header_index(lines)].startswith("Symbol,")
    assert find_header_index(["no header", "here"]) == -1


def test_load_gain_loss(loader, gain_loss_csv):
    export = loader.load_text(gain_loss_csv, "FT_GainLoss.csv")

    assert export.schema is FileSchema.GAIN_LOSS
    assert [row.symbol for row in export.gain_loss_rows] == ["AAPL", "MSFT"]
    assert export.gain_loss_rows[0].sales_proceeds == "$1,500.00"
    assert export.gain_loss_rows[1].date_acquired == "Various"
    assert export.row_count == 2


def test_load_history_splits_dividend_and_interest(loader, history_csv):
    export = loader.load_text(history_csv, "FT_CSV.csv")

    assert export.schema is FileSchema.HISTORY
    assert [row.symbol for row in export.dividend_rows] == ["KO"]
    assert [row.description for row in export.interest_rows] == ["INTEREST ON CREDIT BALANCE"]
    assert export.gain_loss_rows == ()


def test_load_history_with_only_interest(loader):
    text = (
        "Symbol,Action,Description,TradeDate,Amount\n"
        ",Interest,INTEREST ON CREDIT BALANCE,2023-06-30,$2.00\n"
    )
    export = loader.load_text(text)

    assert export.dividend_rows == ()
    assert len(export.interest_rows) == 1


def test_load_empty_text(loader):
    with pytest.raises(EmptyFileError) as excinfo:
        loader.load_text("   \n\n")
    assert excinfo.value.message == "ファイルが空です"


def test_load_without_header(loader):
    with pytest.raises(HeaderNotFoundError) as excinfo:
        loader.load_text("Date,Amount\n2023-01-01,5\n")
    assert "ヘッダー(Symbol)" in excinfo.value.message


def test_load_unknown_format(loader):
    with pytest.raises(UnrecognizedFormatError):
        loader.load_text("Symbol,Price,Volume\nAAPL,150,100\n")


def test_load_gain_loss_only_totals(loader):
    text = "Symbol,Date Sold,Sales Proceeds,Adjust Cost\nTotal,,$100.00,$50.00\n,,,\n"
    with pytest.raises(NoRowsError) as excinfo:
        loader.load_text(text)
    assert excinfo.value.message == "有効なデータが見つかりませんでした(Gain/Loss)"


def test_load_history_without_income(loader):
    text = "Symbol,Action,Description,TradeDate,Amount\nAAPL,BUY,APPLE INC,2023-06-01,-1500\n"
    with pytest.raises(NoRowsError):
        loader.load_text(text)


def test_action_match_is_case_sensitive(loader):
    text = (
        "Symbol,Action,Description,TradeDate,Amount\n"
        "KO,dividend,lowercase,2023-06-15,$1.00\n"
        "KO,Dividend ,trailing space is stripped,2023-06-15,$1.00\n"
    )
    export = loader.load_text(text)

    assert [row.description for row in export.dividend_rows] == ["trailing space is stripped"]


def test_load_file(loader, tmp_path, gain_loss_csv):
    path = tmp_path / "FT_GainLoss.csv"
    path.write_text(gain_loss_csv, encoding="utf-8")

    export = loader.load(path)

    assert export.source == str(path)
    assert len(export.gain_loss_rows) == 2


def test_load_missing_file(loader, tmp_path):
    with pytest.raises(LoaderError) as excinfo:
        loader.load(tmp_path / "missing.csv")
    assert excinfo.value.details['type'] == 'file_not_found'
