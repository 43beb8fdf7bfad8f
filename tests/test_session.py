import logging
import threading
from datetime import date
from decimal import Decimal

import pytest

from firstrade_tax.app.session import Session
from firstrade_tax.app.state import (
    EMPTY_RATES_MESSAGE, SessionState, apply_rates, recalculate, select_year,
)
from firstrade_tax.config.constants import Notes
from firstrade_tax.core.error import ExchangeRateError, RateFetchBusyError
from firstrade_tax.exchange.provider import RateProvider
from firstrade_tax.exchange.rate_table import RateTable


class StaticProvider(RateProvider):
    """固定のレート表を返すプロバイダー"""

    def __init__(self, table):
        super().__init__()
        self.table = table
        self.calls = []

    def fetch(self, start, end):
        self.calls.append((start, end))
        return self.table


class GatedProvider(RateProvider):
    """呼び出しごとにゲートが開くまで待つプロバイダー"""

    def __init__(self, tables):
        super().__init__()
        self.tables = list(tables)
        self.gates = [threading.Event() for _ in self.tables]
        self.started = [threading.Event() for _ in self.tables]
        self._index = 0

    def fetch(self, start, end):
        index = self._index
        self._index += 1
        self.started[index].set()
        self.gates[index].wait(timeout=5)
        return self.tables[index]


class FailingProvider(RateProvider):
    def fetch(self, start, end):
        raise ExchangeRateError("為替レート取得失敗")


@pytest.fixture
def session(rates, today):
    with Session(StaticProvider(rates), today=today) as session:
        yield session


def test_initial_state(today):
    state = SessionState.initial(today)

    assert state.selected_year == 2024
    assert not state.has_raw_data
    assert not state.has_rates
    assert state.available_years(today) == [2024]


def test_load_without_rates_keeps_records_empty(session, gain_loss_csv):
    assert session.load_text(gain_loss_csv, "FT_GainLoss.csv")

    assert session.state.has_raw_data
    assert session.state.gain_loss == ()
    assert session.error_message is None


def test_fetch_rates_recalculates_and_selects_latest_year(session, gain_loss_csv, history_csv):
    session.load_text(gain_loss_csv, "FT_GainLoss.csv")
    session.load_text(history_csv, "FT_CSV.csv")

    assert session.fetch_rates()

    state = session.state
    assert len(state.gain_loss) == 2
    assert len(state.dividends) == 1
    assert len(state.interests) == 1
    assert state.selected_year == 2023
    assert not state.fetching
    assert session.provider.calls == [(date(2022, 12, 23), date(2023, 6, 30))]


def test_load_error_sets_message_and_keeps_data(session, gain_loss_csv):
    session.load_text(gain_loss_csv, "FT_GainLoss.csv")

    assert not session.load_text("Symbol,Price\nAAPL,1\n", "bad.csv")

    assert session.error_message.startswith("不明なCSV形式です")
    assert len(session.state.gain_loss_rows) == 2


def test_later_error_replaces_earlier(session):
    session.load_text("", "empty.csv")
    session.load_text("no header\n", "bad.csv")

    assert session.error_message == "ヘッダー(Symbol)が見つかりません。正しいCSVか確認してください。"


def test_load_missing_file_sets_message(session, tmp_path):
    assert not session.load_file(tmp_path / "missing.csv")
    assert "ソースファイルが存在しません" in session.error_message


def test_fetch_without_dates_sets_message(session):
    assert not session.fetch_rates()
    assert session.error_message == "日付データが見つかりません"


def test_fetch_failure_keeps_previous_rates(gain_loss_csv, today):
    with Session(FailingProvider(), today=today) as session:
        session.load_text(gain_loss_csv)

        assert not session.fetch_rates()

        assert session.error_message == "為替レート取得失敗"
        assert not session.state.has_rates
        assert not session.state.fetching


def test_reloading_file_replaces_rows(session, gain_loss_csv):
    session.load_text(gain_loss_csv)
    session.fetch_rates()
    single = "Symbol,Date Acquired,Date Sold,Sales Proceeds,Adjust Cost\nNVDA,01/02/2023,03/04/2023,$10,$5\n"

    session.load_text(single)

    assert [r.symbol for r in session.state.gain_loss] == ['NVDA']
    assert [r.id for r in session.state.gain_loss] == [0]


def test_select_year_does_not_touch_records(session, gain_loss_csv):
    session.load_text(gain_loss_csv)
    session.fetch_rates()
    before = session.state.gain_loss

    session.select_year(2022)

    assert session.state.selected_year == 2022
    assert session.state.gain_loss is before
    assert session.state.year_summary().is_empty
    assert not session.state.year_summary(2023).is_empty


def test_start_while_pending_is_rejected(gain_loss_csv, rates, today):
    provider = GatedProvider([rates])
    with Session(provider, today=today) as session:
        session.load_text(gain_loss_csv)
        fetch = session.start_rate_fetch()

        with pytest.raises(RateFetchBusyError):
            session.start_rate_fetch()

        provider.gates[0].set()
        assert session.complete_rate_fetch(fetch, timeout=5)


def test_stale_fetch_result_is_discarded(gain_loss_csv, today):
    old_rates = RateTable({'2023-01-02': Decimal('1'), '2023-03-04': Decimal('1')})
    new_rates = RateTable({'2023-01-02': Decimal('130'), '2023-03-04': Decimal('140')})
    provider = GatedProvider([old_rates, new_rates])

    with Session(provider, today=today) as session:
        session.load_text(gain_loss_csv)
        first = session.start_rate_fetch()
        assert provider.started[0].wait(timeout=5)
        second = session.start_rate_fetch(supersede=True)
        assert second.generation == first.generation + 1

        provider.gates[0].set()
        provider.gates[1].set()

        assert not session.complete_rate_fetch(first, timeout=5)
        assert session.state.fetching
        assert session.complete_rate_fetch(second, timeout=5)
        assert session.state.rates is new_rates
        assert session.state.gain_loss[0].proceeds_jpy == 210000


def test_recalculate_is_pure(gain_loss_csv, rates, today):
    with Session(StaticProvider(rates), today=today) as session:
        session.load_text(gain_loss_csv)
        session.fetch_rates()
        state = session.state

    assert recalculate(state) == state
    assert apply_rates(state, rates) == state
    assert select_year(state, 2000).gain_loss == state.gain_loss


def test_empty_rate_table_keeps_records_as_rate_errors(gain_loss_csv, history_csv, today):
    with Session(StaticProvider(RateTable()), today=today) as session:
        session.load_text(gain_loss_csv)
        session.load_text(history_csv)

        assert session.fetch_rates()

        state = session.state
        assert len(state.gain_loss) == 2
        assert len(state.dividends) == 1
        assert len(state.interests) == 1
        assert state.gain_loss[0].notes == Notes.RATE_ERROR
        assert state.gain_loss[0].proceeds_jpy == 0
        assert state.selected_year == 2023
        assert session.error_message == EMPTY_RATES_MESSAGE
        assert not state.fetching


def test_load_after_empty_rate_table_recalculates(gain_loss_csv, today):
    with Session(StaticProvider(RateTable()), today=today) as session:
        session.load_text(gain_loss_csv)
        session.fetch_rates()
        single = "Symbol,Date Acquired,Date Sold,Sales Proceeds,Adjust Cost\nNVDA,01/02/2023,03/04/2023,$10,$5\n"

        session.load_text(single)

        assert [r.symbol for r in session.state.gain_loss] == ['NVDA']


def test_complete_timeout_leaves_fetch_pending(gain_loss_csv, rates, today):
    provider = GatedProvider([rates])
    with Session(provider, today=today) as session:
        session.load_text(gain_loss_csv)
        fetch = session.start_rate_fetch()

        assert not session.complete_rate_fetch(fetch, timeout=0.01)
        assert session.state.fetching
        assert session.error_message is None
        with pytest.raises(RateFetchBusyError):
            session.start_rate_fetch()

        provider.gates[0].set()
        assert session.complete_rate_fetch(fetch, timeout=5)
        assert not session.state.fetching
        assert len(session.state.gain_loss) == 2


def test_second_file_of_same_format_logs_warning(session, gain_loss_csv, history_csv, caplog):
    session.load_text(gain_loss_csv, "first.csv")
    session.load_text(history_csv, "history.csv")
    assert "置き換えます" not in caplog.text

    with caplog.at_level(logging.WARNING, logger="Session"):
        session.load_text(gain_loss_csv, "second.csv")

    assert "second.csv: 読み込み済みのgain_lossデータを置き換えます" in caplog.text
