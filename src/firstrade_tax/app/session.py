"""
セッション制御モジュール

ファイルの読み込み、為替レートの取得、対象年の選択を受け付け、
SessionStateを遷移させます。処理中のエラーはセッションを止めず、
最新の1件をエラーメッセージとして保持します。

レート取得は1本のワーカースレッドで非同期に実行し、取得ごとに世代番号を
振ります。完了時に世代が古くなっている結果は破棄されます。
"""

from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FetchTimeoutError
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional
import logging
import threading

from ..core.classifier import ExportLoader, FileSchema, ParsedExport
from ..core.error import AssistantError, ExchangeRateError, RateFetchBusyError
from ..exchange.provider import RateProvider, compute_fetch_window
from ..exchange.rate_table import RateTable
from .state import (
    SessionState, apply_export, apply_rates, select_year, with_error, with_fetching,
)


@dataclass(frozen=True)
class RateFetch:
    """実行中のレート取得"""

    generation: int
    start: date
    end: date
    future: 'Future[RateTable]'

    @property
    def done(self) -> bool:
        return self.future.done()


class Session:
    """
    1回の実行分のセッション

    Attributes:
        state: 現在のセッション状態
        provider: 為替レートプロバイダー
        loader: CSVエクスポートのローダー
    """

    def __init__(
        self,
        provider: RateProvider,
        loader: Optional[ExportLoader] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        today: Optional[date] = None,
    ) -> None:
        self.provider = provider
        self.loader = loader or ExportLoader()
        self.state = SessionState.initial(today)
        self.logger = logging.getLogger(self.__class__.__name__)

        self._today = today
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix='rate-fetch')
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: Optional[RateFetch] = None

    def __enter__(self) -> 'Session':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def error_message(self) -> Optional[str]:
        return self.state.error_message

    @property
    def generation(self) -> int:
        return self._generation

    def load_file(self, path: Path) -> bool:
        """
        CSVファイルを読み込んで状態に反映

        Args:
            path: CSVファイルのパス

        Returns:
            読み込みに成功した場合True（失敗時はエラーメッセージを設定）
        """
        try:
            export = self.loader.load(path)
        except AssistantError as e:
            self._record_error(e)
            return False
        self._apply_export(export)
        return True

    def load_text(self, text: str, source: str = '<text>') -> bool:
        """デコード済みのCSVテキストを読み込んで状態に反映"""
        try:
            export = self.loader.load_text(text, source)
        except AssistantError as e:
            self._record_error(e)
            return False
        self._apply_export(export)
        return True

    def start_rate_fetch(self, supersede: bool = False) -> Optional[RateFetch]:
        """
        読み込み済みの全日付をカバーするレート取得を開始

        Args:
            supersede: 実行中の取得があれば、その結果を破棄して新たに開始する

        Returns:
            開始した取得。日付データがない場合はNone（エラーメッセージを設定）

        Raises:
            RateFetchBusyError: 取得の実行中にsupersedeなしで呼ばれた場合
        """
        with self._lock:
            pending = self._pending
            if pending is not None and not pending.done and not supersede:
                raise RateFetchBusyError(pending.generation)

            try:
                start, end = compute_fetch_window(self.state.raw_dates())
            except ExchangeRateError as e:
                self.state = with_error(self.state, e.message)
                self.logger.error(e.message)
                return None

            if pending is not None and not pending.done:
                pending.future.cancel()
                self.logger.info(f"レート取得(世代{pending.generation})の結果を破棄します")

            self._generation += 1
            fetch = RateFetch(
                generation=self._generation,
                start=start,
                end=end,
                future=self._executor.submit(self.provider.fetch, start, end),
            )
            self._pending = fetch
            self.state = with_fetching(with_error(self.state, None), True)

        self.logger.info(f"レート取得を開始(世代{fetch.generation}): {start} 〜 {end}")
        return fetch

    def complete_rate_fetch(self, fetch: RateFetch, timeout: Optional[float] = None) -> bool:
        """
        レート取得の完了を待って結果を反映

        後から開始された取得がある場合、この取得の結果は反映しません。

        Args:
            fetch: start_rate_fetchが返した取得
            timeout: 完了を待つ最大秒数

        Returns:
            結果を状態に反映した場合True。時間内に完了しなかった場合は
            取得を実行中のまま残してFalse
        """
        try:
            rates = fetch.future.result(timeout=timeout)
            error: Optional[ExchangeRateError] = None
        except FetchTimeoutError:
            self.logger.warning(f"レート取得(世代{fetch.generation})が{timeout}秒以内に完了しませんでした")
            return False
        except CancelledError:
            self.logger.info(f"レート取得(世代{fetch.generation})はキャンセルされました")
            return False
        except ExchangeRateError as e:
            rates, error = None, e

        with self._lock:
            if fetch.generation != self._generation:
                self.logger.info(f"古いレート取得(世代{fetch.generation})の結果を破棄しました")
                return False

            self._pending = None
            state = with_fetching(self.state, False)
            if error is not None:
                self.logger.error(f"レート取得に失敗: {error}")
                self.state = with_error(state, error.message)
                return False

            self.state = apply_rates(state, rates, self._today)

        if rates.is_empty:
            self.logger.warning("取得したレート表が空です。全ての記録をレートエラーとして扱います")
        self.logger.info(
            f"レートを反映しました: {len(rates)}件、対象年 {self.state.selected_year}"
        )
        return True

    def fetch_rates(self, timeout: Optional[float] = None) -> bool:
        """レート取得を開始し、完了まで待って反映する"""
        fetch = self.start_rate_fetch(supersede=True)
        if fetch is None:
            return False
        return self.complete_rate_fetch(fetch, timeout)

    def select_year(self, year: int) -> None:
        """対象年を変更"""
        self.state = select_year(self.state, year)
        self.logger.debug(f"対象年を{year}年に変更")

    def close(self) -> None:
        """ワーカーを停止（実行中の取得は待たずに破棄）"""
        with self._lock:
            self._generation += 1
            self._pending = None
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.logger.debug("セッションを終了しました")

    def _apply_export(self, export: ParsedExport) -> None:
        with self._lock:
            if self._replaces_rows(export):
                self.logger.warning(
                    f"{export.source}: 読み込み済みの{export.schema.value}データを置き換えます"
                )
            self.state = apply_export(self.state, export)
        self.logger.info(f"{export.source}: {export.row_count}行を読み込みました")

    def _replaces_rows(self, export: ParsedExport) -> bool:
        """読み込み済みの同じ形式の行データが置き換えられるか"""
        if export.schema is FileSchema.GAIN_LOSS:
            return bool(self.state.gain_loss_rows)
        if export.schema is FileSchema.HISTORY:
            return bool(self.state.dividend_rows or self.state.interest_rows)
        return False

    def _record_error(self, error: AssistantError) -> None:
        with self._lock:
            self.state = with_error(self.state, error.message)
        self.logger.error(f"読み込みエラー: {error.message} {error.details or ''}")
