import sys
import logging
import logging.config
from pathlib import Path
import argparse
from datetime import datetime
from typing import List, NoReturn, Optional

from .app.config import ConfigManager
from .app.loader import ComponentLoader
from .app.reporter import TaxReporter
from .app.session import Session
from .core.error import AssistantError
from .exchange.provider import create_rate_provider


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    コマンドライン引数をパース

    Returns:
        argparse.Namespace: パースされた引数
    """
    parser = argparse.ArgumentParser(
        prog="firstrade-tax",
        description="Firstradeの取引CSVを円換算し、確定申告用の集計を出力します",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Gain/Loss CSV または取引履歴CSV（省略時は設定ファイルのinput_files）",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="設定ファイルのパス",
    )
    parser.add_argument(
        "--year",
        type=int,
        help="対象年（省略時は取引のある最新の年）",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="出力先ディレクトリ",
    )
    parser.add_argument(
        "--rates-file",
        type=Path,
        help="為替レートCSV（指定するとAPIの代わりに使用）",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="CSVと取引報告書を出力せず、サマリーのみ表示",
    )
    return parser.parse_args(argv)


def handle_keyboard_interrupt() -> NoReturn:
    """
    キーボード割り込みの処理

    Returns:
        NoReturn: プログラムを終了
    """
    logging.warning("ユーザーにより処理が中断されました")
    sys.exit(130)


def handle_unexpected_error(e: Exception) -> NoReturn:
    """
    予期せぬエラーの処理

    Args:
        e: 発生した例外

    Returns:
        NoReturn: プログラムを終了
    """
    logging.exception(f"予期せぬエラーが発生しました: {e}")
    sys.exit(1)


def run(args: argparse.Namespace, config: ConfigManager) -> int:
    """
    ファイル読み込みから出力までを実行

    Returns:
        int: 終了コード
    """
    logger = logging.getLogger(__name__)

    files = args.files or config.input_files
    if not files:
        logger.error("処理対象のCSVファイルが指定されていません")
        return 1

    logger.info(f"処理対象ファイル数: {len(files)}")
    provider = create_rate_provider(config.exchange_config)

    with Session(provider) as session:
        for path in files:
            if not session.load_file(path):
                print(f"{path}: {session.error_message}", file=sys.stderr)

        if not session.state.has_raw_data:
            logger.error("有効な取引データが読み込めませんでした")
            return 1

        if not session.fetch_rates():
            print(f"為替レートエラー: {session.error_message}", file=sys.stderr)
            return 1

        if session.error_message:
            print(f"為替レートエラー: {session.error_message}", file=sys.stderr)

        if args.year:
            session.select_year(args.year)

        summary = session.state.year_summary()
        year = summary.year
        logger.info(f"対象年: {year} (選択可能: {session.state.available_years()})")

    writers = ComponentLoader(config.output_dir, config.use_color).create_writers(year)
    if not TaxReporter(writers).generate_reports(summary, export=not args.no_export):
        logger.error("出力に失敗しました")
        return 1

    if summary.is_empty:
        logger.warning(f"{year}年の取引はありません")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    メインエントリーポイント

    Returns:
        int: 終了コード
    """
    start_time = datetime.now()
    args = parse_arguments(argv)

    try:
        # 設定の初期化
        config = ConfigManager(args.config)
        config.override(output_dir=args.output_dir, rates_file=args.rates_file)
        logging.config.dictConfig(config.create_logging_config())
        logger = logging.getLogger(__name__)
        logger.info("取引データの処理を開始...")

        exit_code = run(args, config)

        execution_time = datetime.now() - start_time
        logger.info(f"処理が完了しました (所要時間: {execution_time})")
        return exit_code

    except KeyboardInterrupt:
        return handle_keyboard_interrupt()
    except AssistantError as e:
        logging.error(str(e))
        return 1
    except Exception as e:
        return handle_unexpected_error(e)


if __name__ == "__main__":
    sys.exit(main())
