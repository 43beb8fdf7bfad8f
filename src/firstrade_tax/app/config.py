import os
from pathlib import Path
from typing import Dict, Any, Optional, Union, List
import yaml
import logging
from dataclasses import dataclass, field

from ..config.settings import (
    EXCHANGE_RATE_FILE, FRANKFURTER_BASE_URL, LOG_FORMAT, RATE_REQUEST_TIMEOUT,
)
from ..core.error import ConfigurationError

TRUE_VALUES = ('true', '1', 'yes')


@dataclass
class ConfigOptions:
    """設定オプションのデフォルト値を管理"""
    debug: bool = False
    use_color: bool = True

    # 入力ファイル設定
    input_files: List[str] = field(default_factory=list)

    # 出力先
    output_dir: str = 'output'

    # 為替レート設定
    exchange: Dict[str, Any] = field(default_factory=lambda: {
        'provider': 'frankfurter',
        'base_url': FRANKFURTER_BASE_URL,
        'timeout': RATE_REQUEST_TIMEOUT,
        'rates_file': str(EXCHANGE_RATE_FILE),
    })

    # ロギング設定
    logging_config: Dict[str, str] = field(default_factory=lambda: {
        'console_level': 'WARNING',
        'file_level': 'DEBUG',
        'log_dir': 'output/logs',
        'log_file': 'processing.log',
        'log_format': LOG_FORMAT,
    })


class ConfigManager:
    """設定管理クラス"""

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        env_prefix: str = 'FTAX_'
    ):
        """
        設定マネージャを初期化

        Args:
            config_path: 設定ファイルのパス
            env_prefix: 環境変数の接頭辞
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.env_prefix = env_prefix

        # デフォルトの設定
        self._config_options = ConfigOptions()

        # 設定ファイルのロード
        if config_path:
            self._load_config_file(config_path)

        # 環境変数での上書き
        self._override_from_env()

    def _load_config_file(self, config_path: Union[str, Path]) -> None:
        """
        設定ファイルから設定をロード

        Args:
            config_path: 設定ファイルのパス

        Raises:
            ConfigurationError: ファイルの読み込みまたは解析に失敗した場合
        """
        path = Path(config_path)
        if not path.exists():
            self.logger.warning(f"設定ファイルが見つかりません: {path}")
            return

        try:
            with path.open('r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"設定ファイルの読み込み中にエラー: {e}")
            raise ConfigurationError(f"設定ファイルの読み込みに失敗: {e}", {'path': str(path)}) from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"設定ファイルの形式が不正です: {path}", {'path': str(path)})

        self._merge_config(file_config)

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """
        ファイルからの設定とデフォルト設定をマージ

        Args:
            file_config: ファイルから読み込んだ設定
        """
        # デバッグと色設定
        if 'debug' in file_config:
            self._config_options.debug = bool(file_config['debug'])
        if 'use_color' in file_config:
            self._config_options.use_color = bool(file_config['use_color'])

        # 入力ファイル
        if 'input_files' in file_config:
            self._config_options.input_files = list(file_config['input_files'] or [])

        if 'output_dir' in file_config:
            self._config_options.output_dir = str(file_config['output_dir'])

        # 為替レート
        if 'exchange' in file_config:
            self._config_options.exchange.update({
                k: v for k, v in (file_config['exchange'] or {}).items()
                if k in self._config_options.exchange
            })

        # ロギング設定
        if 'logging' in file_config:
            self._config_options.logging_config.update({
                k: v for k, v in (file_config['logging'] or {}).items()
                if k in self._config_options.logging_config
            })

    def _override_from_env(self) -> None:
        """
        環境変数による設定の上書き
        """
        debug_env = os.getenv(f'{self.env_prefix}DEBUG')
        if debug_env is not None:
            self._config_options.debug = debug_env.lower() in TRUE_VALUES

        color_env = os.getenv(f'{self.env_prefix}USE_COLOR')
        if color_env is not None:
            self._config_options.use_color = color_env.lower() in TRUE_VALUES

        input_files_env = os.getenv(f'{self.env_prefix}INPUT_FILES')
        if input_files_env:
            self._config_options.input_files = [p for p in input_files_env.split(',') if p]

        provider_env = os.getenv(f'{self.env_prefix}RATE_PROVIDER')
        if provider_env:
            self._config_options.exchange['provider'] = provider_env.lower()

    def override(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        rates_file: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        コマンドライン引数による設定の上書き

        rates_fileを指定した場合はCSVプロバイダーに切り替えます。
        """
        if output_dir:
            self._config_options.output_dir = str(output_dir)
        if rates_file:
            self._config_options.exchange['rates_file'] = str(rates_file)
            self._config_options.exchange['provider'] = 'csv'

    @property
    def debug(self) -> bool:
        """デバッグモードのプロパティ"""
        return self._config_options.debug

    @property
    def use_color(self) -> bool:
        """カラー出力のプロパティ"""
        return self._config_options.use_color

    @property
    def input_files(self) -> List[Path]:
        """入力CSVファイルのリスト"""
        return [Path(p) for p in self._config_options.input_files]

    @property
    def output_dir(self) -> Path:
        return Path(self._config_options.output_dir)

    @property
    def exchange_config(self) -> Dict[str, Any]:
        """為替設定"""
        return dict(self._config_options.exchange)

    @property
    def logging_config(self) -> Dict[str, str]:
        """ロギング設定"""
        return dict(self._config_options.logging_config)

    def create_logging_config(self) -> Dict[str, Any]:
        """
        ロギング設定を生成

        ログディレクトリが存在しない場合は作成します。
        デバッグモードではコンソールにもDEBUGログを出力します。

        Returns:
            ロギング設定の辞書
        """
        config = self.logging_config
        log_dir = Path(config['log_dir'])
        log_dir.mkdir(parents=True, exist_ok=True)

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'detailed': {
                    'format': config['log_format']
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'detailed',
                    'level': 'DEBUG' if self.debug else config['console_level']
                },
                'file': {
                    'class': 'logging.FileHandler',
                    'filename': str(log_dir / config['log_file']),
                    'formatter': 'detailed',
                    'level': config['file_level'],
                    'encoding': 'utf-8'
                }
            },
            'root': {
                'handlers': ['console', 'file'],
                'level': 'DEBUG'
            }
        }
