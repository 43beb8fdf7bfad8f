from pathlib import Path

import pytest

from firstrade_tax.app.config import ConfigManager
from firstrade_tax.core.error import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FTAX_DEBUG", "FTAX_USE_COLOR", "FTAX_INPUT_FILES", "FTAX_RATE_PROVIDER"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_file_missing(tmp_path):
    config = ConfigManager(tmp_path / "missing.yaml")

    assert not config.debug
    assert config.use_color
    assert config.input_files == []
    assert config.output_dir == Path("output")
    assert config.exchange_config['provider'] == 'frankfurter'
    assert config.logging_config['console_level'] == 'WARNING'


def test_load_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "debug: true\n"
        "use_color: false\n"
        "input_files: [a.csv, b.csv]\n"
        "output_dir: out\n"
        "exchange:\n"
        "  provider: csv\n"
        "  rates_file: rates.csv\n"
        "  unknown_key: ignored\n"
        "logging:\n"
        "  console_level: ERROR\n",
        encoding="utf-8",
    )
    config = ConfigManager(path)

    assert config.debug
    assert not config.use_color
    assert config.input_files == [Path("a.csv"), Path("b.csv")]
    assert config.output_dir == Path("out")
    assert config.exchange_config['provider'] == 'csv'
    assert config.exchange_config['rates_file'] == 'rates.csv'
    assert 'unknown_key' not in config.exchange_config
    assert config.logging_config['console_level'] == 'ERROR'
    assert config.logging_config['file_level'] == 'DEBUG'


def test_malformed_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("debug: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigManager(path)


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("FTAX_DEBUG", "yes")
    monkeypatch.setenv("FTAX_USE_COLOR", "0")
    monkeypatch.setenv("FTAX_INPUT_FILES", "x.csv,y.csv")
    monkeypatch.setenv("FTAX_RATE_PROVIDER", "CSV")

    config = ConfigManager()

    assert config.debug
    assert not config.use_color
    assert config.input_files == [Path("x.csv"), Path("y.csv")]
    assert config.exchange_config['provider'] == 'csv'


def test_rates_file_override_switches_provider():
    config = ConfigManager()
    config.override(output_dir="reports", rates_file="HistoricalPrices.csv")

    assert config.output_dir == Path("reports")
    assert config.exchange_config['provider'] == 'csv'
    assert config.exchange_config['rates_file'] == 'HistoricalPrices.csv'


def test_create_logging_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(f"logging:\n  log_dir: {tmp_path / 'logs'}\n", encoding="utf-8")

    logging_config = ConfigManager(path).create_logging_config()

    assert (tmp_path / "logs").is_dir()
    assert logging_config['handlers']['console']['level'] == 'WARNING'
    assert logging_config['handlers']['file']['filename'] == str(tmp_path / "logs" / "processing.log")
