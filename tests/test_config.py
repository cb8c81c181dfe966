import logging

import pytest
from pydantic import ValidationError

import config
from models import SeqSettings


class TestSettings:
    """Test settings defaults, validation and overrides"""

    def test_defaults(self):
        settings = config.get_settings()
        assert settings.max_size == 10_000
        assert settings.log_level == "WARNING"

    def test_settings_are_cached(self):
        assert config.get_settings() is config.get_settings()

    def test_log_level_is_normalised(self):
        assert SeqSettings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("overrides", [
        {"max_size": 0},
        {"max_size": -10},
        {"log_level": "LOUD"},
        {"unknown": 1},
    ])
    def test_invalid_settings_rejected(self, overrides):
        with pytest.raises(ValidationError):
            SeqSettings(**overrides)

    def test_load_from_mapping(self):
        settings = config.load_settings({"LAZYSEQ_MAX_SIZE": "25", "LAZYSEQ_LOG_LEVEL": "info"})
        assert settings.max_size == 25
        assert settings.log_level == "INFO"

    def test_load_from_environment(self, monkeypatch):
        monkeypatch.setenv("LAZYSEQ_MAX_SIZE", "7")
        assert config.get_settings().max_size == 7

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv("LAZYSEQ_MAX_SIZE", "many")
        with pytest.raises(ValidationError):
            config.get_settings()

    def test_configure_merges_overrides(self):
        config.configure(max_size=50)
        settings = config.configure(log_level="ERROR")
        assert settings.max_size == 50
        assert settings.log_level == "ERROR"
        assert config.get_settings() is settings

    def test_configure_rejects_invalid_values(self):
        with pytest.raises(ValidationError):
            config.configure(max_size=0)
        assert config.get_settings().max_size == 10_000

    def test_reset_settings(self):
        config.configure(max_size=5)
        config.reset_settings()
        assert config.get_settings().max_size == 10_000


class TestLogLevel:
    """Test that settings drive the library loggers"""

    def test_configure_applies_level(self):
        config.configure(log_level="DEBUG")
        for name in config.LIBRARY_LOGGERS:
            assert logging.getLogger(name).level == logging.DEBUG
        config.configure(log_level="WARNING")
        assert logging.getLogger("seq").level == logging.WARNING

    def test_configure_logs_update(self, caplog):
        caplog.set_level(logging.INFO)
        config.configure(log_level="INFO", max_size=12)
        assert "Settings updated" in caplog.text
        assert "'max_size': 12" in caplog.text

    def test_library_loggers_match_module_names(self):
        import seq
        import utils
        assert {seq.logger.name, config.logger.name, utils.logger.name} == set(config.LIBRARY_LOGGERS)
