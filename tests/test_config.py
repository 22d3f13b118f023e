"""
Test 5: Config system (config.py)

Tests CaptureConfig defaults, validation and layered loading.
"""

import json

import pytest

from faultforward.config import (
    DEFAULT_CAPTURE_LIMIT,
    CaptureConfig,
    ConfigError,
    _parse_value,
    get_config,
    set_config,
)


class TestCaptureConfig:

    def test_defaults(self):
        cfg = CaptureConfig()
        assert cfg.capture_limit == DEFAULT_CAPTURE_LIMIT == 65536
        assert cfg.all_units is True
        assert cfg.include_tasks is True

    def test_rejects_non_positive_limit(self):
        with pytest.raises(ConfigError):
            CaptureConfig(capture_limit=0)

    def test_rejects_wrong_types(self):
        with pytest.raises(ConfigError):
            CaptureConfig(capture_limit="big")
        with pytest.raises(ConfigError):
            CaptureConfig(capture_limit=True)
        with pytest.raises(ConfigError):
            CaptureConfig(all_units="yes")

    def test_frozen(self):
        cfg = CaptureConfig()
        with pytest.raises(AttributeError):
            cfg.capture_limit = 10

    def test_with_overrides(self):
        cfg = CaptureConfig().with_overrides(all_units=False)
        assert cfg.all_units is False
        assert cfg.capture_limit == DEFAULT_CAPTURE_LIMIT


class TestConfigLoading:

    def test_load_defaults(self):
        assert CaptureConfig.load() == CaptureConfig()

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "capture.yaml"
        path.write_text("capture_limit: 4096\ninclude_tasks: false\n")
        cfg = CaptureConfig.load(str(path))
        assert cfg.capture_limit == 4096
        assert cfg.include_tasks is False

    def test_load_json(self, tmp_path):
        path = tmp_path / "capture.json"
        path.write_text(json.dumps({"all_units": False}))
        assert CaptureConfig.load(str(path)).all_units is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            CaptureConfig.load(str(tmp_path / "absent.yaml"))

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "capture.yaml"
        path.write_text("capture_limit: 4096\n")
        monkeypatch.setenv("FF_CAPTURE_LIMIT", "1024")
        monkeypatch.setenv("FF_ALL_UNITS", "false")
        cfg = CaptureConfig.load(str(path))
        assert cfg.capture_limit == 1024
        assert cfg.all_units is False

    def test_env_integer_one(self, monkeypatch):
        monkeypatch.setenv("FF_CAPTURE_LIMIT", "1")
        assert CaptureConfig.load().capture_limit == 1

    def test_env_bad_integer(self, monkeypatch):
        monkeypatch.setenv("FF_CAPTURE_LIMIT", "lots")
        with pytest.raises(ConfigError):
            CaptureConfig.load()

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("FF_CAPTURE_LIMIT", "1024")
        cfg = CaptureConfig.load(overrides={"capture_limit": 2048})
        assert cfg.capture_limit == 2048

    def test_unknown_setting(self):
        with pytest.raises(ConfigError, match="Unknown"):
            CaptureConfig.load(overrides={"buffer": 1})

    def test_parse_value(self):
        assert _parse_value("yes") is True
        assert _parse_value("no") is False
        assert _parse_value("12") == 12
        assert _parse_value("1.5") == 1.5
        assert _parse_value('{"a": 1}') == {"a": 1}
        assert _parse_value("plain") == "plain"


class TestDefaultConfig:

    def test_get_config_reads_env(self, monkeypatch):
        monkeypatch.setenv("FF_INCLUDE_TASKS", "false")
        assert get_config().include_tasks is False

    def test_get_config_cached(self):
        assert get_config() is get_config()

    def test_set_config(self):
        cfg = CaptureConfig(capture_limit=128)
        set_config(cfg)
        assert get_config() is cfg
