"""Tests for config (YAML + env) and the FlightLogger handler."""

import io
import logging
from pathlib import Path

import pytest

from study_partner.core.config import ConfigLoader, Settings, get_config, reset_config
from study_partner.core.logging import FlightLogger, get_flight_logger, setup_logging

pytestmark = [pytest.mark.fast]


def test_settings_loads_from_yaml(tmp_path):
    """Settings loads correctly from a sample YAML."""
    yaml_path = tmp_path / "study_config.yml"
    yaml_path.write_text("""
gemini_api_key: from-yaml
analyzer: mock
model_name: gemini-test
request_timeout_seconds: 30
api_base_url: http://10.0.0.5:3000/
log_level: DEBUG
""")
    reset_config()
    cfg = get_config(config_path=yaml_path)
    assert cfg.gemini_api_key == "from-yaml"
    assert cfg.analyzer == "mock"
    assert cfg.model_name == "gemini-test"
    assert cfg.request_timeout_seconds == 30
    assert cfg.api_base_url == "http://10.0.0.5:3000"
    assert cfg.log_level == "DEBUG"


def test_explicit_config_path_ignores_env_key(tmp_path, monkeypatch):
    yaml_path = tmp_path / "study_config.yml"
    yaml_path.write_text("gemini_api_key: from-yaml\n")
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    reset_config()
    assert get_config(config_path=yaml_path).gemini_api_key == "from-yaml"


def test_default_config_env_key_overrides_yaml(tmp_path):
    yaml_path = tmp_path / "study_config.yml"
    yaml_path.write_text("gemini_api_key: from-yaml\nmodel_name: m1\n")
    loader = ConfigLoader(env={"STUDY_CONFIG": str(yaml_path), "GEMINI_API_KEY": "from-env"})
    cfg = loader.load_default()
    assert cfg.gemini_api_key == "from-env"
    assert cfg.model_name == "m1"


def test_default_config_without_file_uses_env_key(tmp_path):
    loader = ConfigLoader(env={"STUDY_CONFIG": str(tmp_path / "nope.yml"), "GEMINI_API_KEY": "k"})
    cfg = loader.load_default()
    assert cfg.gemini_api_key == "k"
    assert cfg.request_timeout_seconds == 90.0
    assert cfg.client_timeout_seconds == 120.0


def test_blank_key_becomes_none():
    assert Settings(gemini_api_key="   ").gemini_api_key is None


def test_missing_explicit_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_config(config_path=tmp_path / "absent.yml")


def test_get_config_is_cached():
    reset_config()
    assert get_config() is get_config()


def test_flight_logger_stores_all_levels_in_memory_until_dump(tmp_path):
    """FlightLogger keeps every level in memory and only writes to disk on dump()."""
    forensics_dir = tmp_path / "logs" / "forensics"
    handler = FlightLogger(capacity=100, forensics_dir=forensics_dir)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    try:
        assert forensics_dir.exists() is False

        logging.debug("msg-debug")
        logging.info("msg-info")
        logging.warning("msg-warning")
        logging.error("msg-error")

        assert len(handler) == 4
        path = handler.dump("test-run")
    finally:
        root.removeHandler(handler)

    assert Path(path).exists()
    assert Path(path).name.startswith("test-run_")
    content = Path(path).read_text()
    for msg in ("msg-debug", "msg-info", "msg-warning", "msg-error"):
        assert msg in content


def test_flight_logger_keeps_only_last_capacity_records(tmp_path):
    handler = FlightLogger(capacity=10, forensics_dir=tmp_path)
    handler.setFormatter(logging.Formatter("%(message)s"))
    log = logging.getLogger("flight-cap-test")
    log.propagate = False
    log.addHandler(handler)
    log.setLevel(logging.DEBUG)
    try:
        for i in range(25):
            log.info("line-%d", i)
    finally:
        log.removeHandler(handler)

    assert len(handler) == 10
    lines = Path(handler.dump("cap")).read_text().strip().split("\n")
    assert lines[0] == "line-15"
    assert lines[-1] == "line-24"


def test_setup_logging_console_filters_but_flight_log_keeps_debug(tmp_path, monkeypatch):
    """Console shows only the configured level; the flight log captures DEBUG too."""
    reset_config()
    cfg = get_config()
    monkeypatch.setattr(cfg, "forensics_dir", str(tmp_path))
    stream = io.StringIO()
    monkeypatch.setattr("sys.stderr", stream)
    root = logging.getLogger()
    saved = root.handlers[:]
    try:
        setup_logging("INFO")
        logging.getLogger("study_partner.test").debug("only-in-flight")
        logging.getLogger("study_partner.test").info("in-both")
        flight = get_flight_logger()
        assert flight is not None
        content = Path(flight.dump("routing")).read_text()
    finally:
        for h in root.handlers[:]:
            root.removeHandler(h)
        for h in saved:
            root.addHandler(h)

    assert "only-in-flight" in content
    assert "in-both" in content
    assert "only-in-flight" not in stream.getvalue()
    assert "in-both" in stream.getvalue()
