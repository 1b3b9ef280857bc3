from pathlib import Path

from pdf_compress_api.config import RuntimeConfig, load_runtime_config

ENV_VARS = (
    "UPLOAD_FOLDER",
    "OUTPUT_FOLDER",
    "MAX_FILE_SIZE_MB",
    "GS_COMPRESSION_PRESET",
    "GS_TIMEOUT_SECONDS",
    "GS_COMMAND",
    "CLEANUP_INTERVAL_SECONDS",
    "FILE_MAX_AGE_SECONDS",
    "RATE_LIMIT_MAX_REQUESTS",
    "APP_ENV",
)


def _clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear_env(monkeypatch)
    config = load_runtime_config()

    assert config.default_preset == "recommended"
    assert config.gs_timeout_seconds == 120.0
    assert config.cleanup_interval_seconds == 120.0
    assert config.file_max_age_seconds == 300.0
    assert config.max_content_length == 40 * 1024 * 1024
    assert config.rate_limit_max_requests == 5
    assert config.gs_command is None
    assert config.is_development


def test_environment_overrides(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    monkeypatch.setenv("UPLOAD_FOLDER", str(tmp_path / "in"))
    monkeypatch.setenv("OUTPUT_FOLDER", str(tmp_path / "out"))
    monkeypatch.setenv("MAX_FILE_SIZE_MB", "10")
    monkeypatch.setenv("GS_COMPRESSION_PRESET", "STRONG")
    monkeypatch.setenv("GS_TIMEOUT_SECONDS", "30")
    monkeypatch.setenv("GS_COMMAND", "gswin64c")
    monkeypatch.setenv("APP_ENV", "production")

    config = load_runtime_config()

    assert config.upload_folder == Path(tmp_path / "in")
    assert config.output_folder == Path(tmp_path / "out")
    assert config.max_content_length == 10 * 1024 * 1024
    assert config.default_preset == "strong"
    assert config.gs_timeout_seconds == 30.0
    assert config.gs_command == "gswin64c"
    assert not config.is_development


def test_invalid_values_fall_back(monkeypatch, caplog):
    _clear_env(monkeypatch)
    monkeypatch.setenv("GS_COMPRESSION_PRESET", "maximum")
    monkeypatch.setenv("GS_TIMEOUT_SECONDS", "soon")
    monkeypatch.setenv("CLEANUP_INTERVAL_SECONDS", "-5")
    monkeypatch.setenv("APP_ENV", "staging")

    config = load_runtime_config()

    assert config.default_preset == "recommended"
    assert config.gs_timeout_seconds == 120.0
    assert config.cleanup_interval_seconds == 120.0
    assert config.app_env == "development"
    assert "[settings]" in caplog.text


def test_sweep_age_always_outlives_a_job():
    config = RuntimeConfig(gs_timeout_seconds=600, file_max_age_seconds=300)
    assert config.effective_file_max_age_seconds == 1200

    relaxed = RuntimeConfig(gs_timeout_seconds=60, file_max_age_seconds=300)
    assert relaxed.effective_file_max_age_seconds == 300
