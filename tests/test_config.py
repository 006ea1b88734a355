from pathlib import Path

import pytest

from casecoach.config import DEFAULT_API_URL, DEFAULT_MODEL, Settings


def test_defaults_when_environment_empty() -> None:
    settings = Settings.from_env({})
    assert settings.data_dir == Path(".casecoach")
    assert settings.catalog_path is None
    assert settings.api_url == DEFAULT_API_URL
    assert settings.model == DEFAULT_MODEL
    assert settings.temperature == 0.8
    assert settings.timeout_seconds == 60.0
    assert settings.log_level == "INFO"
    assert settings.db_path == Path(".casecoach") / "casecoach.db"
    assert settings.log_path == Path(".casecoach") / "casecoach.log"


def test_environment_values() -> None:
    settings = Settings.from_env(
        {
            "CASECOACH_HOME": "/data/coach",
            "CASECOACH_CATALOG": "frameworks.json",
            "CASECOACH_API_URL": "https://api.example.test/v1/chat/completions",
            "CASECOACH_MODEL": "gpt-4",
            "CASECOACH_TEMPERATURE": "0.2",
            "CASECOACH_TIMEOUT": "5",
            "CASECOACH_LOG_LEVEL": "debug",
        }
    )
    assert settings.data_dir == Path("/data/coach")
    assert settings.catalog_path == Path("frameworks.json")
    assert settings.model == "gpt-4"
    assert settings.temperature == 0.2
    assert settings.timeout_seconds == 5.0
    assert settings.log_level == "DEBUG"


def test_invalid_number_names_variable() -> None:
    with pytest.raises(ValueError, match="CASECOACH_TIMEOUT"):
        Settings.from_env({"CASECOACH_TIMEOUT": "soon"})
    with pytest.raises(ValueError, match="CASECOACH_TEMPERATURE"):
        Settings.from_env({"CASECOACH_TEMPERATURE": "-1"})


def test_overrides_replace_only_given_values() -> None:
    base = Settings.from_env({"CASECOACH_MODEL": "m"})
    updated = base.with_overrides(data_dir="elsewhere", log_level="warning")
    assert updated.data_dir == Path("elsewhere")
    assert updated.log_level == "WARNING"
    assert updated.model == "m"
    assert updated.catalog_path is None
    assert base.with_overrides() == base
