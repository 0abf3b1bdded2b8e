from __future__ import annotations

from pathlib import Path

import pytest

from escalator.config import Settings, require_api_key
from escalator.errors import MissingCredentialError

_ENV_VARS = (
    "OPENAI_MODEL",
    "ESCALATOR_SUMMARY_PATH",
    "ESCALATOR_HOST",
    "ESCALATOR_PORT",
    "ESCALATOR_LOG_FILE",
    "ESCALATOR_TIMEOUT_SECONDS",
    "ESCALATOR_QUIET",
)


@pytest.fixture()
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.model == "gpt-4o"
    assert settings.summary_path == Path("./README.md")
    assert (settings.host, settings.port) == ("127.0.0.1", 9001)
    assert settings.log_file == Path("/tmp/escalator.log")
    assert settings.timeout_seconds == 180.0
    assert settings.quiet is False


def test_environment_overrides(clean_env):
    clean_env.setenv("OPENAI_MODEL", "o3")
    clean_env.setenv("ESCALATOR_SUMMARY_PATH", "docs/summary.md")
    clean_env.setenv("ESCALATOR_PORT", "9100")
    clean_env.setenv("ESCALATOR_TIMEOUT_SECONDS", "240")
    clean_env.setenv("ESCALATOR_QUIET", "true")

    settings = Settings.from_env()
    assert settings.model == "o3"
    assert settings.summary_path == Path("docs/summary.md")
    assert settings.port == 9100
    assert settings.timeout_seconds == 240.0
    assert settings.quiet is True


def test_require_api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert require_api_key() == "sk-test"


@pytest.mark.parametrize("value", [None, "", "   "])
def test_require_api_key_missing(monkeypatch, value):
    if value is None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    else:
        monkeypatch.setenv("OPENAI_API_KEY", value)
    with pytest.raises(MissingCredentialError, match="OPENAI_API_KEY"):
        require_api_key()
