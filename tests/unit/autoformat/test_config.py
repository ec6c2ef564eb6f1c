"""Unit tests for configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from autoformat.config import BASE_DIR, DEFAULT_AUTOESCAPE_EXTENSIONS, Settings, get_settings


def test_settings_defaults():
    """Settings work without any environment configuration."""
    settings = Settings()

    assert settings.api_host == "127.0.0.1"
    assert settings.api_port == 8000
    assert settings.dev is False
    assert settings.templates_dir == BASE_DIR / "templates"
    assert settings.template_glob == "**/*.jinja"
    assert settings.autoescape_extensions == DEFAULT_AUTOESCAPE_EXTENSIONS
    assert "en" in settings.languages


def test_settings_from_environment(monkeypatch, tmp_path):
    """Environment variables override defaults, case-insensitively."""
    monkeypatch.setenv("DEV", "true")
    monkeypatch.setenv("TEMPLATES_DIR", str(tmp_path))
    monkeypatch.setenv("LANGUAGES", '["en", "nl"]')
    monkeypatch.setenv("API_ACCOUNTS", '{"k1": "alice"}')

    settings = Settings()

    assert settings.dev is True
    assert settings.templates_dir == Path(tmp_path)
    assert settings.languages == ["en", "nl"]
    assert settings.api_accounts == {"k1": "alice"}


def test_autoescape_extensions_normalized():
    settings = Settings(autoescape_extensions=[" .HTML ", ".svg.jinja"])

    assert settings.autoescape_extensions == [".html", ".svg.jinja"]


@pytest.mark.parametrize("extensions", [["html"], ["."]])
def test_autoescape_extensions_need_leading_dot(extensions):
    with pytest.raises(ValidationError):
        Settings(autoescape_extensions=extensions)


def test_empty_template_glob_rejected():
    with pytest.raises(ValidationError):
        Settings(template_glob="   ")


def test_empty_languages_rejected():
    with pytest.raises(ValidationError):
        Settings(languages=[])


def test_assets_base_url_gets_trailing_slash():
    assert Settings(assets_base_url="/assets").assets_base_url == "/assets/"


def test_vite_dev_server_must_be_http():
    with pytest.raises(ValidationError):
        Settings(vite_dev_server="localhost:5173")


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
