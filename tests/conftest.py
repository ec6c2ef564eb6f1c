"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from autoformat.config import Settings
from autoformat.core.app_factory import create_app
from autoformat.models.account import Account
from autoformat.state_managers import TemplateEngineManager
from autoformat.views.template_renderer import TemplateRenderer, build_template_engine

BASE_TEMPLATE = """<!DOCTYPE html>
<html><body>
{% if account %}<span class="account">{{ account.username }}</span>{% else %}<span class="account">anonymous</span>{% endif %}
{% block content %}{% endblock %}
</body></html>
"""

TEMPLATES = {
    "base.html.jinja": BASE_TEMPLATE,
    "pages/item.html.jinja": (
        '{% extends "base.html.jinja" %}{% block content %}<h1>{{ object.name }}</h1>'
        "<p>{{ object.note }}</p>{% endblock %}"
    ),
    "pages/context.html.jinja": (
        "dev={{ dev }};account={{ account.username if account else 'none' }};name={{ object.name }}"
    ),
    "pages/languages.html.jinja": "{{ languages() | join(',') }}",
    "pages/languages_with_args.html.jinja": "{{ languages('en') }}",
    "pages/markdown.html.jinja": "{{ object.body | markdown }}",
    "pages/missing_var.html.jinja": "{{ object.name }} {{ does_not_exist }}",
    "feeds/item.txt.jinja": "{{ object.note }}",
    "feeds/item.xml.jinja": "<item>{{ object.note }}</item>",
    "pages/modules.html.jinja": '{{ modules("src/main.ts") }}',
}


def write_templates(root: Path, templates: dict[str, str]) -> Path:
    """Write `templates` (relative path -> source) under root and return root."""
    for relative, source in templates.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
    return root


@pytest.fixture
def templates_dir(tmp_path):
    """Template root populated with the standard test templates."""
    return write_templates(tmp_path / "templates", TEMPLATES)


@pytest.fixture
def test_settings(templates_dir, tmp_path):
    """Settings pointing at the test templates and a missing asset manifest."""
    return Settings(
        templates_dir=templates_dir,
        assets_manifest=tmp_path / "dist" / "manifest.json",
        languages=["en", "de", "fr"],
        api_accounts={"secret-key": "alice"},
    )


@pytest.fixture
def engine_manager(test_settings):
    """Fresh engine manager (not the process-wide one) for the test settings."""
    return TemplateEngineManager(lambda: build_template_engine(test_settings))


@pytest.fixture
def renderer(engine_manager):
    """TemplateRenderer bound to the test engine manager."""
    return TemplateRenderer(engine_manager)


@pytest.fixture
def alice():
    """A resolved account."""
    return Account(id="alice", username="alice", display_name="Alice")


@pytest.fixture
def app_settings(tmp_path):
    """Settings using the repository's real templates."""
    return Settings(
        assets_manifest=tmp_path / "dist" / "manifest.json",
        api_accounts={"secret-key": "alice"},
    )


@pytest.fixture
def test_client(app_settings):
    """FastAPI test client with lifespan context."""
    with TestClient(create_app(app_settings)) as client:
        yield client
