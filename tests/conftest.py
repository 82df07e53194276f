"""Pytest fixtures for mode-manager tests."""

import pytest

from mode_manager import config

SAMPLE_CATALOG = """\
# 1. General-purpose modes
## 1.1 Core
Modes every project needs.
- 🧭 Navigator (navigator)
- Scout (scout)
- ⚙️ Builder (builder)

## 1.2 Empty group

# 2. Framework stacks
Stacks grouped by framework.
## 2.1 React & Next.js
- ⚛️ React Specialist (react-specialist)
- Next.js Developer (nextjs-developer)
## 2.2 Python
- 🐍 Django Developer (django-developer)
"""

SAMPLE_CATALOG_RU = """\
# 1. Режимы общего назначения
## 1.1 Ядро
- 🧭 Навигатор (navigator)
- Разведчик (scout)

# 2. Стеки фреймворков
## 2.1 React
- ⚛️ React специалист (react-specialist)
"""


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point the global config at a temp directory."""
    cfg_dir = tmp_path / "mode-manager"
    cfg_dir.mkdir()
    monkeypatch.setattr(config, "get_config_dir", lambda: cfg_dir)
    return cfg_dir


@pytest.fixture
def catalog_dir(tmp_path):
    """A catalog directory with English and Russian documents."""
    directory = tmp_path / "catalogs"
    directory.mkdir()
    (directory / "stacks_by_framework_en.md").write_text(SAMPLE_CATALOG, encoding="utf-8")
    (directory / "stacks_by_framework_ru.md").write_text(SAMPLE_CATALOG_RU, encoding="utf-8")
    return directory


@pytest.fixture
def workspace(tmp_path):
    """An empty workspace directory."""
    ws = tmp_path / "project"
    ws.mkdir()
    return ws


class FakeCatalogSource:
    """In-memory catalog source keyed by locale."""

    def __init__(self, documents=None, failures=None):
        self.documents = dict(documents or {})
        self.failures = dict(failures or {})
        self.requests = []

    def fetch(self, locale):
        from mode_manager.sources import CatalogLoadError

        self.requests.append(locale)
        if locale in self.failures:
            raise CatalogLoadError(self.failures[locale])
        return self.documents.get(locale, "")


class RecordingSink:
    """Selection sink that records every commit."""

    def __init__(self):
        self.commits = []

    def apply(self, items):
        self.commits.append(list(items))


@pytest.fixture
def fake_source():
    return FakeCatalogSource({"en": SAMPLE_CATALOG, "ru": SAMPLE_CATALOG_RU})


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_source():
    """Factory for in-memory catalog sources."""
    return FakeCatalogSource


@pytest.fixture
def sample_catalog():
    """English catalog document."""
    return SAMPLE_CATALOG


@pytest.fixture
def sample_catalog_ru():
    """Russian catalog document with a subset of the English slugs."""
    return SAMPLE_CATALOG_RU
