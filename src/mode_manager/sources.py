"""Collaborators around the selection core.

- CatalogSource: supplies catalog text for a locale.
- PersistedSelectionSource: supplies the initial ordered slug list.
- SelectionSink: receives the ordered selection on commit.

File-backed implementations live here; the controller only depends on the
protocols.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Protocol, Sequence

import yaml

from . import config
from .types import CommitItem

logger = logging.getLogger(__name__)

CATALOG_FILE_TEMPLATE = "stacks_by_framework_{lang}.md"
ROOMODES_FILE = ".roomodes"


class CatalogLoadError(Exception):
    """Raised when catalog text cannot be obtained for a locale."""


class CatalogSource(Protocol):
    def fetch(self, locale: str) -> str: ...


class PersistedSelectionSource(Protocol):
    def load(self) -> list[str]: ...


class SelectionSink(Protocol):
    def apply(self, items: Sequence[CommitItem]) -> None: ...


def slugs_from_ordered_items(items: Iterable[Any]) -> list[str]:
    """Turn ``[{slug, order}, ...]`` records into slugs sorted by order.

    Records without a string slug are skipped; records without an integer
    order keep their relative position after the ordered ones.
    """
    ordered: list[tuple[int, int, str]] = []
    for position, item in enumerate(items):
        if not isinstance(item, dict) or not isinstance(item.get("slug"), str):
            continue
        order = item.get("order")
        if not isinstance(order, int) or isinstance(order, bool):
            order = 1 << 30
        ordered.append((order, position, item["slug"]))
    ordered.sort()
    return [slug for _, _, slug in ordered]


class FileCatalogSource:
    """Reads stacks_by_framework_<lang>.md from a catalog directory."""

    def __init__(self, catalog_dir: Path, languages: Sequence[str] | None = None):
        self.catalog_dir = catalog_dir
        self.languages = list(languages) if languages else list(config.DEFAULT_CONFIG["languages"])

    def sanitize(self, locale: str) -> str:
        """Map an unknown locale to the fallback (first) language."""
        return locale if locale in self.languages else self.languages[0]

    def path_for(self, locale: str) -> Path:
        return self.catalog_dir / CATALOG_FILE_TEMPLATE.format(lang=self.sanitize(locale))

    def fetch(self, locale: str) -> str:
        path = self.path_for(locale)
        if not path.exists():
            logger.error("Catalog file %s not found", path)
            raise CatalogLoadError(f"Failed to load stacks list ({path.name} not found).")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading catalog %s: %s", path, e)
            raise CatalogLoadError(f"Error reading stacks file for language {locale}.") from e


class RoomodesSelectionSource:
    """Initial selection from a workspace ``.roomodes`` file.

    Order of the ``customModes`` array defines the selection order.
    """

    def __init__(self, workspace: Path):
        self.path = workspace / ROOMODES_FILE

    def load(self) -> list[str]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Error reading or parsing %s: %s", self.path, e)
            return []
        if not isinstance(data, dict) or not isinstance(data.get("customModes"), list):
            return []
        slugs = [
            mode["slug"]
            for mode in data["customModes"]
            if isinstance(mode, dict) and isinstance(mode.get("slug"), str)
        ]
        logger.debug("Loaded %d mode(s) with order from %s", len(slugs), self.path)
        return slugs


class WorkspaceSelectionStore:
    """YAML-persisted ordered selection for a workspace.

    Serves as both the persisted-selection source and the commit sink.
    """

    def __init__(self, workspace: Path):
        self.workspace = workspace

    @property
    def path(self) -> Path:
        return config.get_selection_path(self.workspace)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> list[str]:
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            return []
        except (yaml.YAMLError, OSError) as e:
            logger.error("Error reading %s: %s", self.path, e)
            return []
        if not isinstance(data, dict) or not isinstance(data.get("modes"), list):
            return []
        return slugs_from_ordered_items(data["modes"])

    def apply(self, items: Sequence[CommitItem]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.dump(
                {"modes": [item.to_dict() for item in items]},
                f,
                default_flow_style=False,
                sort_keys=False,
            )
        logger.debug("Saved %d selected mode(s) to %s", len(items), self.path)


def load_initial_selection(workspace: Path) -> list[str]:
    """Persisted YAML selection when present, else the ``.roomodes`` order."""
    store = WorkspaceSelectionStore(workspace)
    if store.exists():
        return store.load()
    return RoomodesSelectionSource(workspace).load()
