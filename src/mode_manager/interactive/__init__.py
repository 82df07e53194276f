"""Interactive TUI for mode-manager.

Provides the picker shown when `mode-manager` is run without subcommands
(or with `pick`).
"""

from __future__ import annotations


def interactive_menu(workspace: str | None = None, language: str | None = None) -> bool:
    """Main entry point for the interactive picker.

    Args:
        workspace: Directory whose selection is edited (default: cwd).
        language: Catalog language to start with (default: from config).

    Returns:
        True if the selection was saved.
    """
    from pathlib import Path

    from .. import config
    from ..controller import SelectionController
    from ..sources import FileCatalogSource, WorkspaceSelectionStore, load_initial_selection
    from .picker import run_picker

    cfg = config.load_config()
    languages = config.get_languages(cfg)
    root = Path(workspace).resolve() if workspace else Path.cwd().resolve()

    source = FileCatalogSource(config.get_catalog_dir(cfg), languages)
    controller = SelectionController(
        source,
        sink=WorkspaceSelectionStore(root),
        initial_slugs=load_initial_selection(root),
        locale=source.sanitize(language or config.get_language(cfg)),
        general_markers=config.get_general_markers(cfg),
    )
    controller.request_catalog(controller.locale)
    return run_picker(controller, languages)
