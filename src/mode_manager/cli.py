"""CLI interface for mode-manager."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__

_console = None


def _print(msg: object = "") -> None:
    """Print with Rich markup support."""
    global _console
    if _console is None:
        from rich.console import Console
        _console = Console(highlight=False)
    _console.print(msg)


def _workspace(args) -> Path:
    return Path(args.dir).resolve() if getattr(args, "dir", None) else Path.cwd().resolve()


def _render_catalog(view, title: str):
    """Build a rich Tree for a selection view."""
    from rich.markup import escape
    from rich.tree import Tree

    from .interactive.theme import entry_mark, tri_state_mark

    tree = Tree(f"[bold]{escape(title)}[/bold]")
    for framework in view.catalog.iter_frameworks():
        if not framework.subgroups:
            continue
        fw_node = tree.add(f"[bold]{escape(framework.title)}[/bold]")
        if framework.description:
            fw_node.add(f"[dim]{escape(framework.description)}[/dim]")
        for subgroup in framework.subgroups:
            mark = tri_state_mark(subgroup.selected, subgroup.partially_selected)
            sg_node = fw_node.add(f"{mark} {escape(subgroup.full_title)}")
            for entry in subgroup.entries:
                mark = entry_mark(entry.id in view.selected_ids)
                sg_node.add(f"{mark} {escape(entry.display_label)} [dim]({escape(entry.slug)})[/dim]")
    return tree


def cmd_show(args):
    """Show the catalog for a language with the workspace selection applied."""
    from rich.markup import escape

    from . import config
    from .catalog_parser import parse
    from .selection import derive_view
    from .sources import CatalogLoadError, FileCatalogSource, load_initial_selection

    cfg = config.load_config()
    lang = args.lang or config.get_language(cfg)
    source = FileCatalogSource(config.get_catalog_dir(cfg), config.get_languages(cfg))

    try:
        text = source.fetch(lang)
    except CatalogLoadError as e:
        print(f"Error: {e}")
        sys.exit(1)

    catalog = parse(text, config.get_general_markers(cfg))
    slugs = load_initial_selection(_workspace(args))
    view = derive_view(slugs, catalog)

    _print(_render_catalog(view, f"Modes ({source.sanitize(lang)})"))
    _print()
    _print(f"Selected: {len(view.ordered_entries)}")
    for i, entry in enumerate(view.ordered_entries):
        _print(f"  {i}. {escape(entry.display_label)} ({escape(entry.slug)})")
    hidden = [s for s in slugs if catalog.find_entry_by_slug(s) is None]
    if hidden:
        _print(f"[dim]Not in this catalog: {escape(', '.join(hidden))}[/dim]")


def cmd_parse(args):
    """Parse a catalog document and print its structure."""
    from . import config
    from .catalog_parser import parse
    from .selection import derive_view

    path = Path(args.path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Cannot read {path}: {e}")
        sys.exit(1)

    catalog = parse(text, config.get_general_markers())
    if args.json:
        print(json.dumps(catalog.to_dict(), indent=2, ensure_ascii=False))
        return
    _print(_render_catalog(derive_view([], catalog), path.name))


def cmd_selection(args):
    """Print the persisted ordered selection for a workspace."""
    from .sources import load_initial_selection

    slugs = load_initial_selection(_workspace(args))
    if not slugs:
        print("No modes selected.")
        return
    for order, slug in enumerate(slugs):
        print(f"{order}\t{slug}")


def cmd_pick(args):
    """Run the interactive picker."""
    from .interactive import interactive_menu

    saved = interactive_menu(workspace=args.dir, language=args.lang)
    print("Selection saved." if saved else "No changes saved.")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="mode-manager",
        description="mode-manager: pick and order modes from a framework catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"mode-manager {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # show
    show_p = subparsers.add_parser("show", help="Show the catalog with the current selection")
    show_p.add_argument("--lang", help="Catalog language (default: from config)")
    show_p.add_argument("--dir", help="Workspace directory (default: cwd)")
    show_p.set_defaults(func=cmd_show)

    # parse
    parse_p = subparsers.add_parser("parse", help="Parse a catalog file")
    parse_p.add_argument("path", help="Path to a stacks_by_framework_*.md file")
    parse_p.add_argument("--json", action="store_true", help="Print the parsed catalog as JSON")
    parse_p.set_defaults(func=cmd_parse)

    # selection
    sel_p = subparsers.add_parser("selection", help="Print the saved ordered selection")
    sel_p.add_argument("--dir", help="Workspace directory (default: cwd)")
    sel_p.set_defaults(func=cmd_selection)

    # pick
    pick_p = subparsers.add_parser("pick", help="Interactively select and order modes")
    pick_p.add_argument("--lang", help="Catalog language to start with")
    pick_p.add_argument("--dir", help="Workspace directory (default: cwd)")
    pick_p.set_defaults(func=cmd_pick)

    return parser


def main():
    """Main entry point."""
    from . import config

    parser = build_parser()
    args = parser.parse_args()

    if args.debug or config.load_config().get("debug"):
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command is None:
            cmd_pick(argparse.Namespace(dir=None, lang=None))
        elif hasattr(args, "func"):
            args.func(args)
        else:
            parser.print_help()
    except KeyboardInterrupt:
        print()
        sys.exit(130)


if __name__ == "__main__":
    main()
