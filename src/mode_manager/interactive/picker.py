"""Interactive mode picker.

Renders a Rich Live panel with the catalog as a tree of frameworks,
subgroups (tri-state checkboxes) and modes, plus a strip of the selected
modes in order. Space toggles, [ and ] move the focused chip, Tab cycles the
catalog language, s saves, q cancels.
"""

from __future__ import annotations

import os
from typing import Sequence

import readchar
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.text import Text

from ..controller import SelectionController
from ..selection import SelectionView
from .theme import (
    chip,
    count_badge,
    entry_mark,
    get_palette,
    key_hints,
    pointer,
    rule,
    styled,
    title_line,
    tri_state_mark,
)

console = Console(highlight=False)

# Row kinds for the virtual row model
ROW_FRAMEWORK = "framework"
ROW_SUBGROUP = "subgroup"
ROW_ENTRY = "entry"
ROW_SEPARATOR = "separator"
ROW_ACTION = "action"

ACTION_SAVE = "__save__"
ACTION_CANCEL = "__cancel__"

ACTIONS: list[tuple[str, str]] = [
    ("Save", ACTION_SAVE),
    ("Cancel", ACTION_CANCEL),
]

# (kind, framework_id, subgroup_id, value); value is the entry id for
# entries and the action id for actions
Row = tuple[str, str, str, str]


def _get_terminal_height() -> int:
    try:
        return os.get_terminal_size().lines
    except OSError:
        return 24


def _calculate_visible_range(
    cursor: int, total: int, max_visible: int, scroll_offset: int
) -> tuple[int, int]:
    """Calculate visible (start, end) for a scrolling list."""
    if total == 0:
        return 0, 0
    cursor = max(0, min(cursor, total - 1))
    if cursor < scroll_offset:
        scroll_offset = cursor
    elif cursor >= scroll_offset + max_visible:
        scroll_offset = cursor - max_visible + 1
    scroll_offset = max(0, min(scroll_offset, total - 1))
    return scroll_offset, min(scroll_offset + max_visible, total)


def build_rows(view: SelectionView, collapsed: set[str] | None = None) -> list[Row]:
    """Build the virtual row list for a selection view.

    Frameworks without subgroups are hidden. Collapsed frameworks show only
    their header row.
    """
    collapsed = collapsed or set()
    rows: list[Row] = []
    for framework in view.catalog.iter_frameworks():
        if not framework.subgroups:
            continue
        rows.append((ROW_FRAMEWORK, framework.id, "", ""))
        if framework.id in collapsed:
            continue
        for subgroup in framework.subgroups:
            rows.append((ROW_SUBGROUP, framework.id, subgroup.id, ""))
            for entry in subgroup.entries:
                rows.append((ROW_ENTRY, framework.id, subgroup.id, entry.id))
    if rows:
        rows.append((ROW_SEPARATOR, "", "", ""))
    for _, aid in ACTIONS:
        rows.append((ROW_ACTION, "", "", aid))
    return rows


def chip_move(ordered_ids: Sequence[str], index: int, delta: int) -> tuple[str, str] | None:
    """Return (moved_id, target_id) for shifting the chip at ``index`` by ``delta``."""
    target = index + delta
    if not 0 <= index < len(ordered_ids) or not 0 <= target < len(ordered_ids):
        return None
    return ordered_ids[index], ordered_ids[target]


def next_language(languages: Sequence[str], current: str) -> str:
    """Cycle to the language after ``current``."""
    if not languages:
        return current
    if current not in languages:
        return languages[0]
    return languages[(languages.index(current) + 1) % len(languages)]


def _max_visible(controller: SelectionController, status_msg: str) -> int:
    reserved = 3  # header, chip strip, separator
    reserved += 2  # footer spacer + key hints
    reserved += 2  # scroll indicators
    if status_msg:
        reserved += 2
    if controller.error or controller.loading:
        reserved += 1
    return max(3, _get_terminal_height() - reserved)


def _chip_strip(view: SelectionView, chip_index: int) -> str:
    if not view.ordered_entries:
        return styled("(no modes selected)", get_palette().muted)
    return " · ".join(
        chip(escape(entry.display_label), focused=i == chip_index)
        for i, entry in enumerate(view.ordered_entries)
    )


def _row_line(view: SelectionView, row: Row, is_cur: bool) -> list[str]:
    kind, framework_id, subgroup_id, value = row
    catalog = view.catalog
    palette = get_palette()
    gutter = pointer(is_cur)

    if kind == ROW_FRAMEWORK:
        framework = next(fw for fw in catalog.iter_frameworks() if fw.id == framework_id)
        return [gutter + styled(escape(framework.title), palette.framework)]

    if kind == ROW_SUBGROUP:
        subgroup = catalog.find_subgroup(framework_id, subgroup_id)
        count = sum(1 for e in subgroup.entries if e.id in view.selected_ids)
        title = styled(escape(subgroup.full_title), "bold" if is_cur else "")
        lines = [
            f"{gutter}  {tri_state_mark(subgroup.selected, subgroup.partially_selected)} "
            f"{title}  {count_badge(count, len(subgroup.entries))}"
        ]
        if subgroup.description and is_cur:
            lines.append("       " + styled(escape(subgroup.description), palette.chip))
        return lines

    if kind == ROW_ENTRY:
        entry = catalog.find_entry(value)
        checked = entry.id in view.selected_ids
        if is_cur:
            label_style = "bold"
        else:
            label_style = "" if checked else "dim"
        return [
            f"{gutter}      {entry_mark(checked)} {styled(escape(entry.display_label), label_style)}"
            f"  {styled(f'({escape(entry.slug)})', 'dim')}"
        ]

    if kind == ROW_SEPARATOR:
        return ["  " + styled("─────────", "dim")]

    label = next(label for label, aid in ACTIONS if aid == value)
    return [gutter + (styled(label, f"bold {palette.framework}") if is_cur else label)]


def _build_display(
    controller: SelectionController,
    rows: list[Row],
    cursor: int,
    scroll_offset: int,
    chip_index: int,
    status_msg: str,
) -> str:
    view = controller.view
    palette = get_palette()
    lines = [
        title_line(controller.locale, unsaved=controller.has_changes),
        f"Selected ({len(view.ordered_entries)}): {_chip_strip(view, chip_index)}",
        rule(),
    ]

    if controller.loading:
        lines.append("  " + styled("Loading stacks...", "dim"))
    elif controller.error:
        lines.append("  " + styled(f"Error: {escape(controller.error)}", palette.error))

    vis_start, vis_end = _calculate_visible_range(
        cursor, len(rows), _max_visible(controller, status_msg), scroll_offset
    )
    if vis_start > 0:
        lines.append(styled(f"  ↑ {vis_start} more", "dim"))
    for i in range(vis_start, vis_end):
        lines.extend(_row_line(view, rows[i], i == cursor))
    if vis_end < len(rows):
        lines.append(styled(f"  ↓ {len(rows) - vis_end} more", "dim"))

    if status_msg:
        lines.append("")
        lines.append(styled(escape(status_msg), "dim"))

    lines.append("")
    lines.append(
        key_hints(["space/↵ toggle", "h/l chip", "\\[/] move chip", "tab language", "s save", "q cancel"])
    )
    return "\n".join(lines)


def run_picker(controller: SelectionController, languages: Sequence[str]) -> bool:
    """Run the interactive picker until the user saves or cancels.

    Returns:
        True if the selection was committed, False if cancelled.
    """
    collapsed: set[str] = set()
    rows = build_rows(controller.view, collapsed)
    cursor = 0
    scroll_offset = 0
    chip_index = 0
    status_msg = ""
    committed = False
    # last requested language; advances even when a load fails
    lang_cursor = controller.locale

    def _toggle_row(row: Row) -> None:
        kind, framework_id, subgroup_id, value = row
        if kind == ROW_FRAMEWORK:
            if framework_id in collapsed:
                collapsed.discard(framework_id)
            else:
                collapsed.add(framework_id)
        elif kind == ROW_SUBGROUP:
            subgroup = controller.view.catalog.find_subgroup(framework_id, subgroup_id)
            controller.select_subgroup(framework_id, subgroup_id, not subgroup.selected)
        elif kind == ROW_ENTRY:
            controller.select_entry(value, value not in controller.view.selected_ids)

    with Live("", console=console, refresh_per_second=15, transient=True) as live:
        live.update(Text.from_markup(_build_display(controller, rows, cursor, scroll_offset, chip_index, status_msg)))
        while True:
            try:
                key = readchar.readkey()
            except (KeyboardInterrupt, EOFError):
                controller.cancel()
                break

            total = len(rows)
            status_msg = ""

            if key in (readchar.key.UP, "k"):
                cursor = (cursor - 1) % total
                if rows[cursor][0] == ROW_SEPARATOR:
                    cursor = (cursor - 1) % total
            elif key in (readchar.key.DOWN, "j"):
                cursor = (cursor + 1) % total
                if rows[cursor][0] == ROW_SEPARATOR:
                    cursor = (cursor + 1) % total

            elif key in (" ", "\r", "\n", readchar.key.ENTER):
                row = rows[cursor]
                if row[0] == ROW_ACTION:
                    if row[3] == ACTION_SAVE:
                        controller.commit()
                        committed = True
                    else:
                        controller.cancel()
                    break
                _toggle_row(row)

            elif key == "h":
                chip_index = max(0, chip_index - 1)
            elif key == "l":
                chip_index = min(max(0, len(controller.view.ordered_entries) - 1), chip_index + 1)

            elif key in ("[", "]"):
                delta = -1 if key == "[" else 1
                move = chip_move(controller.view.ordered_ids, chip_index, delta)
                if move and controller.reorder(*move):
                    chip_index += delta

            elif key == "\t":
                lang_cursor = next_language(languages, lang_cursor)
                if lang_cursor != controller.locale or controller.error:
                    if not controller.request_catalog(lang_cursor):
                        status_msg = f"Could not load {lang_cursor}"

            elif key == "s":
                controller.commit()
                committed = True
                break

            elif key in ("q", "\x1b"):
                controller.cancel()
                break

            rows = build_rows(controller.view, collapsed)
            cursor = min(cursor, len(rows) - 1)
            chip_index = min(chip_index, max(0, len(controller.view.ordered_entries) - 1))
            scroll_offset, _ = _calculate_visible_range(
                cursor, len(rows), _max_visible(controller, status_msg), scroll_offset
            )
            live.update(Text.from_markup(_build_display(controller, rows, cursor, scroll_offset, chip_index, status_msg)))

    return committed
