"""Colour palette and Rich markup helpers for the mode picker and CLI tree."""

from __future__ import annotations

import os
from dataclasses import dataclass

RULE_WIDTH = 56


@dataclass(frozen=True)
class Palette:
    """Rich style strings, one per thing the picker draws."""

    name: str
    framework: str
    chip: str
    chip_focus: str
    selected: str
    partial: str
    warning: str
    error: str
    muted: str


PALETTES: dict[str, Palette] = {
    "default": Palette(
        name="default",
        framework="bold color(130)",
        chip="color(24)",
        chip_focus="reverse color(130)",
        selected="color(28)",
        partial="color(136)",
        warning="color(136)",
        error="color(124)",
        muted="grey50",
    ),
    "contrast": Palette(
        name="contrast",
        framework="bold bright_yellow",
        chip="bright_cyan",
        chip_focus="reverse bright_yellow",
        selected="bright_green",
        partial="yellow",
        warning="yellow",
        error="bright_red",
        muted="grey70",
    ),
}


def get_palette() -> Palette:
    """Active palette; MODE_MANAGER_THEME picks one by name."""
    name = os.environ.get("MODE_MANAGER_THEME", "").strip().lower()
    return PALETTES.get(name, PALETTES["default"])


def styled(text: str, style: str) -> str:
    """Wrap already-escaped markup in a style tag."""
    if not style:
        return text
    return f"[{style}]{text}[/{style}]"


def rule(width: int = RULE_WIDTH) -> str:
    return styled("─" * width, get_palette().muted)


def pointer(is_current: bool) -> str:
    """Two-cell cursor gutter."""
    if not is_current:
        return "  "
    return styled("❯", get_palette().framework) + " "


def title_line(locale: str, unsaved: bool = False) -> str:
    palette = get_palette()
    line = f"{styled('Modes', palette.framework)}  language: {locale}"
    if unsaved:
        line += " " + styled("(unsaved)", palette.warning)
    return line + "    " + styled("\\[Tab: next language]", palette.muted)


def tri_state_mark(selected: bool, partial: bool) -> str:
    """Subgroup checkbox: full, partial or empty."""
    palette = get_palette()
    if selected:
        return styled("■", palette.selected)
    if partial:
        return styled("◧", palette.partial)
    return styled("□", palette.muted)


def entry_mark(checked: bool) -> str:
    palette = get_palette()
    return styled("●", palette.selected) if checked else styled("○", palette.muted)


def count_badge(count: int, total: int) -> str:
    """``(count/total)`` badge, dimmed while nothing is selected."""
    return styled(f"({count}/{total})", "white" if count else get_palette().muted)


def chip(label: str, focused: bool = False) -> str:
    palette = get_palette()
    if focused:
        return styled(f" {label} ", palette.chip_focus)
    return styled(label, palette.chip)


def key_hints(hints: list[str]) -> str:
    """Footer line; navigation keys are always listed last."""
    return styled(" · ".join([*hints, "↑↓/jk nav"]), get_palette().muted)
