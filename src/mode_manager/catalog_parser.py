"""Parser for stacks-by-framework catalog documents.

The catalog is a markdown-like document:

    # 1. General-purpose modes
    ## 1.1 Core
    Modes every project needs.
    - 🧭 Navigator (navigator)
    - Scout (scout)

    # 2. Framework stacks
    ## 2.1 React & Next.js
    - ⚛️ React Specialist (react-specialist)

Each line is classified into one of four shapes (framework header, subgroup
header, entry, free text) and dispatched in a single pass. Parsing never
raises: anything unrecognised is skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .types import GENERAL_PURPOSE_ID, Catalog, Entry, Framework, Subgroup

logger = logging.getLogger(__name__)

# Title substrings that route a framework header into the general-purpose bucket
DEFAULT_GENERAL_MARKERS: tuple[str, ...] = (
    "general",
    "загального",
    "універсальних",
    "общего",
    "универсальных",
)

FRAMEWORK_RE = re.compile(r"^#\s+\d+\.\s*(.+)$")
SUBGROUP_RE = re.compile(r"^##\s+(\d+\.\d+\.?\s+.+)$")
SUBGROUP_TITLE_RE = re.compile(r"^\d+\.\d+\.?\s+(.+)$")

# Symbol / pictographic code points allowed in an entry icon, including
# astral emoji, variation selectors and zero-width joiners.
_ICON_CHARS = (
    r"\u2000-\u32ff"
    r"\ue000-\uf8ff"
    r"\ufe00-\ufe0f"
    r"\ufe30-\ufe4f"
    r"\uff00-\uffef"
    r"\U0001f000-\U0001faff"
    r"\U000e0020-\U000e007f"
)
ENTRY_RE = re.compile(
    rf"^-\s*(?:(?P<icon>[{_ICON_CHARS}](?:\s*[{_ICON_CHARS}])*)\s+)?"
    r"(?P<name>.+?)\s+\((?P<slug>[^)]+)\)"
)


class LineKind(str, Enum):
    """Shapes a catalog line can take."""

    BLANK = "blank"
    FRAMEWORK = "framework"
    SUBGROUP = "subgroup"
    ENTRY = "entry"
    TEXT = "text"


def classify_line(line: str) -> LineKind:
    """Classify a single (already stripped) line."""
    if not line:
        return LineKind.BLANK
    if FRAMEWORK_RE.match(line):
        return LineKind.FRAMEWORK
    if SUBGROUP_RE.match(line):
        return LineKind.SUBGROUP
    if line.startswith("-"):
        return LineKind.ENTRY
    return LineKind.TEXT


@dataclass
class _SubgroupDraft:
    id: str
    title: str
    full_title: str
    description: str = ""
    entries: list[Entry] = field(default_factory=list)

    def freeze(self) -> Subgroup:
        return Subgroup(
            id=self.id,
            title=self.title,
            full_title=self.full_title,
            description=self.description,
            entries=tuple(self.entries),
        )


@dataclass
class _FrameworkDraft:
    id: str
    title: str
    description: str = ""
    subgroups: list[_SubgroupDraft] = field(default_factory=list)

    def freeze(self) -> Framework:
        return Framework(
            id=self.id,
            title=self.title,
            description=self.description,
            subgroups=tuple(sg.freeze() for sg in self.subgroups),
        )


def is_general_title(title: str, markers: Iterable[str] = DEFAULT_GENERAL_MARKERS) -> bool:
    """Check whether a framework title names the general-purpose bucket."""
    folded = title.casefold()
    return any(marker.casefold() in folded for marker in markers if marker)


def parse_entry_line(line: str) -> tuple[str | None, str, str] | None:
    """Extract (icon, name, slug) from an entry line, or None if unmatched."""
    match = ENTRY_RE.match(line)
    if not match:
        return None
    icon = (match.group("icon") or "").strip() or None
    name = match.group("name").strip()
    slug = match.group("slug").strip()
    if not name or not slug:
        return None
    return icon, name, slug


def parse(text: str, general_markers: Iterable[str] = DEFAULT_GENERAL_MARKERS) -> Catalog:
    """Parse a catalog document.

    Args:
        text: Document content. Non-string input is treated as empty.
        general_markers: Title substrings that select the general-purpose bucket.

    Returns:
        The parsed Catalog. Always has a general-purpose framework, possibly
        with no subgroups.
    """
    if not isinstance(text, str) or not text:
        if not isinstance(text, str):
            logger.warning("Catalog content is %s, not text; returning empty catalog", type(text).__name__)
        return Catalog.empty()

    markers = tuple(general_markers)
    general = _FrameworkDraft(id=GENERAL_PURPOSE_ID, title="")
    frameworks: list[_FrameworkDraft] = []
    current_framework: _FrameworkDraft | None = None
    current_subgroup: _SubgroupDraft | None = None

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        kind = classify_line(line)

        if kind == LineKind.BLANK:
            continue

        if kind == LineKind.FRAMEWORK:
            title = FRAMEWORK_RE.match(line).group(1).strip()
            if is_general_title(title, markers):
                general.title = title
                current_framework = general
            else:
                current_framework = _FrameworkDraft(id=f"framework-{len(frameworks)}", title=title)
                frameworks.append(current_framework)
            current_subgroup = None

        elif kind == LineKind.SUBGROUP:
            if current_framework is None:
                logger.debug("Line %d: subgroup header outside a framework, skipped", lineno)
                continue
            full_title = SUBGROUP_RE.match(line).group(1).strip()
            title_match = SUBGROUP_TITLE_RE.match(full_title)
            current_subgroup = _SubgroupDraft(
                id=f"subgroup-{len(current_framework.subgroups)}",
                title=title_match.group(1).strip() if title_match else full_title,
                full_title=full_title,
            )
            current_framework.subgroups.append(current_subgroup)

        elif kind == LineKind.ENTRY:
            if current_subgroup is None or current_framework is None:
                continue
            parsed = parse_entry_line(line)
            if parsed is None:
                logger.debug("Line %d: unmatched entry line dropped: %r", lineno, line)
                continue
            icon, name, slug = parsed
            current_subgroup.entries.append(
                Entry(
                    id=f"mode-{current_framework.id}-{current_subgroup.id}-{len(current_subgroup.entries)}",
                    slug=slug,
                    name=name,
                    icon=icon,
                )
            )

        else:
            if line.startswith("#"):
                continue
            if current_subgroup is not None:
                if not current_subgroup.description:
                    current_subgroup.description = line
            elif current_framework is not None and not current_framework.subgroups:
                if not current_framework.description:
                    current_framework.description = line

    return Catalog(
        general_purpose=general.freeze(),
        frameworks=tuple(fw.freeze() for fw in frameworks),
    )
