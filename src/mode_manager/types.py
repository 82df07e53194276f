"""Type definitions for mode-manager.

This module provides the catalog value types produced by the parser, the
commit payload, and the closed set of selection events accepted from the UI
boundary. Catalog values are frozen; selection flags on subgroups are only
ever filled in by the selection store.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterator, Union

GENERAL_PURPOSE_ID = "general-purpose"


# ── catalog ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Entry:
    """A selectable mode."""

    id: str  # structural, unique within one parsed catalog
    slug: str  # stable external identity
    name: str
    icon: str | None = None
    description: str = ""

    @property
    def display_label(self) -> str:
        """Name prefixed with the icon when one is present."""
        if self.icon:
            return f"{self.icon} {self.name}"
        return self.name


@dataclass(frozen=True)
class Subgroup:
    """A numbered group of entries under a framework.

    ``selected`` and ``partially_selected`` are derived by the selection
    store and are always False in freshly parsed catalogs.
    """

    id: str
    title: str
    full_title: str  # keeps the "N.M" prefix
    description: str = ""
    entries: tuple[Entry, ...] = ()
    selected: bool = False
    partially_selected: bool = False

    @property
    def slugs(self) -> list[str]:
        return [entry.slug for entry in self.entries]


@dataclass(frozen=True)
class Framework:
    """A top-level section of the catalog."""

    id: str
    title: str
    description: str = ""
    subgroups: tuple[Subgroup, ...] = ()


@dataclass(frozen=True)
class Catalog:
    """Parsed catalog: the general-purpose bucket plus named frameworks."""

    general_purpose: Framework = field(
        default_factory=lambda: Framework(id=GENERAL_PURPOSE_ID, title="")
    )
    frameworks: tuple[Framework, ...] = ()

    @classmethod
    def empty(cls) -> "Catalog":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.general_purpose.subgroups and not self.frameworks

    def iter_frameworks(self) -> Iterator[Framework]:
        """Yield the general-purpose bucket first, then named frameworks."""
        yield self.general_purpose
        yield from self.frameworks

    def iter_subgroups(self) -> Iterator[tuple[Framework, Subgroup]]:
        for framework in self.iter_frameworks():
            for subgroup in framework.subgroups:
                yield framework, subgroup

    def iter_entries(self) -> Iterator[Entry]:
        for _, subgroup in self.iter_subgroups():
            yield from subgroup.entries

    def find_entry_by_slug(self, slug: str) -> Entry | None:
        """First entry carrying ``slug``, in catalog order."""
        for entry in self.iter_entries():
            if entry.slug == slug:
                return entry
        return None

    def find_entry(self, entry_id: str) -> Entry | None:
        for entry in self.iter_entries():
            if entry.id == entry_id:
                return entry
        return None

    def find_subgroup(self, framework_id: str, subgroup_id: str) -> Subgroup | None:
        for framework, subgroup in self.iter_subgroups():
            if framework.id == framework_id and subgroup.id == subgroup_id:
                return subgroup
        return None

    def all_slugs(self) -> set[str]:
        return {entry.slug for entry in self.iter_entries()}

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form of the catalog; entries also carry ``display_label``."""
        data = asdict(self)
        framework_dicts = [data["general_purpose"], *data["frameworks"]]
        for fw_data, framework in zip(framework_dicts, self.iter_frameworks()):
            for sg_data, subgroup in zip(fw_data["subgroups"], framework.subgroups):
                for entry_data, entry in zip(sg_data["entries"], subgroup.entries):
                    entry_data["display_label"] = entry.display_label
        return data


# ── commit payload ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CommitItem:
    """One element of the commit payload sent to the selection sink."""

    slug: str
    order: int  # zero-based index in the ordered selection at commit time

    def to_dict(self) -> dict[str, Any]:
        return {"slug": self.slug, "order": self.order}


# ── selection events ──────────────────────────────────────────────────────


class EventKind(str, Enum):
    """Commands accepted from the UI boundary."""

    SELECT_ONE = "selectOne"
    SELECT_MANY = "selectMany"
    REORDER = "reorder"
    REQUEST_CATALOG = "requestCatalog"

    def __str__(self) -> str:
        return self.value


class InvalidEventError(ValueError):
    """Raised when a boundary payload is not one of the known events."""


@dataclass(frozen=True)
class SelectOne:
    slug: str
    selected: bool


@dataclass(frozen=True)
class SelectMany:
    slugs: tuple[str, ...]
    selected: bool


@dataclass(frozen=True)
class Reorder:
    moved_id: str
    target_id: str


@dataclass(frozen=True)
class RequestCatalog:
    locale: str


SelectionEvent = Union[SelectOne, SelectMany, Reorder, RequestCatalog]


def _require(payload: dict[str, Any], key: str, kind: type) -> Any:
    value = payload.get(key)
    if not isinstance(value, kind):
        raise InvalidEventError(
            f"Field {key!r} must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def parse_event(payload: Any) -> SelectionEvent:
    """Convert a message-bus payload into a selection event.

    Args:
        payload: Dict with a ``command`` key and the command's fields.

    Returns:
        One of SelectOne, SelectMany, Reorder, RequestCatalog.

    Raises:
        InvalidEventError: If the command is unknown or a field is malformed.
    """
    if not isinstance(payload, dict):
        raise InvalidEventError(f"Event payload must be a mapping, got {type(payload).__name__}")

    try:
        kind = EventKind(payload.get("command"))
    except ValueError:
        raise InvalidEventError(f"Unknown event command: {payload.get('command')!r}") from None

    if kind == EventKind.SELECT_ONE:
        return SelectOne(
            slug=_require(payload, "slug", str),
            selected=_require(payload, "selected", bool),
        )
    if kind == EventKind.SELECT_MANY:
        slugs = _require(payload, "slugs", list)
        if not all(isinstance(s, str) for s in slugs):
            raise InvalidEventError("Field 'slugs' must contain only strings")
        return SelectMany(slugs=tuple(slugs), selected=_require(payload, "selected", bool))
    if kind == EventKind.REORDER:
        return Reorder(
            moved_id=_require(payload, "movedId", str),
            target_id=_require(payload, "targetId", str),
        )
    return RequestCatalog(locale=_require(payload, "locale", str))
