"""Selection store: the ordered slug list and the views derived from it.

``ordered_slugs`` is the only mutable selection state. Every other selection
value (selected entry ids, subgroup tri-state flags, the ordered entries shown
in the chip strip) is rebuilt from ``(ordered_slugs, catalog)`` after each
mutation and after each catalog swap. Listeners are told about a new view
only when it differs by value from the previous one.

Slugs that the current catalog does not contain stay in ``ordered_slugs``;
they contribute to no subgroup and are skipped in ``ordered_entries``, and
reappear once a catalog carrying them is loaded again.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from .types import Catalog, Entry, Framework

logger = logging.getLogger(__name__)

Listener = Callable[["SelectionView"], None]


@dataclass(frozen=True)
class SelectionView:
    """Derived, read-only projection of the selection over a catalog."""

    selected_ids: frozenset[str] = frozenset()
    catalog: Catalog = field(default_factory=Catalog.empty)
    ordered_entries: tuple[Entry, ...] = ()

    @property
    def ordered_ids(self) -> list[str]:
        return [entry.id for entry in self.ordered_entries]


def _dedupe(slugs: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for slug in slugs:
        if slug not in seen:
            seen.add(slug)
            result.append(slug)
    return result


def _apply_flags(framework: Framework, selected: set[str]) -> Framework:
    subgroups = []
    for subgroup in framework.subgroups:
        total = len(subgroup.entries)
        count = sum(1 for entry in subgroup.entries if entry.slug in selected)
        subgroups.append(
            dataclasses.replace(
                subgroup,
                selected=total > 0 and count == total,
                partially_selected=0 < count < total,
            )
        )
    return dataclasses.replace(framework, subgroups=tuple(subgroups))


def derive_view(ordered_slugs: Iterable[str], catalog: Catalog) -> SelectionView:
    """Compute the selection view for a slug list over a catalog."""
    slugs = list(ordered_slugs)
    selected = set(slugs)

    flagged = Catalog(
        general_purpose=_apply_flags(catalog.general_purpose, selected),
        frameworks=tuple(_apply_flags(fw, selected) for fw in catalog.frameworks),
    )

    selected_ids = frozenset(
        entry.id for entry in catalog.iter_entries() if entry.slug in selected
    )

    ordered_entries: list[Entry] = []
    for slug in slugs:
        entry = catalog.find_entry_by_slug(slug)
        if entry is None:
            logger.debug("Selected slug %r not in current catalog", slug)
            continue
        ordered_entries.append(entry)

    return SelectionView(
        selected_ids=selected_ids,
        catalog=flagged,
        ordered_entries=tuple(ordered_entries),
    )


class SelectionStore:
    """Holds the ordered selection and keeps its derived view current."""

    def __init__(self, ordered_slugs: Iterable[str] = (), catalog: Catalog | None = None):
        self._ordered_slugs: list[str] = _dedupe(ordered_slugs)
        self._catalog: Catalog = catalog if catalog is not None else Catalog.empty()
        self._listeners: list[Listener] = []
        self.recompute_count = 0
        self._view = SelectionView()
        self.recompute()

    # -- read access ---------------------------------------------------------

    @property
    def ordered_slugs(self) -> tuple[str, ...]:
        return tuple(self._ordered_slugs)

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def view(self) -> SelectionView:
        return self._view

    def is_selected(self, slug: str) -> bool:
        return slug in self._ordered_slugs

    # -- observers -----------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -- mutations -----------------------------------------------------------

    def set_catalog(self, catalog: Catalog) -> None:
        """Swap in a freshly parsed catalog, keeping the selection by slug."""
        self._catalog = catalog
        self.recompute()

    def set_selected(self, slug: str, is_selected: bool) -> None:
        """Select (append) or deselect one slug. Idempotent."""
        if self._toggle(slug, is_selected):
            self.recompute()

    def set_batch_selected(self, slugs: Iterable[str], is_selected: bool) -> None:
        """Apply ``set_selected`` for each slug, recomputing once at the end."""
        changed = False
        for slug in slugs:
            changed = self._toggle(slug, is_selected) or changed
        if changed:
            self.recompute()

    def replace_order(self, new_ordered_slugs: Iterable[str]) -> bool:
        """Replace the order with a permutation of the current selection.

        Returns:
            True if applied, False if the payload was rejected because it
            would add, drop or duplicate a selection.
        """
        candidate = list(new_ordered_slugs)
        if len(candidate) != len(self._ordered_slugs) or set(candidate) != set(self._ordered_slugs):
            logger.warning(
                "Rejected reorder: %s is not a permutation of %s",
                candidate, self._ordered_slugs,
            )
            return False
        if candidate != self._ordered_slugs:
            self._ordered_slugs = candidate
            logger.debug("Selection reordered: %s", candidate)
            self.recompute()
        return True

    def reset(self, to_slugs: Iterable[str]) -> None:
        """Replace the selection unconditionally (used by cancel)."""
        self._ordered_slugs = _dedupe(to_slugs)
        logger.debug("Selection reset: %s", self._ordered_slugs)
        self.recompute()

    def _toggle(self, slug: str, is_selected: bool) -> bool:
        if is_selected:
            if slug in self._ordered_slugs:
                return False
            self._ordered_slugs.append(slug)
            logger.debug("Selected %s -> %s", slug, self._ordered_slugs)
            return True
        if slug not in self._ordered_slugs:
            return False
        self._ordered_slugs.remove(slug)
        logger.debug("Deselected %s -> %s", slug, self._ordered_slugs)
        return True

    # -- derivation ----------------------------------------------------------

    def recompute(self) -> SelectionView:
        """Rebuild the derived view and notify listeners if it changed."""
        self.recompute_count += 1
        view = derive_view(self._ordered_slugs, self._catalog)
        if view == self._view:
            return self._view
        self._view = view
        for listener in list(self._listeners):
            listener(view)
        return view
