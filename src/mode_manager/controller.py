"""Selection controller: the single owner of ``(ordered_slugs, catalog)``.

UI-originated events are applied one at a time, in arrival order. Catalog
loads are tagged with a generation number so that a late result for an
older request (e.g. after rapid language switching) is discarded.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Sequence

from .catalog_parser import DEFAULT_GENERAL_MARKERS, parse
from .ordering import move_before, project_order
from .selection import SelectionStore, SelectionView
from .sources import CatalogLoadError, CatalogSource, SelectionSink
from .types import (
    CommitItem,
    Reorder,
    RequestCatalog,
    SelectMany,
    SelectOne,
    SelectionEvent,
    parse_event,
)

logger = logging.getLogger(__name__)


class SelectionController:
    """Applies selection events and manages catalog loading and commits."""

    def __init__(
        self,
        catalog_source: CatalogSource,
        sink: SelectionSink | None = None,
        initial_slugs: Iterable[str] = (),
        locale: str = "en",
        general_markers: Sequence[str] = DEFAULT_GENERAL_MARKERS,
    ):
        self.catalog_source = catalog_source
        self.sink = sink
        self.general_markers = tuple(general_markers)
        self.store = SelectionStore(initial_slugs)
        self.locale = locale
        self.loading = False
        self.error: str | None = None
        self._committed: tuple[str, ...] = self.store.ordered_slugs
        self._generation = 0
        self._pending_locale: str | None = None

    # -- state ---------------------------------------------------------------

    @property
    def view(self) -> SelectionView:
        return self.store.view

    @property
    def ordered_slugs(self) -> tuple[str, ...]:
        return self.store.ordered_slugs

    @property
    def committed_slugs(self) -> tuple[str, ...]:
        return self._committed

    @property
    def has_changes(self) -> bool:
        """True when the selection differs (content or order) from the last commit."""
        return self.store.ordered_slugs != self._committed

    def subscribe(self, listener: Callable[[SelectionView], None]) -> Callable[[], None]:
        return self.store.subscribe(listener)

    # -- events --------------------------------------------------------------

    def dispatch(self, event: SelectionEvent) -> None:
        """Apply one selection event."""
        if isinstance(event, SelectOne):
            self.store.set_selected(event.slug, event.selected)
        elif isinstance(event, SelectMany):
            self.store.set_batch_selected(event.slugs, event.selected)
        elif isinstance(event, Reorder):
            self.reorder(event.moved_id, event.target_id)
        elif isinstance(event, RequestCatalog):
            self.request_catalog(event.locale)
        else:
            raise TypeError(f"Unsupported event: {event!r}")

    def dispatch_message(self, payload: dict) -> None:
        """Parse a message-bus payload and apply it.

        Raises:
            InvalidEventError: If the payload is not a known event.
        """
        self.dispatch(parse_event(payload))

    def select_entry(self, entry_id: str, selected: bool) -> bool:
        """Toggle an entry by its structural id. Returns False if unknown."""
        entry = self.store.catalog.find_entry(entry_id)
        if entry is None:
            logger.warning("No entry with id %s in current catalog", entry_id)
            return False
        self.store.set_selected(entry.slug, selected)
        return True

    def select_subgroup(self, framework_id: str, subgroup_id: str, selected: bool) -> bool:
        """Batch-toggle every entry of a subgroup. Returns False if unknown."""
        subgroup = self.store.catalog.find_subgroup(framework_id, subgroup_id)
        if subgroup is None:
            logger.error("No subgroup %s in framework %s", subgroup_id, framework_id)
            return False
        self.store.set_batch_selected(subgroup.slugs, selected)
        return True

    def reorder(self, moved_id: str, target_id: str) -> bool:
        """Move the chip ``moved_id`` to the slot of ``target_id``.

        Stale or equal ids are a no-op. Returns True if the order changed.
        """
        current = self.store.view.ordered_entries
        moved = move_before(current, moved_id, target_id)
        if moved is current:
            logger.debug("Reorder %s -> %s ignored", moved_id, target_id)
            return False
        new_order = project_order(self.store.ordered_slugs, (e.slug for e in moved))
        return self.store.replace_order(new_order)

    # -- catalog loading -----------------------------------------------------

    def begin_catalog_request(self, locale: str) -> int:
        """Mark a new catalog request in flight and return its generation."""
        self._generation += 1
        self._pending_locale = locale
        self.loading = True
        logger.debug("Catalog request #%d for %s", self._generation, locale)
        return self._generation

    def deliver_catalog(self, generation: int, text: str) -> bool:
        """Apply catalog text for a request. Stale generations are discarded."""
        if generation != self._generation:
            logger.warning(
                "Discarding catalog for request #%d (latest is #%d)", generation, self._generation
            )
            return False
        self.loading = False
        self.error = None
        if self._pending_locale is not None:
            self.locale = self._pending_locale
        self.store.set_catalog(parse(text, self.general_markers))
        return True

    def deliver_error(self, generation: int, message: str) -> bool:
        """Record a catalog-source failure. The selection is left untouched."""
        if generation != self._generation:
            logger.warning(
                "Discarding error for request #%d (latest is #%d)", generation, self._generation
            )
            return False
        self.loading = False
        self.error = message or "Unknown error loading stacks."
        logger.error("Catalog load failed: %s", self.error)
        return True

    def request_catalog(self, locale: str) -> bool:
        """Fetch, parse and apply the catalog for ``locale`` synchronously.

        Returns True on success, False if the source failed.
        """
        generation = self.begin_catalog_request(locale)
        try:
            text = self.catalog_source.fetch(locale)
        except CatalogLoadError as e:
            self.deliver_error(generation, str(e))
            return False
        return self.deliver_catalog(generation, text)

    def change_language(self, locale: str) -> bool:
        """Reload the catalog for a new locale; no-op for the current one."""
        if locale == self.locale:
            return False
        return self.request_catalog(locale)

    # -- commit / cancel -----------------------------------------------------

    def commit(self) -> list[CommitItem]:
        """Send the ordered selection to the sink and make it the new baseline."""
        items = [CommitItem(slug=slug, order=i) for i, slug in enumerate(self.store.ordered_slugs)]
        if self.sink is not None:
            self.sink.apply(items)
        self._committed = self.store.ordered_slugs
        logger.debug("Committed %d mode(s)", len(items))
        return items

    def cancel(self) -> None:
        """Discard uncommitted changes."""
        self.store.reset(self._committed)
