"""Reorder helpers for the selected-modes strip.

A drag of chip A onto chip B is expressed as ``move_before(seq, A, B)``;
the resulting visible order is projected back onto the full ordered slug
list with ``project_order``.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, TypeVar


class HasId(Protocol):
    id: str


T = TypeVar("T", bound=HasId)


def _index_of(sequence: Sequence[HasId], item_id: str) -> int:
    for i, item in enumerate(sequence):
        if item.id == item_id:
            return i
    return -1


def move_before(sequence: Sequence[T], moved_id: str, target_id: str) -> Sequence[T]:
    """Move the item ``moved_id`` to the position held by ``target_id``.

    Standard array-move semantics: moving forward shifts the items between
    the two positions left, moving backward shifts them right.

    Returns:
        A new sequence of the same kind (tuple or list), or ``sequence``
        itself when either id is absent or both ids are equal.
    """
    if moved_id == target_id:
        return sequence
    old_index = _index_of(sequence, moved_id)
    new_index = _index_of(sequence, target_id)
    if old_index < 0 or new_index < 0:
        return sequence

    items = list(sequence)
    items.insert(new_index, items.pop(old_index))
    if isinstance(sequence, tuple):
        return tuple(items)
    return items


def project_order(ordered_slugs: Sequence[str], visible_slugs: Iterable[str]) -> list[str]:
    """Lay a reordered visible subsequence back over the full slug list.

    Slugs in ``ordered_slugs`` that are not part of ``visible_slugs`` (selected
    but absent from the current catalog) keep their slots; the remaining slots
    are filled with ``visible_slugs`` in order.
    """
    visible = list(visible_slugs)
    visible_set = set(visible)
    fill = iter(visible)
    return [next(fill, slug) if slug in visible_set else slug for slug in ordered_slugs]
