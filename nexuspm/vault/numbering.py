"""Hierarchical numbering ("1.2.3") and depth for resolved trees."""

from collections.abc import Iterator, Mapping, Sequence

from ..models import Node


def _walk(items: Mapping[str, Node], root_ids: Sequence[str]) -> Iterator[tuple[str, int, str | None]]:
    """Depth-first walk yielding (id, sibling index, parent id).

    Roots are visited in the given order, children in id order. A node is
    visited at most once even if the child lists are inconsistent.
    """
    seen: set[str] = set()
    stack: list[tuple[str, int, str | None]] = [
        (root_id, index, None) for index, root_id in reversed(list(enumerate(root_ids)))
    ]
    while stack:
        item_id, index, parent_id = stack.pop()
        if item_id in seen or item_id not in items:
            continue
        seen.add(item_id)
        yield item_id, index, parent_id

        children = sorted(items[item_id].child_ids)
        stack.extend((child_id, i, item_id) for i, child_id in reversed(list(enumerate(children))))


def compute_numbers(items: Mapping[str, Node], root_ids: Sequence[str]) -> dict[str, str]:
    """Dotted numbers for every reachable node.

    A node whose `number` is already set keeps it (authored in the note); its
    children are numbered beneath that value. Auto numbers always use the
    1-based position among siblings, so an authored sibling does not shift
    the others.
    """
    numbers: dict[str, str] = {}
    for item_id, index, parent_id in _walk(items, root_ids):
        authored = items[item_id].number
        if authored:
            numbers[item_id] = authored
        elif parent_id is None:
            numbers[item_id] = str(index + 1)
        else:
            numbers[item_id] = f"{numbers[parent_id]}.{index + 1}"
    return numbers


def compute_levels(items: Mapping[str, Node], root_ids: Sequence[str]) -> dict[str, int]:
    """Depth of every reachable node; roots are level 0."""
    levels: dict[str, int] = {}
    for item_id, _, parent_id in _walk(items, root_ids):
        levels[item_id] = 0 if parent_id is None else levels[parent_id] + 1
    return levels


def stamp_tree(items: Mapping[str, Node], root_ids: Sequence[str]) -> None:
    """Sort child lists and write numbers and levels onto the nodes."""
    for item in items.values():
        item.child_ids.sort()

    numbers = compute_numbers(items, root_ids)
    levels = compute_levels(items, root_ids)
    for item_id, number in numbers.items():
        items[item_id].number = number
        items[item_id].level = levels[item_id]
