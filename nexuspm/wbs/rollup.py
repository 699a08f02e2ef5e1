"""Progress roll-up and project summary for WBS trees."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field

from ..models import Node, Project, WBSItem, WBSStatus

# Progress implied by status when a leaf declares none
STATUS_PROGRESS: dict[WBSStatus, int] = {
    WBSStatus.COMPLETED: 100,
    WBSStatus.IN_PROGRESS: 50,
    WBSStatus.CANCELLED: 0,
    WBSStatus.NOT_STARTED: 0,
}


def round_half_up(value: float) -> int:
    """Round to nearest integer, .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)


def leaf_progress(item: Node) -> float:
    """Progress of a node without children."""
    progress = getattr(item, "progress", 0) or 0
    if progress > 0:
        return progress

    status = getattr(item, "status", WBSStatus.NOT_STARTED)
    if status == WBSStatus.BLOCKED:
        return progress
    return STATUS_PROGRESS.get(status, 0)


def calculate_progress(items: Mapping[str, Node], item_id: str, _path: frozenset[str] = frozenset()) -> float:
    """Roll-up progress of one node.

    Leaves report their own progress; a parent reports the rounded mean of
    its children's roll-ups, level by level. Children missing from `items`
    are skipped; a parent with none left reports 0. A node reached again
    through its own descendants counts as 0.
    """
    item = items.get(item_id)
    if item is None or item_id in _path:
        return 0

    if not item.child_ids:
        return leaf_progress(item)

    children = [c for c in item.child_ids if c in items]
    if not children:
        return 0

    path = _path | {item_id}
    total = sum(calculate_progress(items, c, path) for c in children)
    return round_half_up(total / len(children))


def progress_by_id(project: Project) -> dict[str, float]:
    """Roll-up progress for every node in the project."""
    return {item_id: calculate_progress(project.items, item_id) for item_id in sorted(project.items)}


@dataclass(frozen=True)
class WBSSummary:
    total: int
    completed: int
    progress: int  # mean of the roots' roll-ups
    by_status: dict[str, int] = field(default_factory=dict)


def summarize_project(project: Project) -> WBSSummary:
    """Counts per status and overall progress."""
    by_status = {status.value: 0 for status in WBSStatus}
    for item in project.items.values():
        if isinstance(item, WBSItem):
            by_status[item.status.value] += 1

    roots = [r for r in project.root_item_ids if r in project.items]
    if roots:
        overall = round_half_up(sum(calculate_progress(project.items, r) for r in roots) / len(roots))
    else:
        overall = 0

    return WBSSummary(
        total=len(project.items),
        completed=by_status[WBSStatus.COMPLETED.value],
        progress=overall,
        by_status=by_status,
    )
