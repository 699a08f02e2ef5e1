"""Frontmatter -> WBSItem."""

from collections.abc import Mapping
from datetime import date
from typing import Any

from ..config import PropertyMapping
from ..models import WBSItem, WBSStatus
from ..vault.fields import (
    as_date,
    as_int,
    as_label,
    as_number,
    as_str,
    as_str_list,
    clamp,
    is_truthy,
    lookup,
    normalize_status,
)
from ..vault.parser import extract_link_target


def _scheduled_date(
    properties: Mapping[str, Any],
    mapping: PropertyMapping,
    explicit: str,
) -> date | None:
    """Resolve a start or due date.

    An explicit `start-date` / `due-date` wins. Otherwise the Full Calendar
    `date` property is used. Time-of-day companions such as `startTime`
    are not read.
    """
    value = as_date(lookup(properties, mapping.keys(explicit)))
    if value is not None:
        return value
    return as_date(lookup(properties, mapping.keys("date")))


def calculate_start_date(properties: Mapping[str, Any], mapping: PropertyMapping) -> date | None:
    return _scheduled_date(properties, mapping, "start_date")


def calculate_due_date(properties: Mapping[str, Any], mapping: PropertyMapping) -> date | None:
    return _scheduled_date(properties, mapping, "due_date")


def extract_wbs_item(
    item_id: str,
    title: str,
    properties: Mapping[str, Any] | None,
    mapping: PropertyMapping | None = None,
) -> WBSItem:
    """Build a WBSItem from a note's frontmatter.

    Every field falls back to its default when missing or malformed. A truthy
    completion checkbox overrides any declared status or progress.
    """
    mapping = mapping or PropertyMapping()
    item = WBSItem(id=item_id, title=title)
    if not properties:
        return item

    def get(logical: str) -> Any:
        return lookup(properties, mapping.keys(logical))

    item.parent_id = extract_link_target(get("parent"))
    item.status = normalize_status(get("status"))
    item.assignee = as_str(get("assignee"))
    item.start_date = calculate_start_date(properties, mapping)
    item.due_date = calculate_due_date(properties, mapping)
    item.progress = clamp(as_number(get("progress"), 0), 0, 100)
    item.estimated_hours = as_number(get("estimated_hours"))
    item.actual_hours = as_number(get("actual_hours"))
    item.priority = as_int(get("priority"))
    item.number = as_label(get("wbs_number")) or ""
    item.tags = as_str_list(get("tags"))
    item.description = as_str(get("description"))

    if is_truthy(get("completed")):
        item.status = WBSStatus.COMPLETED
        item.progress = 100

    return item
