"""Obsidian Bases (`.base`) view files.

A `.base` file is YAML describing a filtered table/board over notes. We only
read it to pick which columns the WBS table shows, in which order.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import yaml

from .fields import as_mapping_list
from .store import FolderStore, NoteHandle, normalize_folder

logger = logging.getLogger(__name__)

BASE_SUFFIX = ".base"

ViewType = Literal["table", "board", "gallery", "list"]

DEFAULT_BASE_COLUMNS = ["file.name", "status", "assignee", "due-date", "progress"]

# Bases property name -> WBS column
COLUMN_MAP: dict[str, str] = {
    "file.name": "title",
    "file.path": "title",
    "name": "title",
    "title": "title",
    "status": "status",
    "assignee": "assignee",
    "start-date": "start_date",
    "startDate": "start_date",
    "due-date": "due_date",
    "dueDate": "due_date",
    "progress": "progress",
    "priority": "priority",
    "estimated-hours": "estimated_hours",
    "estimatedHours": "estimated_hours",
    "actual-hours": "actual_hours",
    "actualHours": "actual_hours",
    "tags": "tags",
}


@dataclass(frozen=True)
class BaseFilter:
    property: str
    operator: str = "is"  # is, is-not, contains, does-not-contain, is-empty, is-not-empty
    value: Any = None


@dataclass(frozen=True)
class BaseSort:
    property: str
    direction: Literal["asc", "desc"] = "asc"


@dataclass
class BaseView:
    type: ViewType = "table"
    name: str = "View"
    order: list[str] | None = None
    group_by: str | None = None
    sort: list[BaseSort] | None = None
    filter: list[BaseFilter] | None = None


@dataclass
class BaseConfig:
    source: str | None = None
    filter: list[BaseFilter] | None = None
    views: list[BaseView] = field(default_factory=list)


def _parse_filters(value: Any) -> list[BaseFilter] | None:
    entries = as_mapping_list(value)
    if not entries:
        return None
    filters = [
        BaseFilter(
            property=str(entry.get("property") or ""),
            operator=str(entry.get("operator") or "is"),
            value=entry.get("value"),
        )
        for entry in entries
    ]
    return [f for f in filters if f.property]


def _parse_sort(value: Any) -> list[BaseSort]:
    result = []
    for entry in as_mapping_list(value):
        prop = str(entry.get("property") or "")
        if not prop:
            continue
        direction = "desc" if entry.get("direction") == "desc" else "asc"
        result.append(BaseSort(property=prop, direction=direction))
    return result


def _parse_views(value: Any) -> list[BaseView]:
    views = []
    for entry in as_mapping_list(value):
        view = BaseView(
            type=entry.get("type") or "table",
            name=str(entry.get("name") or "View"),
        )
        if isinstance(entry.get("order"), list):
            view.order = [str(col) for col in entry["order"]]
        if entry.get("groupBy"):
            view.group_by = str(entry["groupBy"])
        if isinstance(entry.get("sort"), list):
            view.sort = _parse_sort(entry["sort"])
        if isinstance(entry.get("filter"), list):
            view.filter = _parse_filters(entry["filter"])
        views.append(view)
    return views


def parse_base_file(content: str) -> BaseConfig | None:
    """Parse `.base` YAML. Empty, invalid or unrelated documents give None."""
    if not content or not content.strip():
        return None

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        logger.warning("Ignoring unparseable .base file: %s", e)
        return None

    if not isinstance(data, dict):
        return None
    if not any(key in data for key in ("views", "source", "filter")):
        return None

    source = data.get("source")
    return BaseConfig(
        source=str(source) if source is not None else None,
        filter=_parse_filters(data.get("filter")),
        views=_parse_views(data.get("views")),
    )


def get_columns(config: BaseConfig) -> list[str]:
    """Columns of the first table view, or the default column set."""
    for view in config.views:
        if view.type == "table":
            if view.order:
                return list(view.order)
            break
    return list(DEFAULT_BASE_COLUMNS)


def map_to_wbs_columns(base_columns: list[str]) -> list[str]:
    """Translate Bases column names to WBS table columns.

    The WBS number always comes first and the title is always shown.
    Unknown columns are dropped.
    """
    result = ["wbs"]
    for column in base_columns:
        mapped = COLUMN_MAP.get(column)
        if mapped and mapped not in result:
            result.append(mapped)
    if "title" not in result:
        result.insert(1, "title")
    return result


def find_base_config(store: FolderStore, folder: str) -> BaseConfig | None:
    """The first parseable `.base` file directly inside `folder`."""
    folder = normalize_folder(folder)
    for path in store.list_files(folder, BASE_SUFFIX):
        if NoteHandle(path).folder != folder:
            continue
        config = parse_base_file(store.read_file(path) or "")
        if config is not None:
            logger.debug("Using view columns from %s", path)
            return config
    return None
