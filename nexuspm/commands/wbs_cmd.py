"""WBS command - render a task tree with progress roll-up."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Settings, load_settings
from ..models import Project, WBSItem, WBSStatus
from ..vault.bases import find_base_config, get_columns, map_to_wbs_columns
from ..vault.store import FileNotesStore
from ..wbs.assembler import build_wbs_project
from ..wbs.rollup import progress_by_id, summarize_project

DEFAULT_COLUMNS = ["wbs", "title", "status", "progress", "assignee", "start_date", "due_date"]

COLUMN_HEADERS = {
    "wbs": "WBS",
    "title": "Title",
    "status": "Status",
    "assignee": "Assignee",
    "start_date": "Start",
    "due_date": "Due",
    "progress": "Progress",
    "priority": "Priority",
    "estimated_hours": "Est. h",
    "actual_hours": "Actual h",
    "tags": "Tags",
}

STATUS_STYLES = {
    WBSStatus.COMPLETED: "green",
    WBSStatus.IN_PROGRESS: "cyan",
    WBSStatus.BLOCKED: "red",
    WBSStatus.CANCELLED: "dim",
    WBSStatus.NOT_STARTED: "",
}


def _format_hours(value: float | None) -> str:
    if value is None:
        return ""
    return f"{value:g}"


def _cell(item: WBSItem, column: str, progress: float) -> str:
    if column == "wbs":
        return item.number
    if column == "title":
        return "  " * item.level + escape(item.title)
    if column == "status":
        style = STATUS_STYLES.get(item.status, "")
        return f"[{style}]{item.status.value}[/{style}]" if style else item.status.value
    if column == "progress":
        return f"{progress:.0f}%"
    if column == "assignee":
        return escape(item.assignee or "")
    if column == "start_date":
        return item.start_date.isoformat() if item.start_date else ""
    if column == "due_date":
        return item.due_date.isoformat() if item.due_date else ""
    if column == "priority":
        return "" if item.priority is None else str(item.priority)
    if column == "estimated_hours":
        return _format_hours(item.estimated_hours)
    if column == "actual_hours":
        return _format_hours(item.actual_hours)
    if column == "tags":
        return escape(", ".join(item.tags))
    return ""


def item_to_dict(item: WBSItem, progress: float) -> dict[str, Any]:
    return {
        "id": item.id,
        "number": item.number,
        "level": item.level,
        "title": item.title,
        "parent": item.parent_id,
        "children": list(item.child_ids),
        "status": item.status.value,
        "progress": item.progress,
        "rollup_progress": progress,
        "assignee": item.assignee,
        "start_date": item.start_date,
        "due_date": item.due_date,
        "priority": item.priority,
        "estimated_hours": item.estimated_hours,
        "actual_hours": item.actual_hours,
        "tags": item.tags,
    }


def wbs_to_dict(project: Project) -> dict[str, Any]:
    """JSON-ready view of a WBS project, items in tree order."""
    progress = progress_by_id(project)
    summary = summarize_project(project)
    return {
        "type": "wbs",
        "id": project.id,
        "name": project.name,
        "roots": list(project.root_item_ids),
        "items": [
            item_to_dict(item, progress[item.id])
            for item in project.walk()
            if isinstance(item, WBSItem)
        ],
        "summary": {
            "total": summary.total,
            "completed": summary.completed,
            "progress": summary.progress,
            "by_status": summary.by_status,
        },
        "diagnostics": [
            {"level": d.level, "rule": d.rule, "message": d.message, "items": d.item_ids}
            for d in project.diagnostics
        ],
    }


def print_diagnostics(console: Console, project: Project) -> None:
    for d in project.diagnostics:
        style = "bold red" if d.level == "error" else "yellow"
        console.print(f"{d.level.upper()}: [{d.rule}] {d.message}", style=style, markup=False)


def render_wbs(console: Console, project: Project, columns: list[str] | None = None) -> None:
    """Print the task tree as a table, then diagnostics and a summary line."""
    columns = columns or DEFAULT_COLUMNS
    progress = progress_by_id(project)

    table = Table(title=escape(project.name))
    for column in columns:
        justify = "right" if column in ("progress", "priority", "estimated_hours", "actual_hours") else "left"
        table.add_column(COLUMN_HEADERS.get(column, column), justify=justify, no_wrap=column == "wbs")

    for item in project.walk():
        if isinstance(item, WBSItem):
            table.add_row(*(_cell(item, column, progress[item.id]) for column in columns))

    console.print(table)
    print_diagnostics(console, project)

    summary = summarize_project(project)
    console.print(
        f"{summary.completed}/{summary.total} completed, overall progress {summary.progress}%",
        style="bold",
    )


def wbs_columns(store: FileNotesStore, folder: str) -> list[str]:
    """Columns from a `.base` view in the folder, else the defaults."""
    config = find_base_config(store, folder)
    if config is None:
        return DEFAULT_COLUMNS
    return map_to_wbs_columns(get_columns(config))


def run_wbs(
    vault_path: Path,
    folder: str,
    *,
    output_json: bool = False,
    settings: Settings | None = None,
) -> int:
    """Render `folder` as a WBS project.

    Returns:
        Exit code (always 0; structural problems are reported, not fatal)
    """
    settings = settings or load_settings(vault_path)
    store = FileNotesStore(vault_path)
    project = build_wbs_project(store, folder, settings)

    if output_json:
        print(json.dumps(wbs_to_dict(project), indent=2, default=str, ensure_ascii=False))
        return 0

    render_wbs(Console(), project, wbs_columns(store, folder))
    return 0
