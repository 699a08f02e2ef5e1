"""Validate command - structural checks on a project folder."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console

from ..config import Settings, load_settings
from ..loader import build_project
from ..models import ProjectType
from ..vault.hierarchy import validate_single_root
from ..vault.store import FileNotesStore


def run_validate(
    vault_path: Path,
    folder: str,
    *,
    output_json: bool = False,
    project_type: ProjectType | None = None,
    settings: Settings | None = None,
) -> int:
    """Check the single-root invariant and parent cycles.

    Returns:
        Exit code (0 = valid, 1 = errors found or not a project)
    """
    console = Console(stderr=True)
    settings = settings or load_settings(vault_path)

    project = build_project(FileNotesStore(vault_path), folder, settings, project_type)
    if project is None:
        console.print(f"'{folder}' is not a WBS or decision project.", style="bold red", markup=False)
        console.print("Run `nexuspm init` to mark it, or add notes with a parent property.", style="dim", markup=False)
        return 1

    result = validate_single_root(project)

    if output_json:
        output = {
            "project": project.id,
            "valid": not project.has_errors,
            "root": project.root_item_ids[0] if result.valid else None,
            "error": result.error,
            "error_item_ids": result.error_item_ids,
            "diagnostics": [
                {"level": d.level, "rule": d.rule, "message": d.message, "items": d.item_ids}
                for d in project.diagnostics
            ],
        }
        print(json.dumps(output, indent=2, ensure_ascii=False))
        return 1 if project.has_errors else 0

    for d in project.diagnostics:
        style = "bold red" if d.level == "error" else "yellow"
        console.print(str(d), style=style, markup=False)
        for item_id in d.item_ids:
            console.print(f"  {item_id}", style="dim", markup=False)

    if project.has_errors:
        errors = sum(1 for d in project.diagnostics if d.level == "error")
        console.print(f"❌ {errors} error(s) in {project.id} ({len(project.items)} notes)", style="bold red")
        return 1

    root = project.items[project.root_item_ids[0]]
    console.print(
        f"✅ {project.id}: {len(project.items)} notes under one root ({root.title})",
        style="bold green",
        markup=False,
    )
    return 0
