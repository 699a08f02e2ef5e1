"""Show and init commands - project type detection and markers."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..config import Settings, detect_project_type, initialize_project, load_settings
from ..models import ProjectType
from ..vault.store import FileNotesStore
from .decision_cmd import run_decision
from .wbs_cmd import run_wbs


def run_show(
    vault_path: Path,
    folder: str,
    *,
    output_json: bool = False,
    settings: Settings | None = None,
) -> int:
    """Render `folder` as whatever kind of project it is."""
    settings = settings or load_settings(vault_path)
    project_type = detect_project_type(FileNotesStore(vault_path), folder)

    if project_type == "wbs":
        return run_wbs(vault_path, folder, output_json=output_json, settings=settings)
    if project_type == "decision":
        return run_decision(vault_path, folder, output_json=output_json, settings=settings)

    console = Console(stderr=True)
    console.print(f"Could not tell what kind of project '{folder}' is.", style="bold red", markup=False)
    console.print("Mark it with `nexuspm init FOLDER --type wbs|decision`.", style="dim", markup=False)
    return 1


def run_init(vault_path: Path, folder: str, project_type: ProjectType, name: str | None = None) -> int:
    """Write the folder's `.nexuspm` marker."""
    console = Console(stderr=True)
    path = initialize_project(vault_path, folder, project_type, name)
    console.print(f"Marked {path.relative_to(vault_path).as_posix()} as a {project_type} project", markup=False)
    return 0
