"""New command - write a decision note from its template."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..config import Settings, load_settings
from ..decision.templates import create_note
from ..models import DecisionItemType


def run_new(
    vault_path: Path,
    folder: str,
    item_type: DecisionItemType,
    *,
    name: str | None = None,
    parent: str | None = None,
    settings: Settings | None = None,
) -> int:
    """Create a note of `item_type` in `folder` and report where it went."""
    settings = settings or load_settings(vault_path)
    console = Console(stderr=True)

    try:
        path = create_note(
            vault_path,
            folder,
            item_type,
            name=name,
            project_link=parent,
            config_prefix=settings.config_prefix,
        )
    except (ValueError, FileExistsError) as e:
        console.print(f"Error: {e}", style="bold red", markup=False)
        return 1

    console.print(f"Created {path.relative_to(vault_path).as_posix()}", markup=False)
    return 0
