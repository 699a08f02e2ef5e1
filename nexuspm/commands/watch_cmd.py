"""Watch command - re-render a project whenever its notes change."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import load_settings
from ..watcher import run_watch_loop
from .project_cmd import run_show


def run_watch(vault_path: Path, folder: str) -> int:
    """
    Show the project, then again after every debounced change.

    This is a blocking command that runs until interrupted (Ctrl+C).
    Settings are re-read on each refresh so edits to nexuspm.toml apply.
    """
    console = Console(stderr=True)
    refreshes = 0

    def refresh() -> None:
        try:
            settings = load_settings(vault_path)
        except ValueError as e:
            console.print(f"Invalid settings, keeping previous view: {e}", style="yellow", markup=False)
            return
        run_show(vault_path, folder, settings=settings)

    def on_change(paths: set[str]) -> None:
        nonlocal refreshes
        refreshes += 1
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print()
        console.print(f"[dim]{timestamp}[/dim] {len(paths)} file(s) changed, refreshing")
        refresh()

    console.print(f"[bold]Watching[/bold] {escape(str(vault_path / folder))}")
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()
    refresh()

    run_watch_loop(vault_path, folder, on_change)

    console.print()
    console.print(f"[bold]Stopped.[/bold] Refreshed {refreshes} time(s).")
    return 0
