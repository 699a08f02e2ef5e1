"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """An empty vault directory."""
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def write_note(vault: Path) -> Callable[..., Path]:
    """Write a file into the vault from lines of text."""

    def _write(rel_path: str, *lines: str) -> Path:
        path = vault / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def wbs_vault(vault: Path, write_note) -> Path:
    """A small website project: one root, two phases, three tasks."""
    write_note(
        "Projects/Site/Site.md",
        "---",
        "status: in-progress",
        "assignee: Aiko",
        "---",
        "",
        "# Website relaunch",
    )
    write_note(
        "Projects/Site/Design.md",
        "---",
        'parent: "[[Site]]"',
        "status: done",
        "due-date: 2024-03-01",
        "---",
        "",
        "# Design phase",
    )
    write_note(
        "Projects/Site/Build.md",
        "---",
        "parent: '[Site](Site.md)'",
        "start-date: 2024-03-02",
        "---",
        "",
        "# Build phase",
    )
    write_note(
        "Projects/Site/Backend.md",
        "---",
        "parent: Build",
        "progress: 40",
        "---",
    )
    write_note(
        "Projects/Site/Frontend.md",
        "---",
        'parent: "[[Build|the build]]"',
        "completed: true",
        "status: in-progress",
        "---",
        "",
        "# Frontend",
    )
    return vault
