"""Tests for the debounced folder watcher (no observer thread involved)."""

import threading
from pathlib import Path

import pytest
from watchdog.events import DirModifiedEvent, FileDeletedEvent, FileModifiedEvent, FileMovedEvent

from nexuspm.watcher import FolderChangeHandler


@pytest.fixture
def changes() -> list[set[str]]:
    return []


@pytest.fixture
def handler(vault: Path, changes) -> FolderChangeHandler:
    return FolderChangeHandler(vault, "Projects/Site/", on_change=changes.append)


@pytest.mark.parametrize(
    ("rel_path", "relevant"),
    [
        ("Projects/Site/Task.md", True),
        ("Projects/Site/sub/Task.MD", True),
        ("Projects/Site/board.canvas", False),
        ("Projects/Site/tasks.base", True),
        ("Projects/Site/.nexuspm", True),
        ("nexuspm.toml", True),
        ("Projects/Site/image.png", False),
        ("Projects/Site/.hidden.md", False),
        ("Projects/Site/.trash/Task.md", False),
        (".obsidian/workspace.json", False),
        ("Projects/Other/Task.md", False),
        ("Projects/Site2/Task.md", False),
        ("Projects/Site/nexuspm.toml", False),
    ],
)
def test_relevance(handler: FolderChangeHandler, rel_path: str, relevant: bool) -> None:
    assert handler.is_relevant(rel_path) is relevant


def test_events_are_debounced(handler: FolderChangeHandler, vault: Path, changes) -> None:
    task = vault / "Projects" / "Site" / "Task.md"

    handler.on_modified(FileModifiedEvent(str(task)))
    handler.on_modified(FileModifiedEvent(str(task)))
    marked_at = handler.pending["Projects/Site/Task.md"]

    assert handler.flush_pending(now=marked_at + 0.2) is False
    assert changes == []

    assert handler.flush_pending(now=marked_at + handler.DEBOUNCE_SECONDS) is True
    assert changes == [{"Projects/Site/Task.md"}]
    assert handler.pending == {}


def test_only_quiet_paths_are_flushed(handler: FolderChangeHandler, changes) -> None:
    handler.pending = {"Projects/Site/a.md": 10.0, "Projects/Site/b.md": 10.8}

    handler.flush_pending(now=11.0)

    assert changes == [{"Projects/Site/a.md"}]
    assert list(handler.pending) == ["Projects/Site/b.md"]


def test_irrelevant_and_directory_events_are_ignored(handler: FolderChangeHandler, vault: Path) -> None:
    handler.on_modified(FileModifiedEvent(str(vault / "Projects" / "Site" / "photo.jpg")))
    handler.on_modified(DirModifiedEvent(str(vault / "Projects" / "Site")))
    handler.on_deleted(FileDeletedEvent(str(vault.parent / "outside.md")))

    assert handler.pending == {}
    assert handler.flush_pending(now=1e12) is False


def test_move_marks_both_ends(handler: FolderChangeHandler, vault: Path) -> None:
    handler.on_moved(
        FileMovedEvent(
            str(vault / "Projects" / "Site" / "Old.md"),
            str(vault / "Archive" / "Old.md"),
        )
    )
    handler.on_moved(
        FileMovedEvent(
            str(vault / "Inbox" / "New.md"),
            str(vault / "Projects" / "Site" / "New.md"),
        )
    )

    assert set(handler.pending) == {"Projects/Site/Old.md", "Projects/Site/New.md"}


def test_flush_without_callback(vault: Path) -> None:
    handler = FolderChangeHandler(vault, "")
    handler.on_modified(FileModifiedEvent(str(vault / "Any.md")))

    assert handler.flush_pending(now=1e12) is True


def test_flush_while_events_arrive_from_another_thread(handler: FolderChangeHandler, vault: Path, changes) -> None:
    site = vault / "Projects" / "Site"
    expected = {f"Projects/Site/Task {i}.md" for i in range(500)}

    def produce() -> None:
        for i in range(500):
            handler.on_modified(FileModifiedEvent(str(site / f"Task {i}.md")))

    producer = threading.Thread(target=produce)
    producer.start()
    while producer.is_alive():
        handler.flush_pending(now=1e12)
    producer.join()
    handler.flush_pending(now=1e12)

    reported = set().union(*changes)
    assert reported == expected
    assert sum(len(batch) for batch in changes) == len(expected)
    assert handler.pending == {}
