import logging
from datetime import date
from pathlib import Path

from nexuspm.vault.store import FileNotesStore, MemoryNotesStore, NoteHandle, in_folder, note_title


def test_note_handle_parts() -> None:
    note = NoteHandle("Projects/Site/Launch plan.md")
    assert note.basename == "Launch plan"
    assert note.folder == "Projects/Site"
    assert note.suffix == ".md"
    assert NoteHandle("top.md").folder == ""


def test_in_folder_matches_whole_segments() -> None:
    assert in_folder("Projects/Site/a.md", "Projects/Site")
    assert in_folder("Projects/Site/deep/a.md", "/Projects/Site/")
    assert not in_folder("Projects/Site2/a.md", "Projects/Site")
    assert in_folder("anything.md", "")


def test_file_store_lists_markdown_notes_sorted(vault: Path, write_note) -> None:
    write_note("Projects/Site/b.md", "# B")
    write_note("Projects/Site/a.md", "# A")
    write_note("Projects/Site/sub/c.md", "# C")
    write_note("Projects/Site/view.base", "views: []")
    write_note("Projects/Site/.nexuspm", "{}")
    write_note("Projects/Site/.obsidian/workspace.md", "# hidden")
    write_note("Projects/Other/d.md", "# D")

    store = FileNotesStore(vault)

    assert [n.path for n in store.list_notes("Projects/Site")] == [
        "Projects/Site/a.md",
        "Projects/Site/b.md",
        "Projects/Site/sub/c.md",
    ]
    assert store.list_files("Projects/Site", ".base") == ["Projects/Site/view.base"]
    assert store.read_file("Projects/Site/.nexuspm") == "{}\n"
    assert store.read_file("Projects/Site/missing.md") is None


def test_frontmatter_values_are_yaml_typed(vault: Path, write_note) -> None:
    write_note(
        "p/task.md",
        "---",
        "due-date: 2024-03-01",
        "progress: 40",
        "tags: [a, b]",
        "---",
        "",
        "# Task title",
        "",
        "Body text.",
    )
    store = FileNotesStore(vault)
    note = NoteHandle("p/task.md")

    props = store.get_declared_properties(note)
    assert props == {"due-date": date(2024, 3, 1), "progress": 40, "tags": ["a", "b"]}
    assert store.get_first_heading(note) == "Task title"
    assert "Body text." in store.get_raw_content(note)


def test_note_without_frontmatter_has_no_properties(vault: Path, write_note) -> None:
    write_note("p/plain.md", "Just text")
    store = FileNotesStore(vault)
    note = NoteHandle("p/plain.md")

    assert store.get_declared_properties(note) is None
    assert note_title(store, note) == "plain"


def test_malformed_frontmatter_is_logged_and_ignored(vault: Path, write_note, caplog) -> None:
    write_note("p/broken.md", "---", "status: [unclosed", "---", "", "# Still readable")
    store = FileNotesStore(vault)
    note = NoteHandle("p/broken.md")

    with caplog.at_level(logging.WARNING, logger="nexuspm.vault.store"):
        assert store.get_declared_properties(note) is None

    assert "p/broken.md" in caplog.text
    assert note_title(store, note) == "Still readable"


def test_title_ignores_frontmatter_comments() -> None:
    store = MemoryNotesStore({"p/Root.md": "---\n# owner: ops team\nstatus: todo\n---\n\nBody text, no heading.\n"})
    note = NoteHandle("p/Root.md")

    assert store.get_first_heading(note) is None
    assert note_title(store, note) == "Root"


class _RawOnlyStore:
    """A store that offers no parsed headings, only raw text."""

    def __init__(self, text: str):
        self.text = text

    def get_first_heading(self, note: NoteHandle) -> None:
        return None

    def get_raw_content(self, note: NoteHandle) -> str:
        return self.text


def test_raw_title_fallback_skips_frontmatter() -> None:
    note = NoteHandle("p/Plan.md")

    assert note_title(_RawOnlyStore("---\n# not a title\n---\n"), note) == "Plan"
    assert note_title(_RawOnlyStore("---\nstatus: todo\n---\n# Launch plan\n"), note) == "Launch plan"


def test_file_listing_is_taken_once_per_store(vault: Path, write_note) -> None:
    write_note("p/a.md", "# A")
    store = FileNotesStore(vault)
    assert [n.path for n in store.list_notes("p")] == ["p/a.md"]

    write_note("p/b.md", "# B")
    assert [n.path for n in store.list_notes("p")] == ["p/a.md"]
    assert [n.path for n in FileNotesStore(vault).list_notes("p")] == ["p/a.md", "p/b.md"]


def test_file_store_does_not_descend_into_hidden_directories(vault: Path, write_note) -> None:
    write_note(".git/objects/readme.md", "# git internals")
    write_note(".obsidian/plugins/x.base", "views: []")
    write_note("Top.md", "# Top")

    store = FileNotesStore(vault)

    assert [n.path for n in store.list_notes("")] == ["Top.md"]
    assert store.list_files("", ".base") == []
