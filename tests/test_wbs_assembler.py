from datetime import date
from pathlib import Path

from nexuspm.config import PropertyMapping, Settings
from nexuspm.models import WBSStatus
from nexuspm.vault.hierarchy import validate_single_root
from nexuspm.vault.store import FileNotesStore, MemoryNotesStore
from nexuspm.wbs.assembler import build_wbs_project
from nexuspm.wbs.rollup import progress_by_id, summarize_project

SITE = "Projects/Site"


def test_builds_numbered_tree(wbs_vault: Path) -> None:
    project = build_wbs_project(FileNotesStore(wbs_vault), SITE)

    assert project.id == SITE
    assert project.name == "Site"
    assert project.root_item_ids == [f"{SITE}/Site.md"]
    assert project.diagnostics == []
    assert validate_single_root(project).valid

    rows = [(item.number, item.level, item.title) for item in project.walk()]
    assert rows == [
        ("1", 0, "Website relaunch"),
        ("1.1", 1, "Build phase"),
        ("1.1.1", 2, "Backend"),
        ("1.1.2", 2, "Frontend"),
        ("1.2", 1, "Design phase"),
    ]


def test_fields_and_rollup(wbs_vault: Path) -> None:
    project = build_wbs_project(FileNotesStore(wbs_vault), SITE)

    design = project.items[f"{SITE}/Design.md"]
    assert design.status is WBSStatus.COMPLETED
    assert design.due_date == date(2024, 3, 1)

    frontend = project.items[f"{SITE}/Frontend.md"]
    assert frontend.status is WBSStatus.COMPLETED
    assert frontend.progress == 100

    progress = progress_by_id(project)
    assert progress[f"{SITE}/Build.md"] == 70
    assert progress[f"{SITE}/Site.md"] == 85

    summary = summarize_project(project)
    assert summary.total == 5
    assert summary.completed == 2
    assert summary.progress == 85


def test_second_root_is_reported(wbs_vault: Path, write_note) -> None:
    write_note(f"{SITE}/Stray.md", "---", "parent: '[[Nowhere]]'", "---", "# Stray")

    project = build_wbs_project(FileNotesStore(wbs_vault), SITE)

    assert project.root_item_ids == [f"{SITE}/Site.md", f"{SITE}/Stray.md"]
    assert [d.rule for d in project.diagnostics] == ["multiple-roots"]
    assert project.diagnostics[0].item_ids == project.root_item_ids
    # the tree is still built
    assert project.items[f"{SITE}/Build.md"].number == "1.1"


def test_empty_folder_has_no_root(vault: Path) -> None:
    (vault / "Empty").mkdir()
    project = build_wbs_project(FileNotesStore(vault), "Empty")

    assert project.items == {}
    assert [d.rule for d in project.diagnostics] == ["no-root"]
    assert project.diagnostics[0].item_ids == []


def test_only_the_requested_folder_is_read(wbs_vault: Path, write_note) -> None:
    write_note("Projects/Other/Site.md", "# Other site")
    project = build_wbs_project(FileNotesStore(wbs_vault), SITE)
    assert all(item_id.startswith(f"{SITE}/") for item_id in project.items)


def test_authored_numbers_survive_assembly() -> None:
    store = MemoryNotesStore(
        {
            "p/root.md": "# Root\n",
            "p/a.md": "---\nparent: root\n---\n",
            "p/b.md": "---\nparent: root\nwbs-number: '7'\n---\n",
            "p/b1.md": "---\nparent: b\n---\n",
        }
    )
    project = build_wbs_project(store, "p")

    assert {i: n.number for i, n in project.items.items()} == {
        "p/root.md": "1",
        "p/a.md": "1.1",
        "p/b.md": "7",
        "p/b1.md": "7.1",
    }


def test_settings_property_mapping_is_used() -> None:
    store = MemoryNotesStore(
        {
            "p/root.md": "# Root\n",
            "p/task.md": "---\nup: '[[root]]'\nstate: doing\n---\n",
        }
    )
    settings = Settings(properties=PropertyMapping(parent="up", status="state"))

    project = build_wbs_project(store, "p", settings)

    task = project.items["p/task.md"]
    assert task.parent_id == "p/root.md"
    assert task.status is WBSStatus.IN_PROGRESS


def test_assembly_is_deterministic(wbs_vault: Path) -> None:
    def snapshot():
        project = build_wbs_project(FileNotesStore(wbs_vault), SITE)
        return [(n.id, n.number, n.level, tuple(n.child_ids)) for n in project.walk()]

    assert snapshot() == snapshot()


def test_yaml_comment_in_frontmatter_is_not_a_title() -> None:
    store = MemoryNotesStore(
        {
            "p/Root.md": "---\n# owner: ops team\nstatus: todo\n---\n\nBody text, no heading.\n",
            "p/Child.md": "---\nparent: Root\n# progress: 50\n---\n\n# Child task\n",
        }
    )

    project = build_wbs_project(store, "p")

    assert project.items["p/Root.md"].title == "Root"
    assert project.items["p/Child.md"].title == "Child task"
