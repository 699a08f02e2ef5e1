import pytest

from nexuspm.models import Project, WBSItem, WBSStatus
from nexuspm.wbs.rollup import calculate_progress, leaf_progress, round_half_up, summarize_project


def _project(rows: dict[str, dict]) -> Project:
    """Build a linked project from {id: {"parent": ..., **fields}}."""
    items = {}
    for item_id, row in rows.items():
        fields = dict(row)
        parent = fields.pop("parent", None)
        items[item_id] = WBSItem(id=item_id, title=item_id, parent_id=parent, **fields)
    for item in items.values():
        if item.parent_id:
            items[item.parent_id].child_ids.append(item.id)
    roots = sorted(i for i, item in items.items() if not item.parent_id)
    return Project(id="p", name="p", items=items, root_item_ids=roots)


def test_parent_is_mean_of_children() -> None:
    project = _project(
        {
            "root": {},
            "done": {"parent": "root", "progress": 100},
            "todo": {"parent": "root", "progress": 0},
        }
    )
    assert calculate_progress(project.items, "root") == 50


def test_three_levels_roll_up() -> None:
    project = _project(
        {
            "grand": {},
            "mid": {"parent": "grand"},
            "a": {"parent": "mid", "progress": 100},
            "b": {"parent": "mid", "status": WBSStatus.COMPLETED},
        }
    )
    assert calculate_progress(project.items, "mid") == 100
    assert calculate_progress(project.items, "grand") == 100


def test_averages_child_rollups_not_leaves() -> None:
    project = _project(
        {
            "root": {},
            "phase": {"parent": "root"},
            "p1": {"parent": "phase", "progress": 100},
            "p2": {"parent": "phase", "progress": 100},
            "p3": {"parent": "phase", "progress": 100},
            "solo": {"parent": "root", "progress": 0},
        }
    )
    assert calculate_progress(project.items, "root") == 50


@pytest.mark.parametrize(
    ("status", "progress", "expected"),
    [
        (WBSStatus.COMPLETED, 0, 100),
        (WBSStatus.IN_PROGRESS, 0, 50),
        (WBSStatus.IN_PROGRESS, 20, 20),
        (WBSStatus.NOT_STARTED, 0, 0),
        (WBSStatus.CANCELLED, 0, 0),
        (WBSStatus.BLOCKED, 0, 0),
        (WBSStatus.BLOCKED, 30, 30),
    ],
)
def test_leaf_progress(status, progress, expected) -> None:
    assert leaf_progress(WBSItem(id="x", title="x", status=status, progress=progress)) == expected


def test_rounding_is_half_up() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4999) == 2

    project = _project(
        {
            "root": {},
            "a": {"parent": "root", "progress": 1},
            "b": {"parent": "root", "progress": 0},
        }
    )
    assert calculate_progress(project.items, "root") == 1


def test_parent_without_resolvable_children_reports_zero() -> None:
    project = _project({"root": {"progress": 80}})
    project.items["root"].child_ids.append("gone")
    assert calculate_progress(project.items, "root") == 0


def test_unknown_id_reports_zero() -> None:
    assert calculate_progress({}, "missing") == 0


def test_cyclic_child_lists_terminate() -> None:
    project = _project({"a": {}, "b": {"parent": "a", "progress": 100}})
    project.items["b"].child_ids.append("a")
    assert calculate_progress(project.items, "a") == 0


def test_summary_counts_statuses_and_overall_progress() -> None:
    project = _project(
        {
            "root": {},
            "a": {"parent": "root", "status": WBSStatus.COMPLETED},
            "b": {"parent": "root", "status": WBSStatus.BLOCKED},
            "c": {"parent": "root", "status": WBSStatus.IN_PROGRESS},
        }
    )

    summary = summarize_project(project)

    assert summary.total == 4
    assert summary.completed == 1
    assert summary.by_status["blocked"] == 1
    assert summary.by_status["not-started"] == 1
    assert summary.progress == 50


def test_summary_of_empty_project() -> None:
    summary = summarize_project(Project(id="p", name="p"))
    assert summary.total == 0
    assert summary.progress == 0
