"""Parent-link resolution, root detection and structural checks."""

import logging
from collections.abc import Mapping

from ..models import Diagnostic, Node, Project, ValidationResult
from .numbering import stamp_tree
from .parser import MD_SUFFIX, extract_link_target, strip_md_suffix
from .store import normalize_folder

logger = logging.getLogger(__name__)


def _basename(item_id: str) -> str:
    return strip_md_suffix(item_id.rsplit("/", 1)[-1])


def resolve_parent_path(target: str, folder: str, items: Mapping[str, Node]) -> str | None:
    """Resolve a backlink target to the id of an existing node.

    Tried in order, first hit wins:
    1. the target as an exact id
    2. `{folder}/{target}.md`
    3. `{folder}/{target}`
    4. `{target}.md`
    5. any node whose basename equals the target (ids scanned in sorted order)
    """
    if target in items:
        return target

    folder = normalize_folder(folder)
    prefix = f"{folder}/" if folder else ""
    candidates = [
        f"{prefix}{target}{MD_SUFFIX}",
        f"{prefix}{target}",
        f"{target}{MD_SUFFIX}",
    ]
    for candidate in candidates:
        if candidate in items:
            return candidate

    for item_id in sorted(items):
        if _basename(item_id) == target:
            return item_id

    return None


def resolve_hierarchy(items: Mapping[str, Node], folder: str) -> list[Diagnostic]:
    """Link every node to its parent and fill in child lists.

    Unresolvable parents are dropped: the node becomes a root. Parent cycles
    are broken afterwards (see `break_parent_cycles`) and reported.

    Returns diagnostics for the cycles that were broken.
    """
    for item_id in sorted(items):
        item = items[item_id]
        # raw link syntax is accepted as well as bare targets
        target = extract_link_target(item.parent_id)
        if not target:
            item.parent_id = None
            continue

        resolved = resolve_parent_path(target, folder, items)
        if resolved is None:
            logger.debug("Parent '%s' of %s did not resolve; treating as root", item.parent_id, item_id)
            item.parent_id = None
            continue

        item.parent_id = resolved
        parent = items[resolved]
        if item_id not in parent.child_ids:
            parent.child_ids.append(item_id)

    return break_parent_cycles(items)


def find_parent_cycles(items: Mapping[str, Node]) -> list[list[str]]:
    """Find cycles in the parent chains.

    Each node has at most one parent, so every cycle is found by walking
    parent pointers until we hit a node already seen. Cycles are returned in
    child -> parent order, rotated to start at their smallest id.
    """
    state: dict[str, int] = {}  # 1 = on current walk, 2 = finished
    cycles = []

    for start in sorted(items):
        if start in state:
            continue

        path: list[str] = []
        current: str | None = start
        while current is not None and current in items and current not in state:
            state[current] = 1
            path.append(current)
            current = items[current].parent_id

        if current is not None and state.get(current) == 1:
            cycle = path[path.index(current):]
            smallest = cycle.index(min(cycle))
            cycles.append(cycle[smallest:] + cycle[:smallest])

        for item_id in path:
            state[item_id] = 2

    return cycles


def break_parent_cycles(items: Mapping[str, Node]) -> list[Diagnostic]:
    """Demote the smallest id of each parent cycle to a root."""
    diagnostics = []

    for cycle in find_parent_cycles(items):
        demoted = items[cycle[0]]
        old_parent = items.get(demoted.parent_id) if demoted.parent_id else None
        if old_parent is not None and demoted.id in old_parent.child_ids:
            old_parent.child_ids.remove(demoted.id)
        demoted.parent_id = None

        chain = " → ".join(cycle + [cycle[0]])
        logger.warning("Parent cycle %s; %s demoted to root", chain, demoted.id)
        diagnostics.append(
            Diagnostic(
                level="error",
                rule="parent-cycle",
                message=f"Parent chain forms a cycle: {chain}. '{demoted.id}' is shown as a root until fixed.",
                item_ids=list(cycle),
            )
        )

    return diagnostics


def find_roots(items: Mapping[str, Node]) -> list[str]:
    """Ids of parentless nodes, sorted."""
    return sorted(item_id for item_id, item in items.items() if not item.parent_id)


def validate_single_root(project: Project) -> ValidationResult:
    """Check that the project has exactly one root."""
    roots = project.root_item_ids

    if not roots:
        return ValidationResult(
            valid=False,
            error="No root found. Create one note whose parent property is empty.",
        )

    if len(roots) > 1:
        names = ", ".join(
            f"{project.items[r].title} ({r})" if r in project.items else r for r in roots
        )
        return ValidationResult(
            valid=False,
            error=f"Multiple roots: exactly one root is required, found {len(roots)}: {names}",
            error_item_ids=list(roots),
        )

    return ValidationResult(valid=True)


def root_diagnostic(result: ValidationResult) -> Diagnostic | None:
    """Express a failed single-root check as a diagnostic."""
    if result.valid:
        return None
    return Diagnostic(
        level="error",
        rule="multiple-roots" if result.error_item_ids else "no-root",
        message=result.error or "",
        item_ids=list(result.error_item_ids or []),
    )


def link_project(project: Project, folder: str) -> None:
    """Turn the project's extracted nodes into a numbered tree.

    Resolves parents, breaks cycles, finds roots, stamps numbers and levels,
    and records every structural problem in `project.diagnostics`.
    """
    project.diagnostics.extend(resolve_hierarchy(project.items, folder))
    project.root_item_ids = find_roots(project.items)
    stamp_tree(project.items, project.root_item_ids)

    diagnostic = root_diagnostic(validate_single_root(project))
    if diagnostic is not None:
        project.diagnostics.append(diagnostic)
