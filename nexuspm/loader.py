"""Project loading: pick the project type for a folder and assemble it."""

import logging
from pathlib import Path

from .config import Settings, detect_project_type, load_settings
from .decision.assembler import build_decision_project
from .models import Project, ProjectType
from .vault.store import FileNotesStore, FolderStore
from .wbs.assembler import build_wbs_project

logger = logging.getLogger(__name__)


def build_project(
    store: FolderStore,
    folder: str,
    settings: Settings | None = None,
    project_type: ProjectType | None = None,
) -> Project | None:
    """Assemble `folder` as the given type, or the detected one.

    Returns None when the folder is neither a WBS nor a decision project.
    """
    if project_type is None:
        project_type = detect_project_type(store, folder)
        logger.debug("Detected project type '%s' for '%s'", project_type, folder)

    if project_type == "wbs":
        return build_wbs_project(store, folder, settings)
    if project_type == "decision":
        return build_decision_project(store, folder, settings)
    return None


def load_project(
    vault_path: Path,
    folder: str,
    project_type: ProjectType | None = None,
) -> Project | None:
    """Read `nexuspm.toml` and the notes under `vault_path`, then build `folder`."""
    store = FileNotesStore(vault_path)
    return build_project(store, folder, load_settings(vault_path), project_type)
