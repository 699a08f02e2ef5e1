"""Assemble a folder of task notes into a WBS project snapshot."""

import logging
from datetime import datetime
from pathlib import PurePosixPath

from ..config import Settings
from ..models import Project
from ..vault.hierarchy import link_project
from ..vault.store import NotesStore, normalize_folder, note_title
from .extractor import extract_wbs_item

logger = logging.getLogger(__name__)


def build_wbs_project(store: NotesStore, folder: str, settings: Settings | None = None) -> Project:
    """Build a fresh WBS project for `folder`.

    Always returns a usable snapshot; structural problems (no root, several
    roots, parent cycles) are recorded in `project.diagnostics`.
    """
    settings = settings or Settings()
    folder = normalize_folder(folder)
    project = Project(id=folder, name=PurePosixPath(folder).name or folder)

    for note in store.list_notes(folder):
        project.items[note.path] = extract_wbs_item(
            note.path,
            note_title(store, note),
            store.get_declared_properties(note),
            settings.properties,
        )

    link_project(project, folder)
    project.last_updated = datetime.now()
    logger.debug(
        "Built WBS project '%s': %d items, %d roots",
        project.id, len(project.items), len(project.root_item_ids),
    )
    return project
