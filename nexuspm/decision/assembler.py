"""Assemble a folder of typed decision notes into a project snapshot."""

import logging
from datetime import datetime
from pathlib import PurePosixPath

from ..config import DEFAULT_CONFIG_PREFIX, Settings
from ..models import DecisionProject, DecisionProjectConfig
from ..vault.hierarchy import link_project
from ..vault.parser import first_heading
from ..vault.store import NoteHandle, NotesStore, normalize_folder, note_title
from .extractor import EXTRACTORS, detect_item_type, extract_project_config

logger = logging.getLogger(__name__)


def find_project_config_note(
    store: NotesStore,
    folder: str,
    prefix: str = DEFAULT_CONFIG_PREFIX,
) -> NoteHandle | None:
    """The folder's `decision-project` note.

    A note whose filename starts with `prefix` wins; otherwise the first
    such note in path order. None if the folder has no project note.
    """
    candidates = [
        note for note in store.list_notes(folder)
        if detect_item_type(store.get_declared_properties(note)) == "decision-project"
    ]
    if not candidates:
        return None

    for note in candidates:
        if prefix and note.basename.startswith(prefix):
            return note
    return candidates[0]


def build_decision_project(store: NotesStore, folder: str, settings: Settings | None = None) -> DecisionProject:
    """Build a fresh decision project for `folder`.

    Notes without a recognised `nexuspm-type` are skipped. Criteria and
    gates come from the project note, or are empty when there is none.
    """
    settings = settings or Settings()
    folder = normalize_folder(folder)
    project = DecisionProject(id=folder, name=PurePosixPath(folder).name or folder)

    config_note = find_project_config_note(store, folder, settings.config_prefix)
    if config_note is not None:
        project.config = extract_project_config(store.get_declared_properties(config_note))
        project.config_note_id = config_note.path
        heading = store.get_first_heading(config_note) or first_heading(store.get_raw_content(config_note))
        if heading:
            project.name = heading
    else:
        project.config = DecisionProjectConfig()
        logger.debug("No decision-project note in '%s'; using empty criteria", folder)

    skipped = 0
    for note in store.list_notes(folder):
        properties = store.get_declared_properties(note)
        extract = EXTRACTORS.get(detect_item_type(properties) or "")
        if extract is None:
            skipped += 1
            continue
        project.items[note.path] = extract(note.path, note_title(store, note), properties, settings.properties)

    link_project(project, folder)
    project.last_updated = datetime.now()
    logger.debug(
        "Built decision project '%s': %d items (%d untyped notes skipped), %d criteria",
        project.id, len(project.items), skipped, len(project.config.criteria),
    )
    return project
