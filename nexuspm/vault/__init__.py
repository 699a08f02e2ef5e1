"""Note access and the shared hierarchy engine."""

from .hierarchy import link_project, resolve_hierarchy, validate_single_root
from .numbering import stamp_tree
from .parser import extract_link_target
from .store import FileNotesStore, MemoryNotesStore, NoteHandle, NotesStore

__all__ = [
    "FileNotesStore",
    "MemoryNotesStore",
    "NoteHandle",
    "NotesStore",
    "extract_link_target",
    "link_project",
    "resolve_hierarchy",
    "stamp_tree",
    "validate_single_root",
]
