"""Notes store: the read-only boundary between a vault and the project engine."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Protocol

import frontmatter
import yaml

from .parser import first_heading

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


@dataclass(frozen=True)
class NoteHandle:
    """Reference to one note, by vault-relative POSIX path."""

    path: str

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def suffix(self) -> str:
        return PurePosixPath(self.path).suffix.lower()

    @property
    def folder(self) -> str:
        parent = str(PurePosixPath(self.path).parent)
        return "" if parent == "." else parent


class NotesStore(Protocol):
    """What the project engine needs from whatever holds the notes."""

    def list_notes(self, folder: str) -> list[NoteHandle]:
        """Markdown notes whose path is within or equal to `folder`."""
        ...

    def get_declared_properties(self, note: NoteHandle) -> dict[str, Any] | None:
        """The note's frontmatter, or None if it has none."""
        ...

    def get_first_heading(self, note: NoteHandle) -> str | None:
        """Text of the note's first level-1 heading."""
        ...

    def get_raw_content(self, note: NoteHandle) -> str:
        """Full text of the note."""
        ...


class FolderStore(NotesStore, Protocol):
    """A notes store that can also see non-note files (markers, .base views)."""

    def list_files(self, folder: str, suffix: str) -> list[str]:
        ...

    def read_file(self, path: str) -> str | None:
        ...


def normalize_folder(folder: str) -> str:
    return folder.strip().strip("/")


def in_folder(path: str, folder: str) -> bool:
    """True if `path` is `folder` itself or lives somewhere beneath it."""
    folder = normalize_folder(folder)
    if not folder:
        return True
    return path == folder or path.startswith(folder + "/")


def note_title(store: NotesStore, note: NoteHandle) -> str:
    """H1 heading from the store, else scanned from raw text, else basename."""
    heading = store.get_first_heading(note)
    if heading:
        return heading
    heading = first_heading(store.get_raw_content(note))
    return heading or note.basename


class _TextNotesStore:
    """Shared parsing for stores that can produce a note's raw text."""

    def __init__(self) -> None:
        self._posts: dict[str, frontmatter.Post] = {}

    def _paths(self) -> list[str]:
        raise NotImplementedError

    def read_file(self, path: str) -> str | None:
        raise NotImplementedError

    def list_files(self, folder: str, suffix: str) -> list[str]:
        suffix = suffix.lower()
        return sorted(
            p for p in self._paths()
            if p.lower().endswith(suffix) and in_folder(p, folder)
        )

    def list_notes(self, folder: str) -> list[NoteHandle]:
        return [
            NoteHandle(p) for p in self.list_files(folder, NOTE_SUFFIX)
            if not PurePosixPath(p).name.startswith(".")
        ]

    def get_raw_content(self, note: NoteHandle) -> str:
        return self.read_file(note.path) or ""

    def _post(self, note: NoteHandle) -> frontmatter.Post:
        post = self._posts.get(note.path)
        if post is not None:
            return post

        text = self.get_raw_content(note)
        try:
            post = frontmatter.loads(text)
        except (yaml.YAMLError, ValueError, TypeError) as e:
            logger.warning("Ignoring malformed frontmatter in %s: %s", note.path, e)
            post = frontmatter.Post(text)

        self._posts[note.path] = post
        return post

    def get_declared_properties(self, note: NoteHandle) -> dict[str, Any] | None:
        if note.suffix != NOTE_SUFFIX:
            return None
        metadata = self._post(note).metadata
        return dict(metadata) if metadata else None

    def get_first_heading(self, note: NoteHandle) -> str | None:
        return first_heading(self._post(note).content)


class FileNotesStore(_TextNotesStore):
    """Notes read from a vault directory on disk.

    The file listing is taken once per store, so a store is a snapshot of
    the vault's layout; build a new store to see added or removed files.
    """

    def __init__(self, vault_path: Path):
        super().__init__()
        self.vault_path = vault_path
        self._listing: list[str] | None = None

    def _paths(self) -> list[str]:
        if self._listing is None:
            self._listing = self._scan()
        return self._listing

    def _scan(self) -> list[str]:
        paths = []
        for dirpath, dirnames, filenames in os.walk(self.vault_path):
            # Skip hidden directories (.obsidian, .git, ...) but keep dotfiles
            # such as the .nexuspm marker that sit directly in a folder.
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            rel_dir = Path(dirpath).relative_to(self.vault_path)
            for name in filenames:
                paths.append((rel_dir / name).as_posix())
        return paths

    def read_file(self, path: str) -> str | None:
        file = self.vault_path / path
        try:
            return file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", file, e)
            return None


class MemoryNotesStore(_TextNotesStore):
    """Notes held in memory as {path: markdown text}."""

    def __init__(self, notes: Mapping[str, str]):
        super().__init__()
        self.notes = dict(notes)

    def _paths(self) -> list[str]:
        return list(self.notes)

    def read_file(self, path: str) -> str | None:
        return self.notes.get(path)
