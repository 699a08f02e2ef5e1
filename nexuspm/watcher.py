"""
File system watcher that rebuilds a project after its notes change.

Editors save in bursts (write temp file, rename, touch metadata), so events
are collected per path and only reported once a path has been quiet for the
debounce window. The callback receives the set of vault-relative paths that
changed and runs on the thread calling `flush_pending`, not on the watchdog
observer thread.
"""

import logging
import threading
import time
from pathlib import Path, PurePosixPath
from typing import Callable

from watchdog.events import (
    FileSystemEventHandler,
    FileCreatedEvent,
    FileModifiedEvent,
    FileDeletedEvent,
    FileMovedEvent,
)
from watchdog.observers import Observer

from .config import MARKER_FILENAME, SETTINGS_FILENAME
from .vault.store import in_folder, normalize_folder

logger = logging.getLogger(__name__)


class FolderChangeHandler(FileSystemEventHandler):
    """
    Collects file events for one project folder.

    Key behaviors:
    - Filters to files that can change a project (.md, .base, the folder's
      .nexuspm marker, the vault's nexuspm.toml)
    - Ignores hidden directories such as .obsidian and .git
    - Debounces rapid modifications per path
    """

    RELEVANT_EXTENSIONS = {".md", ".base"}
    DEBOUNCE_SECONDS = 1.0

    def __init__(
        self,
        vault_path: Path,
        folder: str,
        on_change: Callable[[set[str]], None] | None = None,
    ):
        super().__init__()
        self.vault_path = vault_path
        self.folder = normalize_folder(folder)
        self.on_change = on_change

        # vault-relative path -> time of last event
        self.pending: dict[str, float] = {}
        # events arrive on the observer thread, flushes on the caller's
        self._lock = threading.Lock()

    def _relative(self, path: str | bytes) -> str | None:
        if isinstance(path, bytes):
            path = path.decode()
        try:
            return Path(path).resolve().relative_to(self.vault_path.resolve()).as_posix()
        except ValueError:
            return None

    def is_relevant(self, rel_path: str) -> bool:
        """Check whether a vault-relative path can affect the project."""
        p = PurePosixPath(rel_path)

        if rel_path == SETTINGS_FILENAME:
            return True

        if any(part.startswith(".") for part in p.parts[:-1]):
            return False
        if not in_folder(rel_path, self.folder):
            return False

        if p.name == MARKER_FILENAME:
            return True
        if p.name.startswith("."):
            return False
        return p.suffix.lower() in self.RELEVANT_EXTENSIONS

    def _mark(self, path: str | bytes) -> None:
        rel_path = self._relative(path)
        if rel_path is None or not self.is_relevant(rel_path):
            return
        with self._lock:
            self.pending[rel_path] = time.time()

    def flush_pending(self, now: float | None = None) -> bool:
        """Report paths that have passed the debounce window.

        Returns True if the callback was invoked.
        """
        now = time.time() if now is None else now
        with self._lock:
            ready = {
                path for path, timestamp in list(self.pending.items())
                if now - timestamp >= self.DEBOUNCE_SECONDS
            }
            for path in ready:
                del self.pending[path]
        if not ready:
            return False

        logger.debug("Changed: %s", ", ".join(sorted(ready)))
        if self.on_change:
            self.on_change(ready)
        return True

    def on_created(self, event: FileCreatedEvent) -> None:
        if not event.is_directory:
            self._mark(event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:
        if not event.is_directory:
            self._mark(event.src_path)

    def on_deleted(self, event: FileDeletedEvent) -> None:
        if not event.is_directory:
            self._mark(event.src_path)

    def on_moved(self, event: FileMovedEvent) -> None:
        """A move touches both ends: either may belong to the project."""
        if event.is_directory:
            return
        self._mark(event.src_path)
        self._mark(event.dest_path)


def watch_folder(
    vault_path: Path,
    folder: str,
    on_change: Callable[[set[str]], None] | None = None,
) -> tuple[Observer, FolderChangeHandler]:
    """
    Start watching a vault for changes to one project folder.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = FolderChangeHandler(vault_path=vault_path, folder=folder, on_change=on_change)

    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=True)
    observer.start()

    return observer, handler


def run_watch_loop(
    vault_path: Path,
    folder: str,
    on_change: Callable[[set[str]], None] | None = None,
) -> None:
    """
    Run the watch loop until interrupted.

    Blocks, flushing debounced changes every half second.
    """
    observer, handler = watch_folder(vault_path, folder, on_change)

    try:
        while True:
            time.sleep(0.5)
            handler.flush_pending()
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
