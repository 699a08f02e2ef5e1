"""Settings, property-key mapping, and project-type markers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any

from .models import DECISION_ITEM_TYPES, ProjectType
from .vault.store import FolderStore, NoteHandle, normalize_folder

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "nexuspm.toml"
MARKER_FILENAME = ".nexuspm"
DEFAULT_MAX_SCORE = 5
DEFAULT_TOP_RISKS = 5
DEFAULT_CONFIG_PREFIX = "_project"

# Legacy / alternate property names consulted after the primary key
DEFAULT_ALIASES: dict[str, tuple[str, ...]] = {
    "start_date": ("startDate",),
    "due_date": ("dueDate", "deadline"),
    "estimated_hours": ("estimatedHours",),
    "actual_hours": ("actualHours",),
    "wbs_number": ("wbsNumber",),
}


@dataclass
class PropertyMapping:
    """Logical field name -> frontmatter key used by a vault."""

    parent: str = "parent"
    status: str = "status"
    assignee: str = "assignee"
    start_date: str = "start-date"
    due_date: str = "due-date"
    # Full Calendar style scheduling
    date: str = "date"
    progress: str = "progress"
    estimated_hours: str = "estimated-hours"
    actual_hours: str = "actual-hours"
    priority: str = "priority"
    wbs_number: str = "wbs-number"
    completed: str = "completed"  # checkbox-style completion flag
    tags: str = "tags"
    description: str = "description"
    aliases: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_ALIASES))

    def keys(self, logical: str) -> tuple[str, ...]:
        """Primary key for a logical field followed by its aliases."""
        primary = getattr(self, logical)
        extra = tuple(a for a in self.aliases.get(logical, ()) if a != primary)
        return (primary, *extra)

    @classmethod
    def logical_names(cls) -> list[str]:
        return [f.name for f in fields(cls) if f.name != "aliases"]


@dataclass
class Settings:
    """Explicit configuration handed to the assemblers."""

    properties: PropertyMapping = field(default_factory=PropertyMapping)
    max_score: float = DEFAULT_MAX_SCORE
    top_risks: int = DEFAULT_TOP_RISKS
    config_prefix: str = DEFAULT_CONFIG_PREFIX


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def parse_settings(data: dict[str, Any]) -> Settings:
    """Build settings from the parsed `nexuspm.toml` document.

    Raises:
        ValueError: a section holds a value of the wrong type.
    """
    settings = Settings()
    known = set(PropertyMapping.logical_names())

    props = _coerce_dict(data.get("properties"))
    overrides: dict[str, Any] = {}
    for name, key in props.items():
        if name == "aliases":
            continue
        logical = name.replace("-", "_")
        if logical not in known:
            logger.warning("Unknown property mapping '%s' in %s", name, SETTINGS_FILENAME)
            continue
        if not isinstance(key, str) or not key.strip():
            raise ValueError(f"properties.{name} must be a non-empty string")
        overrides[logical] = key.strip()

    aliases = dict(DEFAULT_ALIASES)
    for name, keys in _coerce_dict(props.get("aliases")).items():
        logical = name.replace("-", "_")
        if logical not in known:
            logger.warning("Unknown alias group '%s' in %s", name, SETTINGS_FILENAME)
            continue
        if isinstance(keys, str):
            keys = [keys]
        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            raise ValueError(f"properties.aliases.{name} must be a string or list of strings")
        aliases[logical] = tuple(keys)

    settings.properties = replace(PropertyMapping(), aliases=aliases, **overrides)

    scoring = _coerce_dict(data.get("scoring"))
    if "max_score" in scoring:
        max_score = scoring["max_score"]
        if isinstance(max_score, bool) or not isinstance(max_score, (int, float)) or max_score <= 0:
            raise ValueError("scoring.max_score must be a positive number")
        settings.max_score = max_score

    risk = _coerce_dict(data.get("risk"))
    if "top" in risk:
        top = risk["top"]
        if isinstance(top, bool) or not isinstance(top, int) or top < 0:
            raise ValueError("risk.top must be a non-negative integer")
        settings.top_risks = top

    decision = _coerce_dict(data.get("decision"))
    if "config_prefix" in decision:
        prefix = decision["config_prefix"]
        if not isinstance(prefix, str):
            raise ValueError("decision.config_prefix must be a string")
        settings.config_prefix = prefix

    return settings


def load_settings(vault_path: Path) -> Settings:
    """Load `nexuspm.toml` from the vault root, or defaults if absent."""
    import tomllib

    path = vault_path / SETTINGS_FILENAME
    if not path.exists():
        return Settings()

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    logger.debug("Loaded settings from %s", path)
    return parse_settings(data)


@dataclass(frozen=True)
class ProjectMarker:
    """Contents of a folder's `.nexuspm` marker file."""

    type: ProjectType
    name: str | None = None
    created: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type}
        if self.name:
            d["name"] = self.name
        if self.created:
            d["created"] = self.created
        return d


def marker_path(folder: str) -> str:
    folder = normalize_folder(folder)
    return f"{folder}/{MARKER_FILENAME}" if folder else MARKER_FILENAME


def read_marker(store: FolderStore, folder: str) -> ProjectMarker | None:
    """Read the folder's marker; unreadable or invalid markers count as absent."""
    path = marker_path(folder)
    content = store.read_file(path)
    if content is None:
        return None

    try:
        data = json.loads(content)
    except ValueError as e:
        logger.warning("Ignoring unreadable marker %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        return None

    project_type = data.get("type")
    if project_type not in ("wbs", "decision", "unknown"):
        project_type = "unknown"
    name = data.get("name") if isinstance(data.get("name"), str) else None
    created = data.get("created") if isinstance(data.get("created"), str) else None
    return ProjectMarker(type=project_type, name=name, created=created)


def infer_project_type(store: FolderStore, folder: str) -> ProjectType:
    """Guess the project type from the notes directly inside `folder`.

    Decision notes are explicitly marked, so they win over WBS hints.
    """
    folder = normalize_folder(folder)
    has_wbs = False
    has_decision = False
    decision_types = set(DECISION_ITEM_TYPES) - {"task"}

    for note in store.list_notes(folder):
        if note.folder != folder:
            continue
        props = store.get_declared_properties(note)
        if not props:
            continue

        item_type = props.get("nexuspm-type")
        if isinstance(item_type, str) and item_type.strip().lower() in decision_types:
            has_decision = True
        if not item_type and (props.get("parent") or props.get("status") or props.get("assignee")):
            has_wbs = True

    for base_file in store.list_files(folder, ".base"):
        if NoteHandle(base_file).folder == folder:
            has_wbs = True

    if has_decision:
        return "decision"
    if has_wbs:
        return "wbs"
    return "unknown"


def detect_project_type(store: FolderStore, folder: str) -> ProjectType:
    """Marker file first, then inference from the notes."""
    marker = read_marker(store, folder)
    if marker is not None and marker.type != "unknown":
        return marker.type
    return infer_project_type(store, folder)


def initialize_project(vault_path: Path, folder: str, project_type: ProjectType, name: str | None = None) -> Path:
    """Write (or overwrite) the folder's `.nexuspm` marker."""
    folder = normalize_folder(folder)
    marker = ProjectMarker(
        type=project_type,
        name=name or PurePosixPath(folder).name or vault_path.name,
        created=datetime.now(timezone.utc).isoformat(),
    )
    path = vault_path / marker_path(folder)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(marker.to_dict(), indent=2) + "\n", encoding="utf-8")
    return path
