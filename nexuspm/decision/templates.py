"""Starter notes for each decision-project note type.

Each template is a frontmatter block carrying the properties the extractors
read, followed by a short Markdown outline. Non-project notes point at the
folder's project note through `parent`.
"""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path, PurePosixPath
from typing import Any

import frontmatter

from ..config import DEFAULT_CONFIG_PREFIX
from ..models import DecisionItemType
from ..vault.parser import extract_link_target
from ..vault.store import FileNotesStore, normalize_folder
from .assembler import find_project_config_note
from .extractor import TYPE_PROPERTY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateInfo:
    type: DecisionItemType
    label: str
    default_filename: str


TEMPLATES: dict[str, TemplateInfo] = {
    info.type: info
    for info in (
        TemplateInfo("decision-project", "Project settings", DEFAULT_CONFIG_PREFIX),
        TemplateInfo("memo", "Memo", "Memo"),
        TemplateInfo("option", "Option", "Option"),
        TemplateInfo("decision", "Decision log", "Decision"),
        TemplateInfo("risk", "Risk", "Risk"),
        TemplateInfo("assumption", "Assumption", "Assumption"),
        TemplateInfo("evidence", "Evidence", "Evidence"),
    )
}

PROJECT_GUIDE = """\
## How this project runs

1. **Collect.** Write memos with anything you find: candidates, facts, worries.
2. **Organize.** Decide what matters and list it under `criteria`, then set
   `phase: organize`.

   ```yaml
   criteria:
     - key: cost
       label: Cost
       weight: 4
       direction: lower-is-better
     - key: quality
       label: Quality
       weight: 5
   ```

   `direction` defaults to `higher-is-better`.
3. **Evaluate.** Promote memos to options by changing `nexuspm-type`, then
   fill in each option's `scores`.
4. **Decide.** Record the outcome in a decision note and set `phase: decided`.

## Overview

**What are we deciding:**

**Deadline:**

**Stakeholders:**
"""

BODIES: dict[str, str] = {
    "memo": """\
## Notes

Anything goes: research, ideas, candidates, risks.

## Promoting this memo

Change `nexuspm-type` to `option`, `risk` or `evidence` once it is clear
what this memo is, then add that type's properties.
""",
    "option": """\
## Summary

## Pros

-

## Cons

-

## Scores

Once criteria are set, score this option under `scores`, using the
criteria keys from the project note.
""",
    "decision": """\
## Background

## Options considered

1.
2.

## Outcome

## Rationale

## Next actions

- [ ]
""",
    "risk": """\
## Summary

## Trigger

## Impact

## Mitigation

-
""",
    "assumption": """\
## Assumption

## How to test it

## Result
""",
    "evidence": """\
## Summary

## Excerpt

## Source
""",
}


def _parent_link(project_link: str | None) -> str:
    return f"[[{project_link}]]" if project_link else ""


def template_properties(
    item_type: DecisionItemType,
    project_link: str | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Frontmatter of a new note of `item_type`, in writing order."""
    today = today or date.today()
    if item_type == "decision-project":
        return {TYPE_PROPERTY: item_type, "phase": "collect", "criteria": []}

    props: dict[str, Any] = {TYPE_PROPERTY: item_type, "parent": _parent_link(project_link)}
    if item_type == "memo":
        props.update({"created": today, "tags": []})
    elif item_type == "option":
        props.update({"status": "active", "scores": {}})
    elif item_type == "decision":
        props.update({"decision-status": "proposed", "decision-date": today, "chosen": "", "rationale": ""})
    elif item_type == "risk":
        props.update({"status": "active", "probability": 3, "impact": 3, "owner": ""})
    elif item_type == "assumption":
        props["assumption-status"] = "untested"
    elif item_type == "evidence":
        props.update({"source-url": "", "captured-at": today})
    else:
        raise ValueError(f"No template for note type '{item_type}'")
    return props


def template_content(
    item_type: DecisionItemType,
    name: str | None = None,
    project_link: str | None = None,
    today: date | None = None,
) -> str:
    """Full Markdown text of a new note: frontmatter, H1 title, outline."""
    if item_type not in TEMPLATES:
        raise ValueError(f"No template for note type '{item_type}'")

    title = name or TEMPLATES[item_type].label
    body = PROJECT_GUIDE if item_type == "decision-project" else BODIES[item_type]
    post = frontmatter.Post(f"# {title}\n\n{body}")
    post.metadata.update(template_properties(item_type, project_link, today))
    return frontmatter.dumps(post, sort_keys=False) + "\n"


def _free_path(directory: Path, stem: str) -> Path:
    """`stem.md`, or `stem 1.md`, `stem 2.md`, ... if that is taken."""
    path = directory / f"{stem}.md"
    counter = 1
    while path.exists():
        path = directory / f"{stem} {counter}.md"
        counter += 1
    return path


def create_note(
    vault_path: Path,
    folder: str,
    item_type: DecisionItemType,
    name: str | None = None,
    project_link: str | None = None,
    config_prefix: str = DEFAULT_CONFIG_PREFIX,
    today: date | None = None,
) -> Path:
    """Write a new note of `item_type` into `folder` and return its path.

    Without an explicit `project_link`, notes are parented to the folder's
    project note when it has one. A given `name` must not collide with an
    existing note; the default filename is numbered instead.

    Raises:
        ValueError: unknown type, or a name that is not a plain filename
        FileExistsError: a note called `name` already exists
    """
    if item_type not in TEMPLATES:
        raise ValueError(f"No template for note type '{item_type}'")
    if name is not None and (not name.strip() or "/" in name or "\\" in name):
        raise ValueError(f"'{name}' is not a valid note name")

    folder = normalize_folder(folder)
    directory = vault_path / folder if folder else vault_path

    if project_link is not None:
        project_link = extract_link_target(project_link)
    if item_type != "decision-project" and project_link is None:
        config_note = find_project_config_note(FileNotesStore(vault_path), folder, config_prefix)
        if config_note is not None:
            project_link = config_note.basename
        else:
            logger.debug("No project note in '%s'; leaving parent empty", folder)

    if name is None:
        path = _free_path(directory, TEMPLATES[item_type].default_filename)
    else:
        name = name.strip()
        if name.endswith(".md"):
            name = PurePosixPath(name).stem
        path = directory / f"{name}.md"
        if path.exists():
            raise FileExistsError(f"{path.relative_to(vault_path).as_posix()} already exists")

    title = name
    if title is None:
        title = PurePosixPath(folder).name if item_type == "decision-project" else path.stem

    directory.mkdir(parents=True, exist_ok=True)
    path.write_text(template_content(item_type, title or None, project_link, today), encoding="utf-8")
    logger.debug("Created %s note %s", item_type, path)
    return path
