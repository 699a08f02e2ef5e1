"""Decision command - criteria, ranked options and top risks."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Settings, load_settings
from ..decision.assembler import build_decision_project
from ..decision.risk import calculate_exposure, count_by_level, get_risk_level, get_top_risks
from ..decision.scoring import rank_options
from ..models import DecisionProject
from ..vault.store import FileNotesStore
from .wbs_cmd import print_diagnostics

RISK_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "green",
}


def _score(value: float | None) -> str:
    return "" if value is None else f"{value:g}"


def decision_to_dict(project: DecisionProject, *, max_score: float, top: int) -> dict[str, Any]:
    """JSON-ready view of a decision project."""
    ranked = rank_options(project.options, project.config.criteria, max_score)
    return {
        "type": "decision",
        "id": project.id,
        "name": project.name,
        "config_note": project.config_note_id,
        "roots": list(project.root_item_ids),
        "criteria": [
            {"key": c.key, "label": c.label, "weight": c.weight, "direction": c.direction}
            for c in project.config.criteria
        ],
        "gates": [
            {"key": g.key, "label": g.label, "must_tags": g.must_tags, "must_decisions": g.must_decisions}
            for g in project.config.gates
        ],
        "options": [
            {
                "id": o.id,
                "title": o.title,
                "status": o.status,
                "scores": o.scores,
                "total_score": o.total_score,
                "rank": o.rank,
                "constraints": [
                    {"key": c.key, "status": c.status, "evidence": c.evidence} for c in o.constraints
                ],
            }
            for o in ranked
        ],
        "decisions": [
            {
                "id": d.id,
                "title": d.title,
                "status": d.decision_status,
                "date": d.decision_date,
                "options": d.options,
                "chosen": d.chosen,
            }
            for d in project.decisions.values()
        ],
        "top_risks": [
            {
                "id": r.id,
                "title": r.title,
                "probability": r.probability,
                "impact": r.impact,
                "exposure": calculate_exposure(r.probability, r.impact),
                "level": get_risk_level(calculate_exposure(r.probability, r.impact)),
                "owner": r.owner,
            }
            for r in get_top_risks(project.risks, top)
        ],
        "risk_levels": count_by_level(project.risks),
        "assumptions": dict(Counter(a.assumption_status for a in project.assumptions.values())),
        "evidence": len(project.evidences),
        "memos": len(project.memos),
        "diagnostics": [
            {"level": d.level, "rule": d.rule, "message": d.message, "items": d.item_ids}
            for d in project.diagnostics
        ],
    }


def render_decision(console: Console, project: DecisionProject, *, max_score: float, top: int) -> None:
    criteria = project.config.criteria

    if criteria:
        table = Table(title="Criteria")
        table.add_column("Key")
        table.add_column("Label")
        table.add_column("Weight", justify="right")
        table.add_column("Direction")
        for c in criteria:
            table.add_row(escape(c.key), escape(c.label), f"{c.weight:g}", c.direction or "higher-is-better")
        console.print(table)
    else:
        console.print("No criteria declared; every option scores 0.", style="dim")

    ranked = rank_options(project.options, criteria, max_score)
    if ranked:
        table = Table(title=f"{escape(project.name)}: options")
        table.add_column("Rank", justify="right")
        table.add_column("Option")
        for c in criteria:
            table.add_column(escape(c.label), justify="right")
        table.add_column("Total", justify="right", style="bold")
        for option in ranked:
            table.add_row(
                str(option.rank),
                escape(option.title),
                *(_score(option.scores.get(c.key)) for c in criteria),
                _score(option.total_score),
            )
        console.print(table)

    risks = get_top_risks(project.risks, top)
    if risks:
        table = Table(title=f"Top {len(risks)} risks")
        table.add_column("Risk")
        table.add_column("P", justify="right")
        table.add_column("I", justify="right")
        table.add_column("Exposure", justify="right")
        table.add_column("Level")
        table.add_column("Owner")
        for risk in risks:
            exposure = calculate_exposure(risk.probability, risk.impact)
            level = get_risk_level(exposure)
            table.add_row(
                escape(risk.title),
                f"{risk.probability:g}",
                f"{risk.impact:g}",
                f"{exposure:g}",
                f"[{RISK_STYLES[level]}]{level}[/]",
                escape(risk.owner or ""),
            )
        console.print(table)

    decided = sum(1 for d in project.decisions.values() if d.decision_status == "decided")
    console.print(
        f"{decided}/{len(project.decisions)} decisions decided, "
        f"{len(project.assumptions)} assumptions, {len(project.evidences)} evidence, {len(project.memos)} memos",
        style="bold",
    )
    print_diagnostics(console, project)


def run_decision(
    vault_path: Path,
    folder: str,
    *,
    output_json: bool = False,
    top: int | None = None,
    settings: Settings | None = None,
) -> int:
    """Render `folder` as a decision project.

    Returns:
        Exit code (always 0; structural problems are reported, not fatal)
    """
    settings = settings or load_settings(vault_path)
    top = settings.top_risks if top is None else top
    project = build_decision_project(FileNotesStore(vault_path), folder, settings)

    if output_json:
        data = decision_to_dict(project, max_score=settings.max_score, top=top)
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
        return 0

    render_decision(Console(), project, max_score=settings.max_score, top=top)
    return 0
