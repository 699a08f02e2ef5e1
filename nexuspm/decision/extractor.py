"""Frontmatter -> decision-project nodes.

Every note of a decision project declares what it is through the
`nexuspm-type` property. Each kind has its own extractor; all of them share
the WBS extractor's tolerance: a malformed property falls back to its default
and never prevents the note from being read.
"""

from collections.abc import Mapping
from typing import Any, Callable

from ..config import PropertyMapping
from ..models import (
    DECISION_ITEM_TYPES,
    Assumption,
    AssumptionStatus,
    Constraint,
    ConstraintStatus,
    Criterion,
    Decision,
    DecisionItemType,
    DecisionOption,
    DecisionProjectConfig,
    DecisionStatus,
    Evidence,
    Gate,
    Memo,
    Node,
    ProjectNote,
    Risk,
)
from ..vault.fields import (
    as_date,
    as_mapping,
    as_mapping_list,
    as_number,
    as_str,
    as_str_list,
    clamp,
    lookup,
    normalize_choice,
)
from ..vault.parser import extract_link_target, extract_link_targets
from .risk import calculate_exposure

TYPE_PROPERTY = "nexuspm-type"
PROMOTABLE_TYPES: tuple[str, ...] = ("option", "risk", "assumption", "evidence")

_DECISION_STATUS: dict[str, DecisionStatus] = {
    "decided": "decided",
    "決定": "decided",
    "決定済み": "decided",
    "superseded": "superseded",
    "上書き": "superseded",
    "破棄": "superseded",
}

_ASSUMPTION_STATUS: dict[str, AssumptionStatus] = {
    "testing": "testing",
    "検証中": "testing",
    "validated": "validated",
    "確証": "validated",
    "検証済み": "validated",
    "falsified": "falsified",
    "反証": "falsified",
    "否定": "falsified",
}

_CONSTRAINT_STATUS: dict[str, ConstraintStatus] = {
    "pass": "pass",
    "充足": "pass",
    "ok": "pass",
    "true": "pass",
    "fail": "fail",
    "不充足": "fail",
    "ng": "fail",
    "false": "fail",
}


def normalize_decision_status(value: Any) -> DecisionStatus:
    return normalize_choice(value, _DECISION_STATUS, "proposed")  # type: ignore[return-value]


def normalize_assumption_status(value: Any) -> AssumptionStatus:
    return normalize_choice(value, _ASSUMPTION_STATUS, "untested")  # type: ignore[return-value]


def normalize_constraint_status(value: Any) -> ConstraintStatus:
    # YAML turns unquoted true/false into booleans
    if isinstance(value, bool):
        return "pass" if value else "fail"
    return normalize_choice(value, _CONSTRAINT_STATUS, "unknown")  # type: ignore[return-value]


def detect_item_type(properties: Mapping[str, Any] | None) -> DecisionItemType | None:
    """Read `nexuspm-type`; unknown values count as untyped."""
    if not properties:
        return None
    value = as_str(properties.get(TYPE_PROPERTY))
    if value is None:
        return None
    value = value.lower()
    if value in DECISION_ITEM_TYPES:
        return value  # type: ignore[return-value]
    return None


def _key_and_label(entry: Mapping[str, Any]) -> tuple[str, str] | None:
    key = entry.get("key")
    if key is None or isinstance(key, (dict, list)):
        return None
    key = str(key).strip()
    if not key:
        return None
    label = as_str(entry.get("label")) or key
    return key, label


def extract_project_config(properties: Mapping[str, Any] | None) -> DecisionProjectConfig:
    """Read criteria and gates from the `decision-project` note.

    Entries without a key are dropped; the label defaults to the key and a
    non-numeric weight to 1.
    """
    config = DecisionProjectConfig()
    if not properties:
        return config

    for entry in as_mapping_list(properties.get("criteria")):
        names = _key_and_label(entry)
        if names is None:
            continue
        weight = entry.get("weight")
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            weight = 1
        direction = "lower-is-better" if entry.get("direction") == "lower-is-better" else None
        config.criteria.append(
            Criterion(
                key=names[0],
                label=names[1],
                weight=weight,
                direction=direction,
                description=as_str(entry.get("description")),
            )
        )

    for entry in as_mapping_list(properties.get("gates")):
        names = _key_and_label(entry)
        if names is None:
            continue
        must_tags = entry.get("mustTags")
        must_decisions = entry.get("mustDecisions")
        config.gates.append(
            Gate(
                key=names[0],
                label=names[1],
                must_tags=as_str_list(must_tags) if isinstance(must_tags, list) else None,
                must_decisions=as_str_list(must_decisions) if isinstance(must_decisions, list) else None,
            )
        )

    return config


def _parent(properties: Mapping[str, Any], mapping: PropertyMapping) -> str | None:
    return extract_link_target(lookup(properties, mapping.keys("parent")))


def _scores(value: Any) -> dict[str, float]:
    """Per-criterion scores; anything non-numeric scores 0."""
    return {str(key): as_number(raw, 0) for key, raw in as_mapping(value).items()}


def _constraints(value: Any) -> list[Constraint]:
    constraints = []
    for entry in as_mapping_list(value):
        names = _key_and_label(entry)
        if names is None:
            continue
        constraints.append(
            Constraint(
                key=names[0],
                status=normalize_constraint_status(entry.get("status")),
                evidence=extract_link_target(entry.get("evidence")),
            )
        )
    return constraints


def extract_option(item_id: str, title: str, properties: Mapping[str, Any] | None,
                   mapping: PropertyMapping | None = None) -> DecisionOption:
    mapping = mapping or PropertyMapping()
    option = DecisionOption(id=item_id, title=title)
    if not properties:
        return option

    option.parent_id = _parent(properties, mapping)
    option.status = as_str(lookup(properties, mapping.keys("status"))) or option.status
    option.scores = _scores(properties.get("scores"))
    option.constraints = _constraints(properties.get("constraints"))
    return option


def extract_decision(item_id: str, title: str, properties: Mapping[str, Any] | None,
                     mapping: PropertyMapping | None = None) -> Decision:
    mapping = mapping or PropertyMapping()
    decision = Decision(id=item_id, title=title)
    if not properties:
        return decision

    decision.parent_id = _parent(properties, mapping)
    decision.decision_status = normalize_decision_status(properties.get("decision-status"))
    decision.decision_date = as_date(properties.get("decision-date"))
    decision.options = extract_link_targets(properties.get("options"))
    decision.chosen = extract_link_target(properties.get("chosen"))
    decision.rationale = as_str(properties.get("rationale"))
    return decision


def extract_risk(item_id: str, title: str, properties: Mapping[str, Any] | None,
                 mapping: PropertyMapping | None = None) -> Risk:
    """Build a Risk; probability and impact are clamped to 1-5, default 1."""
    mapping = mapping or PropertyMapping()
    risk = Risk(id=item_id, title=title)
    if not properties:
        return risk

    risk.parent_id = _parent(properties, mapping)
    risk.status = as_str(lookup(properties, mapping.keys("status"))) or risk.status
    risk.probability = clamp(as_number(properties.get("probability"), 1), 1, 5)
    risk.impact = clamp(as_number(properties.get("impact"), 1), 1, 5)
    risk.exposure = calculate_exposure(risk.probability, risk.impact)

    mitigation = properties.get("mitigation")
    if isinstance(mitigation, str):
        risk.mitigation = extract_link_target(mitigation) or as_str(mitigation)
    risk.owner = as_str(properties.get("owner"))
    risk.due_date = as_date(lookup(properties, mapping.keys("due_date")))
    return risk


def extract_assumption(item_id: str, title: str, properties: Mapping[str, Any] | None,
                       mapping: PropertyMapping | None = None) -> Assumption:
    mapping = mapping or PropertyMapping()
    assumption = Assumption(id=item_id, title=title)
    if not properties:
        return assumption

    assumption.parent_id = _parent(properties, mapping)
    assumption.assumption_status = normalize_assumption_status(properties.get("assumption-status"))
    assumption.evidence = extract_link_targets(properties.get("evidence"))
    return assumption


def extract_evidence(item_id: str, title: str, properties: Mapping[str, Any] | None,
                     mapping: PropertyMapping | None = None) -> Evidence:
    mapping = mapping or PropertyMapping()
    evidence = Evidence(id=item_id, title=title)
    if not properties:
        return evidence

    evidence.parent_id = _parent(properties, mapping)
    evidence.source_url = as_str(properties.get("source-url"))
    evidence.source_type = as_str(properties.get("source-type"))
    evidence.captured_at = as_date(properties.get("captured-at"))
    return evidence


def extract_memo(item_id: str, title: str, properties: Mapping[str, Any] | None,
                 mapping: PropertyMapping | None = None) -> Memo:
    mapping = mapping or PropertyMapping()
    memo = Memo(id=item_id, title=title)
    if not properties:
        return memo

    memo.parent_id = _parent(properties, mapping)
    memo.tags = as_str_list(lookup(properties, mapping.keys("tags")))
    promote_to = as_str(properties.get("promote-to"))
    if promote_to and promote_to.lower() in PROMOTABLE_TYPES:
        memo.promote_to = promote_to.lower()  # type: ignore[assignment]
    return memo


def extract_project_note(item_id: str, title: str, properties: Mapping[str, Any] | None,
                         mapping: PropertyMapping | None = None) -> ProjectNote:
    mapping = mapping or PropertyMapping()
    note = ProjectNote(id=item_id, title=title)
    if properties:
        note.parent_id = _parent(properties, mapping)
    return note


Extractor = Callable[[str, str, Mapping[str, Any] | None, PropertyMapping | None], Node]

# `task` is recognised but not part of a decision project
EXTRACTORS: dict[str, Extractor] = {
    "decision-project": extract_project_note,
    "option": extract_option,
    "decision": extract_decision,
    "risk": extract_risk,
    "assumption": extract_assumption,
    "evidence": extract_evidence,
    "memo": extract_memo,
}
