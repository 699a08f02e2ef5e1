"""Data models for project notes."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import PurePosixPath
from typing import ClassVar, Literal


class WBSStatus(str, Enum):
    """Closed set of task states every status-like text is normalized into."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


# Values of the `nexuspm-type` frontmatter property
DecisionItemType = Literal[
    "decision-project",
    "memo",
    "option",
    "decision",
    "risk",
    "assumption",
    "evidence",
    "task",
]

DECISION_ITEM_TYPES: tuple[str, ...] = (
    "decision-project",
    "memo",
    "option",
    "decision",
    "risk",
    "assumption",
    "evidence",
    "task",
)

ProjectType = Literal["wbs", "decision", "unknown"]
CriterionDirection = Literal["higher-is-better", "lower-is-better"]
DecisionStatus = Literal["proposed", "decided", "superseded"]
AssumptionStatus = Literal["untested", "testing", "validated", "falsified"]
ConstraintStatus = Literal["pass", "fail", "unknown"]
RiskLevel = Literal["low", "medium", "high", "critical"]


@dataclass
class Node:
    """Base class for every note that takes part in a project tree."""

    kind: ClassVar[str] = "node"

    id: str  # vault-relative path, e.g. "project/task1.md"
    title: str  # first H1 or basename
    parent_id: str | None = None  # raw link target until resolved
    child_ids: list[str] = field(default_factory=list)
    number: str = ""  # dotted number; non-empty before numbering = authored
    level: int = 0
    is_expanded: bool = True

    @property
    def name(self) -> str:
        """Filename without folder or extension."""
        return PurePosixPath(self.id).stem

    @property
    def is_leaf(self) -> bool:
        return not self.child_ids


@dataclass
class WBSItem(Node):
    """A task in a work-breakdown structure."""

    kind: ClassVar[str] = "task"

    status: WBSStatus = WBSStatus.NOT_STARTED
    assignee: str | None = None
    start_date: date | None = None
    due_date: date | None = None
    progress: float = 0  # 0-100
    estimated_hours: float | None = None
    actual_hours: float | None = None
    priority: int | None = None  # 1 is highest
    tags: list[str] = field(default_factory=list)
    description: str | None = None

    @property
    def wbs_number(self) -> str:
        return self.number


@dataclass(frozen=True)
class Criterion:
    """One weighted evaluation axis of a decision."""

    key: str
    label: str
    weight: float = 1
    direction: CriterionDirection | None = None
    description: str | None = None


@dataclass(frozen=True)
class Gate:
    """Phase gate declared by the project note. Parsed, never evaluated."""

    key: str
    label: str
    must_tags: list[str] | None = None
    must_decisions: list[str] | None = None


@dataclass
class DecisionProjectConfig:
    criteria: list[Criterion] = field(default_factory=list)
    gates: list[Gate] = field(default_factory=list)
    scoring_missing: Literal["zero"] = "zero"


@dataclass(frozen=True)
class Constraint:
    key: str
    status: ConstraintStatus = "unknown"
    evidence: str | None = None


@dataclass
class ProjectNote(Node):
    """The `decision-project` note carrying criteria and gates."""

    kind: ClassVar[str] = "decision-project"


@dataclass
class DecisionOption(Node):
    """A candidate evaluated against the project's criteria."""

    kind: ClassVar[str] = "option"

    status: str = "not-started"
    scores: dict[str, float] = field(default_factory=dict)
    constraints: list[Constraint] = field(default_factory=list)
    total_score: float | None = None  # set on scored copies
    rank: int | None = None  # set on ranked copies


@dataclass
class Decision(Node):
    kind: ClassVar[str] = "decision"

    decision_status: DecisionStatus = "proposed"
    decision_date: date | None = None
    options: list[str] = field(default_factory=list)  # link targets
    chosen: str | None = None
    rationale: str | None = None


@dataclass
class Risk(Node):
    kind: ClassVar[str] = "risk"

    status: str = "not-started"
    probability: float = 1  # 1-5
    impact: float = 1  # 1-5
    exposure: float = 1  # probability x impact
    mitigation: str | None = None
    owner: str | None = None
    due_date: date | None = None


@dataclass
class Assumption(Node):
    kind: ClassVar[str] = "assumption"

    assumption_status: AssumptionStatus = "untested"
    evidence: list[str] = field(default_factory=list)


@dataclass
class Evidence(Node):
    kind: ClassVar[str] = "evidence"

    source_url: str | None = None
    source_type: str | None = None
    captured_at: date | None = None


@dataclass
class Memo(Node):
    """Information-gathering note, possibly to be promoted later."""

    kind: ClassVar[str] = "memo"

    tags: list[str] = field(default_factory=list)
    promote_to: DecisionItemType | None = None


@dataclass
class Diagnostic:
    """A structural finding about a project snapshot."""

    level: Literal["error", "warning", "info"]
    rule: str  # no-root, multiple-roots, parent-cycle
    message: str
    item_ids: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.level.upper()}: [{self.rule}] {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of the single-root check."""

    valid: bool
    error: str | None = None
    error_item_ids: list[str] | None = None


@dataclass
class Project:
    """One folder's notes assembled into a tree."""

    id: str  # folder path
    name: str
    items: dict[str, Node] = field(default_factory=dict)
    root_item_ids: list[str] = field(default_factory=list)
    last_updated: datetime = field(default_factory=datetime.now)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def get(self, item_id: str) -> Node | None:
        return self.items.get(item_id)

    def children(self, item_id: str) -> list[Node]:
        item = self.items.get(item_id)
        if item is None:
            return []
        return [self.items[c] for c in item.child_ids if c in self.items]

    def walk(self) -> Iterator[Node]:
        """Yield nodes depth-first in display order, each at most once."""
        seen: set[str] = set()
        stack = list(reversed(self.root_item_ids))
        while stack:
            item_id = stack.pop()
            if item_id in seen or item_id not in self.items:
                continue
            seen.add(item_id)
            node = self.items[item_id]
            yield node
            stack.extend(reversed(node.child_ids))

    @property
    def has_errors(self) -> bool:
        return any(d.level == "error" for d in self.diagnostics)


@dataclass
class DecisionProject(Project):
    """Decision project: typed notes plus the criteria/gates configuration."""

    config: DecisionProjectConfig = field(default_factory=DecisionProjectConfig)
    config_note_id: str | None = None

    def _of_kind(self, cls: type) -> dict[str, Node]:
        return {k: v for k, v in self.items.items() if isinstance(v, cls)}

    @property
    def options(self) -> dict[str, DecisionOption]:
        return self._of_kind(DecisionOption)  # type: ignore[return-value]

    @property
    def decisions(self) -> dict[str, Decision]:
        return self._of_kind(Decision)  # type: ignore[return-value]

    @property
    def risks(self) -> dict[str, Risk]:
        return self._of_kind(Risk)  # type: ignore[return-value]

    @property
    def assumptions(self) -> dict[str, Assumption]:
        return self._of_kind(Assumption)  # type: ignore[return-value]

    @property
    def evidences(self) -> dict[str, Evidence]:
        return self._of_kind(Evidence)  # type: ignore[return-value]

    @property
    def memos(self) -> dict[str, Memo]:
        return self._of_kind(Memo)  # type: ignore[return-value]
