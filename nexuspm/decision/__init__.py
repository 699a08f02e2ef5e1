"""Multi-criteria decision projects."""

from .assembler import build_decision_project, find_project_config_note
from .risk import calculate_exposure, get_risk_level, get_top_risks, sort_risks_by_exposure
from .scoring import calculate_option_score, rank_options

__all__ = [
    "build_decision_project",
    "calculate_exposure",
    "calculate_option_score",
    "find_project_config_note",
    "get_risk_level",
    "get_top_risks",
    "rank_options",
    "sort_risks_by_exposure",
]
