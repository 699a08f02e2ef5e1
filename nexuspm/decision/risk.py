"""Risk exposure, severity bands and top-N selection."""

import math
from collections.abc import Iterable, Mapping
from typing import Any

from ..models import Risk, RiskLevel

RISK_MIN = 1
RISK_MAX = 5

# Lower bound of each band, most severe first; anything below is "low"
RISK_THRESHOLDS: tuple[tuple[RiskLevel, float], ...] = (
    ("critical", 20),
    ("high", 15),
    ("medium", 8),
)

RISK_LEVELS: tuple[RiskLevel, ...] = ("critical", "high", "medium", "low")


def clamp_risk_value(value: Any) -> float:
    """Clamp a probability or impact to 1-5; non-numbers become 1."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return RISK_MIN
    return max(RISK_MIN, min(RISK_MAX, value))


def calculate_exposure(probability: Any, impact: Any) -> float:
    return clamp_risk_value(probability) * clamp_risk_value(impact)


def get_risk_level(exposure: float) -> RiskLevel:
    for level, threshold in RISK_THRESHOLDS:
        if exposure >= threshold:
            return level
    return "low"


def _risks(risks: Mapping[str, Risk] | Iterable[Risk]) -> list[Risk]:
    if isinstance(risks, Mapping):
        return list(risks.values())
    return list(risks)


def sort_risks_by_exposure(risks: Mapping[str, Risk] | Iterable[Risk]) -> list[Risk]:
    """Highest exposure first; equal exposures in id order.

    Exposure is recomputed from probability and impact rather than read
    from the stored field.
    """
    return sorted(_risks(risks), key=lambda r: (-calculate_exposure(r.probability, r.impact), r.id))


def get_top_risks(risks: Mapping[str, Risk] | Iterable[Risk], n: int) -> list[Risk]:
    if n <= 0:
        return []
    return sort_risks_by_exposure(risks)[:n]


def count_by_level(risks: Mapping[str, Risk] | Iterable[Risk]) -> dict[RiskLevel, int]:
    counts: dict[RiskLevel, int] = {level: 0 for level in RISK_LEVELS}
    for risk in _risks(risks):
        counts[get_risk_level(calculate_exposure(risk.probability, risk.impact))] += 1
    return counts
