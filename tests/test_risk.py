import pytest

from nexuspm.models import Risk
from nexuspm.decision.risk import (
    calculate_exposure,
    clamp_risk_value,
    count_by_level,
    get_risk_level,
    get_top_risks,
    sort_risks_by_exposure,
)


def _risk(risk_id: str, probability: float, impact: float) -> Risk:
    return Risk(
        id=risk_id,
        title=risk_id,
        probability=probability,
        impact=impact,
        exposure=calculate_exposure(probability, impact),
    )


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, 1), (-3, 1), (3, 3), (2.5, 2.5), (10, 5), (None, 1), ("4", 1), (True, 1), (float("nan"), 1)],
)
def test_clamp_risk_value(value, expected) -> None:
    assert clamp_risk_value(value) == expected


def test_exposure_uses_clamped_inputs() -> None:
    assert calculate_exposure(10, 0) == 5
    assert get_risk_level(calculate_exposure(10, 0)) == "low"

    assert calculate_exposure(4, 5) == 20
    assert get_risk_level(calculate_exposure(4, 5)) == "critical"


@pytest.mark.parametrize(
    ("exposure", "level"),
    [(1, "low"), (7, "low"), (8, "medium"), (14, "medium"), (15, "high"), (19, "high"), (20, "critical"), (25, "critical")],
)
def test_risk_level_bands(exposure, level) -> None:
    assert get_risk_level(exposure) == level


def test_sort_by_exposure_then_id() -> None:
    risks = {
        "r/b.md": _risk("r/b.md", 2, 2),
        "r/c.md": _risk("r/c.md", 5, 4),
        "r/a.md": _risk("r/a.md", 4, 1),
    }

    assert [r.id for r in sort_risks_by_exposure(risks)] == ["r/c.md", "r/a.md", "r/b.md"]


def test_sort_recomputes_exposure() -> None:
    stale = _risk("stale", 1, 1)
    stale.probability = 5
    stale.impact = 5

    assert sort_risks_by_exposure([_risk("fresh", 3, 3), stale])[0].id == "stale"


def test_top_risks_is_a_slice() -> None:
    risks = [_risk(f"r{i}", i, 5) for i in range(1, 6)]

    assert [r.id for r in get_top_risks(risks, 2)] == ["r5", "r4"]
    assert len(get_top_risks(risks, 10)) == 5
    assert get_top_risks(risks, 0) == []


def test_count_by_level() -> None:
    risks = [_risk("a", 5, 5), _risk("b", 4, 4), _risk("c", 3, 3), _risk("d", 1, 1), _risk("e", 1, 2)]
    assert count_by_level(risks) == {"critical": 1, "high": 1, "medium": 1, "low": 2}
