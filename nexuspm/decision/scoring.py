"""Weighted multi-criteria scoring and ranking of options."""

from collections.abc import Iterable, Mapping
from dataclasses import replace

from ..config import DEFAULT_MAX_SCORE
from ..models import Criterion, DecisionOption


def normalize_score(score: float, criterion: Criterion, max_score: float = DEFAULT_MAX_SCORE) -> float:
    """Invert a lower-is-better score linearly: `max_score - score`."""
    if criterion.direction == "lower-is-better":
        return max_score - score
    return score


def calculate_option_score(
    option: DecisionOption,
    criteria: Iterable[Criterion],
    max_score: float = DEFAULT_MAX_SCORE,
) -> float:
    """Sum of weight x effective score. Missing scores count as 0."""
    total: float = 0
    for criterion in criteria:
        raw = option.scores.get(criterion.key, 0)
        total += criterion.weight * normalize_score(raw, criterion, max_score)
    return total


def calculate_all_scores(
    options: Mapping[str, DecisionOption],
    criteria: Iterable[Criterion],
    max_score: float = DEFAULT_MAX_SCORE,
) -> dict[str, DecisionOption]:
    """Scored copies of every option; the inputs are left untouched."""
    criteria = list(criteria)
    return {
        option_id: replace(option, total_score=calculate_option_score(option, criteria, max_score))
        for option_id, option in options.items()
    }


def rank_options(
    options: Mapping[str, DecisionOption],
    criteria: Iterable[Criterion],
    max_score: float = DEFAULT_MAX_SCORE,
) -> list[DecisionOption]:
    """Options sorted by total score, best first, with competition ranks.

    Equal totals share a rank and the next lower total takes its 1-based
    position, so two options tied for second are followed by a fourth.
    Ties are listed in id order.
    """
    scored = calculate_all_scores(options, criteria, max_score)
    ordered = sorted(scored.values(), key=lambda o: (-(o.total_score or 0), o.id))

    ranked: list[DecisionOption] = []
    rank = 1
    previous: float | None = None
    for position, option in enumerate(ordered, start=1):
        score = option.total_score or 0
        if previous is not None and score < previous:
            rank = position
        ranked.append(replace(option, rank=rank))
        previous = score
    return ranked
