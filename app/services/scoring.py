"""
Skin health scoring from an analysis' severity scores.

Severities are 0-10 where higher is worse. `overallHealth` is the exception:
it is already a health score (0-10, higher is better) and is never inverted
or averaged with the other fields.
"""

from typing import Mapping

from app.schemas import ConcernScore

OVERALL_HEALTH_KEY = "overallHealth"
MAX_SEVERITY = 10


def _clamp(value: float) -> float:
    return max(0.0, min(float(MAX_SEVERITY), float(value)))


def _numeric_items(severity_scores: Mapping[str, object]):
    for key, value in severity_scores.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        yield key, _clamp(value)


def overall_health_score(severity_scores: Mapping[str, object] | None) -> int:
    """Overall health as a 0-100 percentage."""
    if not severity_scores:
        return 0

    scores = dict(_numeric_items(severity_scores))
    if OVERALL_HEALTH_KEY in scores:
        return round(scores[OVERALL_HEALTH_KEY] * 10)

    if not scores:
        return 0
    average = sum(MAX_SEVERITY - s for s in scores.values()) / len(scores)
    return round(average * 10)


def concern_scores(severity_scores: Mapping[str, object] | None) -> list[ConcernScore]:
    """Per-concern health percentages, `overallHealth` excluded."""
    if not severity_scores:
        return []
    return [
        ConcernScore(name=key, score=round((MAX_SEVERITY - value) * 10))
        for key, value in _numeric_items(severity_scores)
        if key != OVERALL_HEALTH_KEY
    ]
