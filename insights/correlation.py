"""
Insights over issue/activity correlations: high-velocity work, stuck issues and scope creep candidates.
"""
import logging
from typing import Iterable, List, Optional

from correlate.models import Correlation
from .models import Insight

logger = logging.getLogger(__name__)

STUCK_MIN_ESTIMATE = 5
STUCK_MAX_ACTIVITY = 3
OVERACTIVE_MAX_ESTIMATE = 3
OVERACTIVE_MIN_ACTIVITY = 10


def average_velocity_ratio(correlations: List[Correlation]) -> Optional[float]:
    """Mean velocity ratio over correlations with a positive ratio; None when there are none."""
    ratios = [c.velocity_ratio for c in correlations if c.velocity_ratio]
    if not ratios:
        return None
    return sum(ratios) / len(ratios)


def _assignee_name(c: Correlation) -> str:
    return c.issue.assignee.label if c.issue.assignee else 'Unassigned'


def _points_line(c: Correlation) -> str:
    estimate = c.issue.estimate or 0
    points = int(estimate) if float(estimate).is_integer() else estimate
    return f"{c.issue.identifier}: {points} pts, {c.activity_score} activity"


def generate_correlation_insights(correlations: Iterable[Correlation], examples: int = 3) -> List[Insight]:
    """
    Flag correlations that stand out.

    high velocity: ratio above the average positive ratio
    stuck: estimate > 5 with activity < 3
    scope creep: estimate < 3 with activity > 10
    Unestimated issues are never stuck or scope creep candidates. Empty input returns [].
    """
    correlations = list(correlations or [])
    if not correlations:
        return []

    avg_ratio = average_velocity_ratio(correlations)
    high = [c for c in correlations if avg_ratio is not None and c.velocity_ratio and c.velocity_ratio > avg_ratio]
    stuck = [
        c for c in correlations
        if c.issue.has_estimate and c.issue.estimate > STUCK_MIN_ESTIMATE and c.activity_score < STUCK_MAX_ACTIVITY
    ]
    overactive = [
        c for c in correlations
        if (c.issue.estimate or 0) < OVERACTIVE_MAX_ESTIMATE and c.activity_score > OVERACTIVE_MIN_ACTIVITY
    ]

    insights: List[Insight] = []
    if high:
        insights.append(Insight(
            type='success',
            title='High Velocity Contributors',
            description=f"{len(high)} issues showing excellent story point to activity ratio",
            items=tuple(f"{c.issue.identifier}: {_assignee_name(c)}" for c in high[:examples]),
            count=len(high),
        ))
    if stuck:
        insights.append(Insight(
            type='warning',
            title='Potentially Stuck Issues',
            description=f"{len(stuck)} high-point issues with low source-control activity",
            items=tuple(_points_line(c) for c in stuck[:examples]),
            count=len(stuck),
        ))
    if overactive:
        insights.append(Insight(
            type='info',
            title='Scope Creep Candidates',
            description=f"{len(overactive)} low-point issues with high activity (possible scope creep)",
            items=tuple(_points_line(c) for c in overactive[:examples]),
            count=len(overactive),
        ))
    logger.info("Generated %d correlation insights from %d correlations", len(insights), len(correlations))
    return insights
