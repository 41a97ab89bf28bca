"""
Rank estimated issues by value/effort and pick quick wins.
"""
import logging
from typing import Iterable, List, Optional

from .config import DEFAULT_SETTINGS, Settings
from .models import EstimatedIssue, Prioritization, PrioritizedIssue

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 3


def value_effort_ratio(priority: Optional[int], points: int) -> float:
    return (priority or DEFAULT_PRIORITY) / points


def is_quick_win(priority: Optional[int], points: int, settings: Settings = DEFAULT_SETTINGS) -> bool:
    """
    Small issue (<= quick_win_max_points) that also passes the priority rule.

    The 'literal' rule keeps the historical `priority >= 2` check even though 1 is the most urgent
    priority; 'urgent_high' selects priority 1 and 2 instead.
    """
    if points > settings.quick_win_max_points:
        return False
    effective = priority or DEFAULT_PRIORITY
    if settings.quick_win_rule == 'urgent_high':
        return effective <= 2
    return effective >= 2


def prioritize(estimated: Iterable[EstimatedIssue], settings: Settings = DEFAULT_SETTINGS) -> Prioritization:
    """
    Sort by value/effort ratio descending (stable, so ties keep input order).
    recommended: top `recommended_limit`; quick_wins: first `quick_win_limit` quick wins in ranked order;
    total_effort: sum of all suggested points.
    """
    estimated = list(estimated or [])
    ranked: List[PrioritizedIssue] = [
        PrioritizedIssue(
            issue=item.issue,
            estimate=item.estimate,
            value_effort_ratio=value_effort_ratio(item.issue.priority, item.estimate.suggested_points),
            quick_win=is_quick_win(item.issue.priority, item.estimate.suggested_points, settings),
        )
        for item in estimated
    ]
    ranked.sort(key=lambda p: p.value_effort_ratio, reverse=True)

    result = Prioritization(
        recommended=ranked[:settings.recommended_limit],
        quick_wins=[p for p in ranked if p.quick_win][:settings.quick_win_limit],
        total_effort=sum(item.estimate.suggested_points for item in estimated),
    )
    logger.info("Prioritized %d issues (%d quick wins, %d total points)", len(ranked), len(result.quick_wins), result.total_effort)
    return result
