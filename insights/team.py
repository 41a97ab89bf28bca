"""
Team performance summary and workload recommendations.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from estimate.velocity import member_metrics
from normalize.models import Issue, User
from normalize.util import parse_timestamp
from .models import PRIORITY_ORDER, MemberPerformance, Recommendation, TeamPerformance

logger = logging.getLogger(__name__)

OVER_COMPLETED_FACTOR = 1.3
OVER_TIME_FACTOR = 0.8
UNDER_COMPLETED_FACTOR = 0.7
UNDER_TIME_FACTOR = 1.5
OVERLOADED_FACTOR = 1.5
UNDERUTILIZED_FACTOR = 0.5


def _in_window(issue: Issue, cutoff: Optional[datetime]) -> bool:
    if cutoff is None:
        return True
    stamp = issue.updated_at or issue.created_at
    # undated issues cannot be placed outside the window
    return stamp is None or parse_timestamp(stamp) >= cutoff


def build_team_performance(issues: Iterable[Issue], lookback_days: Optional[int] = None, now: Optional[datetime] = None) -> TeamPerformance:
    """
    Group recently updated issues by assignee and compute per-member and team metrics.
    Unassigned issues count toward the team metrics but not toward any member.
    """
    now = parse_timestamp(now)
    cutoff = now - timedelta(days=lookback_days) if (now is not None and lookback_days) else None
    recent = [i for i in issues or [] if _in_window(i, cutoff)]

    grouped: Dict[str, List[Issue]] = {}
    assignees: Dict[str, User] = {}
    for issue in recent:
        if issue.assignee is None:
            continue
        uid = issue.assignee.user_id
        assignees.setdefault(uid, issue.assignee)
        grouped.setdefault(uid, []).append(issue)

    members = tuple(MemberPerformance(assignee=assignees[uid], metrics=member_metrics(items)) for uid, items in grouped.items())
    return TeamPerformance(members=members, team_issues=tuple(recent), team_metrics=member_metrics(recent))


def _names(members: List[MemberPerformance]) -> tuple:
    return tuple(m.assignee.label for m in members)


def _classify(members: List[MemberPerformance]):
    count = len(members)
    avg_completed = sum(m.metrics.completed_count for m in members) / count
    avg_points = sum(m.metrics.total_estimate for m in members) / count
    avg_time = sum(m.metrics.avg_time_to_complete for m in members) / count

    over = [
        m for m in members
        if m.metrics.completed_count > avg_completed * OVER_COMPLETED_FACTOR
        and m.metrics.avg_time_to_complete < avg_time * OVER_TIME_FACTOR
    ]
    under = [
        m for m in members
        if m.metrics.completed_count < avg_completed * UNDER_COMPLETED_FACTOR
        or m.metrics.avg_time_to_complete > avg_time * UNDER_TIME_FACTOR
    ]
    overloaded = [m for m in members if m.metrics.total_estimate > avg_points * OVERLOADED_FACTOR]
    underutilized = [m for m in members if m.metrics.total_estimate < avg_points * UNDERUTILIZED_FACTOR]
    return over, under, overloaded, underutilized


def generate_workload_recommendations(team: TeamPerformance) -> List[Recommendation]:
    """
    Classify members against team averages and emit one recommendation per non-empty category,
    plus an estimation-coverage recommendation when team issues lack estimates.
    Members may appear in several categories. Sorted high > medium > low, stable otherwise.
    """
    members = list(team.members) if team else []
    if not members:
        return []

    over, under, overloaded, underutilized = _classify(members)
    recommendations: List[Recommendation] = []

    if over:
        recommendations.append(Recommendation(
            type='success',
            priority='medium',
            title='High Performers Identified',
            description=f"{len(over)} team members showing excellent velocity",
            action_items=(
                'Consider assigning more complex/high-value tasks',
                'Utilize as mentors for knowledge sharing',
                'Review their practices for team adoption',
            ),
            members=_names(over),
        ))

    if under:
        recommendations.append(Recommendation(
            type='warning',
            priority='high',
            title='Performance Support Needed',
            description=f"{len(under)} team members may need additional support",
            action_items=(
                'Schedule 1:1s to understand blockers',
                'Consider pairing with high performers',
                'Review task complexity and provide guidance',
            ),
            members=_names(under),
        ))

    if overloaded:
        recommendations.append(Recommendation(
            type='warning',
            priority='high',
            title='Workload Imbalance Detected',
            description=f"{len(overloaded)} team members have high story point loads",
            action_items=(
                'Review current sprint commitments',
                'Redistribute tasks from overloaded to available members',
                'Consider breaking down large tasks',
            ),
            members=_names(overloaded),
        ))

    if underutilized:
        recommendations.append(Recommendation(
            type='info',
            priority='medium',
            title='Capacity Available',
            description=f"{len(underutilized)} team members have additional capacity",
            action_items=(
                'Assign additional tasks or stretch goals',
                'Involve in cross-team initiatives',
                'Consider training or skill development opportunities',
            ),
            members=_names(underutilized),
        ))

    unestimated = [i for i in team.team_issues if not i.estimate]
    if unestimated:
        recommendations.append(Recommendation(
            type='info',
            priority='medium',
            title='Estimation Coverage',
            description=f"{len(unestimated)} issues lack story point estimates",
            action_items=(
                'Schedule estimation sessions for unestimated work',
                'Establish estimation guidelines for the team',
                'Review and refine estimation processes',
            ),
        ))

    recommendations.sort(key=lambda r: PRIORITY_ORDER.get(r.priority, 0), reverse=True)
    logger.info("Generated %d workload recommendations for %d members", len(recommendations), len(members))
    return recommendations
