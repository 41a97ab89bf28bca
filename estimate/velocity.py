"""
Velocity profiling: a user's historical throughput and estimation consistency.
"""
import logging
import math
from typing import Iterable, List, Optional

from normalize.models import Issue, is_completed, is_completed_estimated
from .models import COMPLEX, DEFAULT_VELOCITY_PROFILE, MEDIUM, SIMPLE, MemberMetrics, VelocityProfile

logger = logging.getLogger(__name__)

# fallbacks used when a ratio has a zero denominator
FALLBACK_POINTS_PER_DAY = 2.0
FALLBACK_TIME_PER_POINT = 1.0
MIN_ACCURACY = 0.1


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def round_half_up(value: float, digits: int = 1) -> float:
    """Round to `digits` decimals with exact halves going up (0.25 -> 0.3)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def _durations(issues: List[Issue]) -> List[float]:
    # issues without a creation timestamp have no measurable duration
    return [d for d in (i.completion_days() for i in issues) if d is not None]


def history_for_user(issues: Iterable[Issue], user_id: Optional[str]) -> List[Issue]:
    """Completed, estimated issues assigned to `user_id`, in input order."""
    return [
        i for i in issues or []
        if is_completed_estimated(i) and i.assignee is not None and i.assignee.user_id == user_id
    ]


def complexity_preference(mean_points: float) -> str:
    if mean_points <= 3:
        return SIMPLE
    if mean_points <= 8:
        return MEDIUM
    return COMPLEX


def estimation_accuracy(completion_days: List[float]) -> float:
    """
    Consistency of completion times: 1 - stddev/mean, floored at 0.1.
    Zero mean completion time means no spread at all and scores 1.0.
    """
    if not completion_days:
        return DEFAULT_VELOCITY_PROFILE.estimation_accuracy
    mean_days = _mean(completion_days)
    variance = _mean([(d - mean_days) ** 2 for d in completion_days])
    if mean_days == 0:
        return 1.0
    return min(1.0, max(MIN_ACCURACY, 1 - math.sqrt(variance) / mean_days))


def compute_velocity_profile(history: List[Issue]) -> VelocityProfile:
    """
    Compute a VelocityProfile from completed, estimated issues.
    Returns the cold-start DEFAULT_VELOCITY_PROFILE when there is no history.
    """
    history = [i for i in history or [] if is_completed_estimated(i)]
    if not history:
        logger.debug("No completed estimated history; using default velocity profile")
        return DEFAULT_VELOCITY_PROFILE

    count = len(history)
    total_points = float(sum(i.estimate for i in history))
    days = _durations(history)
    mean_days = _mean(days)
    mean_points = total_points / count

    denominator = mean_days * count
    points_per_day = total_points / denominator if denominator else 0.0
    time_per_point = mean_days / mean_points if mean_points else 0.0

    return VelocityProfile(
        avg_points_per_day=points_per_day or FALLBACK_POINTS_PER_DAY,
        avg_time_per_point=time_per_point or FALLBACK_TIME_PER_POINT,
        complexity_preference=complexity_preference(mean_points),
        estimation_accuracy=estimation_accuracy(days),
    )


def profile_for_user(issues: Iterable[Issue], user_id: Optional[str]) -> VelocityProfile:
    return compute_velocity_profile(history_for_user(issues, user_id))


def member_metrics(issues: List[Issue]) -> MemberMetrics:
    """
    Throughput metrics for a set of issues (one member, or a whole team).

    completed_count: issues completed with a completion timestamp
    total_estimate: sum of estimates of completed issues (missing counts as 0)
    avg_time_to_complete: mean completion days, rounded to 1 decimal (0 when nothing is completed)
    estimate_accuracy: integer percentage of completed issues that carry an estimate
    issues_without_estimate: all input issues without an estimate
    """
    completed = [i for i in issues or [] if is_completed(i)]
    total_estimate = float(sum(i.estimate or 0 for i in completed))
    avg_days = _mean(_durations(completed))
    estimated_share = (sum(1 for i in completed if i.has_estimate) / len(completed)) if completed else 0.0
    return MemberMetrics(
        completed_count=len(completed),
        total_estimate=total_estimate,
        avg_time_to_complete=round_half_up(avg_days),
        estimate_accuracy=int(round_half_up(estimated_share * 100, 0)),
        issues_without_estimate=sum(1 for i in issues or [] if not i.estimate),
    )
