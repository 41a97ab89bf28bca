"""
Combine a ComplexityAnalysis with a VelocityProfile into a Fibonacci estimate.
"""
from typing import List, Tuple

from .models import (
    COMPLEX,
    FIBONACCI_SEQUENCE,
    MEDIUM,
    SIMPLE,
    Alternative,
    ComplexityAnalysis,
    Estimate,
    TimeEstimate,
    VelocityProfile,
)
from .velocity import round_half_up

BASE_POINTS = 2.0
DEFAULT_HOURS_PER_DAY = 8.0

SMALLER_SCOPE_REASON = "If scope is smaller than expected"
EXTRA_COMPLEXITY_REASON = "If additional complexity emerges"


def base_score(analysis: ComplexityAnalysis) -> float:
    """2 points scaled by text, label and priority factors, averaged with similar issues when present; at least 1."""
    score = BASE_POINTS
    score *= analysis.text_complexity
    score *= analysis.label_complexity
    score *= analysis.priority_weight
    similar_average = analysis.similar_average
    if similar_average is not None:
        score = (score + similar_average) / 2
    return max(1.0, score)


def adjust_for_velocity(score: float, profile: VelocityProfile) -> float:
    adjusted = score
    # slower on large work / faster on small work
    if profile.complexity_preference == SIMPLE and score > 5:
        adjusted *= 1.2
    elif profile.complexity_preference == COMPLEX and score < 3:
        adjusted *= 0.8
    # buffer for inconsistent estimators
    if profile.estimation_accuracy < 0.5:
        adjusted *= 1.1
    return adjusted


def round_to_fibonacci(value: float) -> int:
    """Nearest Fibonacci point value; ties keep the smaller value."""
    closest = FIBONACCI_SEQUENCE[0]
    for candidate in FIBONACCI_SEQUENCE[1:]:
        if abs(candidate - value) < abs(closest - value):
            closest = candidate
    return closest


def confidence_score(analysis: ComplexityAnalysis, profile: VelocityProfile) -> float:
    confidence = 0.5
    if len(analysis.similar_issues) > 2:
        confidence += 0.2
    confidence += profile.estimation_accuracy * 0.3
    if 0.8 < analysis.text_complexity < 2:
        confidence += 0.1
    return min(0.95, max(0.1, confidence))


def confidence_label(confidence: float) -> str:
    if confidence >= 0.8:
        return 'High'
    if confidence >= 0.6:
        return 'Medium'
    return 'Low'


def build_reasoning(analysis: ComplexityAnalysis, profile: VelocityProfile) -> List[str]:
    reasons = []
    if analysis.text_complexity > 1.5:
        reasons.append("High technical complexity detected in description")
    elif analysis.text_complexity < 0.8:
        reasons.append("Simple task based on description")

    similar_average = analysis.similar_average
    if similar_average is not None:
        reasons.append(f"Similar issues averaged {similar_average:.1f} points")

    if analysis.priority_weight > 1.1:
        reasons.append("High priority may require extra care and testing")

    if profile.complexity_preference != MEDIUM:
        reasons.append(f"Adjusted for your {profile.complexity_preference} task preference")
    return reasons


def alternatives_for(points: int) -> Tuple[Alternative, ...]:
    index = FIBONACCI_SEQUENCE.index(points)
    alternatives = []
    if index > 0:
        alternatives.append(Alternative(FIBONACCI_SEQUENCE[index - 1], SMALLER_SCOPE_REASON))
    if index < len(FIBONACCI_SEQUENCE) - 1:
        alternatives.append(Alternative(FIBONACCI_SEQUENCE[index + 1], EXTRA_COMPLEXITY_REASON))
    return tuple(alternatives)


def estimate_time(points: int, profile: VelocityProfile, hours_per_day: float = DEFAULT_HOURS_PER_DAY) -> TimeEstimate:
    days = points * profile.avg_time_per_point
    hours = days * hours_per_day
    return TimeEstimate(
        days=round_half_up(days),
        hours=round_half_up(hours),
        min_hours=round_half_up(hours * 0.7),
        max_hours=round_half_up(hours * 1.3),
    )


def synthesize_estimate(
    analysis: ComplexityAnalysis,
    profile: VelocityProfile,
    hours_per_day: float = DEFAULT_HOURS_PER_DAY,
) -> Estimate:
    """
    Produce the final Estimate.

    Parameters:
        analysis: complexity signals for the issue.
        profile: the assignee's (or requesting user's) velocity profile.
        hours_per_day: working hours used to turn days into hours.

    Returns:
        Estimate with Fibonacci points, clamped confidence, reasoning, adjacent alternatives and time range.
    """
    adjusted = adjust_for_velocity(base_score(analysis), profile)
    points = round_to_fibonacci(adjusted)
    return Estimate(
        suggested_points=points,
        confidence=confidence_score(analysis, profile),
        reasoning=tuple(build_reasoning(analysis, profile)),
        alternatives=alternatives_for(points),
        time_estimate=estimate_time(points, profile, hours_per_day),
    )
