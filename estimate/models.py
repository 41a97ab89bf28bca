"""
Derived records produced by the estimator: velocity profile, complexity analysis, estimate and prioritization.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from normalize.models import Issue

FIBONACCI_SEQUENCE = (1, 2, 3, 5, 8, 13, 21, 34)

SIMPLE = 'simple'
MEDIUM = 'medium'
COMPLEX = 'complex'


@dataclass(frozen=True)
class VelocityProfile:
    avg_points_per_day: float
    avg_time_per_point: float
    complexity_preference: str
    estimation_accuracy: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            'avg_points_per_day': self.avg_points_per_day,
            'avg_time_per_point': self.avg_time_per_point,
            'complexity_preference': self.complexity_preference,
            'estimation_accuracy': self.estimation_accuracy,
        }


# cold-start profile for users without completed, estimated history
DEFAULT_VELOCITY_PROFILE = VelocityProfile(
    avg_points_per_day=2.0,
    avg_time_per_point=1.0,
    complexity_preference=MEDIUM,
    estimation_accuracy=0.5,
)


@dataclass(frozen=True)
class ComplexityAnalysis:
    text_complexity: float
    label_complexity: float
    priority_weight: float
    similar_issues: Tuple[Issue, ...] = ()
    team_complexity: float = 1.0

    @property
    def similar_average(self) -> Optional[float]:
        """Mean estimate of the similar issues, None when there are none."""
        if not self.similar_issues:
            return None
        return sum(i.estimate or 0 for i in self.similar_issues) / len(self.similar_issues)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'text_complexity': self.text_complexity,
            'label_complexity': self.label_complexity,
            'priority_weight': self.priority_weight,
            'similar_issues': [i.identifier for i in self.similar_issues],
            'team_complexity': self.team_complexity,
        }


@dataclass(frozen=True)
class Alternative:
    points: int
    reason: str


@dataclass(frozen=True)
class TimeEstimate:
    days: float
    hours: float
    min_hours: float
    max_hours: float

    def as_dict(self) -> Dict[str, Any]:
        return {'days': self.days, 'hours': self.hours, 'range': {'min': self.min_hours, 'max': self.max_hours}}


@dataclass(frozen=True)
class Estimate:
    suggested_points: int
    confidence: float
    reasoning: Tuple[str, ...]
    alternatives: Tuple[Alternative, ...]
    time_estimate: TimeEstimate

    def as_dict(self) -> Dict[str, Any]:
        return {
            'suggested_points': self.suggested_points,
            'confidence': self.confidence,
            'reasoning': list(self.reasoning),
            'alternatives': [{'points': a.points, 'reason': a.reason} for a in self.alternatives],
            'time_estimate': self.time_estimate.as_dict(),
        }


@dataclass(frozen=True)
class EstimatedIssue:
    issue: Issue
    estimate: Estimate

    def as_dict(self) -> Dict[str, Any]:
        return {
            'issue': {'identifier': self.issue.identifier, 'title': self.issue.title, 'priority': self.issue.priority},
            'estimate': self.estimate.as_dict(),
        }


@dataclass(frozen=True)
class PrioritizedIssue:
    issue: Issue
    estimate: Estimate
    value_effort_ratio: float
    quick_win: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            'identifier': self.issue.identifier,
            'title': self.issue.title,
            'priority': self.issue.priority,
            'suggested_points': self.estimate.suggested_points,
            'value_effort_ratio': self.value_effort_ratio,
            'quick_win': self.quick_win,
        }


@dataclass(frozen=True)
class Prioritization:
    recommended: List[PrioritizedIssue] = field(default_factory=list)
    quick_wins: List[PrioritizedIssue] = field(default_factory=list)
    total_effort: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            'recommended': [p.as_dict() for p in self.recommended],
            'quick_wins': [p.as_dict() for p in self.quick_wins],
            'total_effort': self.total_effort,
        }


@dataclass(frozen=True)
class MemberMetrics:
    completed_count: int = 0
    total_estimate: float = 0.0
    avg_time_to_complete: float = 0.0
    estimate_accuracy: int = 0
    issues_without_estimate: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            'completed_count': self.completed_count,
            'total_estimate': self.total_estimate,
            'avg_time_to_complete': self.avg_time_to_complete,
            'estimate_accuracy': self.estimate_accuracy,
            'issues_without_estimate': self.issues_without_estimate,
        }
