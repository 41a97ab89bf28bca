"""
Data models for team performance summaries, recommendations and correlation insights.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from estimate.models import MemberMetrics
from normalize.models import Issue, User

PRIORITY_ORDER = {'high': 3, 'medium': 2, 'low': 1}


@dataclass(frozen=True)
class MemberPerformance:
    assignee: User
    metrics: MemberMetrics

    def as_dict(self) -> Dict[str, Any]:
        return {'assignee': self.assignee.label, 'metrics': self.metrics.as_dict()}


@dataclass(frozen=True)
class TeamPerformance:
    members: Tuple[MemberPerformance, ...] = ()
    team_issues: Tuple[Issue, ...] = ()
    team_metrics: MemberMetrics = MemberMetrics()

    def as_dict(self) -> Dict[str, Any]:
        return {
            'members': [m.as_dict() for m in self.members],
            'team_issue_count': len(self.team_issues),
            'team_metrics': self.team_metrics.as_dict(),
        }


@dataclass(frozen=True)
class Recommendation:
    """
    Workload recommendation. type: success|warning|info; priority: high|medium|low.
    """
    type: str
    priority: str
    title: str
    description: str
    action_items: Tuple[str, ...] = ()
    members: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'priority': self.priority,
            'title': self.title,
            'description': self.description,
            'action_items': list(self.action_items),
            'members': list(self.members),
        }


@dataclass(frozen=True)
class Insight:
    """
    Correlation insight with up to a handful of representative examples in `items`.
    """
    type: str
    title: str
    description: str
    items: Tuple[str, ...] = ()
    count: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'title': self.title,
            'description': self.description,
            'items': list(self.items),
            'count': self.count,
        }
