"""
Data models for issue/activity correlation results.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from normalize.models import Commit, Issue, PullRequest


@dataclass(frozen=True)
class Correlation:
    """
    Links one issue to the commits and pull requests that look related to it.
    activity_score = commits + 2 * pull requests; velocity_ratio is None unless estimate and activity are both > 0.
    """
    issue: Issue
    related_commits: Tuple[Commit, ...] = ()
    related_prs: Tuple[PullRequest, ...] = ()
    activity_score: int = 0
    velocity_ratio: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        assignee = self.issue.assignee
        return {
            'identifier': self.issue.identifier,
            'title': self.issue.title,
            'assignee': assignee.label if assignee else None,
            'estimate': self.issue.estimate,
            'related_commits': [c.sha for c in self.related_commits],
            'related_prs': [p.number for p in self.related_prs],
            'activity_score': self.activity_score,
            'velocity_ratio': self.velocity_ratio,
        }

    def __str__(self):
        return (
            f"{self.issue.identifier}: {len(self.related_commits)} commits, "
            f"{len(self.related_prs)} PRs, activity {self.activity_score}"
        )
