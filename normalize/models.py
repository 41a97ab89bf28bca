"""
Unified data models for normalized issue-tracker and source-control records.

Records are frozen: one analysis pass treats them as read-only snapshots.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

# status categories shared by every tracker
UNSTARTED = 'unstarted'
STARTED = 'started'
COMPLETED = 'completed'
CANCELED = 'canceled'


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class User:
    """
    Normalized user entity. `name` is the tracker handle (Linear `name`, GitHub login) when known.
    """
    user_id: str
    display_name: str = ''
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.name or self.user_id

    def as_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'display_name': self.display_name,
            'email': self.email,
            'avatar_url': self.avatar_url,
            'name': self.name,
        }


@dataclass(frozen=True)
class Team:
    """Team (Linear) or project (JIRA) an issue belongs to."""
    team_id: str
    key: Optional[str] = None
    name: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {'team_id': self.team_id, 'key': self.key, 'name': self.name}


@dataclass(frozen=True)
class Label:
    name: str
    color: Optional[str] = None


@dataclass(frozen=True)
class Status:
    name: str
    category: str


@dataclass(frozen=True)
class Issue:
    """
    Normalized issue entity.
    estimate: None or 0 means unestimated. priority: 1=urgent .. 4=low, None when unset.
    """
    issue_id: str
    identifier: str
    title: str
    description: Optional[str] = None
    estimate: Optional[float] = None
    priority: Optional[int] = None
    assignee: Optional[User] = None
    team: Optional[Team] = None
    labels: Tuple[Label, ...] = ()
    status: Status = Status('Todo', UNSTARTED)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def has_estimate(self) -> bool:
        return bool(self.estimate) and self.estimate > 0

    def completion_days(self) -> Optional[float]:
        """Days from creation to completion (fractional), None when either end is missing."""
        if self.created_at is None or self.completed_at is None:
            return None
        return (self.completed_at - self.created_at).total_seconds() / 86400.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            'issue_id': self.issue_id,
            'identifier': self.identifier,
            'title': self.title,
            'description': self.description,
            'estimate': self.estimate,
            'priority': self.priority,
            'assignee': self.assignee.as_dict() if self.assignee else None,
            'team': self.team.as_dict() if self.team else None,
            'labels': [{'name': lb.name, 'color': lb.color} for lb in self.labels],
            'status': {'name': self.status.name, 'category': self.status.category},
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'completed_at': _iso(self.completed_at),
        }


def is_completed(issue: Issue) -> bool:
    """Completed category with a completion timestamp."""
    return issue.status.category == COMPLETED and issue.completed_at is not None


def is_completed_estimated(issue: Issue) -> bool:
    """Completed issue that also carries a positive estimate (velocity and similarity history)."""
    return is_completed(issue) and issue.has_estimate


@dataclass(frozen=True)
class CommitAuthor:
    name: str = ''
    email: Optional[str] = None
    date: Optional[datetime] = None
    login: Optional[str] = None

    @property
    def identity(self) -> Optional[str]:
        return self.login or self.email


@dataclass(frozen=True)
class Commit:
    """
    Normalized commit entity. additions/deletions are None when the provider did not report stats.
    """
    sha: str
    message: str
    author: CommitAuthor = CommitAuthor()
    additions: Optional[int] = None
    deletions: Optional[int] = None
    files: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            'sha': self.sha,
            'message': self.message,
            'author': {
                'name': self.author.name,
                'email': self.author.email,
                'date': _iso(self.author.date),
                'login': self.author.login,
            },
            'additions': self.additions,
            'deletions': self.deletions,
            'files': list(self.files),
        }


@dataclass(frozen=True)
class PullRequest:
    """
    Normalized pull request entity.
    """
    number: int
    title: str
    body: Optional[str] = None
    author: Optional[str] = None
    state: str = 'open'
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            'number': self.number,
            'title': self.title,
            'body': self.body,
            'author': self.author,
            'state': self.state,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'merged_at': _iso(self.merged_at),
            'closed_at': _iso(self.closed_at),
        }
