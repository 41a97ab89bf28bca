"""
One analysis run: estimation, prioritization, correlation and insights over normalized records.

Every stage is a pure transformation of its inputs; the same input always yields the same result.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from correlate import correlate_issues
from correlate.models import Correlation
from estimate import StoryPointEstimator, prioritize, select_unestimated
from estimate.config import DEFAULT_SETTINGS, Settings
from estimate.models import EstimatedIssue, Prioritization, VelocityProfile
from insights import build_team_performance, generate_correlation_insights, generate_workload_recommendations
from insights.models import Insight, Recommendation, TeamPerformance
from logger_config import log_function_call
from normalize.models import Commit, Issue, PullRequest, User
from normalize.util import parse_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    user: Optional[User]
    profile: VelocityProfile
    estimates: List[EstimatedIssue] = field(default_factory=list)
    prioritization: Prioritization = field(default_factory=Prioritization)
    correlations: List[Correlation] = field(default_factory=list)
    correlation_insights: List[Insight] = field(default_factory=list)
    team_performance: TeamPerformance = field(default_factory=TeamPerformance)
    team_recommendations: List[Recommendation] = field(default_factory=list)
    generated_at: Optional[datetime] = None
    scope: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'user': self.user.as_dict() if self.user else None,
            'profile': self.profile.as_dict(),
            'estimates': [e.as_dict() for e in self.estimates],
            'prioritization': self.prioritization.as_dict(),
            'correlations': [c.as_dict() for c in self.correlations],
            'correlation_insights': [i.as_dict() for i in self.correlation_insights],
            'team_performance': self.team_performance.as_dict(),
            'team_recommendations': [r.as_dict() for r in self.team_recommendations],
            'generated_at': self.generated_at.isoformat() if self.generated_at else None,
            'scope': dict(self.scope),
        }


def in_team(issue: Issue, team: Optional[str]) -> bool:
    """True when no team filter is given or the issue's team id or key matches it."""
    if not team:
        return True
    if issue.team is None:
        return False
    return team in (issue.team.team_id, issue.team.key)


def _issue_stamps(issue: Issue):
    return (issue.created_at, issue.updated_at, issue.completed_at)


def _pull_stamps(pr: PullRequest):
    return (pr.created_at, pr.updated_at, pr.merged_at, pr.closed_at)


def latest_timestamp(issues: Iterable[Issue], commits: Iterable[Commit], pull_requests: Iterable[PullRequest]) -> Optional[datetime]:
    """Latest timestamp carried by any record, None when nothing is dated."""
    stamps = []
    for issue in issues:
        stamps.extend(_issue_stamps(issue))
    stamps.extend(c.author.date for c in commits)
    for pr in pull_requests:
        stamps.extend(_pull_stamps(pr))
    dated = [parse_timestamp(s) for s in stamps if s is not None]
    return max(dated) if dated else None


def within_lookback(commits: Iterable[Commit], pull_requests: Iterable[PullRequest], lookback_days: int, now: datetime):
    """Commits by author date and pull requests by creation date on or after now - lookback_days; undated records are kept."""
    cutoff = now - timedelta(days=lookback_days)
    recent_commits = [c for c in commits if c.author.date is None or parse_timestamp(c.author.date) >= cutoff]
    recent_prs = [p for p in pull_requests if p.created_at is None or parse_timestamp(p.created_at) >= cutoff]
    return recent_commits, recent_prs


def user_issues(issues: Iterable[Issue], user: Optional[User]) -> List[Issue]:
    """Issues assigned to `user`; every issue when no user is given."""
    if user is None:
        return list(issues)
    return [i for i in issues if i.assignee is not None and i.assignee.user_id == user.user_id]


@log_function_call(logger)
def run_analysis(
    issues: Iterable[Issue],
    commits: Iterable[Commit] = (),
    pull_requests: Iterable[PullRequest] = (),
    user: Optional[User] = None,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
    team: Optional[str] = None,
) -> AnalysisResult:
    """
    Run every stage over one data set.

    Parameters:
        issues: normalized issues; the optional `team` (id or key) restricts them first.
        commits, pull_requests: normalized activity, filtered to the lookback window.
        user: personalizes estimates; only the user's unestimated issues are sized.
        settings: Settings (defaults when None).
        now: reference time for the lookback windows; defaults to the latest input timestamp.
    """
    settings = settings or DEFAULT_SETTINGS
    issues = [i for i in issues or [] if in_team(i, team)]
    commits = list(commits or [])
    pull_requests = list(pull_requests or [])

    # naive datetimes are read as UTC, the same as parsed input
    now = parse_timestamp(now) or latest_timestamp(issues, commits, pull_requests) or datetime.now(timezone.utc)

    scoped = user_issues(issues, user)
    estimator = StoryPointEstimator(scoped, user=user, settings=settings)
    estimates = estimator.estimate_many(select_unestimated(scoped))
    prioritization = prioritize(estimates, settings)

    recent_commits, recent_prs = within_lookback(commits, pull_requests, settings.lookback_days, now)
    correlations = correlate_issues(issues, recent_commits, recent_prs)
    correlation_insights = generate_correlation_insights(correlations, examples=settings.insight_examples)

    team_performance = build_team_performance(issues, settings.team_lookback_days, now)
    team_recommendations = generate_workload_recommendations(team_performance)

    scope = {
        'team': team,
        'lookback_days': settings.lookback_days,
        'team_lookback_days': settings.team_lookback_days,
        'issues': len(issues),
        'commits': len(recent_commits),
        'pull_requests': len(recent_prs),
    }
    logger.info(
        "Analysis complete: %d estimates, %d correlations, %d recommendations",
        len(estimates), len(correlations), len(team_recommendations),
    )
    return AnalysisResult(
        user=user,
        profile=estimator.profile,
        estimates=estimates,
        prioritization=prioritization,
        correlations=correlations,
        correlation_insights=correlation_insights,
        team_performance=team_performance,
        team_recommendations=team_recommendations,
        generated_at=now,
        scope=scope,
    )
