"""
Linker heuristics to associate commits/PRs with tracker issues.
Simple, dependency-free heuristics:
- author identity matches the issue assignee (exact string equality)
- issue identifier or a title keyword appears in the commit message / PR title or body
"""
import logging
from typing import Iterable, List, Optional, Set

from normalize.models import Commit, Issue, PullRequest, User
from .models import Correlation

logger = logging.getLogger(__name__)

# title words must be longer than this to count as keywords
MIN_KEYWORD_LENGTH = 3


def issue_keywords(issue: Issue) -> Set[str]:
    """Lowercased identifier plus title words longer than three characters."""
    keywords = {w for w in (issue.title or '').lower().split() if len(w) > MIN_KEYWORD_LENGTH}
    if issue.identifier:
        keywords.add(issue.identifier.lower())
    return keywords


def _contains_keyword(text: Optional[str], keywords: Set[str]) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(k in lowered for k in keywords)


# helper: handle used to compare against source-control logins
def _assignee_handle(assignee: User) -> Optional[str]:
    return assignee.name or assignee.display_name or None


def commit_matches(commit: Commit, assignee: User, keywords: Set[str]) -> bool:
    identity = commit.author.identity
    if identity and identity in {v for v in (assignee.email, _assignee_handle(assignee)) if v}:
        return True
    return _contains_keyword(commit.message, keywords)


def pull_matches(pr: PullRequest, assignee: User, keywords: Set[str]) -> bool:
    handle = _assignee_handle(assignee)
    if pr.author and handle and pr.author == handle:
        return True
    return _contains_keyword(pr.title, keywords) or _contains_keyword(pr.body, keywords)


def correlate_issue(issue: Issue, commits: Iterable[Commit], pull_requests: Iterable[PullRequest]) -> Optional[Correlation]:
    """
    Correlate a single assigned issue with source-control activity.

    Returns None when the issue has no assignee. The returned Correlation may have activity_score 0;
    correlate_issues() drops those.
    """
    if issue.assignee is None:
        return None
    keywords = issue_keywords(issue)
    related_commits = tuple(c for c in commits or [] if commit_matches(c, issue.assignee, keywords))
    related_prs = tuple(p for p in pull_requests or [] if pull_matches(p, issue.assignee, keywords))
    activity = len(related_commits) + 2 * len(related_prs)
    ratio = issue.estimate / activity if (issue.has_estimate and activity > 0) else None
    return Correlation(
        issue=issue,
        related_commits=related_commits,
        related_prs=related_prs,
        activity_score=activity,
        velocity_ratio=ratio,
    )


def correlate_issues(issues: Iterable[Issue], commits: Iterable[Commit], pull_requests: Iterable[PullRequest]) -> List[Correlation]:
    """
    Correlate every assigned issue with the given commits and pull requests.

    Parameters:
        issues: normalized tracker issues; unassigned issues are skipped.
        commits: normalized commits for one repository and lookback window.
        pull_requests: normalized pull requests for the same scope.

    Returns:
        Correlations with activity_score > 0, highest activity first (ties keep input order).
    """
    commits = list(commits or [])
    pull_requests = list(pull_requests or [])
    correlations: List[Correlation] = []
    for issue in issues or []:
        if issue.assignee is None:
            logger.debug("Skipping unassigned issue %s", issue.identifier)
            continue
        correlation = correlate_issue(issue, commits, pull_requests)
        if correlation.activity_score > 0:
            correlations.append(correlation)
    correlations.sort(key=lambda c: c.activity_score, reverse=True)
    logger.info("Correlated %d issues with source-control activity", len(correlations))
    return correlations
