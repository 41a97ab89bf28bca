"""
Normalize package: provider payloads (Linear, JIRA, GitHub, Bitbucket) to the shared Issue/Commit/PullRequest records.
"""

from .models import Commit, CommitAuthor, Issue, Label, PullRequest, Status, Team, User
from .util import normalize_commits, normalize_issues, normalize_pulls, parse_timestamp

__all__ = [
    "Commit",
    "CommitAuthor",
    "Issue",
    "Label",
    "PullRequest",
    "Status",
    "Team",
    "User",
    "normalize_commits",
    "normalize_issues",
    "normalize_pulls",
    "parse_timestamp",
]
