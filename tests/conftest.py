import sys
import os
from datetime import datetime, timedelta, timezone

import pytest

# Add project root to sys.path so tests can import top-level modules like 'estimate', 'correlate', 'normalize', etc.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from normalize.models import COMPLETED, Commit, CommitAuthor, Issue, PullRequest, Status, Team, User  # noqa: E402

BASE_TIME = datetime(2025, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def alice():
    return User(user_id='u-alice', display_name='Alice', email='alice@example.com', name='alice')


@pytest.fixture
def bob():
    return User(user_id='u-bob', display_name='Bob', email='bob@example.com', name='bob')


@pytest.fixture
def make_issue():
    """Factory for issues; `done_days` marks the issue completed that many days after creation."""
    def _make(identifier, title='Untitled', estimate=None, priority=None, assignee=None, team='T1',
              done_days=None, labels=(), description=None, created=BASE_TIME):
        completed_at = created + timedelta(days=done_days) if done_days is not None else None
        status = Status('Done', COMPLETED) if done_days is not None else Status('Todo', 'unstarted')
        return Issue(
            issue_id=identifier,
            identifier=identifier,
            title=title,
            description=description,
            estimate=estimate,
            priority=priority,
            assignee=assignee,
            team=Team(team_id=team, key=team) if team else None,
            labels=tuple(labels),
            status=status,
            created_at=created,
            updated_at=completed_at or created,
            completed_at=completed_at,
        )
    return _make


@pytest.fixture
def sample_inputs(make_issue, alice, bob):
    """A small team: history, open work, commits and pull requests within a 30 day window."""
    issues = [
        make_issue('ENG-1', title='Refactor billing database', estimate=5, priority=2, assignee=alice, done_days=3),
        make_issue('ENG-2', title='Billing export', estimate=3, priority=3, assignee=alice, done_days=2),
        make_issue('ENG-3', title='Update button color', priority=2, assignee=alice),
        make_issue('ENG-4', title='Refactor billing <api> integration', priority=1, assignee=alice),
        make_issue('ENG-5', title='Checkout workflow', estimate=8, priority=3, assignee=bob, done_days=6),
        make_issue('ENG-6', title='Unassigned cleanup', estimate=2),
    ]
    when = BASE_TIME + timedelta(days=4)
    commits = [
        Commit(sha='c1', message='ENG-1 split billing tables', author=CommitAuthor('Alice', 'alice@example.com', when, 'alice')),
        Commit(sha='c2', message='checkout tweaks', author=CommitAuthor('Bob', 'bob@example.com', when, 'bob')),
        Commit(sha='c3', message='ancient', author=CommitAuthor('Zed', 'zed@example.com', BASE_TIME - timedelta(days=300), 'zed')),
    ]
    prs = [
        PullRequest(number=10, title='ENG-5 checkout flow', author='bob', created_at=when),
    ]
    return issues, commits, prs, alice
