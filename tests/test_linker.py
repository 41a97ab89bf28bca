import unittest
from datetime import datetime, timezone

from correlate import correlate_issue, correlate_issues
from correlate.linker import issue_keywords
from normalize.models import Commit, CommitAuthor, Issue, PullRequest, User

ALICE = User(user_id='u1', display_name='Alice', email='alice@example.com', name='alice')
WHEN = datetime(2025, 1, 2, tzinfo=timezone.utc)


def _commit(sha, message, login=None, email=None):
    return Commit(sha=sha, message=message, author=CommitAuthor(name='x', email=email, date=WHEN, login=login))


class TestLinker(unittest.TestCase):
    def test_keywords(self):
        issue = Issue(issue_id='1', identifier='ENG-42', title='Fix the login page')
        self.assertEqual(issue_keywords(issue), {'eng-42', 'login', 'page'})

    def test_activity_score_and_ratio(self):
        issue = Issue(issue_id='1', identifier='ENG-42', title='Checkout flow', estimate=4, assignee=ALICE)
        commits = [
            _commit('a', 'ENG-42: first pass'),
            _commit('b', 'unrelated', email='alice@example.com'),
            _commit('c', 'unrelated', login='bob'),
        ]
        prs = [
            PullRequest(number=1, title='Improve checkout'),
            PullRequest(number=2, title='Other', author='alice'),
            PullRequest(number=3, title='Other', author='bob'),
        ]
        correlation = correlate_issue(issue, commits, prs)
        self.assertEqual([c.sha for c in correlation.related_commits], ['a', 'b'])
        self.assertEqual([p.number for p in correlation.related_prs], [1, 2])
        self.assertEqual(correlation.activity_score, 6)
        self.assertAlmostEqual(correlation.velocity_ratio, 4 / 6)

    def test_ratio_absent_without_estimate(self):
        issue = Issue(issue_id='1', identifier='ENG-1', title='Thing', assignee=ALICE)
        correlation = correlate_issue(issue, [_commit('a', 'ENG-1')], [])
        self.assertEqual(correlation.activity_score, 1)
        self.assertIsNone(correlation.velocity_ratio)

    def test_unassigned_and_zero_activity_excluded(self):
        unassigned = Issue(issue_id='1', identifier='ENG-1', title='Checkout')
        quiet = Issue(issue_id='2', identifier='ENG-2', title='Quiet', assignee=User('u9', 'Nobody'))
        busy = Issue(issue_id='3', identifier='ENG-3', title='Busy', assignee=ALICE)
        commits = [_commit('a', 'ENG-1 checkout work'), _commit('b', 'ENG-3 work')]
        self.assertIsNone(correlate_issue(unassigned, commits, []))
        result = correlate_issues([unassigned, quiet, busy], commits, [])
        self.assertEqual([c.issue.identifier for c in result], ['ENG-3'])
        self.assertTrue(all(c.activity_score > 0 for c in result))

    def test_sorted_by_activity_descending(self):
        low = Issue(issue_id='1', identifier='ENG-1', title='One', assignee=User('u2', 'Two'))
        high = Issue(issue_id='2', identifier='ENG-2', title='Two', assignee=User('u3', 'Three'))
        commits = [_commit('a', 'ENG-1'), _commit('b', 'ENG-2'), _commit('c', 'ENG-2 again')]
        result = correlate_issues([low, high], commits, [])
        self.assertEqual([c.issue.identifier for c in result], ['ENG-2', 'ENG-1'])


if __name__ == '__main__':
    unittest.main()
