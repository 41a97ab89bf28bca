import unittest

from correlate.models import Correlation
from insights import generate_correlation_insights
from insights.correlation import average_velocity_ratio
from normalize.models import Issue, User


def _corr(identifier, estimate, activity, assignee='Alice'):
    issue = Issue(issue_id=identifier, identifier=identifier, title=identifier, estimate=estimate, assignee=User(assignee.lower(), assignee))
    ratio = estimate / activity if (estimate and activity) else None
    return Correlation(issue=issue, activity_score=activity, velocity_ratio=ratio)


class TestCorrelationInsights(unittest.TestCase):
    def test_empty_input(self):
        self.assertEqual(generate_correlation_insights([]), [])

    def test_categories(self):
        correlations = [
            _corr('HI-1', 8, 2),      # ratio 4, stuck
            _corr('MID-1', 2, 2),     # ratio 1
            _corr('CREEP-1', 1, 12),  # ratio 0.08, scope creep
            _corr('NONE-1', None, 20, assignee='Bob'),
        ]
        insights = {i.title: i for i in generate_correlation_insights(correlations)}
        self.assertEqual(insights['High Velocity Contributors'].items, ('HI-1: Alice',))
        self.assertEqual(insights['High Velocity Contributors'].type, 'success')
        self.assertEqual(insights['Potentially Stuck Issues'].items, ('HI-1: 8 pts, 2 activity',))
        self.assertEqual(insights['Scope Creep Candidates'].items, ('CREEP-1: 1 pts, 12 activity', 'NONE-1: 0 pts, 20 activity'))
        self.assertEqual(insights['Scope Creep Candidates'].description, '2 low-point issues with high activity (possible scope creep)')

    def test_unestimated_counts_as_zero_points(self):
        insights = generate_correlation_insights([_corr('X-1', None, 50), _corr('X-2', 0, 1)])
        self.assertEqual([i.title for i in insights], ['Scope Creep Candidates'])
        self.assertEqual(insights[0].items, ('X-1: 0 pts, 50 activity',))
        self.assertEqual(insights[0].count, 1)

    def test_examples_capped_but_count_kept(self):
        correlations = [_corr(f'S-{n}', 13, 1) for n in range(5)]
        stuck = [i for i in generate_correlation_insights(correlations) if i.title == 'Potentially Stuck Issues'][0]
        self.assertEqual(len(stuck.items), 3)
        self.assertEqual(stuck.count, 5)
        self.assertEqual(stuck.description, '5 high-point issues with low source-control activity')

    def test_average_ratio_ignores_missing(self):
        self.assertAlmostEqual(average_velocity_ratio([_corr('A', 4, 2), _corr('B', None, 3)]), 2.0)
        self.assertIsNone(average_velocity_ratio([_corr('B', None, 3)]))


if __name__ == '__main__':
    unittest.main()
