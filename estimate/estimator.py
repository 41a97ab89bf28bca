"""
Story point estimator for one user's issue set.
The velocity profile is computed once per estimator instance (one estimation batch).
"""
import logging
from typing import Callable, Iterable, List, Optional

from normalize.models import Issue, User
from .complexity import analyze_complexity, constant_team_complexity
from .config import DEFAULT_SETTINGS, Settings
from .models import ComplexityAnalysis, Estimate, EstimatedIssue, Prioritization, VelocityProfile
from .prioritize import prioritize
from .synthesizer import synthesize_estimate
from .velocity import profile_for_user

logger = logging.getLogger(__name__)


def select_unestimated(issues: Iterable[Issue]) -> List[Issue]:
    """Issues with no estimate (absent or 0), in input order."""
    return [i for i in issues or [] if not i.estimate]


class StoryPointEstimator:
    """Estimate issues against a user's historical velocity.

    Parameters:
        issues: the user-scoped issue set; completed issues feed velocity and similarity search.
        user: the user whose history personalizes the estimates (None uses the cold-start profile).
        settings: estimator settings.
        team_complexity: per-issue team adjustment; defaults to a constant 1.0.
    """

    def __init__(
        self,
        issues: Iterable[Issue],
        user: Optional[User] = None,
        settings: Settings = DEFAULT_SETTINGS,
        team_complexity: Callable[[Issue], float] = constant_team_complexity,
    ):
        self.issues = list(issues or [])
        self.user = user
        self.settings = settings
        self.team_complexity = team_complexity
        self.profile: VelocityProfile = profile_for_user(self.issues, user.user_id if user else None)

    def analyze(self, issue: Issue) -> ComplexityAnalysis:
        return analyze_complexity(
            issue,
            self.issues,
            threshold=self.settings.similarity_threshold,
            limit=self.settings.similar_issue_limit,
            team_complexity=self.team_complexity,
        )

    def estimate(self, issue: Issue) -> Estimate:
        return synthesize_estimate(self.analyze(issue), self.profile, hours_per_day=self.settings.hours_per_day)

    def estimate_many(self, issues: Iterable[Issue]) -> List[EstimatedIssue]:
        estimated = [EstimatedIssue(issue=i, estimate=self.estimate(i)) for i in issues or []]
        logger.info("Estimated %d issues", len(estimated))
        return estimated

    def prioritize(self, issues: Iterable[Issue]) -> Prioritization:
        return prioritize(self.estimate_many(issues), self.settings)
