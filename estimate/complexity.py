"""
Complexity heuristics for a single issue: text keywords, labels, priority and similar past work.
Dependency-free keyword scoring; keyword matches are substring matches over lowercased text.
"""
import logging
from typing import Callable, Iterable, List, Optional, Tuple

from normalize.models import Issue, Label, is_completed_estimated
from .models import ComplexityAnalysis

logger = logging.getLogger(__name__)

TECHNICAL_KEYWORDS = (
    'refactor', 'architecture', 'database', 'migration', 'integration',
    'api', 'security', 'performance', 'optimization', 'algorithm',
    'deploy', 'infrastructure', 'testing', 'automation',
)

SIMPLE_KEYWORDS = (
    'fix', 'update', 'change', 'add', 'remove', 'typo', 'text',
    'button', 'color', 'style', 'copy', 'documentation',
)

COMPLEX_KEYWORDS = (
    'implement', 'build', 'create', 'design', 'develop',
    'complex', 'multiple', 'system', 'workflow', 'process',
)

COMPLEX_LABELS = ('epic', 'feature', 'architecture', 'breaking-change', 'research')
SIMPLE_LABELS = ('bug', 'hotfix', 'documentation', 'ui', 'copy')

PRIORITY_WEIGHTS = {1: 1.5, 2: 1.2, 3: 1.0, 4: 0.8}

TEXT_BOUNDS = (0.5, 3.0)
LABEL_BOUNDS = (0.5, 2.0)


def _clamp(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


def text_complexity(title: str, description: Optional[str]) -> float:
    """Score title+description: technical +0.5, simple -0.2, complex +0.3 per keyword, +0.5 each past 50 and 100 words."""
    text = f"{title or ''} {description or ''}".lower()
    score = 1.0
    score += 0.5 * sum(1 for k in TECHNICAL_KEYWORDS if k in text)
    score -= 0.2 * sum(1 for k in SIMPLE_KEYWORDS if k in text)
    score += 0.3 * sum(1 for k in COMPLEX_KEYWORDS if k in text)

    word_count = len(text.split())
    if word_count > 50:
        score += 0.5
    if word_count > 100:
        score += 0.5
    return _clamp(score, TEXT_BOUNDS)


def label_complexity(labels: Iterable[Label]) -> float:
    score = 1.0
    for label in labels or ():
        name = (label.name or '').lower()
        if any(c in name for c in COMPLEX_LABELS):
            score += 0.5
        if any(s in name for s in SIMPLE_LABELS):
            score -= 0.2
    return _clamp(score, LABEL_BOUNDS)


def priority_weight(priority: Optional[int]) -> float:
    return PRIORITY_WEIGHTS.get(priority, 1.0)


def constant_team_complexity(issue: Issue) -> float:
    # TODO: derive per-team adjustments once team-level history is available
    return 1.0


def title_similarity(title1: str, title2: str) -> float:
    """Share of title1's words found in title2, over the longer title's word count."""
    words1 = (title1 or '').lower().split()
    words2 = (title2 or '').lower().split()
    longest = max(len(words1), len(words2))
    if not longest:
        return 0.0
    vocabulary = set(words2)
    common = [w for w in words1 if w in vocabulary]
    return len(common) / longest


def _same_team(a: Issue, b: Issue) -> bool:
    return a.team is not None and b.team is not None and a.team.team_id == b.team.team_id


def find_similar_issues(issue: Issue, candidates: Iterable[Issue], threshold: float = 0.3, limit: int = 5) -> List[Issue]:
    """
    Completed, estimated issues (other than `issue`) whose title overlaps by more than `threshold`
    or that belong to the same team. First `limit` matches in input order.
    """
    similar = []
    for other in candidates or []:
        if other.issue_id == issue.issue_id or not is_completed_estimated(other):
            continue
        if title_similarity(issue.title, other.title) > threshold or _same_team(issue, other):
            similar.append(other)
            if len(similar) >= limit:
                break
    return similar


def analyze_complexity(
    issue: Issue,
    issues: Iterable[Issue],
    threshold: float = 0.3,
    limit: int = 5,
    team_complexity: Callable[[Issue], float] = constant_team_complexity,
) -> ComplexityAnalysis:
    """Build a ComplexityAnalysis for `issue` against the user-scoped issue set."""
    analysis = ComplexityAnalysis(
        text_complexity=text_complexity(issue.title, issue.description),
        label_complexity=label_complexity(issue.labels),
        priority_weight=priority_weight(issue.priority),
        similar_issues=tuple(find_similar_issues(issue, issues, threshold=threshold, limit=limit)),
        team_complexity=team_complexity(issue),
    )
    logger.debug(
        "Complexity for %s: text=%.2f labels=%.2f priority=%.2f similar=%d",
        issue.identifier, analysis.text_complexity, analysis.label_complexity,
        analysis.priority_weight, len(analysis.similar_issues),
    )
    return analysis
